"""Asset slot state and the default asset catalog."""

from .slots_catalog import cinematic_video_request, default_catalog, illustration_requests
from .slots_store import AssetSlotStore

__all__ = [
    "AssetSlotStore",
    "cinematic_video_request",
    "default_catalog",
    "illustration_requests",
]

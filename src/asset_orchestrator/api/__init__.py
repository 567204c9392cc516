"""HTTP facade consumed by the presentation layer."""

from .assets_api import get_orchestrator, router

__all__ = ["get_orchestrator", "router"]

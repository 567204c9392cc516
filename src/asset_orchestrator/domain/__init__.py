"""Domain models and deadline rules of the asset orchestrator."""

from .deadlines import calculate_deadline_info, calculate_poll_expires_at
from .models import (
    ArtifactRef,
    AssetKind,
    AssetRequest,
    AssetSlotState,
    ErrorKind,
    JobOutcome,
    JobPhase,
    PollDeadline,
)

__all__ = [
    "ArtifactRef",
    "AssetKind",
    "AssetRequest",
    "AssetSlotState",
    "ErrorKind",
    "JobOutcome",
    "JobPhase",
    "PollDeadline",
    "calculate_deadline_info",
    "calculate_poll_expires_at",
]

"""Orchestrator level exceptions."""

from __future__ import annotations

__all__ = [
    "OrchestratorError",
    "BackendError",
    "MissingArtifactError",
    "PollTimeoutError",
    "JobCancelledError",
]


class OrchestratorError(Exception):
    """Base class for orchestrator specific errors."""


class BackendError(OrchestratorError):
    """Raised when the generation backend rejects or fails a request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        status: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.status = status


class MissingArtifactError(OrchestratorError):
    """Raised when the backend reports success without a usable artifact."""


class PollTimeoutError(OrchestratorError):
    """Raised when a long-running operation outlives the poll deadline."""


class JobCancelledError(OrchestratorError):
    """Raised when the cancel event is observed during a job or batch."""

"""Abstract generation backend definition."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Mapping

from ..domain.models import ArtifactRef


@dataclass(slots=True)
class ImageResult:
    """Synchronous image response; ``payload`` is ``None`` when no image came back."""

    payload: bytes | None
    content_type: str = "image/png"
    finish_reason: str | None = None
    text: str | None = None


@dataclass(slots=True)
class OperationHandle:
    """Backend token for a long-running operation.

    ``artifact_uri`` is only meaningful once ``done`` is set; ``error``
    carries the backend's error object when the operation finished badly.
    """

    name: str
    done: bool = False
    artifact_uri: str | None = None
    error: Mapping[str, Any] | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class GenerationBackend(ABC):
    """Base interface for generation backends."""

    backend_id: str

    @abstractmethod
    async def generate_image(
        self, prompt: str, config: Mapping[str, Any]
    ) -> ImageResult:
        """Generate an image and return it in the same call."""

    @abstractmethod
    async def submit_video_job(
        self, prompt: str, config: Mapping[str, Any]
    ) -> OperationHandle:
        """Start a long-running video operation."""

    @abstractmethod
    async def poll_video_job(self, handle: OperationHandle) -> OperationHandle:
        """Return the refreshed state of ``handle``."""

    @abstractmethod
    async def fetch_artifact(self, uri: str) -> ArtifactRef:
        """Download a finished artifact (authenticated)."""

    async def aclose(self) -> None:
        """Release network resources held by the backend."""
        return None


__all__ = ["GenerationBackend", "ImageResult", "OperationHandle"]

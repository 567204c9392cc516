"""Domain models for the generative asset orchestrator.

An :class:`AssetRequest` describes one unit of work; its execution is tracked
per asset id through :class:`AssetSlotState` snapshots which move along the
:class:`JobPhase` lifecycle::

    IDLE -> AWAITING_CREDENTIAL -> SUBMITTED -> POLLING -> SUCCEEDED | FAILED

Snapshots are immutable. The slot store swaps them on every transition, so a
reader never observes a half-applied update.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass, field
from datetime import datetime
from enum import StrEnum
from types import MappingProxyType
from typing import Any, Mapping


class AssetKind(StrEnum):
    """Kinds of media the backend can produce."""

    IMAGE = "image"
    VIDEO = "video"


class JobPhase(StrEnum):
    """Lifecycle phases of one asset's execution."""

    IDLE = "idle"
    AWAITING_CREDENTIAL = "awaiting_credential"
    SUBMITTED = "submitted"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def in_flight(self) -> bool:
        return self in _IN_FLIGHT_PHASES

    @property
    def is_terminal(self) -> bool:
        return self in (JobPhase.SUCCEEDED, JobPhase.FAILED)


_IN_FLIGHT_PHASES = frozenset(
    {JobPhase.AWAITING_CREDENTIAL, JobPhase.SUBMITTED, JobPhase.POLLING}
)


class ErrorKind(StrEnum):
    """Failure taxonomy surfaced through :class:`JobOutcome`."""

    AUTHORIZATION_EXPIRED = "authorization_expired"
    MISSING_ARTIFACT = "missing_artifact"
    TRANSIENT = "transient"
    BUSY = "busy"
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"


@dataclass(frozen=True, slots=True)
class AssetRequest:
    """Immutable description of one generation request."""

    id: str
    kind: AssetKind
    prompt: str
    config: Mapping[str, Any] = field(default_factory=dict)
    title: str | None = None
    caption: str | None = None

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("AssetRequest.id must not be empty")
        if not self.prompt:
            raise ValueError(f"AssetRequest '{self.id}' requires a prompt")
        if not isinstance(self.kind, AssetKind):
            object.__setattr__(self, "kind", AssetKind(str(self.kind)))
        object.__setattr__(self, "config", MappingProxyType(dict(self.config)))


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    """Generated media held in memory, optionally with the URI it came from."""

    payload: bytes
    content_type: str
    source_uri: str | None = None

    @property
    def size_bytes(self) -> int:
        return len(self.payload)

    def data_url(self) -> str:
        encoded = base64.b64encode(self.payload).decode("ascii")
        return f"data:{self.content_type};base64,{encoded}"


@dataclass(frozen=True, slots=True)
class AssetSlotState:
    """Snapshot of one asset slot as observed by the presentation layer."""

    id: str
    phase: JobPhase = JobPhase.IDLE
    narration: str | None = None
    artifact: ArtifactRef | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    poll_count: int = 0
    # Token of the run that owns the slot; cleared by reset.
    run_id: str | None = None

    @property
    def has_artifact(self) -> bool:
        return self.phase is JobPhase.SUCCEEDED and self.artifact is not None


@dataclass(frozen=True, slots=True)
class JobOutcome:
    """Structured result of :meth:`JobRunner.run_job`."""

    ok: bool
    artifact: ArtifactRef | None = None
    error_kind: ErrorKind | None = None
    message: str | None = None

    @classmethod
    def success(cls, artifact: ArtifactRef) -> "JobOutcome":
        return cls(ok=True, artifact=artifact)

    @classmethod
    def failure(cls, error_kind: ErrorKind, message: str | None = None) -> "JobOutcome":
        return cls(ok=False, error_kind=error_kind, message=message)


@dataclass(slots=True)
class PollDeadline:
    """Deadline snapshot for a polling operation."""

    expires_at: datetime
    remaining_ms: int
    is_expired: bool

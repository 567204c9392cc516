"""Pydantic schemas for the asset API."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from ..domain.models import AssetKind, AssetRequest, AssetSlotState, ErrorKind, JobPhase


class ArtifactPayload(BaseModel):
    content_type: str
    size_bytes: int
    source_uri: str | None = None
    data_url: str | None = None


class AssetStateResponse(BaseModel):
    asset_id: str
    phase: JobPhase
    narration: str | None = None
    error_kind: ErrorKind | None = None
    error_message: str | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    poll_count: int = 0
    artifact: ArtifactPayload | None = None


class AssetSummaryResponse(BaseModel):
    asset_id: str
    kind: AssetKind
    title: str | None = None
    caption: str | None = None
    config: dict[str, Any] = Field(default_factory=dict)
    state: AssetStateResponse


class BatchRequest(BaseModel):
    asset_ids: list[str] | None = Field(
        default=None,
        description="Assets to run in order; defaults to every image in the catalog.",
    )


class BatchStatusResponse(BaseModel):
    running: bool


class CredentialStatusResponse(BaseModel):
    has_credential: bool
    prompt_in_flight: bool


def state_response(state: AssetSlotState, *, kind: AssetKind) -> AssetStateResponse:
    artifact = None
    if state.artifact is not None:
        artifact = ArtifactPayload(
            content_type=state.artifact.content_type,
            size_bytes=state.artifact.size_bytes,
            source_uri=state.artifact.source_uri,
            # Videos are served from the artifact endpoint instead of inline.
            data_url=state.artifact.data_url() if kind is AssetKind.IMAGE else None,
        )
    return AssetStateResponse(
        asset_id=state.id,
        phase=state.phase,
        narration=state.narration,
        error_kind=state.error_kind,
        error_message=state.error_message,
        started_at=state.started_at,
        finished_at=state.finished_at,
        poll_count=state.poll_count,
        artifact=artifact,
    )


def summary_response(request: AssetRequest, state: AssetSlotState) -> AssetSummaryResponse:
    return AssetSummaryResponse(
        asset_id=request.id,
        kind=request.kind,
        title=request.title,
        caption=request.caption,
        config=dict(request.config),
        state=state_response(state, kind=request.kind),
    )

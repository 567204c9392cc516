"""Asset routes: slot state, single runs, batches and credential selection."""

from __future__ import annotations

import asyncio

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from ..domain.models import ErrorKind
from ..services.container import Orchestrator
from .assets_schemas import (
    AssetStateResponse,
    AssetSummaryResponse,
    BatchRequest,
    BatchStatusResponse,
    CredentialStatusResponse,
    state_response,
    summary_response,
)

router = APIRouter(prefix="/api", tags=["assets"])


def get_orchestrator(request: Request) -> Orchestrator:
    """Fetch the orchestrator from application state."""
    try:
        return request.app.state.orchestrator  # type: ignore[attr-defined]
    except AttributeError as exc:  # pragma: no cover - defensive path
        raise RuntimeError("Orchestrator is not configured") from exc


def _not_found(asset_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail={"status": "error", "asset_id": asset_id, "reason": "asset_not_found"},
    )


def _busy(asset_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail={"status": "error", "asset_id": asset_id, "reason": ErrorKind.BUSY.value},
    )


@router.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/assets")
def list_assets(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> list[AssetSummaryResponse]:
    return [
        summary_response(request, orchestrator.store.get(request.id))
        for request in orchestrator.catalog.values()
    ]


@router.get("/assets/{asset_id}")
def fetch_asset(
    asset_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> AssetSummaryResponse:
    try:
        request = orchestrator.request_for(asset_id)
    except KeyError:
        raise _not_found(asset_id) from None
    return summary_response(request, orchestrator.store.get(asset_id))


@router.get("/assets/{asset_id}/artifact")
def download_artifact(
    asset_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> Response:
    try:
        state = orchestrator.state_for(asset_id)
    except KeyError:
        raise _not_found(asset_id) from None
    if not state.has_artifact or state.artifact is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"status": "error", "asset_id": asset_id, "reason": "artifact_missing"},
        )
    return Response(content=state.artifact.payload, media_type=state.artifact.content_type)


@router.post("/assets/{asset_id}/run", status_code=status.HTTP_202_ACCEPTED)
async def run_asset(
    asset_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> AssetStateResponse:
    try:
        request = orchestrator.request_for(asset_id)
    except KeyError:
        raise _not_found(asset_id) from None
    if orchestrator.store.get(asset_id).phase.in_flight:
        raise _busy(asset_id)
    orchestrator.schedule_job(asset_id)
    # Let the job reach its first suspension point so the response shows it.
    await asyncio.sleep(0)
    return state_response(orchestrator.store.get(asset_id), kind=request.kind)


@router.post("/assets/{asset_id}/reset")
async def reset_asset(
    asset_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> AssetStateResponse:
    try:
        request = orchestrator.request_for(asset_id)
    except KeyError:
        raise _not_found(asset_id) from None
    if orchestrator.store.get(asset_id).phase.in_flight:
        raise _busy(asset_id)
    return state_response(orchestrator.reset(asset_id), kind=request.kind)


@router.post("/assets/{asset_id}/cancel")
async def cancel_asset(
    asset_id: str,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> dict[str, bool]:
    try:
        cancelled = orchestrator.cancel_job(asset_id)
    except KeyError:
        raise _not_found(asset_id) from None
    return {"cancelled": cancelled}


@router.get("/batch")
def batch_status(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> BatchStatusResponse:
    return BatchStatusResponse(running=orchestrator.coordinator.running)


@router.post("/batch", status_code=status.HTTP_202_ACCEPTED)
async def run_batch(
    payload: BatchRequest | None = None,
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> BatchStatusResponse:
    if orchestrator.coordinator.running:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail={"status": "error", "reason": "batch_running"},
        )
    asset_ids = payload.asset_ids if payload is not None else None
    try:
        orchestrator.schedule_batch(asset_ids)
    except KeyError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"status": "error", "reason": "asset_not_found", "message": str(exc)},
        ) from None
    await asyncio.sleep(0)
    return BatchStatusResponse(running=orchestrator.coordinator.running)


@router.post("/batch/cancel")
async def cancel_batch(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> dict[str, bool]:
    return {"cancelled": orchestrator.cancel_batch()}


@router.get("/credential")
def credential_status(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> CredentialStatusResponse:
    return CredentialStatusResponse(
        has_credential=orchestrator.context.has_credential,
        prompt_in_flight=orchestrator.gate.prompt_in_flight,
    )


@router.post("/credential/select")
async def select_credential(
    orchestrator: Orchestrator = Depends(get_orchestrator),
) -> CredentialStatusResponse:
    orchestrator.gate.revoke()
    await orchestrator.gate.ensure_credential()
    return CredentialStatusResponse(
        has_credential=orchestrator.context.has_credential,
        prompt_in_flight=orchestrator.gate.prompt_in_flight,
    )

"""Single-asset job runner.

A job moves its slot through ``AWAITING_CREDENTIAL -> SUBMITTED ->
[POLLING] -> SUCCEEDED | FAILED``. Image requests return their artifact from
the submit call; video requests hand back an operation that is polled on a
fixed interval until the backend reports completion, the poll deadline
passes or the cancel event is set.

Every failure is classified and recorded on the slot; ``run_job`` resolves
to a :class:`JobOutcome` instead of raising.

Each run stamps the slot with a fresh ``run_id``. Later writes only land
while the slot still carries that token, so a run whose slot was reset (or
taken over by a newer run) stops at its next transition instead of
overwriting it.
"""

from __future__ import annotations

import asyncio
import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from ..credentials.credential_gate import CredentialGate
from ..domain.deadlines import calculate_deadline_info, calculate_poll_expires_at
from ..domain.models import (
    ArtifactRef,
    AssetKind,
    AssetRequest,
    ErrorKind,
    JobOutcome,
    JobPhase,
)
from ..exceptions import (
    BackendError,
    JobCancelledError,
    MissingArtifactError,
    PollTimeoutError,
)
from ..providers.providers_base import GenerationBackend, ImageResult, OperationHandle
from ..slots.slots_store import AssetSlotStore
from .failures import classify_failure, describe_failure, user_message
from .narration import NarrationPool

logger = logging.getLogger(__name__)


def _default_clock() -> datetime:
    return datetime.now(timezone.utc)


class JobRunner:
    """Drive one :class:`AssetRequest` end-to-end against the backend."""

    def __init__(
        self,
        *,
        store: AssetSlotStore,
        gate: CredentialGate,
        backend: GenerationBackend,
        narration: NarrationPool | None = None,
        clock: Callable[[], datetime] | None = None,
        sleep: Callable[[float], Any] | None = None,
        poll_interval: float = 10.0,
        max_poll_seconds: float = 600.0,
    ) -> None:
        self.store = store
        self.gate = gate
        self.backend = backend
        self.narration = narration or NarrationPool()
        self._clock = clock or _default_clock
        self._sleep = self._wrap_sleep(sleep)
        self._poll_interval = max(0.0, poll_interval)
        self._max_poll_seconds = max_poll_seconds
        self._logger = logger

    @staticmethod
    def _wrap_sleep(
        sleep: Callable[[float], Any] | None,
    ) -> Callable[[float], Awaitable[None]]:
        if sleep is None:
            return asyncio.sleep

        async def _async_sleep(seconds: float) -> None:
            result = sleep(seconds)
            if inspect.isawaitable(result):
                await result

        return _async_sleep

    async def run_job(
        self,
        request: AssetRequest,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> JobOutcome:
        """Run ``request`` and record every transition on its slot."""

        current = self.store.get(request.id)
        if current.phase.in_flight:
            self._logger.info(
                "job.busy",
                extra={"asset_id": request.id, "phase": current.phase.value},
            )
            return JobOutcome.failure(ErrorKind.BUSY, user_message(ErrorKind.BUSY))

        run_id = uuid4().hex
        self.store.set(
            request.id,
            phase=JobPhase.AWAITING_CREDENTIAL,
            narration=self.narration.awaiting_credential,
            artifact=None,
            error_kind=None,
            error_message=None,
            started_at=self._clock(),
            finished_at=None,
            poll_count=0,
            run_id=run_id,
        )

        try:
            if not await self.gate.ensure_credential():
                self._logger.warning(
                    "job.credential.missing_proceeding",
                    extra={"asset_id": request.id},
                )
            self._raise_if_cancelled(cancel_event)
            self._advance(
                request.id,
                run_id,
                phase=JobPhase.SUBMITTED,
                narration=self.narration.submitted,
            )
            self._logger.info(
                "job.submit",
                extra={"asset_id": request.id, "kind": request.kind.value},
            )
            artifact = await self._execute(request, run_id, cancel_event=cancel_event)
            self._advance(
                request.id,
                run_id,
                phase=JobPhase.SUCCEEDED,
                artifact=artifact,
                narration=None,
                finished_at=self._clock(),
            )
        except asyncio.CancelledError:
            self._mark_failed(request.id, run_id, JobCancelledError("job task cancelled"))
            raise
        except Exception as exc:
            return await self._handle_failure(request, run_id, exc)

        self._logger.info(
            "job.succeeded",
            extra={
                "asset_id": request.id,
                "content_type": artifact.content_type,
                "size_bytes": artifact.size_bytes,
            },
        )
        return JobOutcome.success(artifact)

    async def _execute(
        self,
        request: AssetRequest,
        run_id: str,
        *,
        cancel_event: asyncio.Event | None,
    ) -> ArtifactRef:
        if request.kind is AssetKind.IMAGE:
            result = await self.backend.generate_image(request.prompt, request.config)
            return self._extract_image(result)

        handle = await self.backend.submit_video_job(request.prompt, request.config)
        handle = await self._poll_until_done(
            request, run_id, handle, cancel_event=cancel_event
        )
        if handle.error:
            raise _operation_error(handle)
        if not handle.artifact_uri:
            raise MissingArtifactError(
                f"Operation {handle.name} finished without a video URI"
            )
        artifact = await self.backend.fetch_artifact(handle.artifact_uri)
        if not artifact.payload:
            raise MissingArtifactError(f"Artifact at {handle.artifact_uri} is empty")
        return artifact

    async def _poll_until_done(
        self,
        request: AssetRequest,
        run_id: str,
        handle: OperationHandle,
        *,
        cancel_event: asyncio.Event | None,
    ) -> OperationHandle:
        # The budget covers polling only; credential selection has no timeout.
        expires_at = calculate_poll_expires_at(
            self._clock(), max_poll_seconds=self._max_poll_seconds
        )
        self._advance(
            request.id, run_id, phase=JobPhase.POLLING, narration=self.narration.polling
        )
        polls = 0
        while not handle.done:
            self._raise_if_cancelled(cancel_event)
            await self._sleep(self._poll_interval)
            self._raise_if_cancelled(cancel_event)
            deadline = calculate_deadline_info(expires_at, now=self._clock())
            if deadline.is_expired:
                raise PollTimeoutError(
                    f"Operation {handle.name} still running after "
                    f"{self._max_poll_seconds:g}s ({polls} polls)"
                )
            handle = await self.backend.poll_video_job(handle)
            polls += 1
            self._advance(
                request.id,
                run_id,
                poll_count=polls,
                narration=self.narration.next_tick(),
            )
            self._logger.info(
                "job.poll.tick",
                extra={
                    "asset_id": request.id,
                    "poll": polls,
                    "done": handle.done,
                    "remaining_ms": deadline.remaining_ms,
                },
            )
        return handle

    @staticmethod
    def _extract_image(result: ImageResult) -> ArtifactRef:
        if not result.payload:
            detail = ", ".join(
                part
                for part in (
                    f"finish_reason={result.finish_reason}" if result.finish_reason else "",
                    f"text={result.text}" if result.text else "",
                )
                if part
            )
            raise MissingArtifactError(
                "Image response has no inline data" + (f" ({detail})" if detail else "")
            )
        return ArtifactRef(payload=result.payload, content_type=result.content_type)

    async def _handle_failure(
        self, request: AssetRequest, run_id: str, exc: Exception
    ) -> JobOutcome:
        kind = self._mark_failed(request.id, run_id, exc)
        if kind is ErrorKind.AUTHORIZATION_EXPIRED:
            self.gate.revoke()
            await self.gate.ensure_credential()
        return JobOutcome.failure(kind, user_message(kind))

    def _mark_failed(self, asset_id: str, run_id: str, exc: BaseException) -> ErrorKind:
        kind = classify_failure(exc)
        log_extra = {
            "asset_id": asset_id,
            "error_kind": kind.value,
            "error": describe_failure(exc),
        }
        if kind is ErrorKind.TRANSIENT:
            self._logger.error("job.failed", extra=log_extra, exc_info=exc)
        else:
            self._logger.warning("job.failed", extra=log_extra)
        self._write(
            asset_id,
            run_id,
            phase=JobPhase.FAILED,
            error_kind=kind,
            error_message=user_message(kind),
            narration=None,
            finished_at=self._clock(),
        )
        return kind

    def _write(self, asset_id: str, run_id: str, **patch: Any) -> bool:
        """Apply ``patch`` only while the slot still belongs to ``run_id``."""
        if self.store.get(asset_id).run_id != run_id:
            self._logger.info(
                "job.write.stale",
                extra={"asset_id": asset_id, "fields": sorted(patch)},
            )
            return False
        self.store.set(asset_id, **patch)
        return True

    def _advance(self, asset_id: str, run_id: str, **patch: Any) -> None:
        if not self._write(asset_id, run_id, **patch):
            raise JobCancelledError("slot was reset or taken over by a newer run")

    @staticmethod
    def _raise_if_cancelled(cancel_event: asyncio.Event | None) -> None:
        if cancel_event is not None and cancel_event.is_set():
            raise JobCancelledError("cancel event set")


def _operation_error(handle: OperationHandle) -> BackendError:
    error = handle.error or {}
    message = str(error.get("message") or "operation failed")
    status = error.get("status")
    code = error.get("code")
    text = " ".join(str(part) for part in (status, message) if part)
    return BackendError(
        f"Operation {handle.name} failed: {text}",
        status_code=_http_status_for(code),
        status=str(status) if status else None,
    )


def _http_status_for(code: Any) -> int | None:
    # Operation errors carry google.rpc codes (7 = PERMISSION_DENIED,
    # 16 = UNAUTHENTICATED) rather than HTTP statuses.
    if code == 7:
        return 403
    if code == 16:
        return 401
    return None


__all__ = ["JobRunner"]

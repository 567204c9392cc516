"""Sequential, fault-isolating batch execution."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence

from ..credentials.credential_gate import CredentialGate
from ..domain.models import AssetRequest
from ..slots.slots_store import AssetSlotStore
from .job_runner import JobRunner

logger = logging.getLogger(__name__)


class BatchCoordinator:
    """Run requests one at a time, skipping slots that already hold an artifact.

    Jobs never run concurrently within a batch, which bounds the load placed
    on the shared credential. A failing job is recorded on its slot and the
    batch moves on to the next request.
    """

    def __init__(
        self,
        *,
        runner: JobRunner,
        gate: CredentialGate,
        store: AssetSlotStore,
    ) -> None:
        self.runner = runner
        self.gate = gate
        self.store = store
        self._running = False
        self._logger = logger

    @property
    def running(self) -> bool:
        return self._running

    async def run_batch(
        self,
        requests: Sequence[AssetRequest],
        *,
        cancel_event: asyncio.Event | None = None,
        job_events: Callable[[str], asyncio.Event] | None = None,
    ) -> None:
        """Run ``requests`` in order.

        ``cancel_event`` stops the batch before its next item. When
        ``job_events`` is given, each job receives the event it returns for
        the asset id instead of the batch event.
        """
        if self._running:
            self._logger.info("batch.already_running")
            return

        self._running = True
        try:
            self._logger.info("batch.start", extra={"size": len(requests)})
            await self.gate.ensure_credential()
            for index, request in enumerate(requests):
                if cancel_event is not None and cancel_event.is_set():
                    self._logger.info(
                        "batch.cancelled",
                        extra={"skipped": len(requests) - index},
                    )
                    break
                if self.store.get(request.id).has_artifact:
                    self._logger.debug("batch.skip_cached", extra={"asset_id": request.id})
                    continue
                job_event = job_events(request.id) if job_events else cancel_event
                outcome = await self.runner.run_job(request, cancel_event=job_event)
                self._logger.info(
                    "batch.item.done",
                    extra={
                        "asset_id": request.id,
                        "ok": outcome.ok,
                        "error_kind": outcome.error_kind.value if outcome.error_kind else None,
                    },
                )
        finally:
            self._running = False
            self._logger.info("batch.finished")


__all__ = ["BatchCoordinator"]

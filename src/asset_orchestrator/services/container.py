"""Service composition helpers."""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from ..config import OrchestratorConfig
from ..credentials.credential_gate import CredentialContext, CredentialGate
from ..credentials.credential_providers import (
    CredentialProvider,
    EnvironmentCredentialProvider,
)
from ..domain.models import AssetKind, AssetRequest, AssetSlotState, JobOutcome
from ..providers.providers_base import GenerationBackend
from ..providers.providers_factory import create_backend
from ..slots.slots_catalog import default_catalog
from ..slots.slots_store import AssetSlotStore
from .batch_coordinator import BatchCoordinator
from .job_runner import JobRunner
from .narration import NarrationPool

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Orchestrator:
    """Wired orchestrator plus bookkeeping for jobs started in the background."""

    config: OrchestratorConfig
    context: CredentialContext
    gate: CredentialGate
    store: AssetSlotStore
    backend: GenerationBackend
    runner: JobRunner
    coordinator: BatchCoordinator
    catalog: dict[str, AssetRequest]
    _tasks: set[asyncio.Task[Any]] = field(default_factory=set, init=False)
    _job_cancel_events: dict[str, asyncio.Event] = field(default_factory=dict, init=False)
    _batch_cancel_event: asyncio.Event | None = field(default=None, init=False)
    _batch_ids: tuple[str, ...] = field(default=(), init=False)

    async def start(self) -> bool:
        """Probe the host for a selected credential and register catalog slots."""

        for asset_id in self.catalog:
            self.store.get(asset_id)
        return await self.gate.probe()

    def request_for(self, asset_id: str) -> AssetRequest:
        try:
            return self.catalog[asset_id]
        except KeyError:
            raise KeyError(f"Asset '{asset_id}' not found") from None

    def state_for(self, asset_id: str) -> AssetSlotState:
        self.request_for(asset_id)
        return self.store.get(asset_id)

    async def run_job(self, asset_id: str) -> JobOutcome:
        request = self.request_for(asset_id)
        event = self._cancel_event_for(asset_id)
        return await self.runner.run_job(request, cancel_event=event)

    async def run_batch(self, asset_ids: Iterable[str] | None = None) -> None:
        requests = self._batch_requests(asset_ids)
        if not self.coordinator.running:
            self._batch_cancel_event = asyncio.Event()
            self._batch_ids = tuple(request.id for request in requests)
        await self.coordinator.run_batch(
            requests,
            cancel_event=self._batch_cancel_event,
            job_events=self._cancel_event_for,
        )

    def schedule_job(self, asset_id: str) -> asyncio.Task[JobOutcome]:
        """Start ``run_job`` without awaiting it; the slot reports progress."""

        self.request_for(asset_id)
        return self._track(asyncio.create_task(self.run_job(asset_id)))

    def schedule_batch(self, asset_ids: Iterable[str] | None = None) -> asyncio.Task[None]:
        requests = [request.id for request in self._batch_requests(asset_ids)]
        return self._track(asyncio.create_task(self.run_batch(requests)))

    def cancel_job(self, asset_id: str) -> bool:
        """Ask an in-flight job to stop at its next poll tick."""

        self.request_for(asset_id)
        event = self._job_cancel_events.get(asset_id)
        if event is None or not self.store.get(asset_id).phase.in_flight:
            return False
        event.set()
        return True

    def cancel_batch(self) -> bool:
        if self._batch_cancel_event is None or not self.coordinator.running:
            return False
        self._batch_cancel_event.set()
        for asset_id in self._batch_ids:
            self.cancel_job(asset_id)
        return True

    def reset(self, asset_id: str) -> AssetSlotState:
        """Return the slot to ``IDLE``, stopping a job that still owns it."""

        if self.cancel_job(asset_id):
            logger.info("orchestrator.reset.cancelled_job", extra={"asset_id": asset_id})
        return self.store.reset(asset_id)

    async def aclose(self) -> None:
        """Cancel background jobs and release the backend."""

        for task in list(self._tasks):
            task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)
        await self.backend.aclose()

    def _cancel_event_for(self, asset_id: str) -> asyncio.Event:
        # An in-flight job keeps its event; a fresh run gets a new one.
        event = self._job_cancel_events.get(asset_id)
        if event is None or not self.store.get(asset_id).phase.in_flight:
            event = asyncio.Event()
            self._job_cancel_events[asset_id] = event
        return event

    def _batch_requests(self, asset_ids: Iterable[str] | None) -> list[AssetRequest]:
        if asset_ids is None:
            return [r for r in self.catalog.values() if r.kind is AssetKind.IMAGE]
        return [self.request_for(asset_id) for asset_id in asset_ids]

    def _track(self, task: asyncio.Task[Any]) -> asyncio.Task[Any]:
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task


def build_orchestrator(
    config: OrchestratorConfig | None = None,
    *,
    backend: GenerationBackend | None = None,
    credentials: CredentialProvider | None = None,
    catalog: Iterable[AssetRequest] | None = None,
    clock: Callable[[], datetime] | None = None,
    sleep: Callable[[float], Any] | None = None,
    rng: random.Random | None = None,
) -> Orchestrator:
    """Wire context, gate, store, runner and coordinator from ``config``."""

    cfg = config or OrchestratorConfig.build_default()
    provider = credentials or EnvironmentCredentialProvider(
        env_var=cfg.api_key_env, key_file=cfg.api_key_file
    )
    context = CredentialContext(provider=provider)
    gate = CredentialGate(context)
    store = AssetSlotStore()
    generation_backend = backend or create_backend(
        cfg.backend, config=cfg, credentials=provider
    )
    narration = NarrationPool(rng=rng) if rng is not None else NarrationPool()
    runner = JobRunner(
        store=store,
        gate=gate,
        backend=generation_backend,
        narration=narration,
        clock=clock,
        sleep=sleep,
        poll_interval=cfg.poll_interval_seconds,
        max_poll_seconds=cfg.max_poll_seconds,
    )
    coordinator = BatchCoordinator(runner=runner, gate=gate, store=store)
    requests = list(catalog) if catalog is not None else default_catalog()
    ids = [request.id for request in requests]
    if len(set(ids)) != len(ids):
        raise ValueError("Asset ids in the catalog must be unique")
    logger.debug("orchestrator.built", extra={"assets": len(requests)})
    return Orchestrator(
        config=cfg,
        context=context,
        gate=gate,
        store=store,
        backend=generation_backend,
        runner=runner,
        coordinator=coordinator,
        catalog={request.id: request for request in requests},
    )


__all__ = ["Orchestrator", "build_orchestrator"]

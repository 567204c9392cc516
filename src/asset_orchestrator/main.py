"""FastAPI application entry point."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .api import router
from .config import OrchestratorConfig
from .logging import configure_logging
from .services.container import Orchestrator, build_orchestrator


def create_app(
    config: OrchestratorConfig | None = None,
    *,
    orchestrator: Orchestrator | None = None,
) -> FastAPI:
    """Build FastAPI instance with a wired orchestrator."""
    cfg = config or (
        orchestrator.config if orchestrator is not None else OrchestratorConfig.build_default()
    )
    configure_logging(cfg.log_level, json_output=cfg.log_json)
    service = orchestrator or build_orchestrator(cfg)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        await service.start()
        try:
            yield
        finally:
            await service.aclose()

    app = FastAPI(title="Asset Orchestrator", lifespan=lifespan)
    app.state.orchestrator = service
    app.include_router(router)
    return app


app = create_app()

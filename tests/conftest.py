from __future__ import annotations

import random

import pytest

from asset_orchestrator.config import OrchestratorConfig
from asset_orchestrator.credentials import CredentialContext, CredentialGate
from asset_orchestrator.services.container import build_orchestrator
from asset_orchestrator.services.job_runner import JobRunner
from asset_orchestrator.services.narration import NarrationPool
from asset_orchestrator.slots.slots_store import AssetSlotStore

from tests.mocks.backends import MockBackendConfig, MockGenerationBackend
from tests.mocks.credentials import ScriptedCredentialProvider, TimeController


@pytest.fixture(autouse=True)
def isolated_environment(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    for name in ("BACKEND", "POLL_INTERVAL_SECONDS", "MAX_POLL_SECONDS", "LOG_JSON"):
        monkeypatch.delenv(f"ASSET_ORCHESTRATOR_{name}", raising=False)


@pytest.fixture
def time_controller() -> TimeController:
    return TimeController()


@pytest.fixture
def credential_provider() -> ScriptedCredentialProvider:
    return ScriptedCredentialProvider(selected=True)


@pytest.fixture
def backend_config() -> MockBackendConfig:
    return MockBackendConfig()


@pytest.fixture
def mock_backend(backend_config: MockBackendConfig) -> MockGenerationBackend:
    return MockGenerationBackend(backend_config)


@pytest.fixture
def store() -> AssetSlotStore:
    return AssetSlotStore()


@pytest.fixture
def gate(credential_provider: ScriptedCredentialProvider) -> CredentialGate:
    return CredentialGate(
        CredentialContext(
            provider=credential_provider,
            has_credential=credential_provider.selected,
        )
    )


@pytest.fixture
def job_runner(
    store: AssetSlotStore,
    gate: CredentialGate,
    mock_backend: MockGenerationBackend,
    time_controller: TimeController,
) -> JobRunner:
    return JobRunner(
        store=store,
        gate=gate,
        backend=mock_backend,
        narration=NarrationPool(rng=random.Random(7)),
        clock=time_controller,
        sleep=time_controller.sleep,
        poll_interval=10.0,
        max_poll_seconds=600.0,
    )


@pytest.fixture
def orchestrator_factory(
    mock_backend: MockGenerationBackend,
    credential_provider: ScriptedCredentialProvider,
    time_controller: TimeController,
):
    def factory(**overrides):
        config = OrchestratorConfig(**overrides.pop("config", {}))
        return build_orchestrator(
            config,
            backend=overrides.pop("backend", mock_backend),
            credentials=overrides.pop("credentials", credential_provider),
            clock=time_controller,
            sleep=time_controller.sleep,
            rng=random.Random(7),
            **overrides,
        )

    return factory

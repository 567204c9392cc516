from __future__ import annotations

import asyncio

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from asset_orchestrator.config import OrchestratorConfig
from asset_orchestrator.main import create_app
from asset_orchestrator.services.container import build_orchestrator

from tests.mocks.backends import TRANSPARENT_PNG_BYTES, VIDEO_BYTES, MockBackendScenario


async def settle(rounds: int = 20) -> None:
    for _ in range(rounds):
        await asyncio.sleep(0)


@pytest.fixture
def orchestrator(orchestrator_factory):
    return orchestrator_factory(config={"log_json": False})


@pytest.fixture
def client(orchestrator):
    with TestClient(create_app(orchestrator=orchestrator)) as test_client:
        yield test_client


@pytest_asyncio.fixture
async def async_client(orchestrator):
    app = create_app(orchestrator=orchestrator)
    await orchestrator.start()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        yield http
    await orchestrator.aclose()


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_list_assets_returns_catalog_in_order(client: TestClient) -> None:
    response = client.get("/api/assets")

    assert response.status_code == 200
    body = response.json()
    assert [item["asset_id"] for item in body] == ["cinematic"] + [f"ch{i}" for i in range(1, 9)]
    assert body[0]["kind"] == "video"
    assert body[1]["config"] == {"aspect_ratio": "1:1", "image_size": "1K"}
    assert all(item["state"]["phase"] == "idle" for item in body)


def test_unknown_asset_returns_404(client: TestClient) -> None:
    for method, path in (
        ("get", "/api/assets/ch99"),
        ("post", "/api/assets/ch99/run"),
        ("post", "/api/assets/ch99/reset"),
        ("post", "/api/assets/ch99/cancel"),
        ("get", "/api/assets/ch99/artifact"),
    ):
        response = getattr(client, method)(path)
        assert response.status_code == 404, path
        assert response.json()["detail"]["reason"] == "asset_not_found"


def test_artifact_missing_before_generation(client: TestClient) -> None:
    response = client.get("/api/assets/ch1/artifact")

    assert response.status_code == 404
    assert response.json()["detail"]["reason"] == "artifact_missing"


def test_credential_status_and_selection(client: TestClient, credential_provider) -> None:
    status = client.get("/api/credential")
    assert status.json() == {"has_credential": True, "prompt_in_flight": False}

    selected = client.post("/api/credential/select")

    assert selected.status_code == 200
    assert selected.json()["has_credential"] is True
    assert credential_provider.open_calls == 1


def test_cancel_idle_asset_reports_false(client: TestClient) -> None:
    response = client.post("/api/assets/ch1/cancel")

    assert response.status_code == 200
    assert response.json() == {"cancelled": False}


@pytest.mark.asyncio
async def test_run_image_and_download(async_client: httpx.AsyncClient) -> None:
    accepted = await async_client.post("/api/assets/ch1/run")
    assert accepted.status_code == 202
    assert accepted.json()["phase"] in {"awaiting_credential", "submitted", "succeeded"}

    await settle()
    state = (await async_client.get("/api/assets/ch1")).json()["state"]

    assert state["phase"] == "succeeded"
    assert state["artifact"]["content_type"] == "image/png"
    assert state["artifact"]["data_url"].startswith("data:image/png;base64,")

    artifact = await async_client.get("/api/assets/ch1/artifact")
    assert artifact.status_code == 200
    assert artifact.headers["content-type"] == "image/png"
    assert artifact.content == TRANSPARENT_PNG_BYTES


@pytest.mark.asyncio
async def test_run_video_serves_artifact_by_endpoint(async_client: httpx.AsyncClient) -> None:
    await async_client.post("/api/assets/cinematic/run")
    await settle(50)

    state = (await async_client.get("/api/assets/cinematic")).json()["state"]
    assert state["phase"] == "succeeded"
    assert state["poll_count"] == 2
    assert state["artifact"]["data_url"] is None

    artifact = await async_client.get("/api/assets/cinematic/artifact")
    assert artifact.headers["content-type"] == "video/mp4"
    assert artifact.content == VIDEO_BYTES


@pytest.mark.asyncio
async def test_run_while_in_flight_conflicts(async_client, mock_backend) -> None:
    mock_backend.release = asyncio.Event()

    first = await async_client.post("/api/assets/ch1/run")
    second = await async_client.post("/api/assets/ch1/run")
    reset = await async_client.post("/api/assets/ch1/reset")

    assert first.status_code == 202
    assert second.status_code == 409
    assert second.json()["detail"]["reason"] == "busy"
    assert reset.status_code == 409
    assert len(mock_backend.image_prompts) == 1

    mock_backend.release.set()
    await settle()
    reset = await async_client.post("/api/assets/ch1/reset")
    assert reset.status_code == 200
    assert reset.json()["phase"] == "idle"


@pytest.mark.asyncio
async def test_batch_lifecycle(async_client, mock_backend) -> None:
    mock_backend.release = asyncio.Event()

    started = await async_client.post("/api/batch", json={"asset_ids": ["ch1", "ch2"]})
    assert started.status_code == 202
    assert started.json() == {"running": True}

    conflict = await async_client.post("/api/batch")
    assert conflict.status_code == 409

    cancelled = await async_client.post("/api/batch/cancel")
    assert cancelled.json() == {"cancelled": True}

    mock_backend.release.set()
    await settle()

    assert (await async_client.get("/api/batch")).json() == {"running": False}
    assert (await async_client.get("/api/assets/ch1")).json()["state"]["phase"] == "succeeded"
    assert (await async_client.get("/api/assets/ch2")).json()["state"]["phase"] == "idle"


@pytest.mark.asyncio
async def test_batch_with_unknown_asset_returns_404(async_client) -> None:
    response = await async_client.post("/api/batch", json={"asset_ids": ["ch99"]})

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cancel_asset_reaches_job_started_by_batch(mock_backend, credential_provider) -> None:
    tick = asyncio.Event()
    tick.set()

    async def sleep(seconds: float) -> None:
        await tick.wait()

    orchestrator = build_orchestrator(
        OrchestratorConfig(log_json=False),
        backend=mock_backend,
        credentials=credential_provider,
        sleep=sleep,
    )
    app = create_app(orchestrator=orchestrator)
    await orchestrator.start()
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as http:
        await http.post("/api/assets/cinematic/run")
        await settle(50)
        assert (await http.get("/api/assets/cinematic")).json()["state"]["phase"] == "succeeded"
        assert (await http.post("/api/assets/cinematic/reset")).status_code == 200

        tick.clear()
        mock_backend.config.scenario = MockBackendScenario.NEVER_DONE
        started = await http.post("/api/batch", json={"asset_ids": ["cinematic"]})
        assert started.status_code == 202
        await settle()
        assert (await http.get("/api/assets/cinematic")).json()["state"]["phase"] == "polling"

        cancelled = await http.post("/api/assets/cinematic/cancel")
        assert cancelled.json() == {"cancelled": True}

        tick.set()
        await settle()
        state = (await http.get("/api/assets/cinematic")).json()["state"]
        assert state["phase"] == "failed"
        assert state["error_kind"] == "cancelled"
        assert (await http.get("/api/batch")).json() == {"running": False}
    await orchestrator.aclose()

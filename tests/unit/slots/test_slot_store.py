from __future__ import annotations

import pytest

from asset_orchestrator.domain.models import ArtifactRef, ErrorKind, JobPhase
from asset_orchestrator.slots.slots_store import AssetSlotStore


def test_get_creates_idle_slot() -> None:
    store = AssetSlotStore()

    state = store.get("ch1")

    assert state.id == "ch1"
    assert state.phase is JobPhase.IDLE
    assert state.artifact is None
    assert "ch1" in store
    assert len(store) == 1


def test_set_merges_patch_and_keeps_other_fields() -> None:
    store = AssetSlotStore()
    store.set("ch1", phase=JobPhase.SUBMITTED, narration="Calibrating...")

    state = store.set("ch1", narration="Rendering...")

    assert state.phase is JobPhase.SUBMITTED
    assert state.narration == "Rendering..."
    assert store.get("ch1") is state


def test_set_swaps_snapshots() -> None:
    store = AssetSlotStore()
    before = store.get("ch1")

    store.set("ch1", phase=JobPhase.POLLING)

    assert before.phase is JobPhase.IDLE
    assert store.get("ch1").phase is JobPhase.POLLING


@pytest.mark.parametrize("patch", [{"id": "other"}, {"colour": "red"}])
def test_set_rejects_unknown_or_identity_fields(patch) -> None:
    store = AssetSlotStore()

    with pytest.raises(ValueError):
        store.set("ch1", **patch)


def test_reset_clears_artifact_and_error() -> None:
    store = AssetSlotStore()
    store.set(
        "ch1",
        phase=JobPhase.FAILED,
        artifact=ArtifactRef(payload=b"x", content_type="image/png"),
        error_kind=ErrorKind.TRANSIENT,
        error_message="boom",
    )

    state = store.reset("ch1")

    assert state.phase is JobPhase.IDLE
    assert state.artifact is None
    assert state.error_kind is None
    assert state.error_message is None


def test_reset_releases_run_ownership() -> None:
    store = AssetSlotStore()
    store.set("ch1", phase=JobPhase.POLLING, run_id="run-1", poll_count=2)

    state = store.reset("ch1")

    assert state.run_id is None
    assert state.poll_count == 0


def test_snapshot_and_iteration_follow_insertion_order() -> None:
    store = AssetSlotStore()
    for asset_id in ("cinematic", "ch1", "ch2"):
        store.get(asset_id)

    assert list(store) == ["cinematic", "ch1", "ch2"]
    assert [state.id for state in store.snapshot()] == ["cinematic", "ch1", "ch2"]

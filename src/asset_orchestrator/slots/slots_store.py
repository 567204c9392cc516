"""Process-local store of asset slot snapshots."""

from __future__ import annotations

from dataclasses import fields, replace
from typing import Any, Iterator

from ..domain.models import AssetSlotState, JobPhase

_PATCHABLE_FIELDS = frozenset(f.name for f in fields(AssetSlotState)) - {"id"}


class AssetSlotStore:
    """Map asset ids to their current :class:`AssetSlotState`.

    Writers are the job runner and batch coordinator; they are serialized per
    id by the in-flight phase check and the slot's ``run_id`` token and run on
    a single event loop, so the store itself holds no lock.
    """

    def __init__(self) -> None:
        self._slots: dict[str, AssetSlotState] = {}

    def get(self, asset_id: str) -> AssetSlotState:
        """Return the slot for ``asset_id``, creating an idle one on first use."""

        state = self._slots.get(asset_id)
        if state is None:
            state = AssetSlotState(id=asset_id)
            self._slots[asset_id] = state
        return state

    def set(self, asset_id: str, **patch: Any) -> AssetSlotState:
        """Merge ``patch`` into the slot; fields not named keep their value."""

        unknown = set(patch) - _PATCHABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown slot fields: {', '.join(sorted(unknown))}")
        state = replace(self.get(asset_id), **patch)
        self._slots[asset_id] = state
        return state

    def reset(self, asset_id: str) -> AssetSlotState:
        """Return the slot to ``IDLE`` with no artifact, error or narration."""

        state = AssetSlotState(id=asset_id, phase=JobPhase.IDLE)
        self._slots[asset_id] = state
        return state

    def snapshot(self) -> list[AssetSlotState]:
        return list(self._slots.values())

    def __contains__(self, asset_id: object) -> bool:
        return asset_id in self._slots

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._slots))

    def __len__(self) -> int:
        return len(self._slots)


__all__ = ["AssetSlotStore"]

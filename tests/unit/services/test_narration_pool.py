from __future__ import annotations

import random

import pytest

from asset_orchestrator.services.narration import DEFAULT_TICK_PHRASES, NarrationPool


def test_ticks_never_repeat_back_to_back() -> None:
    pool = NarrationPool(rng=random.Random(3))

    ticks = [pool.next_tick() for _ in range(50)]

    assert set(ticks) <= set(DEFAULT_TICK_PHRASES)
    assert all(a != b for a, b in zip(ticks, ticks[1:]))


def test_single_phrase_pool_repeats() -> None:
    pool = NarrationPool(tick_phrases=("Only one...",))

    assert [pool.next_tick() for _ in range(3)] == ["Only one..."] * 3


def test_empty_pool_is_rejected() -> None:
    with pytest.raises(ValueError):
        NarrationPool(tick_phrases=())

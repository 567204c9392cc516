"""Unit coverage for the poll deadline helpers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from asset_orchestrator.domain import deadlines


def test_calculate_poll_expires_at_adds_budget() -> None:
    """`expires_at` should equal `started_at + max_poll_seconds`."""

    started_at = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    expires_at = deadlines.calculate_poll_expires_at(started_at, max_poll_seconds=600)

    assert expires_at == started_at + timedelta(minutes=10)


def test_calculate_poll_expires_at_rejects_non_positive_budget() -> None:
    started_at = datetime(2025, 1, 1, tzinfo=timezone.utc)

    with pytest.raises(ValueError, match="must be positive"):
        deadlines.calculate_poll_expires_at(started_at, max_poll_seconds=0)


def test_calculate_deadline_info_reports_remaining_time() -> None:
    """The helper returns remaining milliseconds and expiry flag."""

    now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    expires_at = now + timedelta(seconds=15)

    info = deadlines.calculate_deadline_info(expires_at, now=now)

    assert info.expires_at == expires_at
    assert info.remaining_ms == 15_000
    assert info.is_expired is False


def test_calculate_deadline_info_clamps_expired_deadline() -> None:
    now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)

    info = deadlines.calculate_deadline_info(now - timedelta(seconds=3), now=now)

    assert info.remaining_ms == 0
    assert info.is_expired is True


def test_calculate_deadline_info_normalises_naive_now() -> None:
    expires_at = datetime(2025, 1, 1, 12, 0, 10, tzinfo=timezone.utc)

    info = deadlines.calculate_deadline_info(
        expires_at, now=datetime(2025, 1, 1, 12, 0, 0)
    )

    assert info.remaining_ms == 10_000

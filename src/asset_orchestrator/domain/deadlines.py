"""Deadline helpers for long-running generation operations."""

from __future__ import annotations

from datetime import datetime, timedelta

from .models import PollDeadline


def calculate_poll_expires_at(started_at: datetime, *, max_poll_seconds: float) -> datetime:
    """Return the instant after which polling must give up.

    ``max_poll_seconds`` bounds the whole submit-and-poll window of a single
    job, not individual poll requests.
    """

    if max_poll_seconds <= 0:
        raise ValueError("max_poll_seconds must be positive")
    return started_at + timedelta(seconds=max_poll_seconds)


def calculate_deadline_info(expires_at: datetime, *, now: datetime) -> PollDeadline:
    """Build a :class:`PollDeadline` snapshot for the poll loop."""

    if expires_at.tzinfo is not None and now.tzinfo is None:
        now = now.replace(tzinfo=expires_at.tzinfo)
    elif expires_at.tzinfo is None and now.tzinfo is not None:
        expires_at = expires_at.replace(tzinfo=now.tzinfo)

    delta = expires_at - now
    remaining_ms = max(int(delta.total_seconds() * 1000), 0)
    is_expired = expires_at <= now
    return PollDeadline(
        expires_at=expires_at,
        remaining_ms=remaining_ms,
        is_expired=is_expired,
    )


__all__ = [
    "calculate_poll_expires_at",
    "calculate_deadline_info",
]

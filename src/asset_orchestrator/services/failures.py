"""Failure classification for generation jobs."""

from __future__ import annotations

import asyncio

import httpx

from ..domain.models import ErrorKind
from ..exceptions import (
    BackendError,
    JobCancelledError,
    MissingArtifactError,
    PollTimeoutError,
)

# Substrings the API uses when a key is invalid, expired or lacks access.
AUTHORIZATION_MARKERS: tuple[str, ...] = (
    "PERMISSION_DENIED",
    "Requested entity was not found",
    "UNAUTHENTICATED",
    "403",
)
AUTHORIZATION_STATUS_CODES = frozenset({401, 403})

USER_MESSAGES: dict[ErrorKind, str] = {
    ErrorKind.AUTHORIZATION_EXPIRED: (
        "API key session expired or lacks permission. "
        "Please select a valid paid API key and try again."
    ),
    ErrorKind.MISSING_ARTIFACT: "Generation finished without producing any media.",
    ErrorKind.TRANSIENT: "The generation service failed. Please try again later.",
    ErrorKind.BUSY: "This asset is already being generated.",
    ErrorKind.TIMEOUT: "Generation took too long and was abandoned.",
    ErrorKind.CANCELLED: "Generation was cancelled.",
}


def classify_failure(exc: BaseException) -> ErrorKind:
    """Map an exception raised while running a job to an :class:`ErrorKind`."""

    if isinstance(exc, (JobCancelledError, asyncio.CancelledError)):
        return ErrorKind.CANCELLED
    if isinstance(exc, PollTimeoutError):
        return ErrorKind.TIMEOUT
    if isinstance(exc, MissingArtifactError):
        return ErrorKind.MISSING_ARTIFACT
    if _status_code(exc) in AUTHORIZATION_STATUS_CODES:
        return ErrorKind.AUTHORIZATION_EXPIRED
    text = describe_failure(exc)
    if any(marker in text for marker in AUTHORIZATION_MARKERS):
        return ErrorKind.AUTHORIZATION_EXPIRED
    return ErrorKind.TRANSIENT


def describe_failure(exc: BaseException) -> str:
    parts = [type(exc).__name__, str(exc)]
    status = getattr(exc, "status", None)
    if isinstance(status, str) and status:
        parts.append(status)
    return " ".join(part for part in parts if part)


def user_message(kind: ErrorKind) -> str:
    return USER_MESSAGES[kind]


def _status_code(exc: BaseException) -> int | None:
    if isinstance(exc, BackendError):
        return exc.status_code
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code
    return None


__all__ = [
    "AUTHORIZATION_MARKERS",
    "classify_failure",
    "describe_failure",
    "user_message",
]

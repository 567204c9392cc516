"""Credential gate guarding every generation request."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from .credential_providers import CredentialProvider

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CredentialContext:
    """Process-wide credential state passed explicitly to the orchestrator.

    ``has_credential`` is written only by :class:`CredentialGate` and by the
    authorization-failure path of the job runner.
    """

    provider: CredentialProvider
    has_credential: bool = False

    def api_key(self) -> str | None:
        return self.provider.current_key()


class CredentialGate:
    """Check for a selected credential and prompt for one when missing."""

    def __init__(self, context: CredentialContext) -> None:
        self.context = context
        self._pending: asyncio.Task[bool] | None = None
        self._logger = logger

    async def probe(self) -> bool:
        """Initialise ``has_credential`` from the host without prompting."""

        try:
            selected = bool(await self.context.provider.has_selected_credential())
        except Exception:
            self._logger.exception("credential.probe.failed")
            selected = False
        self.context.has_credential = selected
        self._logger.info("credential.probe", extra={"selected": selected})
        return selected

    async def ensure_credential(self) -> bool:
        """Return ``True`` when a credential is usable, prompting if needed.

        Returns immediately while ``has_credential`` holds. Otherwise the
        provider's selection flow runs once; concurrent callers await the
        same in-flight prompt instead of opening a second one. A declined or
        failed selection yields ``False``; nothing is raised.
        """

        if self.context.has_credential:
            return True
        if self._pending is None:
            self._pending = asyncio.ensure_future(self._select())
        return await asyncio.shield(self._pending)

    def revoke(self) -> None:
        """Mark the current credential unusable after a rejection."""

        if self.context.has_credential:
            self._logger.warning("credential.revoked")
        self.context.has_credential = False

    @property
    def prompt_in_flight(self) -> bool:
        return self._pending is not None

    async def _select(self) -> bool:
        provider = self.context.provider
        try:
            self._logger.info("credential.prompt.start")
            await provider.open_selection()
            selected = bool(await provider.has_selected_credential())
        except Exception:
            self._logger.exception("credential.prompt.failed")
            selected = False
        finally:
            self._pending = None
        self.context.has_credential = selected
        self._logger.info("credential.prompt.done", extra={"selected": selected})
        return selected


__all__ = ["CredentialContext", "CredentialGate"]

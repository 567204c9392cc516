"""Host capabilities that supply the generation API key."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable

logger = logging.getLogger(__name__)


@runtime_checkable
class CredentialProvider(Protocol):
    """Host-environment probe and interactive provisioning flow."""

    async def has_selected_credential(self) -> bool:
        """Return whether a credential is currently selected."""

    async def open_selection(self) -> None:
        """Run the (re)selection interaction; may suspend indefinitely."""

    def current_key(self) -> str | None:
        """Return the selected key, if any."""


@dataclass(slots=True)
class EnvironmentCredentialProvider:
    """Resolve the key from an environment variable or a key file.

    Selection is non-interactive: ``open_selection`` re-reads both sources so
    a key rotated on disk or in the environment is picked up.
    """

    env_var: str = "GEMINI_API_KEY"
    key_file: Path | None = None
    log: logging.Logger = field(default_factory=lambda: logger)
    _key: str | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        self._key = self._read_key()

    async def has_selected_credential(self) -> bool:
        return bool(self._key)

    async def open_selection(self) -> None:
        self._key = self._read_key()
        self.log.info(
            "credential.selection.reloaded",
            extra={"env_var": self.env_var, "selected": bool(self._key)},
        )

    def current_key(self) -> str | None:
        return self._key

    def _read_key(self) -> str | None:
        value = (os.getenv(self.env_var) or "").strip()
        if value:
            return value
        if self.key_file is not None:
            try:
                value = self.key_file.read_text(encoding="utf-8").strip()
            except FileNotFoundError:
                return None
            return value or None
        return None


@dataclass(slots=True)
class StaticCredentialProvider:
    """Fixed key supplied by the embedding application."""

    key: str | None = None

    async def has_selected_credential(self) -> bool:
        return bool(self.key)

    async def open_selection(self) -> None:
        return None

    def current_key(self) -> str | None:
        return self.key


__all__ = [
    "CredentialProvider",
    "EnvironmentCredentialProvider",
    "StaticCredentialProvider",
]

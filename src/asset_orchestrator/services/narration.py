"""Cosmetic progress narration shown while a job runs."""

from __future__ import annotations

import random
from dataclasses import dataclass, field

DEFAULT_TICK_PHRASES: tuple[str, ...] = (
    "Weaving the shield of light...",
    "Capturing the ozone and lemon sparks...",
    "Stabilizing the Martian horizon...",
    "Finalizing the cinematic vision...",
)


@dataclass(slots=True)
class NarrationPool:
    """Fixed phrases for each phase plus a rotating pool for poll ticks.

    Tick phrases are drawn at random but never repeat the previous tick, so
    the displayed text changes on every poll.
    """

    awaiting_credential: str = "Initializing Martian transmission..."
    submitted: str = "Calibrating Tesla Tower frequencies..."
    polling: str = "Rendering the City of Glass..."
    tick_phrases: tuple[str, ...] = DEFAULT_TICK_PHRASES
    rng: random.Random = field(default_factory=random.Random)
    _last_tick: str | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if not self.tick_phrases:
            raise ValueError("tick_phrases must not be empty")

    def next_tick(self) -> str:
        choices = [phrase for phrase in self.tick_phrases if phrase != self._last_tick]
        phrase = self.rng.choice(choices or list(self.tick_phrases))
        self._last_tick = phrase
        return phrase


__all__ = ["DEFAULT_TICK_PHRASES", "NarrationPool"]

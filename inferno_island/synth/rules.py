"""Offline synthesizer — template and rule based, no network calls."""

from __future__ import annotations

import random

from inferno_island.models import CeremonyRequest, CeremonyResult, EventBundle, EventRequest

from .ceremony import synthesize_ceremony
from .events import synthesize_event


class RuleBasedSynthesizer:
    """Plays the whole show from the static banks.

    Args:
        rng: Source of every random draw. Pass a seeded ``random.Random``
             for a reproducible run.
    """

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    async def synthesize_event(self, request: EventRequest) -> EventBundle:
        return synthesize_event(request, self._rng)

    async def synthesize_ceremony(self, request: CeremonyRequest) -> CeremonyResult:
        return synthesize_ceremony(request, self._rng)

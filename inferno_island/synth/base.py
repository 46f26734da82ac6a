"""The capability every synthesizer provides."""

from __future__ import annotations

from typing import Protocol

from inferno_island.models import CeremonyRequest, CeremonyResult, EventBundle, EventRequest


class Synthesizer(Protocol):
    async def synthesize_event(self, request: EventRequest) -> EventBundle: ...

    async def synthesize_ceremony(self, request: CeremonyRequest) -> CeremonyResult: ...


class SynthesisError(ValueError):
    """Raised when a synthesizer cannot produce a valid payload.

    Fatal to the advance that triggered it; the caller keeps its last good
    state and may retry.
    """

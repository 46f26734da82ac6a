"""Auto-play driver — owns the live snapshot and advances it on a timer.

Only one advance runs at a time. ``step()`` called while another step is
in flight raises AdvanceInProgressError instead of queueing. A failed step
leaves the held state as it was and records the exception in
``last_error``; the loop keeps ticking, so the next tick is the retry.
"""

from __future__ import annotations

import asyncio
import logging

from inferno_island import engine
from inferno_island.models import GameState
from inferno_island.synth.base import Synthesizer

logger = logging.getLogger(__name__)

DEFAULT_SPEED = 8.0
DEFAULT_CEREMONY_DELAY = 2.0


class AdvanceInProgressError(RuntimeError):
    """Another advance is still running for this session."""


class AutoPlayer:
    """Drive one game session, manually via ``step()`` or on a timer via ``run()``.

    Args:
        state:          Starting snapshot.
        synthesizer:    Produces events and the ceremony.
        speed:          Seconds between event advances.
        ceremony_delay: Seconds to wait before firing the ceremony.
        window:         How many recent events go into each request.
    """

    def __init__(
        self,
        state: GameState,
        synthesizer: Synthesizer,
        speed: float = DEFAULT_SPEED,
        ceremony_delay: float = DEFAULT_CEREMONY_DELAY,
        window: int = engine.RECENT_EVENT_WINDOW,
    ) -> None:
        self.state = state
        self.synthesizer = synthesizer
        self.speed = speed
        self.ceremony_delay = ceremony_delay
        self.window = window
        self.last_error: Exception | None = None
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        return self._lock.locked()

    @property
    def finished(self) -> bool:
        return self.state.phase == "results"

    async def step(self) -> GameState:
        """Advance one event, or run the ceremony when it is due."""
        if self._lock.locked():
            raise AdvanceInProgressError("An advance is already in progress")
        async with self._lock:
            state = self.state
            if state.phase == "intro":
                state = engine.start_game(state)
            try:
                if state.phase == "ceremony":
                    new_state = await engine.run_ceremony(state, self.synthesizer)
                else:
                    new_state = await engine.advance(state, self.synthesizer, self.window)
            except Exception as e:
                self.last_error = e
                logger.error("Advance failed on day %d %s: %s", state.day, state.time_of_day, e)
                raise
            self.last_error = None
            self.state = new_state
            return new_state

    def _delay(self) -> float:
        return self.ceremony_delay if self.state.phase == "ceremony" else self.speed

    async def run(self, max_failures: int | None = None) -> GameState:
        """Step until results. Failures are logged and retried on the next tick.

        ``max_failures`` stops the loop after that many consecutive failures
        and re-raises the last one.
        """
        failures = 0
        while not self.finished:
            await asyncio.sleep(self._delay())
            try:
                await self.step()
            except AdvanceInProgressError:
                continue
            except Exception:
                failures += 1
                if max_failures is not None and failures >= max_failures:
                    raise
                continue
            failures = 0
        return self.state

"""Tests for inferno_island.autoplay — single-flight advancing on a timer."""

import asyncio
import random
from unittest.mock import AsyncMock

import pytest

from inferno_island import engine
from inferno_island.autoplay import AdvanceInProgressError, AutoPlayer
from inferno_island.models import CeremonyResult, EventBundle
from inferno_island.synth import RuleBasedSynthesizer, SynthesisError


class SlowSynth(RuleBasedSynthesizer):
    """Rule-based synthesizer that waits on an event before answering."""

    def __init__(self) -> None:
        super().__init__(random.Random(0))
        self.release = asyncio.Event()

    async def synthesize_event(self, request):
        await self.release.wait()
        return await super().synthesize_event(request)


class TestStep:
    async def test_starts_game_from_intro(self) -> None:
        player = AutoPlayer(engine.new_game(random.Random(0)), RuleBasedSynthesizer(random.Random(0)))
        state = await player.step()
        assert state.phase == "playing"
        assert len(state.events) == 1
        assert player.state is state

    async def test_second_step_while_busy_rejected(self, playing_state) -> None:
        synth = SlowSynth()
        player = AutoPlayer(playing_state, synth)
        first = asyncio.create_task(player.step())
        await asyncio.sleep(0)
        assert player.busy
        with pytest.raises(AdvanceInProgressError):
            await player.step()
        synth.release.set()
        await first
        assert len(player.state.events) == 1
        assert not player.busy

    async def test_failure_keeps_state_and_records_error(self, playing_state) -> None:
        synth = AsyncMock()
        synth.synthesize_event.side_effect = SynthesisError("garbled")
        player = AutoPlayer(playing_state, synth)
        with pytest.raises(SynthesisError):
            await player.step()
        assert player.state is playing_state
        assert isinstance(player.last_error, SynthesisError)
        assert not player.busy

    async def test_success_clears_error(self, playing_state, result_factory) -> None:
        synth = AsyncMock()
        synth.synthesize_event.side_effect = [
            SynthesisError("garbled"), EventBundle(event=result_factory()),
        ]
        player = AutoPlayer(playing_state, synth)
        with pytest.raises(SynthesisError):
            await player.step()
        await player.step()
        assert player.last_error is None
        assert len(player.state.events) == 1

    async def test_runs_ceremony_when_due(self, playing_state) -> None:
        state = playing_state.model_copy(update={"phase": "ceremony"})
        player = AutoPlayer(state, RuleBasedSynthesizer(random.Random(0)))
        done = await player.step()
        assert done.phase == "results"
        assert player.finished


class TestRun:
    async def test_plays_to_results(self) -> None:
        rng = random.Random(9)
        player = AutoPlayer(
            engine.new_game(rng), RuleBasedSynthesizer(rng), speed=0, ceremony_delay=0
        )
        state = await player.run()
        assert state.phase == "results"
        assert state.events[-1].type == "ceremony"

    async def test_retries_on_next_tick(self, playing_state, result_factory) -> None:
        synth = AsyncMock()
        synth.synthesize_event.side_effect = (
            [SynthesisError("once")] + [EventBundle(event=result_factory())] * 21
        )
        synth.synthesize_ceremony.return_value = CeremonyResult(narrative="Done.", couples=[])
        player = AutoPlayer(playing_state, synth, speed=0, ceremony_delay=0)
        state = await player.run()
        assert state.phase == "results"
        assert synth.synthesize_event.await_count == 22

    async def test_gives_up_after_max_failures(self, playing_state) -> None:
        synth = AsyncMock()
        synth.synthesize_event.side_effect = SynthesisError("always")
        player = AutoPlayer(playing_state, synth, speed=0)
        with pytest.raises(SynthesisError):
            await player.run(max_failures=3)
        assert synth.synthesize_event.await_count == 3
        assert player.state is playing_state

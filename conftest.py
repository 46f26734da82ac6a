import random

import pytest

from inferno_island import engine
from inferno_island.affinity import pair_key
from inferno_island.models import Character, EventResult, GameState
from inferno_island.roster import initial_characters


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)


@pytest.fixture
def characters() -> list[Character]:
    return initial_characters()


@pytest.fixture
def zero_affinities(characters) -> dict[str, int]:
    """Every man/woman pair at 0."""
    return {
        pair_key(m.id, f.id): 0
        for m in characters if m.gender == "male"
        for f in characters if f.gender == "female"
    }


@pytest.fixture
def playing_state(characters, zero_affinities) -> GameState:
    """A started game on day 1 morning with flat affinities."""
    return engine.start_game(GameState(characters=characters, affinities=zero_affinities))


def make_result(**overrides) -> EventResult:
    """A minimal valid conversation between kenji and yuki."""
    fields = {
        "title": "Test",
        "event_type": "conversation",
        "participants": ["kenji", "yuki"],
        "narrative": "They talk.",
        "dialogue": [],
    }
    fields.update(overrides)
    return EventResult(**fields)


@pytest.fixture
def result_factory():
    return make_result

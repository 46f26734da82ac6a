"""Core domain models.

The engine, both synthesizers and the HTTP layer operate on these types.
Pydantic is used for validation and serialisation at every data boundary.

Field names are snake_case in Python and camelCase on the wire
(``model_dump(by_alias=True)``); both spellings are accepted on input, so a
JSON reply from the LLM backend validates straight into ``EventResult``.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

Gender = Literal["male", "female"]

EventType = Literal[
    "introduction",
    "conversation",
    "group_activity",
    "confession",
    "paradise_invite",
    "paradise_date",
    "jealousy",
    "drama",
    "ceremony",
]

TimeOfDay = Literal["morning", "afternoon", "evening"]

GamePhase = Literal["intro", "playing", "ceremony", "results"]

Location = Literal["inferno", "paradise", "ceremony"]

Emotion = Literal["happy", "sad", "nervous", "flirty", "angry", "shocked", "default"]


class _Model(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class Character(_Model):
    """A cast member. Static profile plus two flags owned by the engine."""

    id: str
    name: str
    name_jp: str = ""
    age: int
    gender: Gender
    occupation: str  # hidden in the inferno, revealed in paradise
    occupation_hint: str = ""
    personality: str = ""
    background: str = ""
    interests: list[str] = Field(default_factory=list)
    dating_style: str = ""
    avatar: str = ""
    color: str = ""
    is_eliminated: bool = False
    is_in_paradise: bool = False


class DialogueLine(_Model):
    character_id: str
    text: str
    emotion: Emotion | None = None


class InnerThought(_Model):
    """A private thought — shown to the viewer, never to other characters."""

    character_id: str
    thought: str


class AffinityChange(_Model):
    from_id: str
    to_id: str
    change: int = Field(ge=-15, le=25)
    reason: str = ""


class ParadiseInvite(_Model):
    inviter_id: str
    invitee_id: str
    accepted: bool
    inviter_message: str = ""
    invitee_response: str = ""


class EventResult(_Model):
    """One narrative beat as produced by a synthesizer, before the engine stamps it."""

    title: str
    event_type: EventType
    location: Literal["inferno", "paradise"] = "inferno"
    participants: list[str]
    narrative: str
    dialogue: list[DialogueLine]
    inner_thoughts: list[InnerThought] = Field(default_factory=list)
    affinity_changes: list[AffinityChange] = Field(default_factory=list)
    paradise_invite: ParadiseInvite | None = None


class EventBundle(_Model):
    """A synthesized event plus the paradise date it triggered, if any."""

    event: EventResult
    paradise_event: EventResult | None = None


class GameEvent(_Model):
    """An entry in the append-only event log."""

    id: str
    type: EventType
    day: int
    time_of_day: TimeOfDay
    participants: list[str]
    location: Location
    title: str
    narrative: str
    dialogue: list[DialogueLine] = Field(default_factory=list)
    inner_thoughts: list[InnerThought] = Field(default_factory=list)
    affinity_changes: list[AffinityChange] = Field(default_factory=list)
    paradise_invite: ParadiseInvite | None = None
    timestamp: int  # epoch milliseconds


class FinalCouple(_Model):
    person1_id: str
    person2_id: str


class CeremonyResult(_Model):
    narrative: str
    dialogue: list[DialogueLine] = Field(default_factory=list)
    couples: list[FinalCouple]
    uncoupled: list[str] = Field(default_factory=list)


class EventRequest(_Model):
    """Everything a synthesizer may read to produce the next event."""

    day: int
    time_of_day: TimeOfDay
    characters: list[Character]
    affinities: dict[str, int]
    recent_events: list[GameEvent] = Field(default_factory=list)
    paradise_pairs: list[list[str]] = Field(default_factory=list)


class CeremonyRequest(_Model):
    characters: list[Character]
    affinities: dict[str, int]
    paradise_pairs: list[list[str]] = Field(default_factory=list)
    events: list[GameEvent] = Field(default_factory=list)


class GameState(_Model):
    """A snapshot of one game session.

    Never mutated: every transition in ``engine`` returns a new snapshot via
    ``model_copy(update=...)`` with fresh lists/dicts for whatever changed.
    """

    phase: GamePhase = "intro"
    day: int = 1
    time_of_day: TimeOfDay = "morning"
    characters: list[Character]
    affinities: dict[str, int]
    events: list[GameEvent] = Field(default_factory=list)
    current_event: GameEvent | None = None
    paradise_pairs: list[list[str]] = Field(default_factory=list)
    event_count: int = 0  # events in the current time slot
    final_couples: list[FinalCouple] | None = None

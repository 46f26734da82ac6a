"""Paradise date — the second beat of an accepted invite.

The pair leaves the inferno for one scene. Their paradise_date lines reveal
the real occupations, both inner thoughts come from the positive bank, and
the inviter -> invitee change is the largest a single event can make.
"""

from __future__ import annotations

import random

from inferno_island.lines import get_line, get_narrative, get_thought, get_title
from inferno_island.models import (
    AffinityChange,
    Character,
    DialogueLine,
    EventResult,
    InnerThought,
)

PARADISE_DATE_MIN_CHANGE = 15
PARADISE_DATE_MAX_CHANGE = 25


def build_paradise_date(
    rng: random.Random,
    inviter: Character,
    invitee: Character,
    day: int = 0,
    time: str = "",
) -> EventResult:
    dialogue = []
    for character in (inviter, invitee):
        line = get_line(rng, character.id, "paradise_date")
        dialogue.append(
            DialogueLine(character_id=character.id, text=line.text, emotion=line.emotion)
        )

    return EventResult(
        title=get_title(rng, "paradise_date"),
        event_type="paradise_date",
        location="paradise",
        participants=[inviter.id, invitee.id],
        narrative=get_narrative(rng, "paradise_date", inviter.name, invitee.name, day, time),
        dialogue=dialogue,
        inner_thoughts=[
            InnerThought(character_id=c.id, thought=get_thought(rng, c.id, True))
            for c in (inviter, invitee)
        ],
        affinity_changes=[
            AffinityChange(
                from_id=inviter.id,
                to_id=invitee.id,
                change=rng.randint(PARADISE_DATE_MIN_CHANGE, PARADISE_DATE_MAX_CHANGE),
                reason="Grew much closer on the paradise date",
            )
        ],
    )

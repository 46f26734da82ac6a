"""Rule-based event synthesis — one inferno event per call.

Steps:
  1. Pick an event type from a prioritised rule cascade (first hit wins,
     each rule rolls independently).
  2. Pick participants for that type from the available cast (not
     eliminated, not away in paradise).
  3. Fill in title, narrative, dialogue and inner thoughts from the static
     text banks.
  4. Compute the single main-man -> main-woman affinity change.
  5. For paradise invites, decide acceptance and attach the invite; an
     accepted invite also yields the paradise date (see paradise.py).

Event type cascade:
  day 1 morning                                      → conversation | group_activity (50/50)
  day 2+, not morning, max aff >= 62, < 2 pairs, 30%  → paradise_invite
  day 2+, max aff >= 70, 20%                          → confession
  day 3   → jealousy 25 / drama 15 / conversation 25 / group_activity 35
  day 2   → jealousy 20 / drama 15 / conversation 30 / group_activity 35
  else    → conversation 60 / group_activity 40
"""

from __future__ import annotations

import logging
import random
from typing import NamedTuple

from inferno_island.affinity import get_affinity, max_affinity, ranked_pairs
from inferno_island.lines import (
    DEFAULT_INVITE_ACCEPTANCE,
    DEFAULT_INVITE_MESSAGE,
    LINE_BANKS,
    REJECTION_RESPONSES,
    get_line,
    get_narrative,
    get_thought,
    get_title,
)
from inferno_island.models import (
    AffinityChange,
    Character,
    DialogueLine,
    EventBundle,
    EventRequest,
    EventResult,
    EventType,
    InnerThought,
    ParadiseInvite,
)
from inferno_island.roster import available_characters, females, get_character, males

from .paradise import build_paradise_date

logger = logging.getLogger(__name__)

PARADISE_INVITE_MIN_AFFINITY = 62
PARADISE_INVITE_CHANCE = 0.3
MAX_PARADISE_PAIRS = 2
CONFESSION_MIN_AFFINITY = 70
CONFESSION_CHANCE = 0.2

# Cumulative thresholds for the weighted draws: (upper bound, event type)
DAY_WEIGHTS: dict[int, list[tuple[float, EventType]]] = {
    3: [(0.25, "jealousy"), (0.40, "drama"), (0.65, "conversation"), (1.0, "group_activity")],
    2: [(0.20, "jealousy"), (0.35, "drama"), (0.65, "conversation"), (1.0, "group_activity")],
}
DEFAULT_WEIGHTS: list[tuple[float, EventType]] = [(0.6, "conversation"), (1.0, "group_activity")]

TOP_PAIR_POOL = 3
POSITIVE_THOUGHT_MIN_AFFINITY = 40
INVITE_AUTO_ACCEPT_AFFINITY = 55
INVITE_ACCEPT_CHANCE = 0.7

# Types whose participants are a single high-affinity pair
PAIR_EVENTS = ("conversation", "confession", "paradise_invite")
GROUP_EVENTS = ("group_activity", "drama")


class Participants(NamedTuple):
    ids: list[str]
    main_male_id: str | None
    main_female_id: str | None


# ---------------------------------------------------------------------------
# Step 1 — event type
# ---------------------------------------------------------------------------

def select_event_type(
    rng: random.Random,
    day: int,
    time_of_day: str,
    max_aff: int,
    paradise_pair_count: int,
) -> EventType:
    if day == 1 and time_of_day == "morning":
        return rng.choice(("conversation", "group_activity"))

    if (
        day >= 2
        and time_of_day != "morning"
        and max_aff >= PARADISE_INVITE_MIN_AFFINITY
        and paradise_pair_count < MAX_PARADISE_PAIRS
        and rng.random() < PARADISE_INVITE_CHANCE
    ):
        return "paradise_invite"

    if day >= 2 and max_aff >= CONFESSION_MIN_AFFINITY and rng.random() < CONFESSION_CHANCE:
        return "confession"

    roll = rng.random()
    for upper, event_type in DAY_WEIGHTS.get(day, DEFAULT_WEIGHTS):
        if roll < upper:
            return event_type
    return "group_activity"


# ---------------------------------------------------------------------------
# Step 2 — participants
# ---------------------------------------------------------------------------

def select_participants(
    rng: random.Random,
    event_type: EventType,
    available: list[Character],
    affinities: dict[str, int],
) -> Participants:
    men = males(available)
    women = females(available)
    pairs = ranked_pairs(men, women, affinities)

    if event_type in PAIR_EVENTS:
        if not pairs:
            return fallback_participants(available)
        m, f, _ = pairs[rng.randint(0, min(TOP_PAIR_POOL, len(pairs)) - 1)]
        return Participants([m.id, f.id], m.id, f.id)

    if event_type == "jealousy":
        if not pairs:
            return fallback_participants(available)
        m, f, _ = pairs[0]
        rivals = [c for c in men if c.id != m.id] or [c for c in women if c.id != f.id]
        ids = [m.id, f.id]
        if rivals:
            ids.append(rng.choice(rivals).id)
        return Participants(ids, m.id, f.id)

    if event_type in GROUP_EVENTS:
        upper = min(4, len(available))
        if upper == 0:
            return fallback_participants(available)
        count = rng.randint(min(3, upper), upper)
        chosen = rng.sample(available, count)
        top = pairs[0] if pairs else None
        chosen_men = males(chosen)
        chosen_women = females(chosen)
        main_male = chosen_men[0].id if chosen_men else (top[0].id if top else None)
        main_female = chosen_women[0].id if chosen_women else (top[1].id if top else None)
        ids = [c.id for c in chosen]
        # A main character borrowed from the top pair joins the scene
        for main_id in (main_male, main_female):
            if main_id and main_id not in ids:
                ids.append(main_id)
        return Participants(ids, main_male, main_female)

    return fallback_participants(available)


def fallback_participants(available: list[Character]) -> Participants:
    m = next((c for c in available if c.gender == "male"), None)
    f = next((c for c in available if c.gender == "female"), None)
    ids = [c.id for c in (m, f) if c is not None]
    return Participants(ids, m.id if m else None, f.id if f else None)


# ---------------------------------------------------------------------------
# Step 3 — dialogue and inner thoughts
# ---------------------------------------------------------------------------

def _male_context(event_type: EventType) -> str:
    if event_type in ("confession", "paradise_invite", "jealousy", "paradise_date"):
        return event_type
    return "conversation_open"


def _female_context(event_type: EventType) -> str:
    if event_type in ("paradise_invite", "paradise_date", "confession"):
        return event_type
    return "conversation_response"


def _dialogue_line(rng: random.Random, character_id: str, context: str) -> DialogueLine:
    line = get_line(rng, character_id, context)
    return DialogueLine(character_id=character_id, text=line.text, emotion=line.emotion)


def build_dialogue(
    rng: random.Random,
    event_type: EventType,
    main_male_id: str | None,
    main_female_id: str | None,
    participant_ids: list[str],
) -> list[DialogueLine]:
    lines: list[DialogueLine] = []

    if main_male_id:
        lines.append(_dialogue_line(rng, main_male_id, _male_context(event_type)))
    if main_female_id:
        lines.append(_dialogue_line(rng, main_female_id, _female_context(event_type)))

    if event_type in GROUP_EVENTS:
        extras = [cid for cid in participant_ids if cid not in (main_male_id, main_female_id)]
        if extras:
            lines.append(_dialogue_line(rng, extras[0], "conversation_open"))

    if event_type == "jealousy" and main_male_id:
        lines.append(_dialogue_line(rng, main_male_id, "jealousy"))

    return lines


def build_inner_thoughts(
    rng: random.Random,
    event_type: EventType,
    main_male_id: str | None,
    main_female_id: str | None,
    current: int,
) -> list[InnerThought]:
    positive = (
        current >= POSITIVE_THOUGHT_MIN_AFFINITY
        or event_type in ("confession", "paradise_date")
    )
    return [
        InnerThought(character_id=cid, thought=get_thought(rng, cid, positive))
        for cid in (main_male_id, main_female_id)
        if cid
    ]


# ---------------------------------------------------------------------------
# Step 4 — affinity change
# ---------------------------------------------------------------------------

def compute_affinity_changes(
    rng: random.Random,
    event_type: EventType,
    main_male_id: str | None,
    main_female_id: str | None,
    current: int,
) -> list[AffinityChange]:
    if not main_male_id or not main_female_id:
        return []

    if event_type == "conversation":
        change = rng.randint(5, 12) if current >= 50 else rng.randint(3, 9)
        reason = "Grew closer talking"
    elif event_type == "group_activity":
        change = rng.randint(2, 8)
        reason = "Bonded over a group activity"
    elif event_type == "confession":
        change = rng.randint(10, 20) if current >= 60 else rng.randint(5, 12)
        reason = "Opened up about their feelings"
    elif event_type == "paradise_invite":
        change = rng.randint(8, 15)
        reason = "Invited to paradise"
    elif event_type == "paradise_date":
        change = rng.randint(15, 25)
        reason = "Grew much closer on the paradise date"
    elif event_type == "jealousy":
        change = rng.randint(3, 10) if rng.random() < 0.5 else rng.randint(-8, -2)
        reason = "Jealousy proved the feeling is real" if change > 0 else "Jealousy made things awkward"
    elif event_type == "drama":
        change = rng.randint(-10, -3) if rng.random() < 0.4 else rng.randint(2, 8)
        reason = "Clashed honestly" if change > 0 else "A misunderstanding came between them"
    else:
        change = rng.randint(1, 5)
        reason = "Spent time together"

    return [AffinityChange(from_id=main_male_id, to_id=main_female_id, change=change, reason=reason)]


# ---------------------------------------------------------------------------
# Step 5 — paradise invite
# ---------------------------------------------------------------------------

def build_paradise_invite(
    rng: random.Random, inviter_id: str, invitee_id: str, current: int
) -> ParadiseInvite:
    accepted = current >= INVITE_AUTO_ACCEPT_AFFINITY or rng.random() < INVITE_ACCEPT_CHANCE

    if LINE_BANKS.get((inviter_id, "paradise_invite")):
        message = get_line(rng, inviter_id, "paradise_invite").text
    else:
        message = DEFAULT_INVITE_MESSAGE

    if not accepted:
        response = rng.choice(REJECTION_RESPONSES)
    elif LINE_BANKS.get((invitee_id, "paradise_invite")):
        response = get_line(rng, invitee_id, "paradise_invite").text
    else:
        response = DEFAULT_INVITE_ACCEPTANCE

    return ParadiseInvite(
        inviter_id=inviter_id,
        invitee_id=invitee_id,
        accepted=accepted,
        inviter_message=message,
        invitee_response=response,
    )


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def synthesize_event(
    request: EventRequest,
    rng: random.Random,
    event_type: EventType | None = None,
) -> EventBundle:
    """Produce the next event (and its paradise date, if one follows).

    ``event_type`` skips step 1 and forces a type.
    """
    available = available_characters(request.characters)
    men = males(available)
    women = females(available)

    if event_type is None:
        event_type = select_event_type(
            rng,
            request.day,
            request.time_of_day,
            max_affinity(men, women, request.affinities),
            len(request.paradise_pairs),
        )

    ids, main_male_id, main_female_id = select_participants(
        rng, event_type, available, request.affinities
    )
    main_male = get_character(request.characters, main_male_id) if main_male_id else None
    main_female = get_character(request.characters, main_female_id) if main_female_id else None
    current = (
        get_affinity(request.affinities, main_male_id, main_female_id)
        if main_male_id and main_female_id
        else 0
    )

    male_name = main_male.name if main_male else "He"
    female_name = main_female.name if main_female else "she"

    paradise_invite = None
    paradise_event = None
    if event_type == "paradise_invite" and main_male_id and main_female_id:
        paradise_invite = build_paradise_invite(rng, main_male_id, main_female_id, current)
        if paradise_invite.accepted and main_male and main_female:
            paradise_event = build_paradise_date(
                rng, main_male, main_female,
                day=request.day, time=request.time_of_day,
            )

    event = EventResult(
        title=get_title(rng, event_type),
        event_type=event_type,
        location="inferno",
        participants=ids,
        narrative=get_narrative(
            rng, event_type, male_name, female_name, request.day, request.time_of_day
        ),
        dialogue=build_dialogue(rng, event_type, main_male_id, main_female_id, ids),
        inner_thoughts=build_inner_thoughts(rng, event_type, main_male_id, main_female_id, current),
        affinity_changes=compute_affinity_changes(
            rng, event_type, main_male_id, main_female_id, current
        ),
        paradise_invite=paradise_invite,
    )
    logger.debug(
        "event type=%s day=%d time=%s participants=%s",
        event_type, request.day, request.time_of_day, ids,
    )
    return EventBundle(event=event, paradise_event=paradise_event)

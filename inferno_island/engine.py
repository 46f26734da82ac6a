"""Game state machine — pure transitions over immutable GameState snapshots.

Phases run in one direction:

    intro → playing → ceremony → results

``restart()`` is the only way back to ``intro``. Each transition takes a
snapshot and returns a new one; the input is never modified, so a caller
that catches a synthesizer failure still holds a valid pre-advance state.

Within ``playing`` the clock cycles morning → afternoon → evening. Each slot
has an event quota (2 / 3 / 2); meeting it moves the clock on and resets the
counter. Finishing day 3's evening enters ``ceremony`` instead of day 4.

Applying one synthesized turn (``apply_event_result``):
  a. stamp the event, append it to the log and make it current
  b. apply its affinity changes
  c. an accepted paradise invite records the pair and sends both away
  d. a paradise date is stamped, appended, its changes applied, and its
     participants come back
  e. advance the clock if the slot quota is met
"""

from __future__ import annotations

import logging
import random
import time
import uuid
from typing import Any

from inferno_island.affinity import apply_deltas, build_initial_affinities, top_pairs
from inferno_island.models import (
    CeremonyRequest,
    CeremonyResult,
    EventBundle,
    EventRequest,
    EventResult,
    GameEvent,
    GameState,
    TimeOfDay,
)
from inferno_island.roster import active_characters, initial_characters, set_flags
from inferno_island.synth.base import Synthesizer

logger = logging.getLogger(__name__)

TIME_ORDER: tuple[TimeOfDay, ...] = ("morning", "afternoon", "evening")
EVENTS_PER_SLOT: dict[str, int] = {"morning": 2, "afternoon": 3, "evening": 2}
FINAL_DAY = 3
RECENT_EVENT_WINDOW = 5
CEREMONY_TITLE = "Final Coupling"

EVENT_TYPE_LABELS: dict[str, str] = {
    "introduction": "First Meeting",
    "conversation": "Conversation",
    "group_activity": "Group Activity",
    "confession": "Confession",
    "paradise_invite": "Paradise Invite",
    "paradise_date": "Paradise Date",
    "jealousy": "Jealousy",
    "drama": "Drama",
    "ceremony": "Ceremony",
}


class GameStateError(ValueError):
    """A transition was requested in a phase that does not allow it."""


def _now_ms() -> int:
    return int(time.time() * 1000)


def _require_phase(state: GameState, phase: str, action: str) -> None:
    if state.phase != phase:
        raise GameStateError(f"Cannot {action} in phase {state.phase!r} (needs {phase!r})")


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------

def new_game(rng: random.Random | None = None) -> GameState:
    characters = initial_characters()
    return GameState(
        characters=characters,
        affinities=build_initial_affinities(characters, rng),
    )


def start_game(state: GameState) -> GameState:
    _require_phase(state, "intro", "start the game")
    logger.info("Game started")
    return state.model_copy(update={"phase": "playing"})


def restart(rng: random.Random | None = None) -> GameState:
    logger.info("Game restarted")
    return new_game(rng)


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

def events_per_slot(time_of_day: str) -> int:
    return EVENTS_PER_SLOT.get(time_of_day, 2)


def should_advance_time(state: GameState) -> bool:
    return state.event_count >= events_per_slot(state.time_of_day)


def advance_time(state: GameState) -> GameState:
    idx = TIME_ORDER.index(state.time_of_day)
    if idx < len(TIME_ORDER) - 1:
        return state.model_copy(update={"time_of_day": TIME_ORDER[idx + 1], "event_count": 0})

    if state.day >= FINAL_DAY:
        logger.info("Day %d complete — entering ceremony", state.day)
        return state.model_copy(update={"phase": "ceremony", "event_count": 0})

    logger.info("Day %d begins", state.day + 1)
    return state.model_copy(
        update={"day": state.day + 1, "time_of_day": "morning", "event_count": 0}
    )


# ---------------------------------------------------------------------------
# Applying synthesized results
# ---------------------------------------------------------------------------

def _stamp(result: EventResult, state: GameState, timestamp: int) -> GameEvent:
    return GameEvent(
        id=f"evt_{uuid.uuid4().hex[:12]}",
        type=result.event_type,
        day=state.day,
        time_of_day=state.time_of_day,
        participants=result.participants,
        location=result.location,
        title=result.title,
        narrative=result.narrative,
        dialogue=result.dialogue,
        inner_thoughts=result.inner_thoughts,
        affinity_changes=result.affinity_changes,
        paradise_invite=result.paradise_invite,
        timestamp=timestamp,
    )


def apply_event_result(
    state: GameState, bundle: EventBundle, now: int | None = None
) -> GameState:
    _require_phase(state, "playing", "apply an event")
    now = _now_ms() if now is None else now

    event = _stamp(bundle.event, state, now)
    events = [*state.events, event]
    affinities = apply_deltas(state.affinities, event.affinity_changes)
    characters = state.characters
    paradise_pairs = state.paradise_pairs
    current = event
    count = state.event_count + 1

    invite = event.paradise_invite
    travellers: set[str] = set()
    if invite and invite.accepted:
        travellers = {invite.inviter_id, invite.invitee_id}
        paradise_pairs = [*paradise_pairs, [invite.inviter_id, invite.invitee_id]]
        characters = set_flags(characters, travellers, is_in_paradise=True)
        logger.info("%s and %s left for paradise", invite.inviter_id, invite.invitee_id)

    if bundle.paradise_event is not None:
        date = _stamp(
            bundle.paradise_event.model_copy(update={"location": "paradise"}), state, now + 1
        )
        events.append(date)
        affinities = apply_deltas(affinities, date.affinity_changes)
        travellers |= set(date.participants)
        current = date
        count += 1
    elif travellers:
        logger.warning("No paradise date for %s; back to the inferno", sorted(travellers))

    # a trip never outlives the advance that started it
    if travellers:
        characters = set_flags(characters, travellers, is_in_paradise=False)

    updated = state.model_copy(
        update={
            "events": events,
            "current_event": current,
            "affinities": affinities,
            "characters": characters,
            "paradise_pairs": paradise_pairs,
            "event_count": count,
        }
    )
    if should_advance_time(updated):
        updated = advance_time(updated)
    return updated


def apply_ceremony_result(
    state: GameState, result: CeremonyResult, now: int | None = None
) -> GameState:
    _require_phase(state, "ceremony", "apply a ceremony")
    event = GameEvent(
        id=f"ceremony_{uuid.uuid4().hex[:12]}",
        type="ceremony",
        day=state.day,
        time_of_day="evening",
        participants=[c.id for c in active_characters(state.characters)],
        location="ceremony",
        title=CEREMONY_TITLE,
        narrative=result.narrative,
        dialogue=result.dialogue,
        timestamp=_now_ms() if now is None else now,
    )
    logger.info(
        "Ceremony finished: %s",
        ", ".join(f"{c.person1_id}+{c.person2_id}" for c in result.couples) or "no couples",
    )
    return state.model_copy(
        update={
            "events": [*state.events, event],
            "current_event": event,
            "final_couples": result.couples,
            "phase": "results",
        }
    )


# ---------------------------------------------------------------------------
# Turns
# ---------------------------------------------------------------------------

def event_request(state: GameState, window: int = RECENT_EVENT_WINDOW) -> EventRequest:
    return EventRequest(
        day=state.day,
        time_of_day=state.time_of_day,
        characters=state.characters,
        affinities=state.affinities,
        recent_events=state.events[-window:] if window > 0 else [],
        paradise_pairs=state.paradise_pairs,
    )


async def advance(
    state: GameState, synthesizer: Synthesizer, window: int = RECENT_EVENT_WINDOW
) -> GameState:
    """Run one turn. A synthesizer exception propagates with ``state`` untouched."""
    _require_phase(state, "playing", "advance")
    bundle = await synthesizer.synthesize_event(event_request(state, window))
    return apply_event_result(state, bundle)


async def run_ceremony(state: GameState, synthesizer: Synthesizer) -> GameState:
    _require_phase(state, "ceremony", "run the ceremony")
    result = await synthesizer.synthesize_ceremony(
        CeremonyRequest(
            characters=state.characters,
            affinities=state.affinities,
            paradise_pairs=state.paradise_pairs,
            events=state.events,
        )
    )
    return apply_ceremony_result(state, result)


# ---------------------------------------------------------------------------
# Display helpers
# ---------------------------------------------------------------------------

def time_label(time_of_day: str) -> str:
    return time_of_day.capitalize()


def day_label(day: int) -> str:
    return f"DAY {day}"


def event_type_label(event_type: str) -> str:
    return EVENT_TYPE_LABELS.get(event_type, event_type)


def summarize(state: GameState, top_n: int = 3) -> dict[str, Any]:
    """Plain-dict overview of a snapshot for logs, the CLI and the API."""
    names = {c.id: c.name for c in state.characters}
    return {
        "phase": state.phase,
        "day": state.day,
        "timeOfDay": state.time_of_day,
        "label": f"{day_label(state.day)} · {time_label(state.time_of_day)}",
        "eventCount": state.event_count,
        "totalEvents": len(state.events),
        "inParadise": [c.id for c in state.characters if c.is_in_paradise],
        "paradisePairs": state.paradise_pairs,
        "topPairs": [
            {"male": names.get(m, m), "female": names.get(f, f), "affinity": value}
            for m, f, value in top_pairs(state.characters, state.affinities, top_n)
        ],
        "finalCouples": (
            None
            if state.final_couples is None
            else [
                [names.get(c.person1_id, c.person1_id), names.get(c.person2_id, c.person2_id)]
                for c in state.final_couples
            ]
        ),
    }

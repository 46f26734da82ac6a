"""LLM-backed synthesizer — delegates writing to a language model.

Event flow:
  1. Render the event prompt and call the model (stage "event").
  2. Pull the first {...} block out of the reply and validate it as an
     EventResult.
  3. If it is an accepted paradise invite and both ids are in the cast,
     render the paradise-date prompt and call again (stage "paradise_date").
     A failure here drops the date; the invite itself still stands and the
     engine brings the pair straight back.

Ceremony flow: one call (stage "ceremony"), validated as a CeremonyResult,
then checked: every couple is an active man and woman at or above the
threshold, and no character sits in two couples. Events are checked for
participant count, duplicates, and deltas that stay within the participants
and across genders.

A reply that cannot be parsed or validated raises SynthesisError; transport
failures surface as LLMError. Either way the engine's state is untouched.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from inferno_island.affinity import get_affinity
from inferno_island.llm import LLM, LLMError
from inferno_island.models import (
    CeremonyRequest,
    CeremonyResult,
    Character,
    EventBundle,
    EventRequest,
    EventResult,
)
from inferno_island.prompts import (
    build_ceremony_prompt,
    build_event_prompt,
    build_paradise_date_prompt,
)
from inferno_island.roster import get_character

from .base import SynthesisError
from .ceremony import COUPLE_THRESHOLD

logger = logging.getLogger(__name__)

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

MIN_PARTICIPANTS = 2
MAX_PARTICIPANTS = 4

ModelT = TypeVar("ModelT", bound=BaseModel)


def extract_json_object(output: str) -> dict[str, Any]:
    """Return the outermost JSON object in a model reply."""
    match = _JSON_OBJECT.search(output.strip())
    if not match:
        raise SynthesisError("No JSON object found in model reply")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise SynthesisError(f"Model returned invalid JSON: {e}") from e
    if not isinstance(data, dict):
        raise SynthesisError(f"Model reply must be a JSON object, got {type(data).__name__}")
    return data


def parse_reply(output: str, model: type[ModelT]) -> ModelT:
    data = extract_json_object(output)
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise SynthesisError(f"Model reply does not match {model.__name__}: {e}") from e


def check_event(result: EventResult, characters: list[Character]) -> None:
    """Reject an event the engine must not apply.

    Ids outside the cast are tolerated; they only ever score a stray pair.
    """
    participants = result.participants
    if not MIN_PARTICIPANTS <= len(participants) <= MAX_PARTICIPANTS:
        raise SynthesisError(
            f"Event needs {MIN_PARTICIPANTS}-{MAX_PARTICIPANTS} participants, "
            f"got {len(participants)}"
        )
    if len(set(participants)) != len(participants):
        raise SynthesisError(f"Event lists a participant twice: {participants}")

    for delta in result.affinity_changes:
        a = get_character(characters, delta.from_id)
        b = get_character(characters, delta.to_id)
        for known in (a, b):
            if known and known.id not in participants:
                raise SynthesisError(
                    f"Affinity change names {known.id!r}, who is not in the event"
                )
        if a and b and a.gender == b.gender:
            raise SynthesisError(f"Affinity change pairs {a.id!r} and {b.id!r} of the same gender")


def check_couples(result: CeremonyResult, request: CeremonyRequest) -> None:
    seen: set[str] = set()
    for couple in result.couples:
        if couple.person1_id == couple.person2_id:
            raise SynthesisError(f"Couple pairs {couple.person1_id!r} with themselves")
        a = get_character(request.characters, couple.person1_id)
        b = get_character(request.characters, couple.person2_id)
        if not a or not b or a.is_eliminated or b.is_eliminated:
            raise SynthesisError(
                f"Couple {couple.person1_id!r}/{couple.person2_id!r} is not in the active cast"
            )
        if a.gender == b.gender:
            raise SynthesisError(f"Couple pairs {a.id!r} and {b.id!r} of the same gender")
        value = get_affinity(request.affinities, a.id, b.id)
        if value < COUPLE_THRESHOLD:
            raise SynthesisError(
                f"Couple {a.id!r}/{b.id!r} is below the threshold ({value} < {COUPLE_THRESHOLD})"
            )
        for cid in (a.id, b.id):
            if cid in seen:
                raise SynthesisError(f"{cid!r} appears in more than one couple")
            seen.add(cid)


class LLMSynthesizer:
    """Synthesizer backed by any callable matching the LLM protocol."""

    def __init__(self, llm: LLM) -> None:
        self._llm = llm

    async def synthesize_event(self, request: EventRequest) -> EventBundle:
        output = await self._llm("event", build_event_prompt(request))
        event = parse_reply(output, EventResult)
        check_event(event, request.characters)

        invite = event.paradise_invite
        if event.event_type != "paradise_invite" or not invite or not invite.accepted:
            return EventBundle(event=event)

        inviter = get_character(request.characters, invite.inviter_id)
        invitee = get_character(request.characters, invite.invitee_id)
        if not inviter or not invitee:
            logger.warning(
                "Paradise invite names unknown characters %r/%r — no date generated",
                invite.inviter_id, invite.invitee_id,
            )
            return EventBundle(event=event)

        prompt = build_paradise_date_prompt(inviter, invitee, request.affinities)
        try:
            date_output = await self._llm("paradise_date", prompt)
            paradise_event = parse_reply(date_output, EventResult)
            check_event(paradise_event, request.characters)
        except (LLMError, SynthesisError) as e:
            logger.warning("Paradise date generation failed, keeping invite only: %s", e)
            return EventBundle(event=event)

        return EventBundle(event=event, paradise_event=paradise_event)

    async def synthesize_ceremony(self, request: CeremonyRequest) -> CeremonyResult:
        output = await self._llm("ceremony", build_ceremony_prompt(request))
        result = parse_reply(output, CeremonyResult)
        check_couples(result, request)
        return result

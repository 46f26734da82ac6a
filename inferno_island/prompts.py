"""Handlebars prompts for the LLM-backed synthesizer.

Three requests, each a template plus a context builder:

    event          — one inferno event; occupations stay hidden (hints only)
    paradise_date  — the date after an accepted invite; occupations revealed
    ceremony       — the final coupling ceremony

Every template ends with the JSON shape the reply must follow; the shapes
match EventResult / CeremonyResult in their camelCase wire form. Free text
is rendered with triple-stash so apostrophes are not HTML-escaped.
"""

from collections.abc import Callable
from typing import Any

import pybars

from inferno_island.affinity import affinity_label, get_affinity
from inferno_island.models import CeremonyRequest, Character, EventRequest, GameEvent
from inferno_island.roster import active_characters, available_characters, females, males


_compiler = pybars.Compiler()
_cache: dict[str, Callable] = {}

RECENT_EVENT_COUNT = 4
NARRATIVE_SNIPPET_LENGTH = 100
HIGHLIGHT_COUNT = 6


class PromptError(Exception):
    """Raised when a Handlebars template fails to compile or render."""


# ── Custom Handlebars helpers ────────────────────────────


def _helper_last(this, options, items, count):
    """{{#last array N}}...{{/last}} — iterate over the last N items."""
    result = []
    for item in list(items)[-int(count):]:
        result.extend(options["fn"](item))
    return result


_HELPERS: dict[str, Callable] = {
    "last": _helper_last,
}


def render_prompt(template_str: str, context: dict[str, Any]) -> str:
    """Compile and render a Handlebars template with the given context.

    Templates are cached by source string to avoid recompilation.
    """
    try:
        compiled = _cache.get(template_str)
        if compiled is None:
            compiled = _compiler.compile(template_str)
            _cache[template_str] = compiled
        return str(compiled(context, helpers=_HELPERS))
    except Exception as e:
        raise PromptError(f"Template error: {e}") from e


# ── Templates ────────────────────────────────────────────

EVENT_TEMPLATE = """You are the scenario writer for the dating reality show "AI Island: Inferno".
Write with the tension and drama of a show like Single's Inferno.

=== Setting ===
Stage: the deserted island "Inferno" (harsh) and the resort "Paradise" (luxurious).
Occupations are secret until a pair reaches Paradise.
Now: day {{day}}, {{time}}

=== Contestants ===
{{#each characters}}
[{{{name}}} ({{{name_jp}}}), {{age}}, {{gender}}]
  Personality: {{{personality}}}
  Job hint: {{{occupation_hint}}}
  Dating style: {{{dating_style}}}
  Interests: {{{interests}}}
{{/each}}

=== Current affinity (0-100) ===
{{#each affinity_lines}}
{{{this}}}
{{/each}}

=== Paradise so far ===
{{{paradise_summary}}}

=== Recent events ===
{{#if recent_events}}
{{#last recent_events recent_count}}
[{{{title}}}] {{{snippet}}}...
{{/last}}
{{else}}
No events yet.
{{/if}}

=== Instructions ===
Write ONE dramatic event that fits day {{day}}, {{time}}.
Reply with this JSON only, no other text:
{
  "title": "short event title",
  "eventType": "conversation | group_activity | confession | paradise_invite | jealousy | drama",
  "location": "inferno",
  "participants": ["2 to 4 character ids"],
  "narrative": "what happens, 2-4 sentences",
  "dialogue": [
    {"characterId": "id", "text": "spoken line", "emotion": "happy|sad|nervous|flirty|angry|shocked|default"}
  ],
  "innerThoughts": [
    {"characterId": "id", "thought": "what they really think (viewer only)"}
  ],
  "affinityChanges": [
    {"fromId": "man id", "toId": "woman id", "change": -15 to 25, "reason": "why"}
  ],
  "paradiseInvite": null
}

Only when eventType is "paradise_invite", set paradiseInvite to:
{
  "inviterId": "id",
  "inviteeId": "id",
  "accepted": true or false,
  "inviterMessage": "the invitation",
  "inviteeResponse": "the answer"
}

Rules:
- participants must be ids from this list: {{{ids}}}
- put high-affinity pairs together
- use jealousy, love triangles and surprises
- natural, emotional dialogue
- affinityChanges pairs are always one man and one woman
"""

PARADISE_DATE_TEMPLATE = """You are the scenario writer for a dating reality show.

Write the "Paradise" date scene. In Paradise the contestants may reveal their
occupations and spend time alone together.

[{{{inviter.name}}}] {{inviter.age}}
Occupation: {{{inviter.occupation}}}
Personality: {{{inviter.personality}}}

[{{{invitee.name}}}] {{invitee.age}}
Occupation: {{{invitee.occupation}}}
Personality: {{{invitee.personality}}}

Current affinity: {{affinity}}/100

Reply with this JSON only:
{
  "title": "Paradise Date",
  "eventType": "paradise_date",
  "location": "paradise",
  "participants": ["{{inviter.id}}", "{{invitee.id}}"],
  "narrative": "the two of them in Paradise, including the occupation reveal",
  "dialogue": [
    {"characterId": "id", "text": "line, including revealing the occupation", "emotion": "happy|flirty|nervous|default"}
  ],
  "innerThoughts": [
    {"characterId": "{{inviter.id}}", "thought": "inner thought"},
    {"characterId": "{{invitee.id}}", "thought": "inner thought"}
  ],
  "affinityChanges": [
    {"fromId": "{{inviter.id}}", "toId": "{{invitee.id}}", "change": 15 to 25, "reason": "grew closer in Paradise"}
  ]
}
"""

CEREMONY_TEMPLATE = """You are the scenario writer for the final coupling ceremony of the dating
reality show "AI Island: Inferno".

=== Contestants ===
{{{roster}}}

=== Final affinity ===
{{#each affinity_lines}}
{{{this}}}
{{/each}}

=== Paradise ===
{{{paradise_summary}}}

=== Highlights ===
{{{highlights}}}

Write the final coupling ceremony. High-affinity pairs should end up together.

Reply with this JSON only:
{
  "narrative": "the ceremony, 3-5 sentences",
  "dialogue": [
    {"characterId": "id", "text": "moving line", "emotion": "happy|sad|nervous|default"}
  ],
  "couples": [
    {"person1Id": "man id", "person2Id": "woman id"}
  ],
  "uncoupled": ["ids of everyone left without a partner"]
}

Only pair people whose affinity is 45 or more. Nobody appears in two couples.
Everyone not in a couple goes in uncoupled.
"""


# ── Context builders ─────────────────────────────────────


def _gender_label(character: Character) -> str:
    return "man" if character.gender == "male" else "woman"


def affinity_lines(characters: list[Character], affinities: dict[str, int]) -> list[str]:
    """One "man -> woman: score/100 (tier)" line per active pair."""
    active = active_characters(characters)
    lines = []
    for m in males(active):
        for f in females(active):
            value = get_affinity(affinities, m.id, f.id)
            lines.append(f"{m.name} -> {f.name}: {value}/100 ({affinity_label(value)})")
    return lines


def paradise_summary(characters: list[Character], paradise_pairs: list[list[str]]) -> str:
    if not paradise_pairs:
        return "None"
    names = {c.id: c.name for c in characters}
    return ", ".join(
        " & ".join(names.get(cid, cid) for cid in pair) for pair in paradise_pairs
    )


def _event_summary(event: GameEvent) -> dict[str, str]:
    return {
        "title": event.title,
        "snippet": event.narrative[:NARRATIVE_SNIPPET_LENGTH],
    }


def build_event_context(request: EventRequest) -> dict[str, Any]:
    present = available_characters(request.characters)
    return {
        "day": request.day,
        "time": request.time_of_day,
        "characters": [
            {
                "name": c.name,
                "name_jp": c.name_jp,
                "age": c.age,
                "gender": _gender_label(c),
                "personality": c.personality,
                "occupation_hint": c.occupation_hint,
                "dating_style": c.dating_style,
                "interests": ", ".join(c.interests),
            }
            for c in present
        ],
        "ids": ", ".join(c.id for c in present),
        "affinity_lines": affinity_lines(request.characters, request.affinities),
        "paradise_summary": paradise_summary(request.characters, request.paradise_pairs),
        "recent_events": [_event_summary(e) for e in request.recent_events],
        "recent_count": RECENT_EVENT_COUNT,
    }


def build_event_prompt(request: EventRequest) -> str:
    return render_prompt(EVENT_TEMPLATE, build_event_context(request))


def build_paradise_date_prompt(
    inviter: Character, invitee: Character, affinities: dict[str, int]
) -> str:
    context = {
        "inviter": inviter.model_dump(),
        "invitee": invitee.model_dump(),
        "affinity": get_affinity(affinities, inviter.id, invitee.id),
    }
    return render_prompt(PARADISE_DATE_TEMPLATE, context)


def build_ceremony_prompt(request: CeremonyRequest) -> str:
    active = active_characters(request.characters)
    context = {
        "roster": ", ".join(f"{c.name} ({_gender_label(c)}, id {c.id})" for c in active),
        "affinity_lines": affinity_lines(request.characters, request.affinities),
        "paradise_summary": paradise_summary(request.characters, request.paradise_pairs),
        "highlights": ", ".join(e.title for e in request.events[-HIGHLIGHT_COUNT:]) or "None",
    }
    return render_prompt(CEREMONY_TEMPLATE, context)

"""Final coupling ceremony — greedy matching plus closing text.

Matching walks every active man x woman pair from the highest affinity down
and commits a pair when both members are still free. Pairs below
COUPLE_THRESHOLD are never coupled. This is deliberately greedy, not a
maximum-weight matching: taking the single best pair first can leave a
higher-total configuration unused.
"""

from __future__ import annotations

import logging
import random

from inferno_island.affinity import ranked_pairs
from inferno_island.lines import CEREMONY_NARRATIVES, get_line
from inferno_island.models import (
    CeremonyRequest,
    CeremonyResult,
    Character,
    DialogueLine,
    FinalCouple,
)
from inferno_island.roster import active_characters, females, males

logger = logging.getLogger(__name__)

COUPLE_THRESHOLD = 45


def greedy_match(
    characters: list[Character],
    affinities: dict[str, int],
    threshold: int = COUPLE_THRESHOLD,
) -> tuple[list[FinalCouple], list[str]]:
    """Return (couples, uncoupled ids) for the active cast."""
    active = active_characters(characters)
    used: set[str] = set()
    couples: list[FinalCouple] = []

    for m, f, value in ranked_pairs(males(active), females(active), affinities):
        if value < threshold:
            break
        if m.id in used or f.id in used:
            continue
        couples.append(FinalCouple(person1_id=m.id, person2_id=f.id))
        used.update((m.id, f.id))

    uncoupled = [c.id for c in active if c.id not in used]
    return couples, uncoupled


def synthesize_ceremony(request: CeremonyRequest, rng: random.Random) -> CeremonyResult:
    couples, uncoupled = greedy_match(request.characters, request.affinities)
    coupled_ids = {cid for c in couples for cid in (c.person1_id, c.person2_id)}

    dialogue = [
        DialogueLine(
            character_id=c.id,
            text=get_line(rng, c.id, "ceremony").text,
            emotion="happy" if c.id in coupled_ids else "sad",
        )
        for c in active_characters(request.characters)
    ]

    logger.info("ceremony couples=%d uncoupled=%s", len(couples), uncoupled)
    return CeremonyResult(
        narrative=rng.choice(CEREMONY_NARRATIVES),
        dialogue=dialogue,
        couples=couples,
        uncoupled=uncoupled,
    )

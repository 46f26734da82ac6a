"""Pairwise affinity store.

Affinity is tracked per unordered male/female pair under a canonical key —
the two ids sorted and joined with "|" — so (a, b) and (b, a) share one
entry. Values live in [0, 100]. The store is a plain dict; every mutating
helper returns a new dict and leaves its input untouched.

Tiers (used for prompt text and summaries):
  80+   deeply drawn
  60+   interested
  40+   aware
  20+   curious
  0+    indifferent
"""

from __future__ import annotations

import random
from collections.abc import Iterable

from inferno_island.models import AffinityChange, Character

MIN_AFFINITY = 0
MAX_AFFINITY = 100

# Exclusive upper bound of the random starting value
INITIAL_AFFINITY_CEILING = 20

AFFINITY_TIERS = [
    (80, "deeply drawn"),
    (60, "interested"),
    (40, "aware"),
    (20, "curious"),
    (0, "indifferent"),
]


def pair_key(id1: str, id2: str) -> str:
    """Canonical store key for an unordered pair."""
    return "|".join(sorted((id1, id2)))


def get_affinity(affinities: dict[str, int], id1: str, id2: str) -> int:
    """Current score for a pair, 0 when the pair has never been scored."""
    return affinities.get(pair_key(id1, id2), 0)


def clamp(value: int) -> int:
    return max(MIN_AFFINITY, min(MAX_AFFINITY, value))


def apply_deltas(
    affinities: dict[str, int], changes: Iterable[AffinityChange]
) -> dict[str, int]:
    """Return a new store with each change added and clamped, in order."""
    updated = dict(affinities)
    for change in changes:
        key = pair_key(change.from_id, change.to_id)
        updated[key] = clamp(updated.get(key, 0) + change.change)
    return updated


def build_initial_affinities(
    characters: list[Character], rng: random.Random | None = None
) -> dict[str, int]:
    """Small random starting score for every male x female pair."""
    rng = rng or random.Random()
    affinities: dict[str, int] = {}
    for m in characters:
        if m.gender != "male":
            continue
        for f in characters:
            if f.gender != "female":
                continue
            affinities[pair_key(m.id, f.id)] = rng.randrange(INITIAL_AFFINITY_CEILING)
    return affinities


def affinity_label(value: int) -> str:
    for threshold, label in AFFINITY_TIERS:
        if value >= threshold:
            return label
    return AFFINITY_TIERS[-1][1]


def ranked_pairs(
    males: list[Character],
    females: list[Character],
    affinities: dict[str, int],
) -> list[tuple[Character, Character, int]]:
    """All male x female pairs, highest affinity first.

    The sort is stable, so ties keep roster order (males outer, females inner).
    """
    pairs = [
        (m, f, get_affinity(affinities, m.id, f.id))
        for m in males
        for f in females
    ]
    pairs.sort(key=lambda p: p[2], reverse=True)
    return pairs


def max_affinity(
    males: list[Character], females: list[Character], affinities: dict[str, int]
) -> int:
    return max(
        (get_affinity(affinities, m.id, f.id) for m in males for f in females),
        default=0,
    )


def top_pairs(
    characters: list[Character], affinities: dict[str, int], n: int | None = None
) -> list[tuple[str, str, int]]:
    """Best (male id, female id, affinity) pairs among non-eliminated characters."""
    active = [c for c in characters if not c.is_eliminated]
    ranked = ranked_pairs(
        [c for c in active if c.gender == "male"],
        [c for c in active if c.gender == "female"],
        affinities,
    )
    return [(m.id, f.id, value) for m, f, value in ranked[:n]]

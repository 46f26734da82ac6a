"""The cast — six contestants, three men and three women.

Occupations stay secret in the inferno; only ``occupation_hint`` is public
until a pair reaches paradise. ``initial_characters()`` hands out fresh
copies with both status flags cleared.
"""

from __future__ import annotations

from inferno_island.models import Character

INITIAL_CHARACTERS: tuple[Character, ...] = (
    # --- men ---
    Character(
        id="kenji",
        name="Kenji",
        name_jp="健二",
        age=28,
        gender="male",
        occupation="Architect",
        occupation_hint="Designs things for a living",
        personality=(
            "Calm and self-assured, with a deep romantic streak he keeps hidden. "
            "Looks calculating, but turns clumsy around someone he really likes."
        ),
        background=(
            "Grew up in a small coastal town and moved to the city to study. "
            "Has put work first for years and wants to change that."
        ),
        interests=["architecture", "jazz", "art", "running"],
        dating_style="Watches carefully before moving. Not interested in anything casual.",
        avatar="🧑‍💼",
        color="#6366f1",
    ),
    Character(
        id="ryu",
        name="Ryu",
        name_jp="龍",
        age=26,
        gender="male",
        occupation="Musician",
        occupation_hint="Does something creative",
        personality=(
            "Passionate and sensitive, says exactly what he feels. Impulsive and "
            "honest to a fault. Goes all in once he falls, and gets jealous."
        ),
        background=(
            "Spent years playing small venues and is about to make his major-label "
            "debut. Writes every song from something he has lived through."
        ),
        interests=["music", "live shows", "film", "cycling"],
        dating_style="Falls at first sight and acts on it straight away.",
        avatar="🎸",
        color="#f59e0b",
    ),
    Character(
        id="takeshi",
        name="Takeshi",
        name_jp="剛",
        age=31,
        gender="male",
        occupation="Surgeon",
        occupation_hint="A specialist who helps people",
        personality=(
            "Gentle and thoughtful, speaks little and shows it through actions. "
            "Reads a room better than anyone and has a steady kind of strength."
        ),
        background=(
            "Long shifts at a university hospital. Friends signed him up for the "
            "show because he never makes time for himself."
        ),
        interests=["cooking", "mountaineering", "reading", "yoga"],
        dating_style="Never rushes. Builds trust first and follows the other person's pace.",
        avatar="🩺",
        color="#10b981",
    ),
    # --- women ---
    Character(
        id="yuki",
        name="Yuki",
        name_jp="雪",
        age=24,
        gender="female",
        occupation="Fashion designer",
        occupation_hint="Works with looks and style",
        personality=(
            "Bright, energetic and hates losing. Breezy on the surface but has a "
            "glass heart when it comes to love."
        ),
        background=(
            "Just launched her own label. Treats everything, including romance, "
            "as a competition she intends to win."
        ),
        interests=["fashion", "shopping", "dance", "social media"],
        dating_style="Bold with people she likes, but goes hot-and-cold on the one she really wants.",
        avatar="👗",
        color="#ec4899",
    ),
    Character(
        id="hana",
        name="Hana",
        name_jp="花",
        age=27,
        gender="female",
        occupation="Lawyer",
        occupation_hint="A logical, professional job",
        personality=(
            "Cool, sharp and a little mysterious. Rarely shows emotion but burns "
            "hotter than anyone underneath. Proud, and slow to open up."
        ),
        background=(
            "Works human-rights cases at a small firm. Rewarding work, and lonely."
        ),
        interests=["reading", "wine", "galleries", "the gym"],
        dating_style="Looks passive but chooses very carefully. Loves deeply once she lets someone in.",
        avatar="⚖️",
        color="#8b5cf6",
    ),
    Character(
        id="mia",
        name="Mia",
        name_jp="美亜",
        age=25,
        gender="female",
        occupation="Chef",
        occupation_hint="Loves making people happy",
        personality=(
            "Warm and easy to get along with. Seems a little airheaded, but reads "
            "the room well and can quietly steer it."
        ),
        background=(
            "Cooks at a French restaurant and dreams of opening her own place."
        ),
        interests=["cooking", "cafe hopping", "film", "gardening"],
        dating_style="Wins hearts through food. Values empathy over competition.",
        avatar="👩‍🍳",
        color="#f97316",
    ),
)


def initial_characters() -> list[Character]:
    """A fresh roster with every status flag cleared."""
    return [
        c.model_copy(update={"is_eliminated": False, "is_in_paradise": False})
        for c in INITIAL_CHARACTERS
    ]


def get_character(characters: list[Character], character_id: str) -> Character | None:
    for c in characters:
        if c.id == character_id:
            return c
    return None


def active_characters(characters: list[Character]) -> list[Character]:
    """Everyone not eliminated. Paradise status does not matter here."""
    return [c for c in characters if not c.is_eliminated]


def available_characters(characters: list[Character]) -> list[Character]:
    """Everyone who can take part in an inferno event right now."""
    return [c for c in characters if not c.is_eliminated and not c.is_in_paradise]


def males(characters: list[Character]) -> list[Character]:
    return [c for c in characters if c.gender == "male"]


def females(characters: list[Character]) -> list[Character]:
    return [c for c in characters if c.gender == "female"]


def set_flags(
    characters: list[Character], ids: set[str] | frozenset[str], **flags: bool
) -> list[Character]:
    """Return a new roster with ``flags`` applied to the characters in ``ids``."""
    return [
        c.model_copy(update=flags) if c.id in ids else c
        for c in characters
    ]

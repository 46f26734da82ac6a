"""Event and ceremony synthesizers.

Two implementations of one capability (see base.Synthesizer):

    RuleBasedSynthesizer  — offline; rule cascade + static text banks
    LLMSynthesizer        — prompts a language model and validates its JSON

Both return the same payloads (EventBundle / CeremonyResult), so the engine's
apply step never needs to know which one produced them.

Rule-based pieces:
  events.py    event type cascade, participants, dialogue, affinity change,
               paradise invite acceptance
  paradise.py  the paradise date that follows an accepted invite
  ceremony.py  greedy final matching and closing lines
"""

from .base import SynthesisError, Synthesizer  # noqa: F401
from .ceremony import COUPLE_THRESHOLD, greedy_match, synthesize_ceremony  # noqa: F401
from .events import synthesize_event  # noqa: F401
from .llm import LLMSynthesizer  # noqa: F401
from .paradise import build_paradise_date  # noqa: F401
from .rules import RuleBasedSynthesizer  # noqa: F401

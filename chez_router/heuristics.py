"""Intent classification by pattern matching (no API cost).

Rules are evaluated top to bottom against the trimmed, lowercased message and
the first match wins, so the order of RULES is part of the behavior.
"""

import re
from dataclasses import dataclass
from typing import Any

from chez_router.models import Intent, IntentType


@dataclass(frozen=True)
class IntentRule:
    """One entry of the classification cascade."""

    patterns: tuple[re.Pattern[str], ...]
    intent: IntentType
    confidence: float
    requires_context: bool
    requires_rag: bool

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)

    def to_intent(self) -> Intent:
        return Intent(self.intent, self.confidence, self.requires_context, self.requires_rag)


def _rule(
    intent: IntentType,
    confidence: float,
    requires_context: bool,
    requires_rag: bool,
    *patterns: str,
) -> IntentRule:
    return IntentRule(
        tuple(re.compile(p) for p in patterns),
        intent, confidence, requires_context, requires_rag,
    )


RULES: tuple[IntentRule, ...] = (
    # Timer commands may be handled locally by the caller
    _rule(IntentType.TIMER_COMMAND, 0.98, False, False,
          r"^(start|stop|pause|resume|set|cancel)\s+(timer|alarm)"),
    _rule(IntentType.TIMING_QUESTION, 0.95, True, False,
          r"how long|how much time|duration|minutes|seconds|hours|when (is|will)"),
    _rule(IntentType.TEMPERATURE_QUESTION, 0.95, True, False,
          r"temperature|degrees|temp|how hot|how cold|oven|heat"),
    _rule(IntentType.SIMPLE_QUESTION, 0.9, True, False,
          r"how much|quantity|amount|measurement"),
    _rule(IntentType.SUBSTITUTION_REQUEST, 0.9, True, True,
          r"instead of|substitute|replace|swap|use.*instead|without|don't have|alternative"),
    _rule(IntentType.INGREDIENT_QUESTION, 0.85, True, False,
          r"what (is|are).*ingredient|which ingredient|about.*ingredient"),
    _rule(IntentType.SCALING_QUESTION, 0.85, True, False,
          r"double|half|triple|scale|serve|serving|portion|make (more|less)"),
    _rule(IntentType.STEP_CLARIFICATION, 0.8, True, True,
          r"what does.*mean|explain|clarify|don't understand|confused|step"),
    _rule(IntentType.TECHNIQUE_QUESTION, 0.8, False, True,
          r"how to|how do i|what does.*mean|technique|method|process|what is|define"),
    # The cook reporting what they did differently
    _rule(IntentType.MODIFICATION_REPORT, 0.85, True, False,
          r"i (used|added|changed|substituted|made|did|skipped)"),
    _rule(IntentType.PREFERENCE_STATEMENT, 0.9, False, False,
          r"i (like|prefer|love|hate|don't like|always|never)"),
    _rule(IntentType.TROUBLESHOOTING, 0.85, True, True,
          r"went wrong|not working|help|problem|issue|fix|broken|burnt|raw"
          r"|overcooked|undercooked|why (is|did)",
          r"clump|separating|breaking|split|watery|soggy|tough|dry|rubbery|mushy|keeps"),
    # Future plans: a preference, but less certain than an explicit one
    _rule(IntentType.PREFERENCE_STATEMENT, 0.7, False, False,
          r"i('ll| will| want to| should| might| could) (try|use|add|make|do|skip)",
          r"next time|from now on|in the future|going to"),
)

DEFAULT_INTENT = Intent(IntentType.SIMPLE_QUESTION, 0.6, True, False)


def classify(message: Any) -> Intent:
    """Classify a cook's message. Deterministic and total, never raises."""
    if message is None:
        return DEFAULT_INTENT
    text = str(message).strip().lower()
    if not text:
        return DEFAULT_INTENT

    for rule in RULES:
        if rule.matches(text):
            return rule.to_intent()
    return DEFAULT_INTENT

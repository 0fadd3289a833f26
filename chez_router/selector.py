"""Intent → model tier, with confidence-based escalation."""

from chez_router.models import Intent, IntentType
from chez_router.registry import CHEAP_TIER, MID_TIER, TOP_TIER

LOW_CONFIDENCE_THRESHOLD = 0.7

TIER_BY_INTENT: dict[IntentType, str] = {
    # Cheap tier: high-frequency, low-risk
    IntentType.TIMING_QUESTION: CHEAP_TIER,
    IntentType.TEMPERATURE_QUESTION: CHEAP_TIER,
    IntentType.SIMPLE_QUESTION: CHEAP_TIER,
    IntentType.MODIFICATION_REPORT: CHEAP_TIER,
    IntentType.PREFERENCE_STATEMENT: CHEAP_TIER,
    IntentType.TIMER_COMMAND: CHEAP_TIER,
    # Mid tier: nuanced but boundable answers
    IntentType.SUBSTITUTION_REQUEST: MID_TIER,
    IntentType.INGREDIENT_QUESTION: MID_TIER,
    IntentType.TECHNIQUE_QUESTION: MID_TIER,
    IntentType.SCALING_QUESTION: MID_TIER,
    IntentType.STEP_CLARIFICATION: MID_TIER,
    # Top tier
    IntentType.TROUBLESHOOTING: TOP_TIER,
}


def select_tier(intent: Intent) -> str:
    """Pick a tier name for an intent.

    Low-confidence classifications always go to the mid tier, overriding the
    category table. This also moves a low-confidence troubleshooting intent
    down from the top tier.
    """
    if intent.confidence < LOW_CONFIDENCE_THRESHOLD:
        return MID_TIER
    return TIER_BY_INTENT.get(intent.type, CHEAP_TIER)

"""Intent classification cascade."""

import pytest

from chez_router.heuristics import DEFAULT_INTENT, RULES, classify
from chez_router.models import IntentType


@pytest.mark.parametrize("message, expected", [
    ("Start timer for 5 minutes", IntentType.TIMER_COMMAND),
    ("cancel alarm", IntentType.TIMER_COMMAND),
    ("How long should I cook this?", IntentType.TIMING_QUESTION),
    ("When will it be done?", IntentType.TIMING_QUESTION),
    ("What temperature should the oven be?", IntentType.TEMPERATURE_QUESTION),
    ("How much salt?", IntentType.SIMPLE_QUESTION),
    ("Can I use butter instead of oil?", IntentType.SUBSTITUTION_REQUEST),
    ("I don't have cream", IntentType.SUBSTITUTION_REQUEST),
    ("What is this ingredient for?", IntentType.INGREDIENT_QUESTION),
    ("Can I double this recipe?", IntentType.SCALING_QUESTION),
    ("What does fold mean?", IntentType.STEP_CLARIFICATION),
    ("How do I julienne a carrot?", IntentType.TECHNIQUE_QUESTION),
    ("I added extra garlic", IntentType.MODIFICATION_REPORT),
    ("I love spicy food", IntentType.PREFERENCE_STATEMENT),
    ("My sauce is burnt, what went wrong?", IntentType.TROUBLESHOOTING),
    ("The gravy looks clumpy", IntentType.TROUBLESHOOTING),
])
def test_classify_categories(message, expected):
    assert classify(message).type == expected


def test_flags_come_from_the_rule_table():
    intent = classify("My sauce is burnt")
    assert intent.confidence == 0.85
    assert intent.requires_context is True
    assert intent.requires_rag is True

    timer = classify("stop timer")
    assert timer.confidence == 0.98
    assert timer.requires_context is False
    assert timer.requires_rag is False

    technique = classify("how to temper chocolate")
    # "temper" contains "temp", so temperature wins by order
    assert technique.type == IntentType.TEMPERATURE_QUESTION


def test_case_and_whitespace_insensitive():
    assert classify("   HOW LONG?  ").type == IntentType.TIMING_QUESTION


def test_timer_precedes_substitution():
    intent = classify("start timer then substitute butter instead of oil")
    assert intent.type == IntentType.TIMER_COMMAND


def test_timing_precedes_substitution():
    # Matches both; the timing block is tested first
    assert classify("how long if I substitute honey").type == IntentType.TIMING_QUESTION


def test_timer_pattern_is_anchored():
    assert classify("please start timer").type != IntentType.TIMER_COMMAND


def test_future_plan_is_low_confidence_preference():
    intent = classify("Next time I'll use less salt")
    assert intent.type == IntentType.PREFERENCE_STATEMENT
    assert intent.confidence == 0.7


@pytest.mark.parametrize("message", ["", "   ", None, "hello there", "🍅🍅", 42])
def test_default_catch_all(message):
    assert classify(message) == DEFAULT_INTENT
    assert DEFAULT_INTENT.type == IntentType.SIMPLE_QUESTION
    assert DEFAULT_INTENT.confidence == 0.6
    assert DEFAULT_INTENT.requires_context is True
    assert DEFAULT_INTENT.requires_rag is False


def test_deterministic():
    message = "why did my bread come out raw?"
    assert classify(message) == classify(message)


def test_never_emits_fallback():
    assert all(rule.intent != IntentType.FALLBACK for rule in RULES)


def test_rule_confidences_in_range():
    for rule in RULES:
        assert 0.6 <= rule.confidence <= 0.98


def test_each_rule_matches_its_own_example():
    examples = {
        0: "set timer",
        1: "how much time left",
        2: "how hot is the pan",
        3: "what amount",
        4: "any alternative",
        5: "which ingredient",
        6: "serving size",
        7: "explain",
        8: "what is a roux",
        9: "i skipped it",
        10: "i prefer it mild",
        11: "this is not working",
        12: "from now on",
    }
    assert len(examples) == len(RULES)
    for index, text in examples.items():
        assert RULES[index].matches(text), (index, text)

"""Prompt assembly: system prompt, token-budgeted context, capped history."""

import math
from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from chez_router.context import build_context, includes_memory
from chez_router.models import (
    ChatMessage,
    CookingContext,
    DispatchRequest,
    Intent,
    IntentType,
    RetrievedKnowledge,
)
from chez_router.registry import CHEAP_TIER, MID_TIER, TOP_TIER, get_tier

BASE_PROMPT = "You are a helpful cooking assistant. Answer concisely and directly."

_MEMORY_NOTE = (
    " You remember this cook's preferences, past substitutions, and cooking notes "
    "from previous sessions. Use them naturally without over-explaining."
)

CONTEXT_BUDGET_RATIO = 0.4
CHARS_PER_TOKEN = 4
MAX_HISTORY_MESSAGES = 6
TRUNCATION_MARKER = "..."

# Tier → intent → instruction appended to BASE_PROMPT.
# Cheap tier is terse, mid tier moderate, top tier elaborated.
TIER_INSTRUCTIONS: dict[str, dict[IntentType, str]] = {
    CHEAP_TIER: {
        IntentType.TIMING_QUESTION: "Answer timing questions based on the recipe step.",
        IntentType.TEMPERATURE_QUESTION: "Answer temperature questions based on the recipe step.",
        IntentType.SIMPLE_QUESTION: "Answer simple questions about quantities or measurements.",
        IntentType.MODIFICATION_REPORT: "Acknowledge the user's modification and note it for learning.",
        IntentType.PREFERENCE_STATEMENT: "Acknowledge the user's preference and note it for learning.",
    },
    MID_TIER: {
        IntentType.SUBSTITUTION_REQUEST: (
            "Suggest appropriate ingredient substitutions considering flavor, texture, "
            "and cooking properties."
        ),
        IntentType.INGREDIENT_QUESTION: "Explain the ingredient's role in this recipe.",
        IntentType.TECHNIQUE_QUESTION: "Explain cooking techniques clearly with practical tips.",
        IntentType.SCALING_QUESTION: (
            "Help scale the recipe proportionally, noting any adjustments for cooking "
            "time or method."
        ),
        IntentType.STEP_CLARIFICATION: "Clarify the recipe step with additional context if needed.",
    },
    TOP_TIER: {
        IntentType.TROUBLESHOOTING: (
            "Help diagnose and solve cooking problems. Consider what went wrong, why it "
            "happened, and how to fix it or prevent it next time. Be encouraging and practical."
        ),
    },
}

# Instruction for intents a tier has no entry for. Absent → BASE_PROMPT alone.
TIER_DEFAULT_INSTRUCTIONS: dict[str, str] = {
    TOP_TIER: "Provide thoughtful, detailed guidance for this cooking question.",
}


def estimate_tokens(text: str) -> int:
    """Rough estimate: 1 token ≈ 4 characters of English text."""
    return math.ceil(len(text) / CHARS_PER_TOKEN)


def context_budget(tier: str) -> int:
    """Token budget for the context block: 40% of the tier's max tokens."""
    return math.floor(get_tier(tier).max_tokens * CONTEXT_BUDGET_RATIO)


def truncate_to_budget(text: str, max_tokens: int) -> str:
    if estimate_tokens(text) <= max_tokens:
        return text
    return text[: max_tokens * CHARS_PER_TOKEN] + TRUNCATION_MARKER


def build_system_prompt(intent: Intent, tier: str, has_memory_context: bool = False) -> str:
    """Select the instruction string for this tier and intent."""
    get_tier(tier)  # unknown tier → ConfigurationError
    base = BASE_PROMPT
    if has_memory_context:
        base = f"{base}{_MEMORY_NOTE}"

    instruction = TIER_INSTRUCTIONS.get(tier, {}).get(intent.type)
    if instruction is None:
        instruction = TIER_DEFAULT_INSTRUCTIONS.get(tier)
    return f"{base} {instruction}" if instruction else base


def _coerce_history(history: Iterable[ChatMessage | Mapping[str, Any]] | None) -> list[ChatMessage]:
    messages: list[ChatMessage] = []
    for entry in history or ():
        if isinstance(entry, ChatMessage):
            messages.append(entry)
        else:
            messages.append(ChatMessage(str(entry["role"]), str(entry["content"])))
    return messages


def assemble(
    message: str,
    context: CookingContext,
    intent: Intent,
    tier: str,
    knowledge: RetrievedKnowledge | None = None,
    history: Iterable[ChatMessage | Mapping[str, Any]] | None = None,
    *,
    temperature: float = 0.7,
    max_tokens: int | None = None,
) -> DispatchRequest:
    """Build the immutable request for one dispatch.

    Never touches the network. Raises ConfigurationError for an unknown tier.
    """
    system_prompt = build_system_prompt(
        intent, tier, has_memory_context=includes_memory(intent, knowledge),
    )

    context_block = build_context(context, intent, knowledge)
    budget = context_budget(tier)
    estimated = estimate_tokens(context_block)
    if estimated > budget:
        logger.debug(f"Context truncated: ≈{estimated} tokens > budget {budget} ({tier})")
        context_block = truncate_to_budget(context_block, budget)

    recent = _coerce_history(history)[-MAX_HISTORY_MESSAGES:]

    return DispatchRequest(
        tier=tier,
        system_prompt=system_prompt,
        context_block=context_block,
        history_messages=tuple(recent),
        user_message=message,
        temperature=temperature,
        max_tokens=max_tokens,
    )

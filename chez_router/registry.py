"""Model tier registry, the single source of truth for tier cost and limits.

Tiers are immutable and defined once at import time. Used by the selector,
the prompt assembler (token budget) and the dispatch client (model id,
timeout, cost).
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from chez_router.errors import ConfigurationError


@dataclass(frozen=True)
class ModelTierConfig:
    """Cost/latency/token characteristics of one upstream model."""

    name: str
    model_id: str            # Gateway model identifier
    prompt_cost: float       # USD per 1M input tokens
    completion_cost: float   # USD per 1M output tokens
    max_tokens: int
    timeout_s: float


CHEAP_TIER = "GEMINI_FLASH"
MID_TIER = "GPT4O_MINI"
TOP_TIER = "CLAUDE_SONNET_4"

MODEL_TIERS: MappingProxyType[str, ModelTierConfig] = MappingProxyType({
    "GEMINI_FLASH": ModelTierConfig(
        "GEMINI_FLASH", "google/gemini-flash-1.5", 0.10, 0.30, 8000, 10.0,
    ),
    "GROQ_LLAMA_70B": ModelTierConfig(
        "GROQ_LLAMA_70B", "groq/llama-3.1-70b-versatile", 0.59, 0.79, 8000, 10.0,
    ),
    "GPT4O_MINI": ModelTierConfig(
        "GPT4O_MINI", "openai/gpt-4o-mini", 0.15, 0.60, 16000, 15.0,
    ),
    "CLAUDE_SONNET_4": ModelTierConfig(
        "CLAUDE_SONNET_4", "anthropic/claude-sonnet-4-20250514", 3.00, 15.00, 16000, 20.0,
    ),
})


def get_tier(name: str) -> ModelTierConfig:
    """Look up a tier by its exact registry name."""
    try:
        return MODEL_TIERS[name]
    except KeyError:
        valid = ", ".join(MODEL_TIERS)
        raise ConfigurationError(f"Unknown model tier '{name}'. Known tiers: {valid}") from None


def calculate_cost(tier: str | ModelTierConfig, prompt_tokens: int, completion_tokens: int) -> float:
    """USD cost from provider-reported token counts."""
    config = tier if isinstance(tier, ModelTierConfig) else get_tier(tier)
    prompt_cost = prompt_tokens / 1_000_000 * config.prompt_cost
    completion_cost = completion_tokens / 1_000_000 * config.completion_cost
    return prompt_cost + completion_cost

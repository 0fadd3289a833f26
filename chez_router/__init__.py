"""chez-router: intent-based model routing and dispatch for cooking chat."""

from chez_router.config import RouterSettings, validate_api_keys
from chez_router.dispatch import DispatchClient
from chez_router.errors import ConfigurationError, DispatchError, FallbackError, RouterError
from chez_router.fallback import AnthropicFallback, route_with_fallback
from chez_router.heuristics import classify
from chez_router.models import (
    ChatMessage,
    CookingContext,
    DispatchRequest,
    DispatchResult,
    Intent,
    IntentType,
    KnowledgeChunk,
    RetrievedKnowledge,
)
from chez_router.prompts import assemble
from chez_router.registry import MODEL_TIERS, ModelTierConfig, get_tier
from chez_router.retry import RetryPolicy
from chez_router.router import CookingRouter, route
from chez_router.selector import select_tier

__all__ = [
    "AnthropicFallback",
    "ChatMessage",
    "ConfigurationError",
    "CookingContext",
    "CookingRouter",
    "DispatchClient",
    "DispatchError",
    "DispatchRequest",
    "DispatchResult",
    "FallbackError",
    "Intent",
    "IntentType",
    "KnowledgeChunk",
    "MODEL_TIERS",
    "ModelTierConfig",
    "RetrievedKnowledge",
    "RetryPolicy",
    "RouterError",
    "RouterSettings",
    "assemble",
    "classify",
    "get_tier",
    "route",
    "route_with_fallback",
    "select_tier",
    "validate_api_keys",
]

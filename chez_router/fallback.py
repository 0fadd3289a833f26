"""Caller-side fallback: answer via Anthropic directly when the gateway fails.

Opt-in and kept outside CookingRouter, which never downgrades or switches
providers on its own. Trades multi-model routing for availability.
"""

import dataclasses
import time
from typing import Any

import anthropic
import httpx
from anthropic import AsyncAnthropic
from loguru import logger

from chez_router.errors import DispatchError, FallbackError
from chez_router.models import CookingContext, DispatchResult, IntentType, RetrievedKnowledge
from chez_router.registry import ModelTierConfig, get_tier
from chez_router.router import CookingRouter, History

FALLBACK_MODEL = "claude-sonnet-4-20250514"
FALLBACK_PROMPT_COST = 3.0       # USD per 1M input tokens
FALLBACK_COMPLETION_COST = 15.0  # USD per 1M output tokens
DEFAULT_SYSTEM = "You are a helpful cooking assistant."


class AnthropicFallback:
    """Direct Messages API call used when the gateway is unavailable."""

    def __init__(
        self,
        api_key: str,
        *,
        http_client: httpx.AsyncClient | None = None,
        timeout_s: float = 30.0,
    ):
        # Single attempt per fallback call
        self._client = AsyncAnthropic(
            api_key=api_key,
            http_client=http_client,
            timeout=timeout_s,
            max_retries=0,
        )

    async def aclose(self) -> None:
        await self._client.close()

    async def call(
        self,
        messages: list[dict[str, str]],
        tier: str | ModelTierConfig,
        temperature: float = 0.7,
    ) -> DispatchResult:
        """Send gateway-shaped ``messages``; max_tokens follows the failed tier."""
        config = tier if isinstance(tier, ModelTierConfig) else get_tier(tier)
        system = "\n\n".join(m["content"] for m in messages if m["role"] == "system") or DEFAULT_SYSTEM
        conversation = [
            {"role": m["role"], "content": m["content"]}
            for m in messages if m["role"] != "system"
        ]

        t0 = time.monotonic()
        try:
            reply = await self._client.messages.create(
                model=FALLBACK_MODEL,
                max_tokens=config.max_tokens,
                temperature=temperature,
                system=system,
                messages=conversation,
            )
        except anthropic.APIError as e:
            raise FallbackError(f"Claude fallback failed: {e}") from e
        latency_ms = int((time.monotonic() - t0) * 1000)

        content = _text_of(getattr(reply, "content", None))
        usage = getattr(reply, "usage", None)
        prompt_tokens = int(getattr(usage, "input_tokens", 0) or 0)
        completion_tokens = int(getattr(usage, "output_tokens", 0) or 0)
        cost = (
            prompt_tokens / 1_000_000 * FALLBACK_PROMPT_COST
            + completion_tokens / 1_000_000 * FALLBACK_COMPLETION_COST
        )
        logger.info(
            f"Fallback: {FALLBACK_MODEL} | tokens={prompt_tokens}/{completion_tokens} "
            f"cost=${cost:.6f} {latency_ms}ms"
        )
        return DispatchResult(
            tier=config.name,
            model_id=FALLBACK_MODEL,
            provider_id="anthropic",
            response_text=content,
            cost_usd=cost,
            latency_ms=latency_ms,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            intent=IntentType.FALLBACK,
            fallback=True,
        )


def _text_of(blocks: Any) -> str:
    """Concatenate the text blocks of a Messages reply."""
    parts = []
    for block in blocks or []:
        text = getattr(block, "text", None)
        if getattr(block, "type", None) == "text" and text:
            parts.append(text)
    return "".join(parts)


async def route_with_fallback(
    router: CookingRouter,
    fallback: AnthropicFallback,
    message: str,
    context: CookingContext,
    knowledge: RetrievedKnowledge | None = None,
    history: History | None = None,
    *,
    credential: str | None = None,
) -> DispatchResult:
    """Try the router first; on any DispatchError answer through ``fallback``.

    The request is planned once and reused, so the fallback sees exactly the
    messages the gateway was sent. The gateway error is kept on the result
    as ``fallback_reason``.
    """
    intent, request = router.plan(message, context, knowledge, history)
    try:
        return await router.send(intent, request, credential=credential)
    except DispatchError as e:
        logger.warning(f"Router failed, using Claude fallback: {e}")
        result = await fallback.call(request.to_messages(), request.tier, request.temperature)
        return dataclasses.replace(result, fallback_reason=e.message)

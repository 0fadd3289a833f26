"""CookingRouter: intent-based tier routing for in-session cooking questions."""

import asyncio
import dataclasses
from collections.abc import Iterable, Mapping
from typing import Any

from loguru import logger

from chez_router.dispatch import DispatchClient
from chez_router.errors import ConfigurationError
from chez_router.heuristics import classify
from chez_router.models import (
    ChatMessage,
    CookingContext,
    DispatchRequest,
    DispatchResult,
    Intent,
    RetrievedKnowledge,
)
from chez_router.prompts import assemble, estimate_tokens
from chez_router.selector import select_tier

History = Iterable[ChatMessage | Mapping[str, Any]]


class CookingRouter:
    """Routes each question to a cost-appropriate tier.

    Sequence: classify → select tier → assemble prompt → dispatch. There is
    no fallback or tier downgrade here; a DispatchError from the client
    propagates unchanged so the caller, who has the intent, can decide.
    """

    def __init__(
        self,
        client: DispatchClient,
        *,
        temperature: float = 0.7,
        credential: str | None = None,
    ):
        self._client = client
        self._temperature = temperature
        self._credential = credential

    def plan(
        self,
        message: str,
        context: CookingContext,
        knowledge: RetrievedKnowledge | None = None,
        history: History | None = None,
    ) -> tuple[Intent, DispatchRequest]:
        """Everything up to the network call. Pure, never touches I/O."""
        intent = classify(message)
        tier = select_tier(intent)
        request = assemble(
            message, context, intent, tier, knowledge, history,
            temperature=self._temperature,
        )
        token_estimate = sum(estimate_tokens(m["content"]) for m in request.to_messages())
        logger.info(
            f"Route: {intent.type.value} ({intent.confidence:.2f}) → {tier} | "
            f"tokens≈{token_estimate} history={len(request.history_messages)}"
        )
        return intent, request

    async def route(
        self,
        message: str,
        context: CookingContext,
        knowledge: RetrievedKnowledge | None = None,
        history: History | None = None,
        *,
        credential: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> DispatchResult:
        intent, request = self.plan(message, context, knowledge, history)
        return await self.send(intent, request, credential=credential, cancel_event=cancel_event)

    async def send(
        self,
        intent: Intent,
        request: DispatchRequest,
        *,
        credential: str | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> DispatchResult:
        """Dispatch an already planned request and tag the result with its intent.

        ``credential`` overrides the key the router was built with.
        """
        key = credential or self._credential
        if not key:
            raise ConfigurationError("No gateway credential: pass credential= or build the router with one")
        result = await self._client.dispatch(request, key, cancel_event=cancel_event)
        return dataclasses.replace(result, intent=intent.type)


async def route(
    message: str,
    context: CookingContext,
    knowledge: RetrievedKnowledge | None = None,
    history: History | None = None,
    *,
    credential: str,
    client: DispatchClient | None = None,
    cancel_event: asyncio.Event | None = None,
) -> DispatchResult:
    """One-shot helper. Creates (and closes) a DispatchClient if none is given."""
    if client is not None:
        return await CookingRouter(client).route(
            message, context, knowledge, history,
            credential=credential, cancel_event=cancel_event,
        )
    async with DispatchClient() as owned:
        return await CookingRouter(owned).route(
            message, context, knowledge, history,
            credential=credential, cancel_event=cancel_event,
        )

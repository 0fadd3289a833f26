"""Dispatch client for the OpenRouter-style multi-model gateway."""

import asyncio
import time
from typing import Any

import httpx
from loguru import logger

from chez_router.errors import DispatchError
from chez_router.models import DispatchRequest, DispatchResult, GatewayReply
from chez_router.registry import calculate_cost, get_tier
from chez_router.retry import RetryPolicy, SleepFn, attempt

DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_REFERER = "https://chez.app"
DEFAULT_TITLE = "Chez Cooking Assistant"


class DispatchClient:
    """Sends assembled requests upstream with per-tier timeout and bounded retries.

    Holds no per-request state, so one client can serve concurrent calls.
    Pass ``http_client`` to share a connection pool (or a MockTransport in
    tests); otherwise the client creates and owns one.
    """

    def __init__(
        self,
        *,
        base_url: str = DEFAULT_BASE_URL,
        referer: str = DEFAULT_REFERER,
        title: str = DEFAULT_TITLE,
        retry_policy: RetryPolicy | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFn = asyncio.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.referer = referer
        self.title = title
        self.retry_policy = retry_policy or RetryPolicy()
        self._http = http_client
        self._owns_http = http_client is None
        self._sleep = sleep

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            # Timeouts are enforced per attempt by dispatch()
            self._http = httpx.AsyncClient(timeout=None)
        return self._http

    async def aclose(self) -> None:
        if self._http is not None and self._owns_http:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "DispatchClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _headers(self, credential: str) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
            "HTTP-Referer": self.referer,
            "X-Title": self.title,
        }

    async def dispatch(
        self,
        request: DispatchRequest,
        credential: str,
        *,
        cancel_event: asyncio.Event | None = None,
    ) -> DispatchResult:
        """Send ``request`` and return the realized result.

        Raises DispatchError on failure; ``retryable`` tells the caller whether
        the failure class was transient (timeout, 429, 408, 5xx).
        """
        tier = get_tier(request.tier)
        body = {
            "model": tier.model_id,
            "messages": request.to_messages(),
            "max_tokens": request.max_tokens or tier.max_tokens,
            "temperature": request.temperature,
        }
        headers = self._headers(credential)
        url = f"{self.base_url}/chat/completions"

        async def _call(attempt_no: int) -> GatewayReply:
            try:
                response = await asyncio.wait_for(
                    self.http.post(url, json=body, headers=headers),
                    timeout=tier.timeout_s,
                )
            except (asyncio.TimeoutError, httpx.TimeoutException):
                raise DispatchError.timeout(tier.timeout_s) from None
            except httpx.TransportError as e:
                raise DispatchError(
                    f"Gateway unreachable: {e}", code="NETWORK", retryable=False,
                ) from e

            if not response.is_success:
                raise DispatchError.from_response(response.status_code, _json_or_empty(response))

            reply = GatewayReply.from_json(_json_or_empty(response))
            if reply.is_degraded:
                logger.warning(
                    f"Gateway reply for {tier.name} missing content or usage "
                    f"(attempt {attempt_no}); returning degraded result"
                )
            return reply

        t0 = time.monotonic()
        reply = await attempt(
            _call,
            self.retry_policy,
            sleep=self._sleep,
            cancel_event=cancel_event,
        )
        latency_ms = int((time.monotonic() - t0) * 1000)

        prompt_tokens = reply.usage.prompt_tokens
        completion_tokens = reply.usage.completion_tokens
        cost = calculate_cost(tier, prompt_tokens, completion_tokens)
        logger.info(
            f"Dispatch: {tier.name} ({tier.model_id}) via {reply.provider} | "
            f"tokens={prompt_tokens}/{completion_tokens} cost=${cost:.6f} {latency_ms}ms"
        )
        return DispatchResult(
            tier=tier.name,
            model_id=tier.model_id,
            provider_id=reply.provider,
            response_text=reply.content,
            cost_usd=cost,
            latency_ms=latency_ms,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
        )


def _json_or_empty(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return {}

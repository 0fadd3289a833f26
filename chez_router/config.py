"""Router settings, read from keyword arguments or the environment."""

import os
from dataclasses import dataclass

from chez_router.dispatch import DEFAULT_BASE_URL, DEFAULT_REFERER, DEFAULT_TITLE, DispatchClient
from chez_router.errors import ConfigurationError
from chez_router.fallback import AnthropicFallback
from chez_router.retry import RetryPolicy
from chez_router.router import CookingRouter

ENV_PREFIX = "CHEZ_ROUTER_"


@dataclass(frozen=True)
class RouterSettings:
    openrouter_api_key: str = ""
    anthropic_api_key: str = ""
    base_url: str = DEFAULT_BASE_URL
    referer: str = DEFAULT_REFERER
    title: str = DEFAULT_TITLE
    max_retries: int = 2
    backoff_base_s: float = 1.0
    temperature: float = 0.7

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "RouterSettings":
        env = os.environ if environ is None else environ

        def _get(name: str, default: str) -> str:
            return env.get(f"{ENV_PREFIX}{name}", default)

        try:
            return cls(
                openrouter_api_key=env.get("OPENROUTER_API_KEY", ""),
                anthropic_api_key=env.get("ANTHROPIC_API_KEY", ""),
                base_url=_get("BASE_URL", DEFAULT_BASE_URL),
                referer=_get("REFERER", DEFAULT_REFERER),
                title=_get("TITLE", DEFAULT_TITLE),
                max_retries=int(_get("MAX_RETRIES", "2")),
                backoff_base_s=float(_get("BACKOFF_BASE_S", "1.0")),
                temperature=float(_get("TEMPERATURE", "0.7")),
            )
        except ValueError as e:
            raise ConfigurationError(f"Invalid {ENV_PREFIX}* setting: {e}") from e

    @property
    def retry_policy(self) -> RetryPolicy:
        return RetryPolicy(max_attempts=self.max_retries + 1, base_delay_s=self.backoff_base_s)

    def make_client(self, **kwargs) -> DispatchClient:
        return DispatchClient(
            base_url=self.base_url,
            referer=self.referer,
            title=self.title,
            retry_policy=self.retry_policy,
            **kwargs,
        )

    def make_router(self, **client_kwargs) -> CookingRouter:
        """Router carrying the configured temperature and gateway key."""
        return CookingRouter(
            self.make_client(**client_kwargs),
            temperature=self.temperature,
            credential=self.openrouter_api_key or None,
        )

    def make_fallback(self, **kwargs) -> AnthropicFallback:
        if not self.anthropic_api_key.strip():
            raise ConfigurationError("ANTHROPIC_API_KEY is not configured (required for fallback)")
        return AnthropicFallback(self.anthropic_api_key, **kwargs)


def validate_api_keys(
    openrouter_key: str | None,
    anthropic_key: str | None,
    *,
    strict: bool = False,
) -> tuple[bool, list[str]]:
    """Check both credentials are present. ``strict`` raises instead of returning."""
    errors: list[str] = []
    if not openrouter_key or not openrouter_key.strip():
        errors.append("OPENROUTER_API_KEY is not configured")
    if not anthropic_key or not anthropic_key.strip():
        errors.append("ANTHROPIC_API_KEY is not configured (required for fallback)")

    if strict and errors:
        raise ConfigurationError("; ".join(errors))
    return not errors, errors

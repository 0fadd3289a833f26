"""Typed failures raised by the router."""

from typing import Any

RETRYABLE_STATUS_CODES = frozenset({408, 429})


def is_retryable_status(status_code: int | None) -> bool:
    """429, 408 and any 5xx are transient; everything else is terminal."""
    if not status_code:
        return False
    return status_code in RETRYABLE_STATUS_CODES or status_code >= 500


class RouterError(Exception):
    """Base class for chez-router errors."""


class ConfigurationError(RouterError, KeyError):
    """Unknown tier or missing configuration. Indicates a programming defect."""

    def __str__(self) -> str:
        # KeyError would repr() the message otherwise
        return str(self.args[0]) if self.args else ""


class DispatchError(RouterError):
    """Upstream gateway call failed."""

    def __init__(
        self,
        message: str,
        *,
        code: str | None = None,
        status_code: int | None = None,
        retryable: bool = False,
        attempts: int = 1,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.retryable = retryable
        self.attempts = attempts

    @classmethod
    def from_response(cls, status_code: int, body: Any) -> "DispatchError":
        """Build from a non-2xx status and its (possibly empty) JSON body."""
        message = f"Gateway returned HTTP {status_code}"
        code = None
        if isinstance(body, dict):
            err = body.get("error")
            if isinstance(err, dict):
                message = err.get("message") or message
                code = err.get("code")
            elif isinstance(err, str) and err:
                message = err
            elif isinstance(body.get("message"), str) and body["message"]:
                message = body["message"]
            if code is None and body.get("code") is not None:
                code = body.get("code")
        return cls(
            str(message),
            code=str(code) if code is not None else None,
            status_code=status_code,
            retryable=is_retryable_status(status_code),
        )

    @classmethod
    def timeout(cls, timeout_s: float) -> "DispatchError":
        return cls(
            f"Request timeout after {timeout_s:g}s",
            code="TIMEOUT",
            status_code=408,
            retryable=True,
        )

    @classmethod
    def cancelled(cls, attempts: int) -> "DispatchError":
        return cls("Dispatch cancelled", code="CANCELLED", retryable=False, attempts=attempts)

    def __repr__(self) -> str:
        return (
            f"DispatchError({self.message!r}, code={self.code!r}, "
            f"status_code={self.status_code!r}, retryable={self.retryable}, "
            f"attempts={self.attempts})"
        )


class FallbackError(RouterError):
    """The fallback provider failed as well."""

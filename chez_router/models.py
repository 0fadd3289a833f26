"""Core data models for chez-router."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class IntentType(str, Enum):
    """Purpose of a cook's message. Drives context shape and tier choice."""

    TIMER_COMMAND = "timer_command"
    TIMING_QUESTION = "timing_question"
    TEMPERATURE_QUESTION = "temperature_question"
    SIMPLE_QUESTION = "simple_question"
    SUBSTITUTION_REQUEST = "substitution_request"
    INGREDIENT_QUESTION = "ingredient_question"
    SCALING_QUESTION = "scaling_question"
    STEP_CLARIFICATION = "step_clarification"
    TECHNIQUE_QUESTION = "technique_question"
    MODIFICATION_REPORT = "modification_report"
    PREFERENCE_STATEMENT = "preference_statement"
    TROUBLESHOOTING = "troubleshooting"
    # Never produced by classify(); marks answers from the fallback provider.
    FALLBACK = "fallback"


@dataclass(frozen=True)
class Intent:
    """Result of intent classification."""
    type: IntentType
    confidence: float
    requires_context: bool
    requires_rag: bool


@dataclass(frozen=True)
class CookingContext:
    """Snapshot of the cooking session, owned by the session component."""
    session_id: str
    recipe_id: str
    recipe_name: str
    current_step: int
    current_step_text: str
    total_steps: int
    ingredients: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from callers, store immutably
        object.__setattr__(self, "ingredients", tuple(self.ingredients))


@dataclass(frozen=True)
class KnowledgeChunk:
    content: str
    source: str = ""


@dataclass(frozen=True)
class RetrievedKnowledge:
    """Already-ranked snippets supplied by the retrieval collaborator."""
    recipe_knowledge: tuple[KnowledgeChunk, ...] = ()
    user_memory: tuple[KnowledgeChunk, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "recipe_knowledge", tuple(self.recipe_knowledge))
        object.__setattr__(self, "user_memory", tuple(self.user_memory))

    @property
    def has_memory(self) -> bool:
        return len(self.user_memory) > 0


@dataclass(frozen=True)
class ChatMessage:
    role: str  # "system", "user", "assistant"
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass(frozen=True)
class DispatchRequest:
    """Provider-agnostic request, fully assembled and ready to send."""
    tier: str
    system_prompt: str
    context_block: str
    history_messages: tuple[ChatMessage, ...]
    user_message: str
    temperature: float = 0.7
    max_tokens: int | None = None  # None → tier's max_tokens

    def to_messages(self) -> list[dict[str, str]]:
        """Serialize in gateway order: system, context, history, user."""
        messages = [{"role": "system", "content": self.system_prompt}]
        if self.context_block:
            messages.append({"role": "system", "content": f"Context:\n{self.context_block}"})
        messages.extend(m.to_dict() for m in self.history_messages)
        messages.append({"role": "user", "content": self.user_message})
        return messages


@dataclass(frozen=True)
class GatewayUsage:
    prompt_tokens: int = 0
    completion_tokens: int = 0


@dataclass(frozen=True)
class GatewayReply:
    """Parsed 2xx gateway body. Every field has a defined default."""
    content: str = ""
    usage: GatewayUsage = field(default_factory=GatewayUsage)
    model: str = ""

    @property
    def provider(self) -> str:
        if not self.model:
            return "unknown"
        return self.model.split("/")[0] or "unknown"

    @property
    def is_degraded(self) -> bool:
        """True when content or usage were missing from the body."""
        return not self.content or (
            self.usage.prompt_tokens == 0 and self.usage.completion_tokens == 0
        )

    @classmethod
    def from_json(cls, data: Any) -> "GatewayReply":
        if not isinstance(data, dict):
            return cls()

        content = ""
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            first = choices[0] if isinstance(choices[0], dict) else {}
            message = first.get("message") or {}
            if isinstance(message, dict) and isinstance(message.get("content"), str):
                content = message["content"]

        usage = data.get("usage")
        if isinstance(usage, dict):
            parsed_usage = GatewayUsage(
                prompt_tokens=_as_int(usage.get("prompt_tokens")),
                completion_tokens=_as_int(usage.get("completion_tokens")),
            )
        else:
            parsed_usage = GatewayUsage()

        model = data.get("model")
        return cls(
            content=content,
            usage=parsed_usage,
            model=model if isinstance(model, str) else "",
        )


def _as_int(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return max(int(value), 0)
    return 0


@dataclass(frozen=True)
class DispatchResult:
    """Terminal artifact handed back to the caller."""
    tier: str
    model_id: str
    provider_id: str
    response_text: str
    cost_usd: float
    latency_ms: int
    prompt_tokens: int
    completion_tokens: int
    intent: IntentType | None = None
    fallback: bool = False
    fallback_reason: str | None = None  # gateway error that triggered the fallback

"""Minimal per-intent context blocks.

Only what the intent needs is included. Knowledge and memory chunk caps are
enforced here regardless of how much the retrieval collaborator supplies.
"""

from collections.abc import Sequence

from chez_router.models import CookingContext, Intent, IntentType, KnowledgeChunk, RetrievedKnowledge

MAX_KNOWLEDGE_CHUNKS = 3
MAX_MEMORY_CHUNKS = 2
MAX_CLARIFICATION_CHUNKS = 2

# Intents whose context block carries user memory.
MEMORY_INTENTS = frozenset({IntentType.TROUBLESHOOTING})


def _join_chunks(chunks: Sequence[KnowledgeChunk], limit: int) -> str:
    return "\n\n".join(c.content for c in chunks[:limit])


def _ingredients(context: CookingContext) -> str:
    return f"Ingredients: {', '.join(context.ingredients)}"


def includes_memory(intent: Intent, knowledge: RetrievedKnowledge | None) -> bool:
    """True when build_context will put user memory into the block."""
    return intent.type in MEMORY_INTENTS and knowledge is not None and knowledge.has_memory


def build_context(
    context: CookingContext,
    intent: Intent,
    knowledge: RetrievedKnowledge | None = None,
) -> str:
    """Assemble the newline-joined context block for one request."""
    knowledge = knowledge or RetrievedKnowledge()
    recipe = f"Recipe: {context.recipe_name}"
    kind = intent.type
    parts: list[str] = []

    if kind in (IntentType.TIMING_QUESTION, IntentType.TEMPERATURE_QUESTION):
        parts.append(f"Step {context.current_step}/{context.total_steps}: {context.current_step_text}")

    elif kind == IntentType.SUBSTITUTION_REQUEST:
        parts += [recipe, _ingredients(context), f"Current step: {context.current_step_text}"]

    elif kind == IntentType.SCALING_QUESTION:
        parts += [recipe, _ingredients(context)]

    elif kind == IntentType.TECHNIQUE_QUESTION:
        # No session context, relies entirely on retrieval
        if knowledge.recipe_knowledge:
            chunks = _join_chunks(knowledge.recipe_knowledge, MAX_KNOWLEDGE_CHUNKS)
            parts.append(f"Cooking Knowledge:\n{chunks}")

    elif kind == IntentType.TROUBLESHOOTING:
        parts += [
            recipe,
            f"Current step: {context.current_step}/{context.total_steps}",
            f"Step instruction: {context.current_step_text}",
            _ingredients(context),
        ]
        if knowledge.recipe_knowledge:
            chunks = _join_chunks(knowledge.recipe_knowledge, MAX_KNOWLEDGE_CHUNKS)
            parts.append(f"\nRelevant Knowledge:\n{chunks}")
        if includes_memory(intent, knowledge):
            memory = _join_chunks(knowledge.user_memory, MAX_MEMORY_CHUNKS)
            parts.append(f"\nUser Preferences:\n{memory}")

    elif kind == IntentType.STEP_CLARIFICATION:
        parts += [recipe, f"Step {context.current_step}: {context.current_step_text}"]
        if knowledge.recipe_knowledge:
            chunks = _join_chunks(knowledge.recipe_knowledge, MAX_CLARIFICATION_CHUNKS)
            parts.append(f"\nBackground:\n{chunks}")

    elif kind in (IntentType.MODIFICATION_REPORT, IntentType.PREFERENCE_STATEMENT):
        parts.append(recipe)
        if context.current_step_text:
            parts.append(f"Current step: {context.current_step_text}")

    else:
        parts.append(f"Step {context.current_step}: {context.current_step_text}")

    return "\n".join(p for p in parts if p)

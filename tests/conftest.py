"""Shared fixtures for chez_router tests."""

import pytest

from chez_router.models import CookingContext, KnowledgeChunk, RetrievedKnowledge
from tests.helpers import FakeSleep


@pytest.fixture
def cooking_context() -> CookingContext:
    return CookingContext(
        session_id="session-123",
        recipe_id="recipe-456",
        recipe_name="Tomato Soup",
        current_step=3,
        current_step_text="Simmer for 10 minutes",
        total_steps=8,
        ingredients=["tomatoes", "onion", "garlic", "butter"],
    )


@pytest.fixture
def lots_of_knowledge() -> RetrievedKnowledge:
    return RetrievedKnowledge(
        recipe_knowledge=[KnowledgeChunk(f"knowledge-{i}", "Chef AI Knowledge") for i in range(10)],
        user_memory=[KnowledgeChunk(f"memory-{i}", "Your Cooking History") for i in range(10)],
    )


@pytest.fixture
def fake_sleep() -> FakeSleep:
    return FakeSleep()

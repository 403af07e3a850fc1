"""
Pytest fixtures for the NutriPlan API tests.
"""
import pytest
from fastapi.testclient import TestClient

# Mock environment variables before importing app
import os
os.environ.setdefault("OPENAI_API_KEY", "test-api-key")
os.environ["RATE_LIMIT_ENABLED"] = "false"

from nutriplan.main import app
from nutriplan.routes.actions import get_completion_client


class FakeCompletionClient:
    """Stands in for CompletionClient; records every call."""

    def __init__(self):
        self.text = ""
        self.fragments: list[str] = []
        self.image = "AAAA"
        self.error: Exception | None = None
        self.calls: list[tuple] = []

    async def generate_text(self, prompt, json_output=False, temperature=0.7):
        self.calls.append(("generate_text", prompt, json_output))
        if self.error:
            raise self.error
        return self.text

    async def stream_text(self, turns, temperature=0.7):
        self.calls.append(("stream_text", turns))
        if self.error:
            raise self.error
        for fragment in self.fragments:
            yield fragment

    async def generate_image(self, prompt):
        self.calls.append(("generate_image", prompt))
        if self.error:
            raise self.error
        return self.image


@pytest.fixture
def fake_ai():
    """Fake completion client injected into the action route."""
    fake = FakeCompletionClient()
    app.dependency_overrides[get_completion_client] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_completion_client, None)


@pytest.fixture
def client(fake_ai):
    """Create a test client for the FastAPI app."""
    return TestClient(app)


@pytest.fixture
def sample_user_data():
    """Sample user profile."""
    return {
        "name": "Ana",
        "age": 31,
        "gender": "female",
        "height": 165,
        "weight": 68,
        "activityLevel": "moderate",
        "weightGoal": 62,
        "dietaryPreferences": {"diets": ["mediterranean"], "restrictions": ["lactose"]},
        "macros": {
            "calories": {"goal": 1800},
            "protein": {"goal": 120},
            "carbs": {"goal": 180},
            "fat": {"goal": 60}
        },
        "adminSettings": {"permanentPrompt": "Avoid ultra-processed food."}
    }


@pytest.fixture
def sample_meal():
    """Sample meal."""
    return {
        "id": "m1",
        "name": "Breakfast",
        "time": "08:00",
        "items": [
            {"name": "Oatmeal", "portion": "50 g", "calories": 190, "protein": 7, "carbs": 33, "fat": 3},
            {"name": "Banana", "portion": "1 unit", "calories": 105, "protein": 1, "carbs": 27, "fat": 0}
        ],
        "totalCalories": 295,
        "totalMacros": {"calories": 295, "protein": 8, "carbs": 60, "fat": 3}
    }


@pytest.fixture
def sample_daily_plan(sample_meal):
    """Sample daily plan response."""
    return {
        "date": "2024-01-01",
        "meals": [sample_meal],
        "totalCalories": 295,
        "totalMacros": {"calories": 295, "protein": 8, "carbs": 60, "fat": 3},
        "waterGoal": 2.5
    }

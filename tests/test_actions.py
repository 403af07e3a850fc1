"""
Tests for the action catalog and dispatch helpers.
"""
import asyncio
import json

import pytest

from nutriplan.core.errors import InvalidRequestError, UnknownActionError
from nutriplan.services.action_router import execute_action, prepare_action
from nutriplan.services.actions import ACTIONS, ResponseMode


EXPECTED_MODES = {
    "generateDailyPlan": ResponseMode.STRUCTURED_JSON,
    "regenerateDailyPlan": ResponseMode.STRUCTURED_JSON,
    "adjustDailyPlanForMacro": ResponseMode.STRUCTURED_JSON,
    "generateWeeklyPlan": ResponseMode.STRUCTURED_JSON,
    "regenerateMealFromPrompt": ResponseMode.STRUCTURED_JSON,
    "parseMealPlanText": ResponseMode.STRUCTURED_JSON,
    "analyzeMealFromText": ResponseMode.STRUCTURED_JSON,
    "analyzeMealFromImage": ResponseMode.STRUCTURED_JSON,
    "getFoodSubstitution": ResponseMode.STRUCTURED_JSON,
    "findRecipes": ResponseMode.STRUCTURED_JSON,
    "analyzeProgress": ResponseMode.PLAIN_TEXT,
    "generateShoppingList": ResponseMode.PLAIN_TEXT,
    "getFoodInfo": ResponseMode.PLAIN_TEXT,
    "generateImageFromPrompt": ResponseMode.BINARY_IMAGE,
    "sendMessageToAI": ResponseMode.STREAMED_TEXT,
}


class TestCatalog:
    """The action table itself."""

    def test_catalog_matches_expected_modes(self):
        assert {name: spec.mode for name, spec in ACTIONS.items()} == EXPECTED_MODES

    def test_only_list_results_are_postprocessed(self):
        postprocessed = {name for name, spec in ACTIONS.items() if spec.postprocess}
        assert postprocessed == {"generateWeeklyPlan", "findRecipes"}


class TestPrepareAction:
    """Tests for prepare_action."""

    def test_missing_action(self):
        with pytest.raises(InvalidRequestError, match="Action is required"):
            prepare_action(None, {})

    def test_unknown_action(self):
        with pytest.raises(UnknownActionError, match="Unknown action: doesNotExist"):
            prepare_action("doesNotExist", {})

    def test_invalid_date_format(self, sample_user_data):
        with pytest.raises(InvalidRequestError, match="dateString"):
            prepare_action("generateDailyPlan", {"userData": sample_user_data, "dateString": "01/01/2024"})

    def test_profile_is_embedded(self, sample_user_data):
        prepared = prepare_action("analyzeProgress", {"userData": sample_user_data})
        assert "Ana" in prepared.prompt
        assert "Calories: 1800 kcal" in prepared.prompt
        assert "mediterranean" in prepared.prompt

    def test_structured_prompt_carries_schema(self, sample_user_data):
        prepared = prepare_action("generateDailyPlan", {"userData": sample_user_data, "dateString": "2024-03-05"})
        assert "waterGoal" in prepared.prompt
        assert "JSON ONLY" in prepared.prompt

    def test_chat_is_streaming(self):
        prepared = prepare_action("sendMessageToAI", {"message": "Hi"})
        assert prepared.streaming
        assert [t.role for t in prepared.prompt] == ["user"]

    def test_adjust_embeds_plan_verbatim(self, sample_user_data, sample_daily_plan):
        prepared = prepare_action("adjustDailyPlanForMacro", {
            "userData": sample_user_data,
            "currentPlan": sample_daily_plan,
            "macroToFix": "protein",
        })
        assert "protein goal" in prepared.prompt
        assert json.dumps(sample_daily_plan, separators=(",", ":")) in prepared.prompt

    def test_partial_plan_is_not_padded(self, sample_user_data):
        plan = {"date": "2024-01-01", "totalCalories": 295, "mood": "hungry"}
        prepared = prepare_action("regenerateDailyPlan", {"userData": sample_user_data, "currentPlan": plan})
        assert '{"date":"2024-01-01","totalCalories":295,"mood":"hungry"}' in prepared.prompt
        assert "295.0" not in prepared.prompt

    def test_payload_is_not_mutated(self, sample_user_data):
        payload = {"userData": sample_user_data, "dateString": "2024-01-01"}
        snapshot = json.dumps(payload, sort_keys=True)
        prepare_action("generateDailyPlan", payload)
        assert json.dumps(payload, sort_keys=True) == snapshot


class TestExecuteAction:
    """Tests for execute_action with a fake client."""

    def test_streaming_action_is_rejected(self, fake_ai):
        prepared = prepare_action("sendMessageToAI", {"message": "Hi"})
        with pytest.raises(InvalidRequestError):
            asyncio.run(execute_action(fake_ai, prepared))
        assert fake_ai.calls == []

    def test_plain_text_is_fence_stripped(self, fake_ai, sample_user_data):
        fake_ai.text = "```\nKeep going!\n```"
        prepared = prepare_action("analyzeProgress", {"userData": sample_user_data})
        assert asyncio.run(execute_action(fake_ai, prepared)) == "Keep going!"

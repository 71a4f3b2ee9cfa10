"""
Unit Tests for Chat Services

Tests prompt construction, the fallback reply and workout JSON parsing.
"""

import asyncio
import json

import pytest

from healthtracker.infrastructure.llm import LLMProviderError
from healthtracker.services.chat import (
    FALLBACK_REPLY,
    HealthChatService,
    WorkoutChatService,
    WorkoutSuggestion,
)
from healthtracker.services.prompt.prompt_builder import PromptBuilder
from tests.fakes import FakeLLMProvider


class TestHealthPrompt:

    @pytest.fixture
    def builder(self) -> PromptBuilder:
        return PromptBuilder()

    def test_empty_sections_use_fallback_sentences(self, builder):
        prompt = builder.build_health_prompt("How am I doing?")

        assert "No recent nutrition data available." in prompt.system_prompt
        assert "No workout schedule set yet." in prompt.system_prompt
        assert "No recent workout logs." in prompt.system_prompt

    def test_data_sections_embedded(self, builder):
        prompt = builder.build_health_prompt(
            "How am I doing?",
            nutrition_data="Mon: 2100 kcal",
            workout_data="Mon: Chest",
            workout_logs="Mon: done",
        )

        assert "NUTRITION (Last 7 Days):\nMon: 2100 kcal" in prompt.system_prompt
        assert "WORKOUT SCHEDULE:\nMon: Chest" in prompt.system_prompt
        assert "No recent workout logs." not in prompt.system_prompt

    def test_goals_quoted(self, builder):
        system = builder.build_health_prompt("hi").system_prompt

        assert "2500 kcal" in system
        assert "Protein: 150g" in system
        assert "Carbs: 300g" in system
        assert "Fats: 80g" in system

    def test_messages_shape(self, builder):
        messages = builder.build_health_prompt("hi").to_messages()

        assert [m["role"] for m in messages] == ["system", "user"]
        assert messages[1]["content"] == "hi"

    def test_workout_prompt_mentions_day(self, builder):
        prompt = builder.build_workout_prompt("Plan my day", current_day="Tuesday")

        assert "Tuesday workout schedule" in prompt.system_prompt
        assert prompt.temperature == 0.7
        assert prompt.max_tokens == 500


class TestHealthChatService:

    def test_reply(self, llm_provider):
        service = HealthChatService(llm_provider)

        reply = asyncio.run(service.reply("Should I eat more protein?", nutrition_data="Mon: 90g protein"))

        assert reply == "Drink more water."
        prompt = llm_provider.prompts[0]
        assert prompt.user_message == "Should I eat more protein?"
        assert prompt.temperature == 0.8
        assert prompt.max_tokens == 800

    def test_empty_completion_falls_back(self):
        service = HealthChatService(FakeLLMProvider(content=""))

        assert asyncio.run(service.reply("hi")) == FALLBACK_REPLY

    def test_provider_error_propagates(self, failing_llm_provider):
        service = HealthChatService(failing_llm_provider)

        with pytest.raises(LLMProviderError):
            asyncio.run(service.reply("hi"))


class TestWorkoutSuggestion:

    def test_structured_plan(self):
        plan = {
            "explanation": "Compound lifts first.",
            "exercises": [{"name": "Squat", "sets": 4, "reps": "6-8", "weight": "Heavy"}],
        }

        suggestion = WorkoutSuggestion.from_completion(json.dumps(plan))

        assert suggestion.to_dict() == {
            "exercises": plan["exercises"],
            "explanation": "Compound lifts first.",
            "isStructured": True,
        }

    @pytest.mark.parametrize("text", [
        "Just do some pushups.",
        json.dumps({"explanation": "Rest day."}),
        json.dumps(["Squat", "Lunge"]),
    ])
    def test_unstructured_reply(self, text):
        suggestion = WorkoutSuggestion.from_completion(text)

        assert suggestion.to_dict() == {"reply": text, "isStructured": False}

    def test_service_uses_workout_settings(self):
        provider = FakeLLMProvider(content=json.dumps({"explanation": "x", "exercises": [{"name": "Row"}]}))
        service = WorkoutChatService(provider)

        suggestion = asyncio.run(service.suggest("Back day?", current_day="Friday"))

        assert suggestion.is_structured
        assert provider.prompts[0].temperature == 0.7
        assert "Friday" in provider.prompts[0].system_prompt

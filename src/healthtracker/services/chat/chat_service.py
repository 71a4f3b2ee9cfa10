"""
Chat Services

Health assistant and workout coach conversations. Each request is a
single completion call: prompt in, reply out.
"""

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from healthtracker.config.logging_config import get_logger
from healthtracker.infrastructure.llm.provider import LLMProvider
from healthtracker.services.prompt.prompt_builder import PromptBuilder

logger = get_logger(__name__)

FALLBACK_REPLY = "Sorry, I could not generate a response."


@dataclass
class WorkoutSuggestion:
    """
    Workout coach answer.

    Structured when the model returned a JSON object with both
    "exercises" and "explanation"; otherwise the raw text is kept.
    """

    is_structured: bool
    exercises: list[Any] = field(default_factory=list)
    explanation: str = ""
    reply: str = ""

    def to_dict(self) -> dict:
        if self.is_structured:
            return {
                "exercises": self.exercises,
                "explanation": self.explanation,
                "isStructured": True,
            }
        return {"reply": self.reply, "isStructured": False}

    @classmethod
    def from_completion(cls, text: str) -> "WorkoutSuggestion":
        try:
            data = json.loads(text)
        except ValueError:
            return cls(is_structured=False, reply=text)

        if isinstance(data, dict) and data.get("exercises") and data.get("explanation"):
            return cls(
                is_structured=True,
                exercises=data["exercises"],
                explanation=data["explanation"],
            )
        return cls(is_structured=False, reply=text)


class HealthChatService:
    """Personal health assistant backed by an LLM provider."""

    def __init__(
        self,
        provider: LLMProvider,
        prompt_builder: Optional[PromptBuilder] = None,
        temperature: float = 0.8,
        max_tokens: int = 800,
    ) -> None:
        self._provider = provider
        self._prompts = prompt_builder or PromptBuilder()
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def reply(
        self,
        message: str,
        *,
        nutrition_data: Optional[str] = None,
        workout_data: Optional[str] = None,
        workout_logs: Optional[str] = None,
    ) -> str:
        """
        Answer a health question using the user's recent data.

        Args:
            message: User question
            nutrition_data: Pre-formatted nutrition summary
            workout_data: Pre-formatted workout schedule
            workout_logs: Pre-formatted workout completion

        Returns:
            Model reply, or a fixed apology when the model returned nothing

        Raises:
            LLMProviderError: If the completion call fails
        """
        prompt = self._prompts.build_health_prompt(
            message,
            nutrition_data=nutrition_data,
            workout_data=workout_data,
            workout_logs=workout_logs,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        response = await self._provider.generate(prompt)

        if response.is_empty:
            logger.warning("Empty health chat completion", finish_reason=response.finish_reason)
            return FALLBACK_REPLY
        return response.content


class WorkoutChatService:
    """Workout coach that asks the model for a JSON exercise plan."""

    def __init__(
        self,
        provider: LLMProvider,
        prompt_builder: Optional[PromptBuilder] = None,
        temperature: float = 0.7,
        max_tokens: int = 500,
    ) -> None:
        self._provider = provider
        self._prompts = prompt_builder or PromptBuilder()
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def suggest(self, message: str, *, current_day: Optional[str] = None) -> WorkoutSuggestion:
        prompt = self._prompts.build_workout_prompt(
            message,
            current_day=current_day,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
        )
        response = await self._provider.generate(prompt)
        suggestion = WorkoutSuggestion.from_completion(response.content or "{}")

        logger.debug("Workout suggestion generated", structured=suggestion.is_structured)
        return suggestion

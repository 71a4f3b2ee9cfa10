"""
Prompt Builder

Constructs chat prompts for the health assistant and the workout coach.

The health prompt embeds whatever nutrition/workout data the client
sent (or a fixed "no data" sentence per section) plus the daily goals.
The workout prompt asks the model for a strict JSON exercise plan.
"""

from dataclasses import dataclass, field
from typing import Optional

from healthtracker.config.logging_config import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class NutritionGoals:
    """Daily macro targets quoted to the model."""

    calories_kcal: int = 2500
    protein_g: int = 150
    carbs_g: int = 300
    fats_g: int = 80


@dataclass
class BuiltPrompt:
    """
    Complete prompt ready for the LLM.

    Attributes:
        system_prompt: System/instruction prompt
        conversation_history: Earlier messages, OpenAI format
        user_message: Current user message
        max_tokens: Max tokens for the response
        temperature: Sampling temperature
    """

    system_prompt: str
    conversation_history: list[dict] = field(default_factory=list)
    user_message: str = ""
    max_tokens: int = 800
    temperature: float = 0.8

    def to_messages(self) -> list[dict]:
        """
        Convert to OpenAI-style message format.

        Returns:
            List of message dictionaries
        """
        messages = [{"role": "system", "content": self.system_prompt}]
        messages.extend(self.conversation_history)
        if self.user_message:
            messages.append({"role": "user", "content": self.user_message})
        return messages


class PromptBuilder:
    """Builds the two chat prompts used by the app."""

    HEALTH_INTRO: str = (
        "You are a personal health and fitness AI assistant. You have access to "
        "the user's health data and should provide personalized advice, "
        "motivation, and insights."
    )

    HEALTH_GUIDANCE: str = """Your responsibilities:
1. Provide personalized health and fitness advice based on their data
2. Help them reach their nutrition and fitness goals
3. Analyze their patterns and suggest improvements
4. Motivate and encourage them
5. Answer questions about their progress, nutrition, and workouts
6. Be supportive, knowledgeable, and friendly

When analyzing their data:
- Look for trends in nutrition (are they hitting their macros?)
- Check workout consistency (are they completing their scheduled workouts?)
- Identify areas for improvement
- Celebrate their wins

Keep responses conversational, encouraging, and actionable."""

    WORKOUT_INSTRUCTIONS: str = """When recommending exercises:
1. First provide a brief explanation of your reasoning (2-3 sentences max)
2. Suggest specific exercises that are effective and safe
3. Include appropriate sets, reps, and optional weight recommendations
4. Consider muscle groups, workout balance, and progression
5. Be practical and accommodating to different fitness levels

IMPORTANT: You MUST respond with ONLY a valid JSON object in this exact format, with no additional text:
{
  "explanation": "For a balanced upper body day, I'm recommending compound movements followed by isolation exercises. This combination will build strength while ensuring proper muscle development.",
  "exercises": [
    {"name": "Bench Press", "sets": 4, "reps": "8-10", "weight": "Moderate weight"},
    {"name": "Pull-ups", "sets": 3, "reps": "10-12", "weight": "Bodyweight"},
    {"name": "Shoulder Press", "sets": 3, "reps": "10-12", "weight": "Light to moderate"}
  ]
}

Do not include any text outside the JSON object. Only valid JSON."""

    def __init__(self, goals: Optional[NutritionGoals] = None) -> None:
        self.goals = goals or NutritionGoals()

    @staticmethod
    def _section(title: str, data: Optional[str], empty_text: str) -> str:
        if data:
            return f"{title}:\n{data}"
        return empty_text

    def build_health_prompt(
        self,
        message: str,
        *,
        nutrition_data: Optional[str] = None,
        workout_data: Optional[str] = None,
        workout_logs: Optional[str] = None,
        max_tokens: int = 800,
        temperature: float = 0.8,
    ) -> BuiltPrompt:
        """
        Build the health assistant prompt.

        Args:
            message: User question
            nutrition_data: Last 7 days of nutrition, pre-formatted by the client
            workout_data: Weekly workout schedule
            workout_logs: Recent workout completion
            max_tokens: Response token cap
            temperature: Sampling temperature

        Returns:
            BuiltPrompt with the data sections and goals embedded
        """
        goals = self.goals
        sections = [
            self.HEALTH_INTRO,
            "USER'S DATA:",
            self._section(
                "NUTRITION (Last 7 Days)", nutrition_data,
                "No recent nutrition data available.",
            ),
            self._section(
                "WORKOUT SCHEDULE", workout_data,
                "No workout schedule set yet.",
            ),
            self._section(
                "RECENT WORKOUT COMPLETION", workout_logs,
                "No recent workout logs.",
            ),
            "GOALS:\n"
            f"- Daily Calories: {goals.calories_kcal} kcal\n"
            f"- Protein: {goals.protein_g}g\n"
            f"- Carbs: {goals.carbs_g}g\n"
            f"- Fats: {goals.fats_g}g",
            self.HEALTH_GUIDANCE,
        ]

        logger.debug(
            "Health prompt built",
            has_nutrition=bool(nutrition_data),
            has_workouts=bool(workout_data),
            has_logs=bool(workout_logs),
        )

        return BuiltPrompt(
            system_prompt="\n\n".join(sections),
            user_message=message,
            max_tokens=max_tokens,
            temperature=temperature,
        )

    def build_workout_prompt(
        self,
        message: str,
        *,
        current_day: Optional[str] = None,
        max_tokens: int = 500,
        temperature: float = 0.7,
    ) -> BuiltPrompt:
        """Build the workout coach prompt, optionally scoped to a weekday."""
        lines = ["You are a fitness coach helping users create effective workout routines."]
        if current_day:
            lines.append(f"The user is currently viewing their {current_day} workout schedule.")

        return BuiltPrompt(
            system_prompt="\n".join(lines) + "\n\n" + self.WORKOUT_INSTRUCTIONS,
            user_message=message,
            max_tokens=max_tokens,
            temperature=temperature,
        )

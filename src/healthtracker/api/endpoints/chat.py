"""
Chat Endpoints

Health assistant and workout coach backed by OpenAI.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field

from healthtracker.api.dependencies import get_health_chat_service, get_workout_chat_service
from healthtracker.config.logging_config import get_logger
from healthtracker.infrastructure.llm import LLMProviderError
from healthtracker.services.chat import HealthChatService, WorkoutChatService

logger = get_logger(__name__)
router = APIRouter()


# Request/Response Models

class HealthChatRequest(BaseModel):
    """Health question plus pre-formatted context sections."""

    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = Field(None, description="User question")
    nutrition_data: Optional[str] = Field(None, alias="nutritionData")
    workout_data: Optional[str] = Field(None, alias="workoutData")
    workout_logs: Optional[str] = Field(None, alias="workoutLogs")


class HealthChatResponse(BaseModel):
    reply: str

    model_config = ConfigDict(
        json_schema_extra={
            "example": {"reply": "You're 400 kcal under your goal today..."},
        }
    )


class WorkoutChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: Optional[str] = None
    current_day: Optional[str] = Field(None, alias="currentDay")


def _require_message(message: Optional[str]) -> str:
    if not message or not message.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Message is required",
        )
    return message


def _ai_failure(e: LLMProviderError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail={"error": "Failed to get AI response", "details": str(e)},
    )


@router.post(
    "/health-chat",
    response_model=HealthChatResponse,
    summary="Ask the health assistant",
)
async def health_chat(
    request: HealthChatRequest,
    service: HealthChatService = Depends(get_health_chat_service),
) -> HealthChatResponse:
    """
    Answer a health question in the context of the user's recent
    nutrition, workout schedule and workout logs.
    """
    message = _require_message(request.message)

    try:
        reply = await service.reply(
            message,
            nutrition_data=request.nutrition_data,
            workout_data=request.workout_data,
            workout_logs=request.workout_logs,
        )
    except LLMProviderError as e:
        logger.error("Health chat failed", provider=e.provider, error=str(e))
        raise _ai_failure(e) from e

    return HealthChatResponse(reply=reply)


@router.post("/workout-chat", summary="Ask the workout coach")
async def workout_chat(
    request: WorkoutChatRequest,
    service: WorkoutChatService = Depends(get_workout_chat_service),
) -> dict:
    """Exercise suggestions; structured when the model returns a JSON plan."""
    message = _require_message(request.message)

    try:
        suggestion = await service.suggest(message, current_day=request.current_day)
    except LLMProviderError as e:
        logger.error("Workout chat failed", provider=e.provider, error=str(e))
        raise _ai_failure(e) from e

    return suggestion.to_dict()

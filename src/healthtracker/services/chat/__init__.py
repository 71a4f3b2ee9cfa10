"""Chat services package."""

from healthtracker.services.chat.chat_service import (
    FALLBACK_REPLY,
    HealthChatService,
    WorkoutChatService,
    WorkoutSuggestion,
)

__all__ = [
    "FALLBACK_REPLY",
    "HealthChatService",
    "WorkoutChatService",
    "WorkoutSuggestion",
]

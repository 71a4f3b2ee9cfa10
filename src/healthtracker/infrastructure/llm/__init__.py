"""LLM provider abstraction package."""

from healthtracker.infrastructure.llm.provider import (
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from healthtracker.infrastructure.llm.openai_provider import OpenAIProvider

__all__ = [
    "LLMProvider",
    "LLMResponse",
    "LLMProviderError",
    "RateLimitError",
    "OpenAIProvider",
]

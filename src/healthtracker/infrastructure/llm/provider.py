"""
Chat-completion provider contract.

The chat services only see `LLMProvider`; the OpenAI SDK stays behind
`OpenAIProvider`. A provider makes one completion call per request and
reports failures as `LLMProviderError`.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional

from healthtracker.services.prompt.prompt_builder import BuiltPrompt


@dataclass
class LLMResponse:
    """One completion. `content` is "" when the model produced no text."""

    content: str
    finish_reason: str = "stop"
    usage: dict[str, int] = field(default_factory=dict)
    model: str = ""
    provider: str = ""
    latency_ms: int = 0
    raw_response: Optional[Any] = field(default=None, repr=False)

    @property
    def is_empty(self) -> bool:
        return not self.content.strip()

    @property
    def prompt_tokens(self) -> int:
        return self.usage.get("prompt_tokens", 0)

    @property
    def completion_tokens(self) -> int:
        return self.usage.get("completion_tokens", 0)


class LLMProvider(ABC):
    """Vendor-neutral completion interface used by the chat services."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Short name used in logs and metric labels."""

    @property
    @abstractmethod
    def default_model(self) -> str:
        ...

    @abstractmethod
    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        """
        Complete `prompt`.

        Sampling settings default to the ones carried by the prompt, then
        to the provider's configured defaults.

        Raises:
            LLMProviderError: Missing credentials or a failed API call
        """

    @abstractmethod
    async def health_check(self) -> bool:
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """True when credentials are present; says nothing about reachability."""


class LLMProviderError(Exception):
    """A completion could not be produced."""

    def __init__(
        self,
        message: str,
        provider: str,
        original_error: Optional[Exception] = None,
    ) -> None:
        super().__init__(message)
        self.provider = provider
        self.original_error = original_error


class RateLimitError(LLMProviderError):
    """The vendor throttled or refused for quota reasons."""

    def __init__(self, provider: str, detail: str = "") -> None:
        suffix = f": {detail}" if detail else ""
        super().__init__(f"{provider} rate limit exceeded{suffix}", provider=provider)

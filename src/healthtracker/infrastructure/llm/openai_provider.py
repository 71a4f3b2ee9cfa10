"""
OpenAI chat-completions provider.

One request per call. SDK errors are wrapped in LLMProviderError and
never retried; the caller turns them into a 500 for the client.
"""

import time
from typing import Any, Optional

from openai import APIError, AsyncOpenAI, RateLimitError as OpenAIRateLimitError

from healthtracker.config import get_settings
from healthtracker.config.logging_config import get_logger
from healthtracker.infrastructure.llm.provider import (
    LLMProvider,
    LLMProviderError,
    LLMResponse,
    RateLimitError,
)
from healthtracker.infrastructure.metrics import track_llm_request
from healthtracker.services.prompt.prompt_builder import BuiltPrompt

logger = get_logger(__name__)


def _usage_dict(usage: Any) -> dict[str, int]:
    if usage is None:
        return {"prompt_tokens": 0, "completion_tokens": 0, "total_tokens": 0}
    return {
        "prompt_tokens": usage.prompt_tokens or 0,
        "completion_tokens": usage.completion_tokens or 0,
        "total_tokens": usage.total_tokens or 0,
    }


class OpenAIProvider(LLMProvider):
    """
    Chat completions against `settings.openai.model` (gpt-4o-mini).

    The SDK client is created on first use, so constructing the provider
    without an API key is fine; `generate` then fails fast.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        openai_settings = get_settings().openai
        self._api_key = api_key or openai_settings.api_key.get_secret_value()
        self._default_model = model or openai_settings.model
        self._fallback_max_tokens = openai_settings.max_tokens
        self._fallback_temperature = openai_settings.temperature
        self._client = client

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def default_model(self) -> str:
        return self._default_model

    def is_configured(self) -> bool:
        return self._client is not None or bool(self._api_key)

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._api_key)
        return self._client

    def _sampling(
        self,
        prompt: BuiltPrompt,
        max_tokens: Optional[int],
        temperature: Optional[float],
    ) -> tuple[int, float]:
        if max_tokens is None:
            max_tokens = prompt.max_tokens or self._fallback_max_tokens
        if temperature is None:
            temperature = prompt.temperature if prompt.temperature is not None else self._fallback_temperature
        return max_tokens, temperature

    @track_llm_request("openai")
    async def generate(
        self,
        prompt: BuiltPrompt,
        *,
        model: Optional[str] = None,
        max_tokens: Optional[int] = None,
        temperature: Optional[float] = None,
    ) -> LLMResponse:
        if not self.is_configured():
            raise LLMProviderError("OpenAI API key not configured", provider=self.provider_name)

        model_name = model or self._default_model
        max_tokens, temperature = self._sampling(prompt, max_tokens, temperature)
        started = time.perf_counter()

        try:
            completion = await self.client.chat.completions.create(
                model=model_name,
                messages=prompt.to_messages(),
                max_tokens=max_tokens,
                temperature=temperature,
            )
        except OpenAIRateLimitError as e:
            logger.warning("OpenAI throttled the request", model=model_name, error=str(e))
            raise RateLimitError(provider=self.provider_name, detail=str(e)) from e
        except APIError as e:
            logger.error("OpenAI request failed", model=model_name, error=str(e))
            raise LLMProviderError(
                f"OpenAI API error: {e}",
                provider=self.provider_name,
                original_error=e,
            ) from e

        choice = completion.choices[0] if completion.choices else None
        result = LLMResponse(
            content=(choice.message.content or "") if choice else "",
            finish_reason=(choice.finish_reason or "stop") if choice else "stop",
            usage=_usage_dict(completion.usage),
            model=model_name,
            provider=self.provider_name,
            latency_ms=int((time.perf_counter() - started) * 1000),
            raw_response=completion,
        )

        logger.debug(
            "OpenAI completion received",
            model=model_name,
            finish_reason=result.finish_reason,
            completion_tokens=result.completion_tokens,
            latency_ms=result.latency_ms,
        )
        return result

    async def health_check(self) -> bool:
        """Lists models; any API error counts as unavailable."""
        if not self.is_configured():
            return False
        try:
            await self.client.models.list()
        except APIError as e:
            logger.warning("OpenAI health check failed", error=str(e))
            return False
        return True

"""
Chat model caller.

The conversation core treats the model as an opaque, fallible function:
messages in, text out. Every failure (network, API, timeout, missing
credentials) surfaces as a single retryable ``ModelCallError``.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol, Sequence

from openai import AsyncOpenAI, OpenAIError

from order_support.config import ModelConfig, settings
from order_support.schemas.session_schema import ChatMessage

logger = logging.getLogger(__name__)


class ModelCallError(Exception):
    """Raised when the external model is unreachable or errors."""

    retryable = True


@dataclass(frozen=True)
class SamplingParams:
    temperature: float
    max_tokens: int


def intro_sampling(config: ModelConfig = settings.model) -> SamplingParams:
    """Deterministic sampling for the introduction message."""
    return SamplingParams(temperature=config.intro_temperature, max_tokens=config.max_tokens)


def menu_sampling(config: ModelConfig = settings.model) -> SamplingParams:
    """Moderate-temperature sampling for in-menu turns."""
    return SamplingParams(temperature=config.menu_temperature, max_tokens=config.max_tokens)


class ModelClient(Protocol):
    async def complete(self, messages: Sequence[ChatMessage], params: SamplingParams) -> str:
        ...


class OpenAIModelClient:
    """ModelClient backed by the OpenAI chat completions API."""

    def __init__(self, config: ModelConfig = settings.model, client: Optional[AsyncOpenAI] = None) -> None:
        self._config = config
        self._client = client
        if self._client is None and config.api_key:
            self._client = AsyncOpenAI(api_key=config.api_key)
        if self._client is None:
            logger.error("OPENAI_API_KEY not set; model calls will fail until it is configured")

    async def complete(self, messages: Sequence[ChatMessage], params: SamplingParams) -> str:
        if self._client is None:
            raise ModelCallError("OPENAI_API_KEY is not configured")

        try:
            completion = await asyncio.wait_for(
                self._client.chat.completions.create(
                    model=self._config.llm_model,
                    messages=[m.to_dict() for m in messages],
                    max_tokens=params.max_tokens,
                    temperature=params.temperature,
                ),
                timeout=self._config.timeout_sec,
            )
        except asyncio.TimeoutError:
            logger.warning("Model call timed out after %.1fs", self._config.timeout_sec)
            raise ModelCallError(f"Model call timed out after {self._config.timeout_sec}s") from None
        except OpenAIError as exc:
            logger.warning("Model call failed: %s", exc)
            raise ModelCallError(str(exc)) from exc

        content = completion.choices[0].message.content
        if content is None:
            raise ModelCallError("Model returned an empty message")
        return content

"""
Codemode LLM Provider Base

The agent loop talks to every model backend through LLMProvider. The
conversation is kept in Anthropic message format (text blocks, tool_use
blocks, tool_result blocks); providers for other APIs translate it on
the way out and normalize the reply into LLMResponse on the way back.

Retries live here: transient failures (network errors, 429, 5xx) are
retried with exponential backoff, request errors (other 4xx) are not.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field

from codemode.exceptions import ProviderError
from codemode.logging import get_logger

logger = get_logger("codemode.providers")

# 4xx statuses worth another attempt
_RETRYABLE_CLIENT_STATUSES = {408, 409, 429}


class ToolCall(BaseModel):
    """One tool invocation requested by the model."""
    id: str
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


class LLMResponse(BaseModel):
    """A model reply: optional text plus any tool calls, and token usage."""
    text: str = ""
    tool_calls: list[ToolCall] = Field(default_factory=list)
    stop_reason: str = "end_turn"
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)

    def to_assistant_message(self) -> dict[str, Any]:
        """The reply as an assistant turn for the next request."""
        content: list[dict[str, Any]] = []
        if self.text:
            content.append({"type": "text", "text": self.text})
        content.extend(
            {"type": "tool_use", "id": c.id, "name": c.name, "input": c.input}
            for c in self.tool_calls
        )
        return {"role": "assistant", "content": content}


class ProviderConfig(BaseModel):
    """Connection and retry settings for one provider."""
    api_key: str | None = None
    model: str = ""
    base_url: str | None = None
    max_retries: int = Field(default=3, ge=1)
    timeout_seconds: float = 60.0
    retry_base_delay: float = 1.0  # 1s, 2s, 4s


class LLMProvider(ABC):
    """Base class for model backends.

    Subclasses implement ``_complete``; callers use ``complete``.
    """

    def __init__(self, config: ProviderConfig):
        self._config = config

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @property
    def model(self) -> str:
        return self._config.model

    @abstractmethod
    async def _complete(
        self,
        messages: list[dict[str, Any]],
        *,
        system: str | None,
        tools: list[dict[str, Any]] | None,
        max_tokens: int,
    ) -> LLMResponse:
        ...

    async def complete(
        self,
        messages: list[dict[str, Any]],
        *,
        system: str | None = None,
        tools: list[dict[str, Any]] | None = None,
        max_tokens: int = 4096,
    ) -> LLMResponse:
        """Send the conversation and return the normalized reply.

        Raises:
            ProviderError: on a non-retryable error, or once retries run out.
        """
        attempts = self._config.max_retries
        attempt = 1
        while True:
            try:
                return await self._complete(messages, system=system, tools=tools, max_tokens=max_tokens)
            except Exception as e:
                if not self.is_retryable(e) or attempt == attempts:
                    raise ProviderError(self.name, f"{e} (attempt {attempt}/{attempts})") from e
                delay = self._config.retry_base_delay * 2 ** (attempt - 1)
                logger.warning(
                    f"Attempt {attempt}/{attempts} failed, retrying in {delay:.1f}s: {e}",
                    extra={"provider": self.name},
                )
            await asyncio.sleep(delay)
            attempt += 1

    @staticmethod
    def is_retryable(error: Exception) -> bool:
        """True unless the API rejected the request itself.

        Both SDKs expose the HTTP status as ``status_code`` on their
        status errors; anything without one (timeouts, connection resets)
        is treated as transient.
        """
        status = getattr(error, "status_code", None)
        if not isinstance(status, int):
            return True
        return status >= 500 or status in _RETRYABLE_CLIENT_STATUSES

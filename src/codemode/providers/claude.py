"""
Codemode Claude Provider

Anthropic's Messages API already speaks the conversation format the
agent keeps, so requests go out unchanged; only the reply is folded
into LLMResponse.
"""

from __future__ import annotations

from typing import Any

import anthropic

from codemode.providers.base import LLMProvider, LLMResponse, ProviderConfig, ToolCall

DEFAULT_CLAUDE_MODEL = "claude-sonnet-4-20250514"


class ClaudeProvider(LLMProvider):
    """Claude through ``anthropic.AsyncAnthropic``.

    The SDK reads ANTHROPIC_API_KEY itself when no key is configured.
    """

    def __init__(self, config: ProviderConfig, client: anthropic.AsyncAnthropic | None = None):
        super().__init__(config)
        self._client = client or anthropic.AsyncAnthropic(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout_seconds,
            max_retries=0,
        )

    @property
    def name(self) -> str:
        return "claude"

    async def _complete(self, messages, *, system, tools, max_tokens) -> LLMResponse:
        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": messages,
        }
        if system:
            request["system"] = system
        if tools:
            request["tools"] = tools
        message = await self._client.messages.create(**request)
        return parse_message(message)


def parse_message(message: Any) -> LLMResponse:
    """Fold an Anthropic ``Message`` into an LLMResponse."""
    text = "".join(block.text for block in message.content if block.type == "text")
    calls = [
        ToolCall(id=block.id, name=block.name, input=dict(block.input or {}))
        for block in message.content
        if block.type == "tool_use"
    ]
    return LLMResponse(
        text=text,
        tool_calls=calls,
        stop_reason=message.stop_reason or "end_turn",
        model=message.model,
        input_tokens=message.usage.input_tokens,
        output_tokens=message.usage.output_tokens,
    )

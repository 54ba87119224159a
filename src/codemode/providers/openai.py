"""
Codemode OpenAI-compatible Provider

Serves OpenRouter (the agent's default backend) and OpenAI itself
through the chat completions API. The agent's Anthropic-format
conversation is translated per request:

    assistant text + tool_use blocks  ->  assistant message with tool_calls
    user tool_result blocks           ->  one "tool" message per result
    tool input_schema                 ->  function parameters
"""

from __future__ import annotations

import json
from typing import Any

import openai

from codemode.exceptions import ProviderError
from codemode.providers.base import LLMProvider, LLMResponse, ProviderConfig, ToolCall

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_OPENAI_MODEL = "gpt-4o"

_STOP_REASONS = {
    "stop": "end_turn",
    "tool_calls": "tool_use",
    "length": "max_tokens",
}


class OpenAIProvider(LLMProvider):
    """Chat completions provider; ``base_url`` selects OpenRouter."""

    def __init__(self, config: ProviderConfig, client: openai.AsyncOpenAI | None = None):
        super().__init__(config)
        if client is None:
            try:
                client = openai.AsyncOpenAI(
                    api_key=config.api_key,
                    base_url=config.base_url,
                    timeout=config.timeout_seconds,
                    max_retries=0,
                )
            except openai.OpenAIError as e:
                # raised when no key is configured or in OPENAI_API_KEY
                raise ProviderError(self.name, str(e)) from e
        self._client = client

    @property
    def name(self) -> str:
        return "openrouter" if self._config.base_url == OPENROUTER_BASE_URL else "openai"

    async def _complete(self, messages, *, system, tools, max_tokens) -> LLMResponse:
        request: dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": to_chat_messages(messages, system),
        }
        if tools:
            request["tools"] = [to_function_tool(tool) for tool in tools]
        completion = await self._client.chat.completions.create(**request)
        return parse_completion(completion)


def to_chat_messages(messages: list[dict[str, Any]], system: str | None = None) -> list[dict[str, Any]]:
    """Translate an Anthropic-format conversation to chat messages."""
    chat: list[dict[str, Any]] = [{"role": "system", "content": system}] if system else []
    for message in messages:
        role, content = message["role"], message["content"]
        if isinstance(content, str):
            chat.append({"role": role, "content": content})
            continue

        texts = [b["text"] for b in content if b.get("type") == "text"]
        if role == "assistant":
            calls = [
                {
                    "id": b["id"],
                    "type": "function",
                    "function": {"name": b["name"], "arguments": json.dumps(b.get("input", {}))},
                }
                for b in content
                if b.get("type") == "tool_use"
            ]
            turn: dict[str, Any] = {"role": "assistant", "content": "\n".join(texts) or None}
            if calls:
                turn["tool_calls"] = calls
            chat.append(turn)
            continue

        results = [b for b in content if b.get("type") == "tool_result"]
        chat.extend(
            {"role": "tool", "tool_call_id": r["tool_use_id"], "content": r.get("content", "")}
            for r in results
        )
        if texts:
            chat.append({"role": role, "content": "\n".join(texts)})
    return chat


def to_function_tool(tool: dict[str, Any]) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool["name"],
            "description": tool.get("description", ""),
            "parameters": tool.get("input_schema", {"type": "object"}),
        },
    }


def parse_completion(completion: Any) -> LLMResponse:
    """Fold a chat completion into an LLMResponse.

    Tool arguments that are not valid JSON become an empty input, which
    the exec tool then rejects with an error the model can read.
    """
    if not completion.choices:
        return LLMResponse(model=completion.model or "")

    choice = completion.choices[0]
    calls = []
    for call in choice.message.tool_calls or []:
        try:
            arguments = json.loads(call.function.arguments or "{}")
        except json.JSONDecodeError:
            arguments = {}
        calls.append(ToolCall(id=call.id, name=call.function.name, input=arguments))

    usage = completion.usage
    return LLMResponse(
        text=choice.message.content or "",
        tool_calls=calls,
        stop_reason=_STOP_REASONS.get(choice.finish_reason or "stop", "end_turn"),
        model=completion.model or "",
        input_tokens=usage.prompt_tokens if usage else 0,
        output_tokens=usage.completion_tokens if usage else 0,
    )

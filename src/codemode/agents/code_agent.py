"""
Codemode Agent

A conversational agent that follows the "write code, execute, done"
pattern:

1. generate one complete program for the user's goal
2. execute it once with the exec tool
3. read the result and answer in natural language

The agent loop owns retries: if a run fails, the model may regenerate
the program and call the tool again, up to MAX_TOOL_ROUNDS round trips.
"""

from __future__ import annotations

import json
import time
from typing import Any

from pydantic import BaseModel, Field

from codemode.agents.prompts import build_system_prompt
from codemode.logging import get_logger
from codemode.memory.store import ConversationMemory
from codemode.providers.base import LLMProvider, LLMResponse
from codemode.sandbox.executor import SandboxExecutor
from codemode.tools.exec_tool import register_exec_tool
from codemode.tools.executor import ToolExecutor

logger = get_logger("codemode.agent")

MAX_TOOL_ROUNDS = 10  # Max tool_use round-trips per generate()

NO_ANSWER = "(No answer: stopped after {rounds} tool round(s) without a final reply.)"


class ToolCallRecord(BaseModel):
    """One tool call made while answering a message."""
    tool_name: str
    tool_input: dict[str, Any] = Field(default_factory=dict)
    output: str = ""
    is_error: bool = False
    duration_ms: float = 0.0

    @property
    def execution(self) -> dict[str, Any] | None:
        """The decoded exec tool result, if the output is JSON."""
        try:
            return json.loads(self.output)
        except (json.JSONDecodeError, TypeError):
            return None


class AgentResponse(BaseModel):
    """Final answer plus what it took to get there."""
    text: str
    thread_id: str
    resource_id: str
    tool_calls: list[ToolCallRecord] = Field(default_factory=list)
    tool_rounds: int = 0
    input_tokens: int = 0
    output_tokens: int = 0


class CodeAgent:
    """Code-mode agent with a single exec tool.

    When memory is provided, the last messages of the thread are replayed
    before the new message and the exchange is stored afterwards.
    """

    def __init__(
        self,
        provider: LLMProvider,
        executor: SandboxExecutor,
        memory: ConversationMemory | None = None,
        system_prompt: str | None = None,
        max_tokens: int = 4096,
        name: str = "agent0",
    ):
        self.name = name
        self.provider = provider
        self.executor = executor
        self.memory = memory
        self.max_tokens = max_tokens
        self.tools = ToolExecutor()
        self.tool_name = register_exec_tool(self.tools, executor)
        self.system_prompt = system_prompt or build_system_prompt(
            executor.runtime,
            self.tool_name,
            executor.config.timeout_seconds,
        )

    async def generate(
        self,
        message: str,
        *,
        thread_id: str,
        resource_id: str,
    ) -> AgentResponse:
        """Answer one user message within a conversation thread.

        Raises:
            ProviderError: if the model cannot be reached after retries.
        """
        history: list[dict[str, Any]] = []
        if self.memory:
            history = [m.to_message() for m in self.memory.recent(thread_id)]

        messages: list[dict[str, Any]] = [*history, {"role": "user", "content": message}]
        response = await self._complete(messages)
        input_tokens = response.input_tokens
        output_tokens = response.output_tokens

        records: list[ToolCallRecord] = []
        rounds = 0
        while response.wants_tools and rounds < MAX_TOOL_ROUNDS:
            rounds += 1

            tool_results = []
            for call in response.tool_calls:
                start = time.monotonic()
                result = await self.tools.execute(call.name, call.input, call.id)
                records.append(ToolCallRecord(
                    tool_name=call.name,
                    tool_input=call.input,
                    output=result.content,
                    is_error=result.is_error,
                    duration_ms=round((time.monotonic() - start) * 1000, 1),
                ))
                tool_results.append({
                    "type": "tool_result",
                    "tool_use_id": result.tool_use_id,
                    "content": result.content,
                    "is_error": result.is_error,
                })

            messages.append(response.to_assistant_message())
            messages.append({"role": "user", "content": tool_results})

            response = await self._complete(messages)
            input_tokens += response.input_tokens
            output_tokens += response.output_tokens

        if response.wants_tools:
            logger.warning(
                f"Stopped after {MAX_TOOL_ROUNDS} tool rounds",
                extra={"thread_id": thread_id, "provider": self.provider.name},
            )

        # replayed history must not contain empty assistant turns
        text = response.text or NO_ANSWER.format(rounds=rounds)
        if self.memory:
            self.memory.append(thread_id, resource_id, "user", message)
            self.memory.append(thread_id, resource_id, "assistant", text)

        logger.info(
            f"Agent '{self.name}' answered with {len(records)} tool call(s)",
            extra={"thread_id": thread_id, "provider": self.provider.name},
        )

        return AgentResponse(
            text=text,
            thread_id=thread_id,
            resource_id=resource_id,
            tool_calls=records,
            tool_rounds=rounds,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
        )

    async def _complete(self, messages: list[dict[str, Any]]) -> LLMResponse:
        return await self.provider.complete(
            messages,
            system=self.system_prompt,
            tools=self.tools.get_schemas(),
            max_tokens=self.max_tokens,
        )

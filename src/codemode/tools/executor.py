"""
Codemode Tool Executor

Registers tool handlers and runs them when the model makes a tool call.
Handlers may be plain functions or coroutines. A handler failure becomes
an error ToolResult so the model can see what went wrong.
"""

from __future__ import annotations

import inspect
import time
from collections.abc import Awaitable, Callable
from typing import Any

from codemode.exceptions import ToolExecutionError
from codemode.logging import get_logger
from codemode.observability.metrics import record_tool_call
from codemode.tools.models import ToolDefinition, ToolResult

logger = get_logger("codemode.tools")

ToolHandler = Callable[..., Any] | Callable[..., Awaitable[Any]]


class ToolExecutor:
    """Manages tool registration and execution."""

    def __init__(self) -> None:
        self._tools: dict[str, ToolDefinition] = {}
        self._handlers: dict[str, ToolHandler] = {}

    def register(self, tool_def: ToolDefinition, handler: ToolHandler) -> None:
        """Register a tool with its handler function.

        Raises ValueError if a tool with the same name already exists.
        """
        if tool_def.name in self._tools:
            raise ValueError(f"Tool '{tool_def.name}' is already registered")
        self._tools[tool_def.name] = tool_def
        self._handlers[tool_def.name] = handler

    async def execute(self, name: str, tool_input: dict, tool_use_id: str = "") -> ToolResult:
        """Execute a tool by name with given input."""
        handler = self._handlers.get(name)
        if not handler:
            return ToolResult(
                tool_use_id=tool_use_id,
                content=f"Unknown tool: {name}",
                is_error=True,
            )

        start = time.monotonic()
        try:
            result = handler(**tool_input)
            if inspect.isawaitable(result):
                result = await result
            tool_result = ToolResult(tool_use_id=tool_use_id, content=str(result))
        except Exception as e:
            error = ToolExecutionError(name, str(e))
            logger.warning(str(error), extra={"tool_name": name})
            tool_result = ToolResult(
                tool_use_id=tool_use_id,
                content=f"Tool error: {e}",
                is_error=True,
            )

        logger.debug(
            "Tool call finished",
            extra={"tool_name": name, "duration_ms": round((time.monotonic() - start) * 1000, 1)},
        )
        record_tool_call(tool_name=name, is_error=tool_result.is_error)
        return tool_result

    def get(self, name: str) -> ToolDefinition | None:
        return self._tools.get(name)

    def get_schemas(self) -> list[dict]:
        """Get tool schemas for the provider's tools parameter."""
        return [t.to_schema() for t in self._tools.values()]

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools.keys())

    def __len__(self) -> int:
        return len(self._tools)

    def __contains__(self, name: str) -> bool:
        return name in self._tools

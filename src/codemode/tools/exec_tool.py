"""Exec tool — runs one complete program in a fresh sandbox.

The agent's only capability. Input mirrors ExecutionRequest; the tool
output is the JSON-encoded ExecutionResult with camelCase keys:

    {"stdout": ..., "stderr": ..., "resultValue"?: ..., "outputFiles"?: {...}, "errorMessage"?: ...}
"""

from __future__ import annotations

import json
from typing import Any

from codemode.sandbox.environment import ARGS_ENV_VAR
from codemode.sandbox.executor import SandboxExecutor
from codemode.tools.executor import ToolExecutor
from codemode.tools.models import ToolDefinition


def exec_tool_name(executor: SandboxExecutor) -> str:
    return f"exec_{executor.runtime.language}"


def create_exec_tool(executor: SandboxExecutor) -> tuple[ToolDefinition, Any]:
    """Build the tool definition and handler for ``executor``."""
    runtime = executor.runtime
    seconds = int(executor.config.timeout_seconds)

    definition = ToolDefinition(
        name=exec_tool_name(executor),
        description=(
            f"Execute a complete {runtime.name} program in an isolated sandbox "
            f"({seconds}s limit covering dependency install and execution). "
            f"Specify packages to install as dependencies. API keys are available "
            f"as environment variables. Always print the result as a single JSON "
            f"object on stdout."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "program": {
                    "type": "string",
                    "description": f"Complete {runtime.name} program to execute",
                },
                "dependencies": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": (
                        f"Packages to install with `{' '.join(runtime.install_command)}` "
                        f"before execution"
                    ),
                },
                "files": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                    "description": "Files to write into the working directory (relative path -> content)",
                },
                "arguments": {
                    "description": f"Arguments for the program, readable as JSON from the {ARGS_ENV_VAR} env var",
                },
            },
            "required": ["program"],
        },
    )

    async def _exec(
        program: str,
        dependencies: list[str] | None = None,
        files: dict[str, str] | None = None,
        arguments: Any = None,
    ) -> str:
        result = await executor.execute(
            program,
            dependencies=dependencies,
            files=files,
            arguments=arguments,
        )
        return json.dumps(result.to_wire(), default=str)

    return definition, _exec


def register_exec_tool(tools: ToolExecutor, executor: SandboxExecutor) -> str:
    """Register the exec tool on ``tools`` and return its name."""
    definition, handler = create_exec_tool(executor)
    tools.register(definition, handler)
    return definition.name

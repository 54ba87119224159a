"""
Codemode Tool System

The agent is given one tool: the exec tool, which wraps SandboxExecutor.

    Agent → LLM (tool_use) → ToolExecutor → exec tool → SandboxExecutor

Components:
- ToolDefinition / ToolResult: tool schema and tool output
- ToolExecutor: registration and (sync or async) handler dispatch
- create_exec_tool / register_exec_tool: the sandbox exec tool
"""

from codemode.tools.exec_tool import create_exec_tool, exec_tool_name, register_exec_tool
from codemode.tools.executor import ToolExecutor
from codemode.tools.models import ToolDefinition, ToolResult

__all__ = [
    "ToolDefinition",
    "ToolExecutor",
    "ToolResult",
    "create_exec_tool",
    "exec_tool_name",
    "register_exec_tool",
]

"""
Codemode — write code, execute once, report.

A conversational agent that answers a goal by emitting one complete
program, running it in an ephemeral E2B sandbox and relaying the result.

Usage:
    from codemode import Settings, create_agent, create_executor

    executor = create_executor(Settings.from_env())
    result = await executor.execute('console.log(JSON.stringify({ ok: true }))')
    print(result.result_value)

    agent = create_agent(Settings.from_env())
    reply = await agent.generate("What's the weather in Oslo?", thread_id="t-1", resource_id="me")
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from codemode.config import Settings
from codemode.core.models import ExecutionRequest, ExecutionResult
from codemode.logging import configure_logging
from codemode.sandbox.executor import SandboxConfig, SandboxExecutor
from codemode.sandbox.observer import ExecutionObserver, LoggingObserver, MetricsObserver
from codemode.sandbox.runtimes import get_runtime

if TYPE_CHECKING:
    from codemode.agents.code_agent import CodeAgent

__version__ = "0.1.0"

__all__ = [
    "ExecutionRequest",
    "ExecutionResult",
    "SandboxConfig",
    "SandboxExecutor",
    "Settings",
    "__version__",
    "create_agent",
    "create_executor",
]


def create_executor(
    settings: Settings,
    observers: list[ExecutionObserver] | None = None,
) -> SandboxExecutor:
    """Build an E2B-backed executor from settings."""
    from codemode.sandbox.e2b import E2BSandboxProvider

    configure_logging(level=settings.log_level, json_output=settings.log_json)
    config = SandboxConfig(
        timeout_seconds=settings.sandbox_timeout,
        runtime=get_runtime(settings.runtime),
    )
    if observers is None:
        observers = [LoggingObserver(), MetricsObserver()]
    return SandboxExecutor(
        E2BSandboxProvider(api_key=settings.e2b_api_key),
        config=config,
        observers=observers,
    )


def create_agent(
    settings: Settings,
    executor: SandboxExecutor | None = None,
) -> CodeAgent:
    """Build the code-mode agent with provider, executor and memory from settings."""
    from codemode.agents.code_agent import CodeAgent
    from codemode.memory.store import ConversationMemory
    from codemode.providers import create_provider

    provider = create_provider(
        settings.provider,
        api_key=settings.llm_api_key,
        model=settings.model,
    )
    return CodeAgent(
        provider=provider,
        executor=executor or create_executor(settings),
        memory=ConversationMemory(settings.memory_url),
    )

"""
Codemode Sandbox Execution

Runs generated programs once in an ephemeral remote sandbox:

    SandboxExecutor → SandboxProvider (E2B) → SandboxExecutor → ExecutionResult

Components:
- SandboxExecutor: the execute-and-collect adapter
- SandboxProvider / SandboxHandle: provider interface
- RuntimeProfile: per-language constants (typescript, python)
- filter_environment: host env → forwarded sandbox env
- ExecutionObserver: checkpoint hooks for logging and metrics

The E2B provider lives in codemode.sandbox.e2b and is imported on demand.
"""

from codemode.sandbox.base import FileEntry, RunOutput, SandboxHandle, SandboxProvider
from codemode.sandbox.environment import (
    ARGS_ENV_VAR,
    ForwardRules,
    build_sandbox_env,
    filter_environment,
)
from codemode.sandbox.executor import SandboxConfig, SandboxExecutor
from codemode.sandbox.extraction import extract_json_result
from codemode.sandbox.observer import (
    ExecutionObserver,
    LoggingObserver,
    MetricsObserver,
    RecordingObserver,
)
from codemode.sandbox.runtimes import PYTHON, TYPESCRIPT, RuntimeProfile, get_runtime

__all__ = [
    "ARGS_ENV_VAR",
    "ExecutionObserver",
    "FileEntry",
    "ForwardRules",
    "LoggingObserver",
    "MetricsObserver",
    "PYTHON",
    "RecordingObserver",
    "RunOutput",
    "RuntimeProfile",
    "SandboxConfig",
    "SandboxExecutor",
    "SandboxHandle",
    "SandboxProvider",
    "TYPESCRIPT",
    "build_sandbox_env",
    "extract_json_result",
    "filter_environment",
    "get_runtime",
]

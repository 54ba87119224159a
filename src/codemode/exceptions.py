"""
Codemode Custom Exceptions

Structured exception hierarchy for the codemode package.
All codemode-specific exceptions inherit from CodemodeError.

Exception hierarchy:
    CodemodeError
    +-- SandboxError                  (one phase of the execution pipeline failed)
    |   +-- ProvisioningError         (sandbox could not be created)
    |   +-- DependencyInstallError    (package install command failed)
    |   +-- FileStagingError          (input file could not be written)
    |   +-- ExecutionFaultError       (runtime failed outside the program's own output)
    |   +-- SandboxTimeoutError       (wall-clock budget exhausted)
    +-- ToolExecutionError            (tool handler failure)
    +-- ProviderError                 (LLM provider failure)
    +-- MemoryStoreError              (conversation memory backend failure)
    +-- ConfigurationError            (invalid or missing settings)

SandboxError subclasses never escape SandboxExecutor; they are folded
into ExecutionResult.error_message at the adapter boundary.
"""

from __future__ import annotations


class CodemodeError(Exception):
    """Base exception for all codemode errors."""

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}


class SandboxError(CodemodeError):
    """Raised when a phase of the sandbox pipeline fails.

    The phase name ("provision", "install", "stage", "execute", ...) is kept
    so the folded error message and the logs say where it broke.
    """

    phase = "sandbox"

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message, details={"phase": self.phase, **(details or {})})


class ProvisioningError(SandboxError):
    """Raised when the sandbox provider cannot create an instance."""

    phase = "provision"


class DependencyInstallError(SandboxError):
    """Raised when the batched dependency install fails."""

    phase = "install"

    def __init__(self, packages: list[str], message: str, details: dict | None = None):
        super().__init__(
            f"Dependency installation failed ({' '.join(packages)}): {message}",
            details={"packages": list(packages), **(details or {})},
        )
        self.packages = list(packages)


class FileStagingError(SandboxError):
    """Raised when an input file cannot be written into the sandbox."""

    phase = "stage"

    def __init__(self, path: str, message: str, details: dict | None = None):
        super().__init__(
            f"Failed to write input file '{path}': {message}",
            details={"path": path, **(details or {})},
        )
        self.path = path


class ExecutionFaultError(SandboxError):
    """Raised when the sandbox cannot run the program at all."""

    phase = "execute"


class SandboxTimeoutError(SandboxError):
    """Raised when the pipeline exceeds its wall-clock budget."""

    phase = "timeout"

    def __init__(self, timeout_seconds: float, details: dict | None = None):
        super().__init__(
            f"Execution exceeded {timeout_seconds}s limit",
            details={"timeout_seconds": timeout_seconds, **(details or {})},
        )
        self.timeout_seconds = timeout_seconds


class ToolExecutionError(CodemodeError):
    """Raised when a tool execution fails.

    Includes tool name for debugging.
    """

    def __init__(self, tool_name: str, message: str, details: dict | None = None):
        super().__init__(
            f"Tool '{tool_name}' execution failed: {message}",
            details={"tool_name": tool_name, **(details or {})},
        )
        self.tool_name = tool_name


class ProviderError(CodemodeError):
    """Raised when an LLM provider fails after its retries."""

    def __init__(self, provider_name: str, message: str, details: dict | None = None):
        super().__init__(
            f"Provider '{provider_name}' error: {message}",
            details={"provider_name": provider_name, **(details or {})},
        )
        self.provider_name = provider_name


class MemoryStoreError(CodemodeError):
    """Raised when the conversation memory backend fails."""


class ConfigurationError(CodemodeError):
    """Raised for invalid or missing configuration."""

    def __init__(self, setting: str, message: str, details: dict | None = None):
        super().__init__(
            f"Invalid setting '{setting}': {message}",
            details={"setting": setting, **(details or {})},
        )
        self.setting = setting

"""
Codemode Sandbox Provider Base

Abstract interface for remote sandbox providers. The execution adapter
only talks to these two classes, so a provider can be swapped (or faked
in tests) without touching the pipeline.

Every method is a suspension point that may block for up to the
remaining wall-clock budget.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class RunOutput(BaseModel):
    """Raw output of one program run, before any interpretation."""

    stdout_chunks: list[str] = Field(default_factory=list)
    stderr_chunks: list[str] = Field(default_factory=list)
    fault: dict[str, Any] | None = None

    @property
    def stdout(self) -> str:
        return "".join(self.stdout_chunks)

    @property
    def stderr(self) -> str:
        return "".join(self.stderr_chunks)


class FileEntry(BaseModel):
    """One directory entry in the sandbox filesystem."""

    name: str
    path: str
    is_file: bool = True


class SandboxHandle(ABC):
    """A live sandbox instance, owned by exactly one adapter invocation."""

    @property
    @abstractmethod
    def sandbox_id(self) -> str:
        ...

    @abstractmethod
    async def run_command(self, command: str) -> None:
        """Run a shell command; raise on a non-zero exit."""
        ...

    @abstractmethod
    async def write_file(self, path: str, content: str) -> None:
        ...

    @abstractmethod
    async def run_code(self, code: str, *, language: str, envs: dict[str, str]) -> RunOutput:
        """Run a program and capture its output chunks in emission order."""
        ...

    @abstractmethod
    async def list_files(self, directory: str) -> list[FileEntry]:
        ...

    @abstractmethod
    async def read_file(self, path: str) -> str:
        ...

    @abstractmethod
    async def kill(self) -> None:
        ...


class SandboxProvider(ABC):
    """Creates sandbox instances."""

    @property
    def name(self) -> str:
        return self.__class__.__name__

    @abstractmethod
    async def create(self, *, timeout_seconds: float) -> SandboxHandle:
        """Provision a fresh sandbox that the provider kills after ``timeout_seconds``."""
        ...

"""
Codemode E2B Provider

Wraps the E2B code interpreter SDK (e2b_code_interpreter.AsyncSandbox)
behind the SandboxProvider interface.

Setup:
    pip install e2b-code-interpreter
    export E2B_API_KEY=your_key

The sandbox lifetime is the adapter's wall-clock budget: E2B kills the
instance itself once ``timeout`` seconds have passed, even if the
explicit kill never arrives.
"""

from __future__ import annotations

from typing import Any

from e2b_code_interpreter import AsyncSandbox, FileType

from codemode.sandbox.base import FileEntry, RunOutput, SandboxHandle, SandboxProvider


class E2BSandboxHandle(SandboxHandle):
    """A running E2B sandbox."""

    def __init__(self, sandbox: AsyncSandbox):
        self._sandbox = sandbox

    @property
    def sandbox_id(self) -> str:
        return self._sandbox.sandbox_id

    async def run_command(self, command: str) -> None:
        # commands.run raises CommandExitException on a non-zero exit
        result = await self._sandbox.commands.run(command)
        if result.exit_code:
            raise RuntimeError(f"exit code {result.exit_code}: {result.stderr.strip()}")

    async def write_file(self, path: str, content: str) -> None:
        await self._sandbox.files.write(path, content)

    async def run_code(self, code: str, *, language: str, envs: dict[str, str]) -> RunOutput:
        execution = await self._sandbox.run_code(code, language=language, envs=envs)
        return RunOutput(
            stdout_chunks=list(execution.logs.stdout),
            stderr_chunks=list(execution.logs.stderr),
            fault=self._fault_to_dict(execution.error),
        )

    async def list_files(self, directory: str) -> list[FileEntry]:
        entries = await self._sandbox.files.list(directory)
        return [
            FileEntry(name=entry.name, path=entry.path, is_file=entry.type == FileType.FILE)
            for entry in entries
        ]

    async def read_file(self, path: str) -> str:
        return await self._sandbox.files.read(path)

    async def kill(self) -> None:
        await self._sandbox.kill()

    @staticmethod
    def _fault_to_dict(error: Any) -> dict[str, Any] | None:
        """Convert an E2B ExecutionError into plain data."""
        if error is None:
            return None
        return {
            "name": error.name,
            "value": error.value,
            "traceback": error.traceback,
        }


class E2BSandboxProvider(SandboxProvider):
    """E2B cloud sandbox provider.

    Falls back to the E2B_API_KEY env var (read by the SDK) if no key
    is provided.
    """

    name = "e2b"

    def __init__(self, api_key: str | None = None, template: str | None = None):
        self._api_key = api_key
        self._template = template

    async def create(self, *, timeout_seconds: float) -> SandboxHandle:
        kwargs: dict[str, Any] = {"timeout": max(1, int(timeout_seconds))}
        if self._api_key:
            kwargs["api_key"] = self._api_key
        if self._template:
            kwargs["template"] = self._template
        sandbox = await AsyncSandbox.create(**kwargs)
        return E2BSandboxHandle(sandbox)

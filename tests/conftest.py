"""Shared test fixtures: an in-memory sandbox provider and executors built on it."""

import asyncio

import pytest

from codemode.sandbox.base import FileEntry, RunOutput, SandboxHandle, SandboxProvider
from codemode.sandbox.executor import SandboxConfig, SandboxExecutor
from codemode.sandbox.observer import RecordingObserver


class FakeSandboxHandle(SandboxHandle):
    """Records every call; ``fail_on`` names the operations that raise."""

    def __init__(self):
        self.commands: list[str] = []
        self.written: dict[str, str] = {}
        self.run_calls: list[dict] = []
        self.kill_count = 0
        self.fail_on: set[str] = set()
        self.run_delay = 0.0
        self.run_output = RunOutput()
        self.workdir_files: dict[str, str] = {
            ".bashrc": "# bashrc",
            ".profile": "# profile",
        }
        self.directories: list[str] = []

    @property
    def sandbox_id(self) -> str:
        return "sbx-test"

    async def run_command(self, command: str) -> None:
        self.commands.append(command)
        if "install" in self.fail_on:
            raise RuntimeError("npm ERR! 404 Not Found - left-padd")

    async def write_file(self, path: str, content: str) -> None:
        if "write" in self.fail_on:
            raise RuntimeError("disk quota exceeded")
        self.written[path] = content

    async def run_code(self, code: str, *, language: str, envs: dict[str, str]) -> RunOutput:
        self.run_calls.append({"code": code, "language": language, "envs": dict(envs)})
        if self.run_delay:
            await asyncio.sleep(self.run_delay)
        if "run" in self.fail_on:
            raise RuntimeError("kernel connection lost")
        return self.run_output

    async def list_files(self, directory: str) -> list[FileEntry]:
        if "list" in self.fail_on:
            raise RuntimeError("listing not permitted")
        entries = [
            FileEntry(name=name, path=f"{directory}/{name}", is_file=True)
            for name in self.workdir_files
        ]
        entries += [
            FileEntry(name=name, path=f"{directory}/{name}", is_file=False)
            for name in self.directories
        ]
        return entries

    async def read_file(self, path: str) -> str:
        name = path.rsplit("/", 1)[-1]
        if f"read:{name}" in self.fail_on:
            raise RuntimeError(f"cannot read {name}")
        return self.workdir_files[name]

    async def kill(self) -> None:
        self.kill_count += 1
        if "kill" in self.fail_on:
            raise RuntimeError("sandbox already gone")


class FakeSandboxProvider(SandboxProvider):
    def __init__(self, handle: FakeSandboxHandle):
        self.handle = handle
        self.create_calls: list[float] = []
        self.fail = False

    async def create(self, *, timeout_seconds: float) -> SandboxHandle:
        self.create_calls.append(timeout_seconds)
        if self.fail:
            raise RuntimeError("sandbox quota exceeded")
        return self.handle


@pytest.fixture
def fake_handle():
    return FakeSandboxHandle()


@pytest.fixture
def fake_provider(fake_handle):
    return FakeSandboxProvider(fake_handle)


@pytest.fixture
def recorder():
    return RecordingObserver()


@pytest.fixture
def host_env():
    return {
        "SECRET_TOKEN": "x",
        "MY_API_KEY": "y",
        "API_KEY_FOO": "z",
        "BASE_URL_BAR": "w",
        "PATH": "/usr/bin",
    }


@pytest.fixture
def make_executor(fake_provider, recorder, host_env):
    def _make(**config_kwargs) -> SandboxExecutor:
        return SandboxExecutor(
            fake_provider,
            config=SandboxConfig(**config_kwargs),
            observers=[recorder],
            environ=host_env,
        )

    return _make


@pytest.fixture
def executor(make_executor):
    return make_executor()

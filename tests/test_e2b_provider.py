"""Tests for the E2B sandbox provider.

The SDK is mocked; these tests check the mapping between
e2b_code_interpreter objects and the provider interface, and the
adapter's behavior end to end on top of it.
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from e2b_code_interpreter import FileType

from codemode.sandbox.e2b import E2BSandboxHandle, E2BSandboxProvider
from codemode.sandbox.executor import SandboxExecutor


def _entry(name, type_=FileType.FILE):
    return SimpleNamespace(name=name, path=f"/home/user/{name}", type=type_)


def _execution(stdout=None, stderr=None, error=None):
    return SimpleNamespace(
        logs=SimpleNamespace(stdout=stdout or [], stderr=stderr or []),
        error=error,
    )


@pytest.fixture
def sdk_sandbox():
    sandbox = MagicMock()
    sandbox.sandbox_id = "e2b-123"
    sandbox.commands.run = AsyncMock(return_value=SimpleNamespace(exit_code=0, stderr=""))
    sandbox.files.write = AsyncMock()
    sandbox.files.list = AsyncMock(return_value=[])
    sandbox.files.read = AsyncMock(return_value="")
    sandbox.run_code = AsyncMock(return_value=_execution())
    sandbox.kill = AsyncMock()
    return sandbox


class TestE2BSandboxProvider:
    @pytest.mark.asyncio
    async def test_create_passes_timeout_and_key(self, sdk_sandbox):
        with patch("codemode.sandbox.e2b.AsyncSandbox") as sandbox_cls:
            sandbox_cls.create = AsyncMock(return_value=sdk_sandbox)
            provider = E2BSandboxProvider(api_key="e2b_key", template="node")

            handle = await provider.create(timeout_seconds=30.0)

        sandbox_cls.create.assert_awaited_once_with(timeout=30, api_key="e2b_key", template="node")
        assert handle.sandbox_id == "e2b-123"

    @pytest.mark.asyncio
    async def test_create_without_key_relies_on_sdk_env(self, sdk_sandbox):
        with patch("codemode.sandbox.e2b.AsyncSandbox") as sandbox_cls:
            sandbox_cls.create = AsyncMock(return_value=sdk_sandbox)
            await E2BSandboxProvider().create(timeout_seconds=0.5)

        sandbox_cls.create.assert_awaited_once_with(timeout=1)

    def test_name(self):
        assert E2BSandboxProvider().name == "e2b"


class TestE2BSandboxHandle:
    @pytest.mark.asyncio
    async def test_run_code_maps_logs(self, sdk_sandbox):
        sdk_sandbox.run_code.return_value = _execution(stdout=["a\n", "b\n"], stderr=["w\n"])
        handle = E2BSandboxHandle(sdk_sandbox)

        output = await handle.run_code("code", language="ts", envs={"K_API_KEY": "v"})

        sdk_sandbox.run_code.assert_awaited_once_with("code", language="ts", envs={"K_API_KEY": "v"})
        assert output.stdout == "a\nb\n"
        assert output.stderr == "w\n"
        assert output.fault is None

    @pytest.mark.asyncio
    async def test_run_code_maps_error(self, sdk_sandbox):
        error = SimpleNamespace(name="ReferenceError", value="x is not defined", traceback="at <anon>")
        sdk_sandbox.run_code.return_value = _execution(error=error)

        output = await E2BSandboxHandle(sdk_sandbox).run_code("x", language="ts", envs={})

        assert output.fault == {
            "name": "ReferenceError",
            "value": "x is not defined",
            "traceback": "at <anon>",
        }

    @pytest.mark.asyncio
    async def test_run_command_nonzero_exit_raises(self, sdk_sandbox):
        sdk_sandbox.commands.run.return_value = SimpleNamespace(exit_code=1, stderr="npm ERR! 404\n")

        with pytest.raises(RuntimeError, match="npm ERR! 404"):
            await E2BSandboxHandle(sdk_sandbox).run_command("npm install nope")

    @pytest.mark.asyncio
    async def test_list_files_marks_directories(self, sdk_sandbox):
        sdk_sandbox.files.list.return_value = [_entry("out.csv"), _entry("node_modules", FileType.DIR)]

        entries = await E2BSandboxHandle(sdk_sandbox).list_files("/home/user")

        assert [(e.name, e.is_file) for e in entries] == [("out.csv", True), ("node_modules", False)]


class TestExecutorOnE2B:
    @pytest.mark.asyncio
    async def test_environment_files_not_returned(self, sdk_sandbox):
        sdk_sandbox.run_code.return_value = _execution(stdout=['{"ok":true}'])
        sdk_sandbox.files.list.return_value = [
            _entry("package.json"),
            _entry(".bashrc"),
            _entry("program.ts"),
            _entry("report.csv"),
        ]
        sdk_sandbox.files.read = AsyncMock(side_effect=lambda path: f"contents of {path}")

        with patch("codemode.sandbox.e2b.AsyncSandbox") as sandbox_cls:
            sandbox_cls.create = AsyncMock(return_value=sdk_sandbox)
            executor = SandboxExecutor(E2BSandboxProvider(api_key="k"), environ={})
            result = await executor.execute("console.log(JSON.stringify({ok: true}))")

        assert result.result_value == {"ok": True}
        assert result.output_files == {"report.csv": "contents of /home/user/report.csv"}
        sdk_sandbox.kill.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_install_exit_code_becomes_error(self, sdk_sandbox):
        sdk_sandbox.commands.run.return_value = SimpleNamespace(exit_code=1, stderr="E404")

        with patch("codemode.sandbox.e2b.AsyncSandbox") as sandbox_cls:
            sandbox_cls.create = AsyncMock(return_value=sdk_sandbox)
            executor = SandboxExecutor(E2BSandboxProvider(api_key="k"), environ={})
            result = await executor.execute("x", dependencies=["left-padd"])

        assert "E404" in result.error_message
        sdk_sandbox.commands.run.assert_awaited_once_with("npm install left-padd")
        sdk_sandbox.run_code.assert_not_awaited()
        sdk_sandbox.kill.assert_awaited_once()

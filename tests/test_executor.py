"""
Tests for the execution adapter (SandboxExecutor).

Verifies:
- Happy path: stdout/stderr, JSON extraction, output files
- Dependency install batching and its absence
- File staging into the working directory
- Environment forwarding and ARGS_JSON
- Every failure path folds into error_message and still tears down once
- Timeout budget
- Observer checkpoints
"""

import json

import pytest

from codemode.core.models import Checkpoint
from codemode.sandbox.base import RunOutput
from codemode.sandbox.observer import ExecutionObserver
from codemode.sandbox.runtimes import PYTHON

PROGRAM = 'console.log(JSON.stringify({ ok: true, data: 5 }))'


# ─── Happy path ────────────────────────────────────────────


class TestSuccessfulExecution:
    @pytest.mark.asyncio
    async def test_stdout_and_result_value(self, executor, fake_handle):
        fake_handle.run_output = RunOutput(
            stdout_chunks=["log line\n", '{"ok":true,"data":5}\n', "trailing"],
            stderr_chunks=["warn 1\n", "warn 2\n"],
        )

        result = await executor.execute(PROGRAM)

        assert result.ok
        assert result.stdout == 'log line\n{"ok":true,"data":5}\ntrailing'
        assert result.stderr == "warn 1\nwarn 2\n"
        assert result.result_value == {"ok": True, "data": 5}
        assert result.error_message is None

    @pytest.mark.asyncio
    async def test_runs_with_runtime_language(self, executor, fake_handle):
        await executor.execute(PROGRAM)
        assert fake_handle.run_calls[0]["language"] == "ts"
        assert fake_handle.run_calls[0]["code"] == PROGRAM

    @pytest.mark.asyncio
    async def test_unparseable_stdout_is_not_an_error(self, executor, fake_handle):
        fake_handle.run_output = RunOutput(stdout_chunks=["no json here"])

        result = await executor.execute(PROGRAM)

        assert result.ok
        assert result.result_value is None

    @pytest.mark.asyncio
    async def test_oversized_json_keeps_output(self, executor, fake_handle):
        stdout = 'log line\n{"n": ' + "9" * 5000 + "}"
        fake_handle.run_output = RunOutput(stdout_chunks=[stdout])
        fake_handle.workdir_files["report.csv"] = "a,b"

        result = await executor.execute(PROGRAM)

        assert result.ok
        assert result.stdout == stdout
        assert result.result_value is None
        assert result.output_files == {"report.csv": "a,b"}

    @pytest.mark.asyncio
    async def test_silent_program_yields_empty_strings(self, executor, fake_handle):
        result = await executor.execute(PROGRAM)

        assert result.stdout == ""
        assert result.stderr == ""
        assert result.result_value is None
        assert result.output_files is None
        assert result.error_message is None
        assert result.to_wire() == {"stdout": "", "stderr": ""}

    @pytest.mark.asyncio
    async def test_output_files_exclude_environment_files(self, executor, fake_handle):
        fake_handle.workdir_files = {
            "package.json": "{}",
            ".bashrc": "# bashrc",
            "program.ts": "console.log(1)",
            "report.csv": "a,b\n1,2\n",
        }

        result = await executor.execute(PROGRAM)

        assert result.output_files == {"report.csv": "a,b\n1,2\n"}

    @pytest.mark.asyncio
    async def test_directories_are_skipped(self, executor, fake_handle):
        fake_handle.directories = ["node_modules", "out"]
        fake_handle.workdir_files["notes.txt"] = "hello"

        result = await executor.execute(PROGRAM)

        assert result.output_files == {"notes.txt": "hello"}

    @pytest.mark.asyncio
    async def test_python_runtime_excludes_py_files(self, make_executor, fake_handle):
        executor = make_executor(runtime=PYTHON)
        fake_handle.workdir_files = {
            "main.py": "print(1)",
            "requirements.txt": "httpx",
            "out.json": "[]",
        }

        result = await executor.execute("print(1)")

        assert fake_handle.run_calls[0]["language"] == "python"
        assert result.output_files == {"out.json": "[]"}


# ─── Dependencies and files ────────────────────────────────


class TestStaging:
    @pytest.mark.asyncio
    async def test_no_dependencies_no_install(self, executor, fake_handle):
        await executor.execute(PROGRAM)
        assert fake_handle.commands == []

    @pytest.mark.asyncio
    async def test_empty_dependency_list_no_install(self, executor, fake_handle):
        await executor.execute(PROGRAM, dependencies=[])
        assert fake_handle.commands == []

    @pytest.mark.asyncio
    async def test_dependencies_installed_in_one_batch(self, executor, fake_handle):
        await executor.execute(PROGRAM, dependencies=["axios", "cheerio", "rss-parser"])
        assert fake_handle.commands == ["npm install axios cheerio rss-parser"]

    @pytest.mark.asyncio
    async def test_install_happens_before_run(self, executor, fake_handle, recorder):
        await executor.execute(PROGRAM, dependencies=["zod"])
        assert recorder.checkpoints == [
            Checkpoint.PROVISIONED,
            Checkpoint.DEPENDENCIES_INSTALLED,
            Checkpoint.EXECUTED,
            Checkpoint.COLLECTED,
            Checkpoint.TORN_DOWN,
        ]

    @pytest.mark.asyncio
    async def test_files_written_to_workdir_verbatim(self, executor, fake_handle):
        content = "id,name\n1,ünïcode\r\n"
        await executor.execute(PROGRAM, files={"data.csv": content, "cfg/app.json": "{}"})

        assert fake_handle.written == {
            "/home/user/data.csv": content,
            "/home/user/cfg/app.json": "{}",
        }


# ─── Environment ───────────────────────────────────────────


class TestEnvironment:
    @pytest.mark.asyncio
    async def test_only_matching_variables_forwarded(self, executor, fake_handle):
        await executor.execute(PROGRAM)

        envs = fake_handle.run_calls[0]["envs"]
        assert envs == {"MY_API_KEY": "y", "API_KEY_FOO": "z", "BASE_URL_BAR": "w"}
        assert "SECRET_TOKEN" not in envs

    @pytest.mark.asyncio
    async def test_arguments_round_trip(self, executor, fake_handle):
        await executor.execute(PROGRAM, arguments={"n": 3, "tag": "x"})

        envs = fake_handle.run_calls[0]["envs"]
        assert json.loads(envs["ARGS_JSON"]) == {"n": 3, "tag": "x"}

    @pytest.mark.asyncio
    async def test_no_arguments_no_args_variable(self, executor, fake_handle):
        await executor.execute(PROGRAM)
        assert "ARGS_JSON" not in fake_handle.run_calls[0]["envs"]


# ─── Failures ──────────────────────────────────────────────


class TestFailures:
    @pytest.mark.asyncio
    async def test_provisioning_failure(self, executor, fake_provider, fake_handle):
        fake_provider.fail = True

        result = await executor.execute(PROGRAM)

        assert not result.ok
        assert "Sandbox creation failed" in result.error_message
        assert "quota" in result.error_message
        assert result.stdout == ""
        assert result.stderr == result.error_message
        assert fake_handle.kill_count == 0

    @pytest.mark.asyncio
    async def test_install_failure_aborts_before_run(self, executor, fake_handle):
        fake_handle.fail_on.add("install")

        result = await executor.execute(PROGRAM, dependencies=["left-padd"])

        assert "Dependency installation failed" in result.error_message
        assert "404" in result.error_message
        assert fake_handle.run_calls == []
        assert fake_handle.kill_count == 1

    @pytest.mark.asyncio
    async def test_staging_failure_still_tears_down(self, executor, fake_handle):
        fake_handle.fail_on.add("write")

        result = await executor.execute(PROGRAM, files={"input.txt": "data"})

        assert "input.txt" in result.error_message
        assert fake_handle.run_calls == []
        assert fake_handle.kill_count == 1

    @pytest.mark.asyncio
    async def test_run_call_failure(self, executor, fake_handle):
        fake_handle.fail_on.add("run")

        result = await executor.execute(PROGRAM)

        assert "Code execution failed" in result.error_message
        assert result.result_value is None
        assert result.output_files is None
        assert fake_handle.kill_count == 1

    @pytest.mark.asyncio
    async def test_runtime_fault_is_pretty_printed(self, executor, fake_handle):
        fault = {"name": "TypeError", "value": "x is not a function", "traceback": "at main"}
        fake_handle.run_output = RunOutput(
            stdout_chunks=['{"ok": true}'],
            stderr_chunks=["boom"],
            fault=fault,
        )

        result = await executor.execute(PROGRAM)

        assert result.error_message == json.dumps(fault, indent=2)
        assert result.stdout == '{"ok": true}'
        assert result.stderr == "boom"
        assert result.result_value is None
        assert fake_handle.kill_count == 1

    @pytest.mark.asyncio
    async def test_timeout_yields_error_not_hang(self, make_executor, fake_handle):
        executor = make_executor(timeout_seconds=1.0)
        fake_handle.run_delay = 5.0
        fake_handle.workdir_files["report.csv"] = "a,b"

        result = await executor.execute(PROGRAM)

        assert "exceeded 1.0s" in result.error_message
        assert result.result_value is None
        assert result.output_files is None
        assert fake_handle.kill_count == 1

    @pytest.mark.asyncio
    async def test_provider_receives_budget(self, make_executor, fake_provider):
        executor = make_executor(timeout_seconds=45.0)
        await executor.execute(PROGRAM)
        assert fake_provider.create_calls == [45.0]

    @pytest.mark.asyncio
    async def test_empty_program_rejected_without_sandbox(self, executor, fake_provider):
        result = await executor.execute("")

        assert "Invalid execution request" in result.error_message
        assert fake_provider.create_calls == []

    @pytest.mark.asyncio
    async def test_teardown_failure_not_surfaced(self, executor, fake_handle):
        fake_handle.fail_on.add("kill")
        fake_handle.run_output = RunOutput(stdout_chunks=['{"ok": true}'])

        result = await executor.execute(PROGRAM)

        assert result.ok
        assert result.result_value == {"ok": True}
        assert fake_handle.kill_count == 1


class TestCollectionFailures:
    @pytest.mark.asyncio
    async def test_listing_failure_swallowed(self, executor, fake_handle, recorder):
        fake_handle.fail_on.add("list")
        fake_handle.run_output = RunOutput(stdout_chunks=['{"ok": true}'])

        result = await executor.execute(PROGRAM)

        assert result.ok
        assert result.output_files is None
        assert result.result_value == {"ok": True}
        collected = [d for c, _, d in recorder.events if c == Checkpoint.COLLECTED]
        assert collected[0]["status"] == "UNAVAILABLE"

    @pytest.mark.asyncio
    async def test_unreadable_file_skipped(self, executor, fake_handle):
        fake_handle.workdir_files.update({"a.txt": "A", "b.txt": "B"})
        fake_handle.fail_on.add("read:a.txt")

        result = await executor.execute(PROGRAM)

        assert result.ok
        assert result.output_files == {"b.txt": "B"}

    @pytest.mark.asyncio
    async def test_empty_collection_reported(self, executor, recorder):
        await executor.execute(PROGRAM)

        collected = [d for c, _, d in recorder.events if c == Checkpoint.COLLECTED]
        assert collected[0]["status"] == "EMPTY"


# ─── Observers ─────────────────────────────────────────────


class TestObservers:
    @pytest.mark.asyncio
    async def test_checkpoints_without_dependencies(self, executor, recorder):
        await executor.execute(PROGRAM)
        assert recorder.checkpoints == [
            Checkpoint.PROVISIONED,
            Checkpoint.EXECUTED,
            Checkpoint.COLLECTED,
            Checkpoint.TORN_DOWN,
        ]

    @pytest.mark.asyncio
    async def test_checkpoint_details_carry_sandbox_id(self, executor, recorder):
        await executor.execute(PROGRAM)
        for _, elapsed_ms, details in recorder.events:
            assert details["sandbox_id"] == "sbx-test"
            assert elapsed_ms >= 0

    @pytest.mark.asyncio
    async def test_failing_observer_does_not_change_result(self, fake_provider, fake_handle, host_env):
        from codemode.sandbox.executor import SandboxExecutor

        class Broken(ExecutionObserver):
            def on_checkpoint(self, checkpoint, *, elapsed_ms, details):
                raise ValueError("observer bug")

        fake_handle.run_output = RunOutput(stdout_chunks=['{"n": 1}'])
        executor = SandboxExecutor(fake_provider, observers=[Broken()], environ=host_env)

        result = await executor.execute(PROGRAM)

        assert result.ok
        assert result.result_value == {"n": 1}
        assert fake_handle.kill_count == 1

    @pytest.mark.asyncio
    async def test_torn_down_reported_after_failure(self, executor, fake_handle, recorder):
        fake_handle.fail_on.add("install")
        await executor.execute(PROGRAM, dependencies=["nope"])
        assert recorder.checkpoints == [Checkpoint.PROVISIONED, Checkpoint.TORN_DOWN]

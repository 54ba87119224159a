"""
Codemode Execution Adapter

Runs one generated program in a fresh remote sandbox and returns a
structured result:

    provision -> install dependencies -> stage files -> filter env
    -> run -> collect stdout/stderr -> extract JSON -> collect files
    -> tear down (always)

One wall-clock budget covers the whole pipeline. It is handed to the
provider as the sandbox lifetime and enforced locally with
asyncio.wait_for, so a stalled provider call cannot hang the caller.
Install and execution share that budget.

Nothing raises past SandboxExecutor.execute(): every failure is folded
into ExecutionResult.error_message. The adapter never retries; deciding
whether to regenerate the program and try again is the agent's job.
"""

from __future__ import annotations

import asyncio
import json
import os
import time
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, Field, ValidationError

from codemode.core.models import (
    Checkpoint,
    ExecutionRequest,
    ExecutionResult,
    FileCollection,
)
from codemode.exceptions import (
    DependencyInstallError,
    ExecutionFaultError,
    FileStagingError,
    ProvisioningError,
    SandboxError,
    SandboxTimeoutError,
)
from codemode.logging import get_logger
from codemode.observability.metrics import record_execution
from codemode.sandbox.base import SandboxHandle, SandboxProvider
from codemode.sandbox.environment import ForwardRules, build_sandbox_env
from codemode.sandbox.extraction import extract_json_result
from codemode.sandbox.observer import ExecutionObserver
from codemode.sandbox.runtimes import TYPESCRIPT, RuntimeProfile

logger = get_logger("codemode.sandbox")


class SandboxConfig(BaseModel):
    """Configuration for sandboxed program execution."""

    timeout_seconds: float = Field(default=30.0, ge=1.0, le=3600.0)
    teardown_timeout_seconds: float = Field(default=10.0, ge=1.0, le=60.0)
    runtime: RuntimeProfile = TYPESCRIPT
    forward_rules: ForwardRules = Field(default_factory=ForwardRules)


class _PipelineRun:
    """Mutable per-invocation state shared with the cleanup block."""

    def __init__(self) -> None:
        self.handle: SandboxHandle | None = None
        self.phase_started = time.monotonic()

    @property
    def sandbox_id(self) -> str | None:
        return self.handle.sandbox_id if self.handle else None


class SandboxExecutor:
    """Executes programs in ephemeral sandboxes.

    Each call acquires its own sandbox and releases it before returning;
    calls share no state and may run concurrently. There is no admission
    control: concurrent calls each hold a sandbox.
    """

    def __init__(
        self,
        provider: SandboxProvider,
        config: SandboxConfig | None = None,
        observers: list[ExecutionObserver] | None = None,
        environ: Mapping[str, str] | None = None,
    ):
        self._provider = provider
        self._config = config or SandboxConfig()
        self._observers = list(observers or [])
        self._environ = environ

    @property
    def config(self) -> SandboxConfig:
        return self._config

    @property
    def runtime(self) -> RuntimeProfile:
        return self._config.runtime

    async def execute(
        self,
        program: str,
        dependencies: list[str] | None = None,
        files: dict[str, str] | None = None,
        arguments: Any = None,
    ) -> ExecutionResult:
        """Run ``program`` once and return its result. Never raises."""
        try:
            request = ExecutionRequest(
                program=program,
                dependencies=dependencies or [],
                files=files or {},
                arguments=arguments,
            )
        except ValidationError as e:
            return ExecutionResult.failure(f"Invalid execution request: {e.errors()[0]['msg']}")
        return await self.execute_request(request)

    async def execute_request(self, request: ExecutionRequest) -> ExecutionResult:
        """Run a validated request. Never raises (except on outside cancellation)."""
        cfg = self._config
        run = _PipelineRun()
        started = time.monotonic()

        logger.info(
            f"Executing {cfg.runtime.name} program "
            f"(dependencies={request.dependencies or 'none'}, "
            f"files={list(request.files) or 'none'}, "
            f"arguments={'yes' if request.arguments is not None else 'none'})",
            extra={"provider": self._provider.name},
        )

        try:
            result = await asyncio.wait_for(
                self._run_pipeline(request, run),
                timeout=cfg.timeout_seconds,
            )
        except TimeoutError:
            error = SandboxTimeoutError(cfg.timeout_seconds)
            logger.warning(str(error), extra={"sandbox_id": run.sandbox_id, "phase": error.phase})
            result = ExecutionResult.failure(str(error))
        except SandboxError as e:
            logger.warning(str(e), extra={"sandbox_id": run.sandbox_id, "phase": e.phase})
            result = ExecutionResult.failure(str(e))
        except Exception as e:
            logger.exception("Unexpected sandbox pipeline failure", extra={"sandbox_id": run.sandbox_id})
            result = ExecutionResult.failure(str(e) or e.__class__.__name__)
        finally:
            await self._teardown(run)

        record_execution(runtime=cfg.runtime.name, success=result.ok)
        logger.info(
            "Execution finished" if result.ok else "Execution failed",
            extra={"duration_ms": round((time.monotonic() - started) * 1000, 1)},
        )
        return result

    # ─── Pipeline ────────────────────────────────────────────

    async def _run_pipeline(self, request: ExecutionRequest, run: _PipelineRun) -> ExecutionResult:
        cfg = self._config
        runtime = cfg.runtime

        try:
            run.handle = await self._provider.create(timeout_seconds=cfg.timeout_seconds)
        except Exception as e:
            raise ProvisioningError(f"Sandbox creation failed: {e}") from e
        handle = run.handle
        self._checkpoint(Checkpoint.PROVISIONED, run)

        if request.dependencies:
            try:
                await handle.run_command(runtime.install_line(request.dependencies))
            except Exception as e:
                raise DependencyInstallError(request.dependencies, str(e)) from e
            self._checkpoint(Checkpoint.DEPENDENCIES_INSTALLED, run, packages=request.dependencies)

        for path, content in request.files.items():
            try:
                await handle.write_file(runtime.path_for(path), content)
            except Exception as e:
                raise FileStagingError(path, str(e)) from e

        envs = build_sandbox_env(
            os.environ if self._environ is None else self._environ,
            request.arguments,
            cfg.forward_rules,
        )

        try:
            output = await handle.run_code(request.program, language=runtime.language, envs=envs)
        except Exception as e:
            raise ExecutionFaultError(f"Code execution failed: {e}") from e
        self._checkpoint(Checkpoint.EXECUTED, run, faulted=output.fault is not None)

        error_message = json.dumps(output.fault, indent=2) if output.fault else None
        result_value = None if error_message else extract_json_result(output.stdout)

        collection = await self._collect_files(handle, runtime)
        self._checkpoint(
            Checkpoint.COLLECTED,
            run,
            status=collection.status.value,
            files=sorted(collection.files),
        )

        return ExecutionResult(
            stdout=output.stdout,
            stderr=output.stderr,
            result_value=result_value,
            output_files=collection.as_output_files(),
            error_message=error_message,
        )

    async def _collect_files(self, handle: SandboxHandle, runtime: RuntimeProfile) -> FileCollection:
        """Read back files the program left in the working directory.

        Failures here never fail the execution.
        """
        try:
            entries = await handle.list_files(runtime.workdir)
        except Exception as e:
            logger.debug(f"File listing unavailable: {e}", extra={"sandbox_id": handle.sandbox_id})
            return FileCollection.unavailable(str(e))

        files: dict[str, str] = {}
        for entry in entries:
            if not entry.is_file or not runtime.is_output_file(entry.name):
                continue
            try:
                files[entry.name] = await handle.read_file(runtime.path_for(entry.name))
            except Exception as e:
                logger.debug(f"Skipping unreadable file {entry.name}: {e}", extra={"sandbox_id": handle.sandbox_id})
        return FileCollection.from_files(files)

    async def _teardown(self, run: _PipelineRun) -> None:
        """Kill the sandbox if one was acquired. Failures are logged only."""
        if run.handle is None:
            return
        run.phase_started = time.monotonic()
        try:
            await asyncio.wait_for(run.handle.kill(), timeout=self._config.teardown_timeout_seconds)
        except Exception as e:
            logger.warning(f"Sandbox teardown failed: {e}", extra={"sandbox_id": run.sandbox_id})
        self._checkpoint(Checkpoint.TORN_DOWN, run)

    def _checkpoint(self, checkpoint: Checkpoint, run: _PipelineRun, **details: Any) -> None:
        now = time.monotonic()
        elapsed_ms = (now - run.phase_started) * 1000
        run.phase_started = now
        details["sandbox_id"] = run.sandbox_id
        for observer in self._observers:
            try:
                observer.on_checkpoint(checkpoint, elapsed_ms=elapsed_ms, details=details)
            except Exception as e:
                logger.warning(f"Observer {observer.__class__.__name__} failed: {e}")

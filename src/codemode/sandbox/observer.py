"""
Execution observers.

Instrumentation hooks invoked at fixed pipeline checkpoints. Observers
only watch: nothing they do or raise changes what the adapter returns.
"""

from __future__ import annotations

from typing import Any

from codemode.core.models import Checkpoint
from codemode.logging import get_logger
from codemode.observability.metrics import record_phase_duration

logger = get_logger("codemode.sandbox.observer")


class ExecutionObserver:
    """Base observer; override on_checkpoint."""

    def on_checkpoint(
        self,
        checkpoint: Checkpoint,
        *,
        elapsed_ms: float,
        details: dict[str, Any],
    ) -> None:
        """Called after a checkpoint is reached.

        ``elapsed_ms`` is the duration of the phase that just finished.
        """


class LoggingObserver(ExecutionObserver):
    """Logs phase timings at INFO."""

    MESSAGES = {
        Checkpoint.PROVISIONED: "Sandbox created",
        Checkpoint.DEPENDENCIES_INSTALLED: "Dependencies installed",
        Checkpoint.EXECUTED: "Code executed",
        Checkpoint.COLLECTED: "Output collected",
        Checkpoint.TORN_DOWN: "Sandbox torn down",
    }

    def on_checkpoint(self, checkpoint, *, elapsed_ms, details):
        logger.info(
            self.MESSAGES[checkpoint],
            extra={
                "phase": checkpoint.value,
                "sandbox_id": details.get("sandbox_id"),
                "duration_ms": round(elapsed_ms, 1),
            },
        )


class MetricsObserver(ExecutionObserver):
    """Records phase durations as OpenTelemetry histograms."""

    def on_checkpoint(self, checkpoint, *, elapsed_ms, details):
        record_phase_duration(phase=checkpoint.value, duration_ms=elapsed_ms)


class RecordingObserver(ExecutionObserver):
    """Keeps every checkpoint in memory, in order.

    Used by the CLI's verbose output and by tests.
    """

    def __init__(self) -> None:
        self.events: list[tuple[Checkpoint, float, dict[str, Any]]] = []

    def on_checkpoint(self, checkpoint, *, elapsed_ms, details):
        self.events.append((checkpoint, elapsed_ms, dict(details)))

    @property
    def checkpoints(self) -> list[Checkpoint]:
        return [event[0] for event in self.events]

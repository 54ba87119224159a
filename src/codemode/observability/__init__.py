"""Codemode Observability — OpenTelemetry metrics.

Without an OpenTelemetry SDK configured, all metric calls are no-ops.
"""

from codemode.observability.metrics import (
    record_execution,
    record_phase_duration,
    record_tool_call,
)

__all__ = [
    "record_execution",
    "record_phase_duration",
    "record_tool_call",
]

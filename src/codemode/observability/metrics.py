"""OpenTelemetry metrics for codemode.

Counters and histograms for sandbox executions, pipeline phases and tool
calls. All functions are no-ops if opentelemetry is not installed or not
configured.
"""

from __future__ import annotations

_meter = None
_executions_total = None
_phase_duration = None
_tool_calls_total = None
_initialized = False


def _ensure_meter() -> bool:
    """Lazily initialize the meter and instruments."""
    global _meter, _executions_total, _phase_duration, _tool_calls_total, _initialized

    if _initialized:
        return _meter is not None

    _initialized = True

    try:
        from opentelemetry import metrics

        _meter = metrics.get_meter("codemode", "0.1.0")

        _executions_total = _meter.create_counter(
            "codemode.executions.total",
            description="Total sandbox executions",
            unit="1",
        )
        _phase_duration = _meter.create_histogram(
            "codemode.phase.duration_ms",
            description="Duration of each sandbox pipeline phase",
            unit="ms",
        )
        _tool_calls_total = _meter.create_counter(
            "codemode.tool_calls.total",
            description="Total tool call executions",
            unit="1",
        )
        return True
    except ImportError:
        return False


def record_execution(*, runtime: str, success: bool) -> None:
    """Record a finished adapter invocation."""
    if not _ensure_meter() or _executions_total is None:
        return
    _executions_total.add(
        1,
        {"codemode.runtime": runtime, "codemode.success": str(success)},
    )


def record_phase_duration(*, phase: str, duration_ms: float) -> None:
    """Record how long one pipeline phase took."""
    if not _ensure_meter() or _phase_duration is None:
        return
    _phase_duration.record(duration_ms, {"codemode.phase": phase})


def record_tool_call(*, tool_name: str, is_error: bool) -> None:
    """Record a tool call execution."""
    if not _ensure_meter() or _tool_calls_total is None:
        return
    _tool_calls_total.add(
        1,
        {"codemode.tool_name": tool_name, "codemode.is_error": str(is_error)},
    )


"""
Tool execution metrics.

Per-tool counters and durations collected by the ToolExecutor, plus a
report with the busiest, fastest and slowest tools.
"""

from __future__ import annotations

import statistics
import threading
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

_MAX_SAMPLES = 1000


@dataclass
class ToolMetrics:
    """Metrics for one tool.

    Attributes:
        name: Tool name
        total_executions: Executions recorded, including cache hits
        successful_executions: Executions that returned a result
        failed_executions: Executions that returned an error
        cache_hits: Executions answered from the result cache
        retries: Failed attempts that were retried or gave up
        total_duration: Sum of execution durations, in seconds
        min_duration: Fastest execution, in seconds
        max_duration: Slowest execution, in seconds
        last_execution: When the tool last ran (UTC)
        error_counts: Failures per error type
    """

    name: str
    total_executions: int = 0
    successful_executions: int = 0
    failed_executions: int = 0
    cache_hits: int = 0
    retries: int = 0
    total_duration: float = 0.0
    min_duration: float | None = None
    max_duration: float = 0.0
    last_execution: datetime | None = None
    error_counts: dict[str, int] = field(default_factory=dict)
    duration_samples: deque[float] = field(
        default_factory=lambda: deque(maxlen=_MAX_SAMPLES), repr=False
    )

    def record(
        self,
        duration: float,
        success: bool,
        error_type: str | None = None,
        retries: int = 0,
        cached: bool = False,
    ) -> None:
        self.total_executions += 1
        self.total_duration += duration
        self.retries += retries
        self.last_execution = datetime.now(timezone.utc)
        self.duration_samples.append(duration)
        if cached:
            self.cache_hits += 1
        if success:
            self.successful_executions += 1
        else:
            self.failed_executions += 1
            key = error_type or "unknown"
            self.error_counts[key] = self.error_counts.get(key, 0) + 1
        if self.min_duration is None or duration < self.min_duration:
            self.min_duration = duration
        self.max_duration = max(self.max_duration, duration)

    @property
    def success_rate(self) -> float:
        """Fraction of executions that succeeded (0.0 to 1.0)."""
        if self.total_executions == 0:
            return 0.0
        return self.successful_executions / self.total_executions

    @property
    def failure_rate(self) -> float:
        if self.total_executions == 0:
            return 0.0
        return self.failed_executions / self.total_executions

    @property
    def average_duration(self) -> float:
        if self.total_executions == 0:
            return 0.0
        return self.total_duration / self.total_executions

    @property
    def p50_duration(self) -> float:
        """Median of the most recent durations, in seconds."""
        if not self.duration_samples:
            return 0.0
        return statistics.median(self.duration_samples)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "total_executions": self.total_executions,
            "successful_executions": self.successful_executions,
            "failed_executions": self.failed_executions,
            "cache_hits": self.cache_hits,
            "retries": self.retries,
            "success_rate": self.success_rate,
            "average_duration_ms": self.average_duration * 1000,
            "p50_duration_ms": self.p50_duration * 1000,
            "min_duration_ms": (self.min_duration or 0.0) * 1000,
            "max_duration_ms": self.max_duration * 1000,
            "last_execution": self.last_execution.isoformat() if self.last_execution else None,
            "error_counts": dict(self.error_counts),
        }


@dataclass
class GlobalMetrics:
    """Totals across all tools."""

    total_executions: int = 0
    total_successful: int = 0
    total_failed: int = 0
    total_duration: float = 0.0
    parallel_batches: int = 0
    parallel_calls: int = 0
    started_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def success_rate(self) -> float:
        if self.total_executions == 0:
            return 0.0
        return self.total_successful / self.total_executions

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_executions": self.total_executions,
            "total_successful": self.total_successful,
            "total_failed": self.total_failed,
            "success_rate": self.success_rate,
            "total_duration_ms": self.total_duration * 1000,
            "parallel_batches": self.parallel_batches,
            "parallel_calls": self.parallel_calls,
            "started_at": self.started_at.isoformat(),
        }


@dataclass
class MetricsReport:
    """Point-in-time copy of collected metrics.

    Attributes:
        global_metrics: Totals across all tools
        tool_metrics: Metrics per tool name
        uptime_seconds: Time since the collector started or was reset
        generated_at: When the report was built (UTC)
    """

    global_metrics: GlobalMetrics
    tool_metrics: dict[str, ToolMetrics]
    uptime_seconds: float
    generated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def most_used_tool(self) -> ToolMetrics | None:
        return max(self.tool_metrics.values(), key=lambda m: m.total_executions, default=None)

    def fastest_tool(self) -> ToolMetrics | None:
        ran = [m for m in self.tool_metrics.values() if m.total_executions]
        return min(ran, key=lambda m: m.average_duration, default=None)

    def slowest_tool(self) -> ToolMetrics | None:
        ran = [m for m in self.tool_metrics.values() if m.total_executions]
        return max(ran, key=lambda m: m.average_duration, default=None)

    @property
    def executions_per_second(self) -> float:
        if self.uptime_seconds <= 0:
            return 0.0
        return self.global_metrics.total_executions / self.uptime_seconds

    def to_dict(self) -> dict[str, Any]:
        return {
            "global": self.global_metrics.to_dict(),
            "tools": {name: m.to_dict() for name, m in sorted(self.tool_metrics.items())},
            "uptime_seconds": self.uptime_seconds,
            "executions_per_second": self.executions_per_second,
            "generated_at": self.generated_at.isoformat(),
        }


class MetricsCollector:
    """Thread-safe collector for tool execution metrics.

    Example:
        >>> metrics = MetricsCollector()
        >>> executor = ToolExecutor(registry, metrics=metrics)
        >>> await executor.execute("get_weather", {"city": "Beijing"})
        >>> report = metrics.generate_report()
        >>> print(report.tool_metrics["get_weather"].success_rate)
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._tools: dict[str, ToolMetrics] = {}
        self._global = GlobalMetrics()
        self._started = time.monotonic()

    def record_execution(
        self,
        tool_name: str,
        duration: float,
        success: bool,
        error_type: str | None = None,
        retries: int = 0,
        cached: bool = False,
    ) -> None:
        with self._lock:
            metrics = self._tools.get(tool_name)
            if metrics is None:
                metrics = self._tools[tool_name] = ToolMetrics(name=tool_name)
            metrics.record(duration, success, error_type, retries, cached)

            self._global.total_executions += 1
            self._global.total_duration += duration
            if success:
                self._global.total_successful += 1
            else:
                self._global.total_failed += 1

    def record_parallel_execution(self, count: int) -> None:
        with self._lock:
            self._global.parallel_batches += 1
            self._global.parallel_calls += count

    def get_tool_metrics(self, tool_name: str) -> ToolMetrics | None:
        with self._lock:
            metrics = self._tools.get(tool_name)
            return _copy_tool(metrics) if metrics is not None else None

    def get_global_metrics(self) -> GlobalMetrics:
        with self._lock:
            return GlobalMetrics(**vars(self._global))

    def generate_report(self) -> MetricsReport:
        with self._lock:
            return MetricsReport(
                global_metrics=GlobalMetrics(**vars(self._global)),
                tool_metrics={name: _copy_tool(m) for name, m in self._tools.items()},
                uptime_seconds=time.monotonic() - self._started,
            )

    def reset(self) -> None:
        with self._lock:
            self._tools.clear()
            self._global = GlobalMetrics()
            self._started = time.monotonic()


def _copy_tool(metrics: ToolMetrics) -> ToolMetrics:
    copy = ToolMetrics(**{k: v for k, v in vars(metrics).items() if k != "duration_samples"})
    copy.error_counts = dict(metrics.error_counts)
    copy.duration_samples.extend(metrics.duration_samples)
    return copy

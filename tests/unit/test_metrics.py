"""Tests for tool execution metrics."""

import pytest

from zai_lib_python.telemetry import MetricsCollector, ToolMetrics
from zai_lib_python.tools import ExecutionConfig, ToolCallCache, ToolExecutor, ToolRegistry


class TestToolMetrics:
    """Tests for ToolMetrics."""

    def test_empty(self) -> None:
        metrics = ToolMetrics(name="t")
        assert metrics.success_rate == 0.0
        assert metrics.failure_rate == 0.0
        assert metrics.average_duration == 0.0
        assert metrics.p50_duration == 0.0
        assert metrics.to_dict()["last_execution"] is None

    def test_record(self) -> None:
        metrics = ToolMetrics(name="get_weather")
        metrics.record(0.1, True)
        metrics.record(0.3, True, retries=1)
        metrics.record(0.2, False, error_type="timeout", retries=2)
        metrics.record(0.4, False)

        assert metrics.total_executions == 4
        assert metrics.successful_executions == 2
        assert metrics.failed_executions == 2
        assert metrics.success_rate == 0.5
        assert metrics.failure_rate == 0.5
        assert metrics.retries == 3
        assert metrics.min_duration == 0.1
        assert metrics.max_duration == 0.4
        assert metrics.average_duration == pytest.approx(0.25)
        assert metrics.p50_duration == pytest.approx(0.25)
        assert metrics.error_counts == {"timeout": 1, "unknown": 1}
        assert metrics.last_execution is not None

    def test_to_dict_in_milliseconds(self) -> None:
        metrics = ToolMetrics(name="t")
        metrics.record(0.5, True, cached=True)
        data = metrics.to_dict()
        assert data["average_duration_ms"] == pytest.approx(500)
        assert data["cache_hits"] == 1
        assert data["success_rate"] == 1.0


class TestMetricsCollector:
    """Tests for MetricsCollector."""

    def test_per_tool_and_global(self) -> None:
        collector = MetricsCollector()
        collector.record_execution("a", 0.1, True)
        collector.record_execution("a", 0.1, False, error_type="execution_failed")
        collector.record_execution("b", 0.5, True)

        a = collector.get_tool_metrics("a")
        assert a is not None
        assert (a.total_executions, a.successful_executions, a.failed_executions) == (2, 1, 1)
        assert collector.get_tool_metrics("missing") is None

        totals = collector.get_global_metrics()
        assert (totals.total_executions, totals.total_successful, totals.total_failed) == (3, 2, 1)
        assert totals.success_rate == pytest.approx(2 / 3)

    def test_snapshots_are_copies(self) -> None:
        collector = MetricsCollector()
        collector.record_execution("a", 0.1, False, error_type="timeout")
        snapshot = collector.get_tool_metrics("a")
        snapshot.error_counts["timeout"] = 99
        snapshot.total_executions = 99

        again = collector.get_tool_metrics("a")
        assert again.error_counts == {"timeout": 1}
        assert again.total_executions == 1

    def test_report(self) -> None:
        collector = MetricsCollector()
        for _ in range(3):
            collector.record_execution("busy", 0.2, True)
        collector.record_execution("fast", 0.01, True)
        collector.record_execution("slow", 2.0, True)
        collector.record_parallel_execution(2)

        report = collector.generate_report()

        assert report.most_used_tool().name == "busy"
        assert report.fastest_tool().name == "fast"
        assert report.slowest_tool().name == "slow"
        assert report.uptime_seconds >= 0
        data = report.to_dict()
        assert list(data["tools"]) == ["busy", "fast", "slow"]
        assert data["global"]["total_executions"] == 5
        assert data["global"]["parallel_batches"] == 1
        assert data["global"]["parallel_calls"] == 2

    def test_empty_report(self) -> None:
        report = MetricsCollector().generate_report()
        assert report.most_used_tool() is None
        assert report.fastest_tool() is None
        assert report.slowest_tool() is None

    def test_reset(self) -> None:
        collector = MetricsCollector()
        collector.record_execution("a", 0.1, True)
        collector.record_parallel_execution(3)
        collector.reset()

        assert collector.get_tool_metrics("a") is None
        assert collector.get_global_metrics().total_executions == 0
        assert collector.get_global_metrics().parallel_calls == 0


class TestExecutorMetrics:
    """Tests for metrics recorded by ToolExecutor."""

    @pytest.mark.asyncio
    async def test_executions_recorded(self) -> None:
        registry = ToolRegistry()
        registry.register("echo", {"type": "object"}, lambda args: args)

        async def boom(args: dict) -> None:
            raise RuntimeError("boom")

        registry.register("boom", {"type": "object"}, boom)
        metrics = MetricsCollector()
        executor = ToolExecutor(registry, ExecutionConfig(max_retries=2, retry_delay=0), metrics=metrics)

        await executor.execute("echo", {})
        await executor.execute_parallel([("echo", {}), ("boom", {}), ("missing", {})])

        echo = metrics.get_tool_metrics("echo")
        assert (echo.total_executions, echo.success_rate) == (2, 1.0)

        failed = metrics.get_tool_metrics("boom")
        assert failed.failed_executions == 1
        assert failed.error_counts == {"execution_failed": 1}
        assert failed.retries == 2

        assert metrics.get_tool_metrics("missing").error_counts == {"tool_not_found": 1}

        totals = metrics.get_global_metrics()
        assert totals.total_executions == 4
        assert (totals.parallel_batches, totals.parallel_calls) == (1, 3)
        assert executor.metrics is metrics

    @pytest.mark.asyncio
    async def test_cache_hits_recorded(self) -> None:
        registry = ToolRegistry()
        registry.register("echo", {"type": "object"}, lambda args: args)
        metrics = MetricsCollector()
        executor = ToolExecutor(registry, cache=ToolCallCache(), metrics=metrics)

        await executor.execute("echo", {"a": 1})
        await executor.execute("echo", {"a": 1})

        echo = metrics.get_tool_metrics("echo")
        assert echo.total_executions == 2
        assert echo.cache_hits == 1
        assert echo.successful_executions == 2

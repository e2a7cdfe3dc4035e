"""
Telemetry for zai-lib-python: structured, masked logging and tool metrics.
"""

from zai_lib_python.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    SensitiveDataMasker,
    TextFormatter,
    ZaiLogger,
    clear_log_context,
    get_log_context,
    get_logger,
    log_context,
    set_log_context,
)
from zai_lib_python.telemetry.metrics import (
    GlobalMetrics,
    MetricsCollector,
    MetricsReport,
    ToolMetrics,
)

__all__ = [
    # Logging
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "SensitiveDataMasker",
    "TextFormatter",
    "ZaiLogger",
    "clear_log_context",
    "get_log_context",
    "get_logger",
    "log_context",
    "set_log_context",
    # Metrics
    "GlobalMetrics",
    "MetricsCollector",
    "MetricsReport",
    "ToolMetrics",
]

"""
Structured logging for zai-lib-python.

Provides context-aware logging with sensitive data masking. Every module
in the library logs through ``get_logger(__name__)``; keyword arguments
become structured fields.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
import time
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, ClassVar

_log_context: ContextVar[dict[str, Any] | None] = ContextVar("zai_log_context", default=None)

_REDACTED = "***REDACTED***"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_logging_level(self) -> int:
        """Convert to standard logging level."""
        return getattr(logging, self.value)

    @classmethod
    def from_env(cls, default: LogLevel | None = None) -> LogLevel:
        """Read the level from ZAI_LOG_LEVEL, falling back to ``default`` (WARNING)."""
        raw = os.getenv("ZAI_LOG_LEVEL", "").upper()
        try:
            return cls(raw)
        except ValueError:
            return default or cls.WARNING


@dataclass
class LogContext:
    """Request- or session-scoped logging context.

    Attributes:
        request_id: Client request identifier
        session_id: Realtime session identifier
        model: Model name
        tool_name: Tool being executed
        extra: Additional context fields
    """

    request_id: str | None = None
    session_id: str | None = None
    model: str | None = None
    tool_name: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result: dict[str, Any] = {}
        for key in ("request_id", "session_id", "model", "tool_name"):
            value = getattr(self, key)
            if value:
                result[key] = value
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LogContext:
        known = {k: data[k] for k in ("request_id", "session_id", "model", "tool_name") if k in data}
        extra = {k: v for k, v in data.items() if k not in known}
        return cls(**known, extra=extra)


def get_log_context() -> LogContext:
    """Get current logging context."""
    data = _log_context.get()
    return LogContext.from_dict(data) if data else LogContext()


def set_log_context(context: LogContext) -> None:
    """Set logging context for current async context."""
    _log_context.set(context.to_dict())


def clear_log_context() -> None:
    """Clear logging context."""
    _log_context.set(None)


@contextmanager
def log_context(**fields: Any) -> Iterator[None]:
    """Temporarily merge fields into the logging context.

    Example:
        >>> with log_context(session_id="sess_1"):
        ...     logger.info("connected")
    """
    current = _log_context.get() or {}
    token = _log_context.set({**current, **{k: v for k, v in fields.items() if v is not None}})
    try:
        yield
    finally:
        _log_context.reset(token)


class SensitiveDataMasker:
    """Masks sensitive data in log messages."""

    DEFAULT_PATTERNS: ClassVar[list[tuple[str, str]]] = [
        # Zhipu keys: <32 hex id>.<secret>
        (r"\b[0-9a-f]{32}\.[A-Za-z0-9]{8,}\b", _REDACTED),
        (r"(api[_-]?key[\"']?\s*[:=]\s*[\"']?)([^\"'\s]+)", r"\1" + _REDACTED),
        (r"(Bearer\s+)([^\s\"']+)", r"\1" + _REDACTED),
        (r"(Authorization[\"']?\s*[:=]\s*[\"']?)(?!Bearer)([^\"'\s]+)", r"\1" + _REDACTED),
        (r"(ZAI_API_KEY=)([^\s]+)", r"\1" + _REDACTED),
    ]

    SENSITIVE_KEYS: ClassVar[tuple[str, ...]] = ("key", "token", "secret", "password", "auth")

    def __init__(self, patterns: list[tuple[str, str]] | None = None) -> None:
        """Initialize masker with patterns.

        Args:
            patterns: List of (pattern, replacement) tuples
        """
        self._patterns = [
            (re.compile(p, re.IGNORECASE), r)
            for p, r in (patterns or self.DEFAULT_PATTERNS)
        ]

    def mask(self, text: str) -> str:
        """Mask sensitive data in text."""
        result = text
        for pattern, replacement in self._patterns:
            result = pattern.sub(replacement, result)
        return result

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask sensitive values in a dictionary, recursing into nested dicts and lists."""
        result: dict[str, Any] = {}
        for key, value in data.items():
            if any(s in key.lower() for s in self.SENSITIVE_KEYS):
                result[key] = _REDACTED
            else:
                result[key] = self._mask_value(value)
        return result

    def _mask_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, dict):
            return self.mask_dict(value)
        if isinstance(value, list):
            return [self._mask_value(v) for v in value]
        return value


class JsonFormatter(logging.Formatter):
    """JSON log formatter, one object per line."""

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_timestamp: bool = True,
    ) -> None:
        super().__init__()
        self._masker = masker or SensitiveDataMasker()
        self._include_timestamp = include_timestamp

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "level": record.levelname,
            "logger": record.name,
            "message": self._masker.mask(record.getMessage()),
        }

        if self._include_timestamp:
            log_data["timestamp"] = time.strftime(
                "%Y-%m-%dT%H:%M:%S", time.gmtime(record.created)
            ) + f".{int(record.msecs):03d}Z"

        if context_dict := get_log_context().to_dict():
            log_data["context"] = self._masker.mask_dict(context_dict)

        if hasattr(record, "extra_fields"):
            log_data.update(self._masker.mask_dict(record.extra_fields))

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable text formatter.

    Structured fields are appended as ``key=value`` pairs.
    """

    def __init__(
        self,
        masker: SensitiveDataMasker | None = None,
        include_context: bool = True,
    ) -> None:
        super().__init__(
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        self._masker = masker or SensitiveDataMasker()
        self._include_context = include_context

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as text."""
        original_msg = record.msg
        record.msg = self._masker.mask(str(record.msg))
        try:
            result = super().format(record)
        finally:
            record.msg = original_msg

        pairs: dict[str, Any] = {}
        if hasattr(record, "extra_fields"):
            pairs.update(self._masker.mask_dict(record.extra_fields))
        if self._include_context:
            pairs.update(self._masker.mask_dict(get_log_context().to_dict()))
        if pairs:
            result = f"{result} | " + " ".join(f"{k}={v}" for k, v in pairs.items())

        return result


class ZaiLogger:
    """Logger for zai-lib-python with structured logging support.

    Example:
        >>> logger = ZaiLogger.get_logger("zai_lib_python.realtime")
        >>> logger.info("Session connected", session_id="sess_123")
    """

    _loggers: ClassVar[dict[str, logging.Logger]] = {}
    _level: ClassVar[LogLevel] = LogLevel.from_env()
    _handler: ClassVar[logging.Handler | None] = None

    @classmethod
    def configure(
        cls,
        level: LogLevel = LogLevel.INFO,
        format: str = "text",
        stream: Any = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Configure global logging settings.

        Args:
            level: Log level
            format: Output format ('json' or 'text')
            stream: Output stream (default: stderr)
            masker: Sensitive data masker
        """
        cls._level = level

        formatter: logging.Formatter
        if format == "json":
            formatter = JsonFormatter(masker=masker)
        else:
            formatter = TextFormatter(masker=masker)

        cls._handler = logging.StreamHandler(stream or sys.stderr)
        cls._handler.setFormatter(formatter)
        cls._handler.setLevel(level.to_logging_level())

        for logger in cls._loggers.values():
            logger.handlers.clear()
            logger.addHandler(cls._handler)
            logger.setLevel(level.to_logging_level())

    @classmethod
    def get_logger(cls, name: str) -> ZaiLogger:
        """Get or create a logger."""
        if name not in cls._loggers:
            logger = logging.getLogger(name)
            logger.setLevel(cls._level.to_logging_level())

            if cls._handler:
                logger.handlers.clear()
                logger.addHandler(cls._handler)
            elif not logger.handlers:
                handler = logging.StreamHandler(sys.stderr)
                handler.setFormatter(TextFormatter())
                logger.addHandler(handler)

            logger.propagate = False
            cls._loggers[name] = logger

        return cls(cls._loggers[name])

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def name(self) -> str:
        return self._logger.name

    def is_enabled_for(self, level: LogLevel) -> bool:
        return self._logger.isEnabledFor(level.to_logging_level())

    def _log(
        self, level: int, msg: str, exc_info: bool = False, **kwargs: Any
    ) -> None:
        extra = {"extra_fields": kwargs} if kwargs else {}
        self._logger.log(level, msg, exc_info=exc_info, extra=extra)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, exc_info=exc_info, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log exception with traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **kwargs)


def get_logger(name: str) -> ZaiLogger:
    """Get a logger instance.

    Args:
        name: Logger name, usually ``__name__``

    Returns:
        Logger instance
    """
    return ZaiLogger.get_logger(name)

"""工具执行器：超时、重试与并行执行。

Tool executor.

Runs tools by name with argument validation, a per-call timeout and
retry with backoff. Failures are returned as data (ExecutionResult) so
that one failing call never affects its siblings. A result cache and a
metrics collector can be attached.
"""

from __future__ import annotations

import asyncio
import json
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

from zai_lib_python.errors import (
    ExecutionFailedError,
    ToolError,
    ToolNotFoundError,
    ToolTimeoutError,
)
from zai_lib_python.resilience.retry import BackoffStrategy, RetryConfig, RetryPolicy
from zai_lib_python.telemetry import get_logger, log_context
from zai_lib_python.types.message import Message
from zai_lib_python.types.tool import ToolCall, parse_arguments

if TYPE_CHECKING:
    from collections.abc import Sequence

    from zai_lib_python.telemetry.metrics import MetricsCollector
    from zai_lib_python.tools.cache import ToolCallCache
    from zai_lib_python.tools.core import Tool
    from zai_lib_python.tools.registry import ToolRegistry

ToolInvocation = ToolCall | tuple[str, str | dict[str, Any] | None]

logger = get_logger(__name__)


@dataclass
class ExecutionConfig:
    """Tool execution settings.

    Attributes:
        timeout: Per-attempt timeout in seconds
        max_retries: Total attempts for retryable failures; the executor
            stops once this many attempts have failed (at least one
            attempt is always made)
        retry_delay: Delay before the first retry, in seconds
        backoff: Fixed delay, or exponential growth from ``retry_delay``
        max_delay: Upper bound on any single retry delay, in seconds
        validate_parameters: Check arguments against the input schema
    """

    timeout: float = 30.0
    max_retries: int = 0
    retry_delay: float = 0.1
    backoff: BackoffStrategy = BackoffStrategy.FIXED
    max_delay: float = 30.0
    validate_parameters: bool = True

    def retry_config(self) -> RetryConfig:
        return RetryConfig(
            max_attempts=max(self.max_retries, 1),
            initial_delay=self.retry_delay,
            max_delay=self.max_delay,
            backoff=self.backoff,
        )


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of one tool execution.

    Attributes:
        tool_name: Tool that was requested
        success: Whether the handler returned a result
        result: The handler's JSON result (on success)
        error: Error message (on failure)
        error_type: ``tool_not_found``, ``invalid_parameters``,
            ``execution_failed`` or ``timeout`` (on failure)
        duration: Wall time across all attempts, in seconds
        retries: Number of failed attempts
        timestamp: When execution started (UTC)
        metadata: ``tool_call_id`` when run for a model call, ``cached``
            when served from the result cache
    """

    tool_name: str
    success: bool
    result: Any = None
    error: str | None = None
    error_type: str | None = None
    duration: float = 0.0
    retries: int = 0
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_content(self) -> str:
        """Message content for the model: the result, or an error object."""
        if self.success:
            if isinstance(self.result, str) and self.result:
                return self.result
            return json.dumps(self.result, ensure_ascii=False, default=str)
        return json.dumps(
            {"error": {"type": self.error_type, "message": self.error}},
            ensure_ascii=False,
        )


class ToolExecutor:
    """Executes registered tools.

    Successful results of retry-safe tools are served from ``cache`` when
    one is given. Every execution is recorded in ``metrics`` when given.

    Example:
        >>> executor = ToolExecutor(registry, ExecutionConfig(timeout=5, max_retries=3))
        >>> result = await executor.execute("get_weather", '{"city": "Beijing"}')
        >>> if not result.success:
        ...     print(result.error_type, result.error)
    """

    def __init__(
        self,
        registry: ToolRegistry,
        config: ExecutionConfig | None = None,
        *,
        cache: ToolCallCache | None = None,
        metrics: MetricsCollector | None = None,
    ) -> None:
        self._registry = registry
        self._config = config or ExecutionConfig()
        self._policy = RetryPolicy(self._config.retry_config())
        self._cache = cache
        self._metrics = metrics

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    @property
    def config(self) -> ExecutionConfig:
        return self._config

    @property
    def cache(self) -> ToolCallCache | None:
        return self._cache

    @property
    def metrics(self) -> MetricsCollector | None:
        return self._metrics

    def _prepare(
        self,
        name: str,
        arguments: str | dict[str, Any] | None,
    ) -> tuple[Tool, dict[str, Any], RetryPolicy]:
        tool = self._registry.lookup(name)
        if tool is None or not tool.metadata.enabled:
            raise ToolNotFoundError(name)
        parsed = parse_arguments(arguments or {}, tool_name=name)
        if self._config.validate_parameters:
            tool.validate(parsed)
        if not tool.metadata.retry_safe:
            return tool, parsed, RetryPolicy(RetryConfig.no_retry())
        return tool, parsed, self._policy

    async def _invoke(self, tool: Tool, arguments: dict[str, Any]) -> Any:
        # Handler errors are wrapped here so a TimeoutError raised by the
        # handler itself is not mistaken for the executor's deadline.
        try:
            return await tool.invoke(arguments)
        except ToolError:
            raise
        except Exception as e:
            raise ExecutionFailedError(
                f"Tool '{tool.name}' failed: {e}", tool_name=tool.name, cause=e
            ) from e

    async def _attempt(self, tool: Tool, arguments: dict[str, Any]) -> Any:
        try:
            return await asyncio.wait_for(self._invoke(tool, arguments), timeout=self._config.timeout)
        except asyncio.TimeoutError as e:
            raise ToolTimeoutError(tool.name, self._config.timeout) from e

    def _record(self, result: ExecutionResult) -> ExecutionResult:
        if self._metrics is not None:
            self._metrics.record_execution(
                result.tool_name,
                result.duration,
                result.success,
                error_type=result.error_type,
                retries=result.retries,
                cached=bool(result.metadata.get("cached")),
            )
        return result

    async def execute(
        self,
        name: str,
        arguments: str | dict[str, Any] | None = None,
        *,
        tool_call_id: str | None = None,
    ) -> ExecutionResult:
        """Execute a tool, returning failures as data.

        Args:
            name: Registered tool name
            arguments: JSON-encoded arguments or an already-parsed dict
            tool_call_id: Model call id, copied into ``result.metadata``

        Returns:
            ExecutionResult; never raises for tool failures
        """
        started = datetime.now(timezone.utc)
        start = time.perf_counter()
        metadata: dict[str, Any] = {}
        if tool_call_id is not None:
            metadata["tool_call_id"] = tool_call_id

        def failed(error: ToolError, retries: int = 0) -> ExecutionResult:
            return self._record(
                ExecutionResult(
                    tool_name=name,
                    success=False,
                    error=error.message,
                    error_type=error.error_type,
                    duration=time.perf_counter() - start,
                    retries=retries,
                    timestamp=started,
                    metadata=metadata,
                )
            )

        def succeeded(value: Any, retries: int = 0) -> ExecutionResult:
            return self._record(
                ExecutionResult(
                    tool_name=name,
                    success=True,
                    result=value,
                    duration=time.perf_counter() - start,
                    retries=retries,
                    timestamp=started,
                    metadata=metadata,
                )
            )

        with log_context(tool_name=name):
            try:
                tool, parsed, policy = self._prepare(name, arguments)
            except ToolError as e:
                logger.warning("Tool call rejected", error_type=e.error_type, error=e.message)
                return failed(e)

            cache = self._cache if tool.metadata.retry_safe else None
            if cache is not None:
                entry = await cache.get(name, parsed)
                if entry is not None:
                    logger.debug("Tool result served from cache", hits=entry.hits)
                    metadata["cached"] = True
                    return succeeded(entry.value)

            def on_retry(failures: int, error: Exception, delay: float) -> None:
                logger.info("Retrying tool", failures=failures, delay=delay, error=str(error))

            outcome = await policy.execute(lambda: self._attempt(tool, parsed), on_retry)

            if outcome.success:
                if cache is not None:
                    await cache.set(name, parsed, outcome.value)
                return succeeded(outcome.value, outcome.failures)

        error = outcome.error
        if not isinstance(error, ToolError):
            error = ExecutionFailedError(f"Tool '{name}' failed: {error}", tool_name=name, cause=error)
        logger.warning(
            "Tool execution failed",
            tool_name=name,
            error_type=error.error_type,
            attempts=outcome.attempts,
        )
        return failed(error, outcome.failures)

    async def execute_or_raise(
        self,
        name: str,
        arguments: str | dict[str, Any] | None = None,
    ) -> Any:
        """Execute a tool and return its result.

        Raises:
            ToolError: The subclass matching the failure
        """
        tool, parsed, policy = self._prepare(name, arguments)
        outcome = await policy.execute(lambda: self._attempt(tool, parsed))
        if outcome.error is not None:
            raise outcome.error
        return outcome.value

    async def execute_parallel(self, calls: Sequence[ToolInvocation]) -> list[ExecutionResult]:
        """Execute tool calls concurrently.

        Args:
            calls: Model ``ToolCall`` objects, or ``(name, arguments)``
                pairs

        Returns:
            Results in input order; results for ``ToolCall`` items carry
            the call id as ``metadata["tool_call_id"]``
        """
        pending = []
        for call in calls:
            if isinstance(call, ToolCall):
                pending.append(self.execute(call.name, call.arguments, tool_call_id=call.id))
            else:
                name, arguments = call
                pending.append(self.execute(name, arguments))
        if self._metrics is not None:
            self._metrics.record_parallel_execution(len(pending))
        return list(await asyncio.gather(*pending))

    async def execute_tool_calls(self, calls: Sequence[ToolCall]) -> list[Message]:
        """Execute model tool calls concurrently and build the replies.

        Returns:
            One ``tool`` message per call, in input order, keyed by the
            call id; failures carry ``{"error": {"type", "message"}}``
        """
        results = await self.execute_parallel(calls)
        return tool_messages(calls, results)


def tool_messages(calls: Sequence[ToolCall], results: Sequence[ExecutionResult]) -> list[Message]:
    """Build the ``tool`` reply message for each call/result pair."""
    return [
        Message.tool(result.to_content(), tool_call_id=call.id)
        for call, result in zip(calls, results)
    ]

"""
Retry policy with fixed or exponential backoff and optional jitter.

Used by the tool executor between handler attempts and by the chat
client for retryable remote errors on non-streaming requests.
"""

from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from zai_lib_python.errors import RemoteError, ToolError, TransportError

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

T = TypeVar("T")


class BackoffStrategy(str, Enum):
    """How the delay grows between attempts."""

    FIXED = "fixed"
    EXPONENTIAL = "exponential"


class JitterStrategy(str, Enum):
    """Jitter strategy for retry delays."""

    NONE = "none"
    FULL = "full"
    EQUAL = "equal"


@dataclass
class RetryConfig:
    """Configuration for retry policy.

    Attributes:
        max_attempts: Total attempts including the first (minimum 1)
        initial_delay: Delay before the second attempt, in seconds
        max_delay: Upper bound for any single delay, in seconds
        backoff: Fixed or exponential growth
        multiplier: Growth factor for exponential backoff
        jitter: Jitter strategy (none, full, equal)
    """

    max_attempts: int = 3
    initial_delay: float = 0.1
    max_delay: float = 30.0
    backoff: BackoffStrategy = BackoffStrategy.EXPONENTIAL
    multiplier: float = 2.0
    jitter: JitterStrategy = JitterStrategy.NONE

    @classmethod
    def no_retry(cls) -> RetryConfig:
        """Create a config that makes exactly one attempt."""
        return cls(max_attempts=1)

    @classmethod
    def fixed(cls, max_attempts: int, delay: float) -> RetryConfig:
        return cls(
            max_attempts=max_attempts,
            initial_delay=delay,
            max_delay=max(delay, 0.0),
            backoff=BackoffStrategy.FIXED,
        )


@dataclass
class RetryResult:
    """Result of a retry operation.

    Attributes:
        success: Whether the operation succeeded
        value: The result value (if success)
        error: The last error (if failed)
        attempts: Number of attempts made
        failures: Number of attempts that failed
        total_delay: Total time spent waiting between attempts, in seconds
    """

    success: bool
    value: Any = None
    error: Exception | None = None
    attempts: int = 0
    failures: int = 0
    total_delay: float = 0.0


def is_retryable_error(error: BaseException) -> bool:
    """Default retry predicate.

    Tool errors declare their own retryability; remote errors use their
    classification; transport failures are retried.
    """
    if isinstance(error, ToolError):
        return error.retryable
    if isinstance(error, RemoteError):
        return error.retryable
    return isinstance(error, TransportError)


class RetryPolicy:
    """Retry policy with fixed or exponential backoff.

    Example:
        >>> policy = RetryPolicy(RetryConfig(max_attempts=3, initial_delay=0.05))
        >>> result = await policy.execute(async_operation)
        >>> if not result.success:
        ...     print(f"Failed after {result.attempts} attempts")
    """

    def __init__(
        self,
        config: RetryConfig | None = None,
        retry_on: Callable[[BaseException], bool] | None = None,
    ) -> None:
        """Initialize retry policy.

        Args:
            config: Retry configuration
            retry_on: Predicate deciding whether an error is retryable
        """
        self._config = config or RetryConfig()
        self._retry_on = retry_on or is_retryable_error

    @property
    def config(self) -> RetryConfig:
        return self._config

    def calculate_delay(self, failures: int, retry_after: float | None = None) -> float:
        """Calculate the delay after ``failures`` failed attempts.

        Args:
            failures: Failed attempts so far (1-based)
            retry_after: Optional retry-after hint from server

        Returns:
            Delay in seconds
        """
        if retry_after is not None and retry_after > 0:
            return min(retry_after, self._config.max_delay)

        if self._config.backoff == BackoffStrategy.FIXED:
            base = self._config.initial_delay
        else:
            base = self._config.initial_delay * (self._config.multiplier ** max(failures - 1, 0))
        base = min(base, self._config.max_delay)

        if self._config.jitter == JitterStrategy.FULL:
            return random.uniform(0, base)
        if self._config.jitter == JitterStrategy.EQUAL:
            return base / 2 + random.uniform(0, base / 2)
        return base

    def should_retry(self, error: BaseException, failures: int) -> bool:
        """Check if another attempt is allowed after ``failures`` failures."""
        if failures >= max(self._config.max_attempts, 1):
            return False
        return self._retry_on(error)

    async def execute(
        self,
        operation: Callable[[], Awaitable[T]],
        on_retry: Callable[[int, Exception, float], None] | None = None,
    ) -> RetryResult:
        """Execute an operation with retry.

        Args:
            operation: Async operation to execute
            on_retry: Optional callback ``(failures, error, delay)`` called
                before each wait

        Returns:
            RetryResult with success status and value/error
        """
        failures = 0
        total_delay = 0.0

        while True:
            try:
                value = await operation()
            except Exception as e:
                failures += 1
                if not self.should_retry(e, failures):
                    return RetryResult(
                        success=False,
                        error=e,
                        attempts=failures,
                        failures=failures,
                        total_delay=total_delay,
                    )

                retry_after = e.retry_after if isinstance(e, RemoteError) else None
                delay = self.calculate_delay(failures, retry_after)
                total_delay += delay
                if on_retry:
                    on_retry(failures, e, delay)
                await asyncio.sleep(delay)
            else:
                return RetryResult(
                    success=True,
                    value=value,
                    attempts=failures + 1,
                    failures=failures,
                    total_delay=total_delay,
                )


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    config: RetryConfig | None = None,
    on_retry: Callable[[int, Exception, float], None] | None = None,
) -> T:
    """Execute an operation with retry, raising the last error on failure."""
    result = await RetryPolicy(config).execute(operation, on_retry)
    if result.error is not None:
        raise result.error
    return result.value

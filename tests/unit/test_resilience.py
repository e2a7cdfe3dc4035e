"""Tests for resilience module."""

import pytest

from zai_lib_python.errors import (
    ErrorClass,
    ExecutionFailedError,
    InvalidParametersError,
    RemoteError,
    TransportError,
)
from zai_lib_python.resilience import (
    BackoffStrategy,
    JitterStrategy,
    RetryConfig,
    RetryPolicy,
    is_retryable_error,
    with_retry,
)


def rate_limited(retry_after: float | None = None) -> RemoteError:
    return RemoteError(
        "slow down",
        status_code=429,
        error_class=ErrorClass.RATE_LIMITED,
        retryable=True,
        retry_after=retry_after,
    )


class TestRetryConfig:
    """Tests for RetryConfig."""

    def test_default_config(self) -> None:
        config = RetryConfig()
        assert config.max_attempts == 3
        assert config.backoff == BackoffStrategy.EXPONENTIAL
        assert config.jitter == JitterStrategy.NONE

    def test_no_retry_config(self) -> None:
        assert RetryConfig.no_retry().max_attempts == 1

    def test_fixed(self) -> None:
        config = RetryConfig.fixed(5, 0.2)
        assert config.max_attempts == 5
        assert config.initial_delay == 0.2
        assert config.backoff == BackoffStrategy.FIXED


class TestRetryPolicy:
    """Tests for RetryPolicy."""

    def test_calculate_delay_exponential(self) -> None:
        policy = RetryPolicy(RetryConfig(initial_delay=1.0, max_delay=60.0))
        assert policy.calculate_delay(1) == 1.0
        assert policy.calculate_delay(2) == 2.0
        assert policy.calculate_delay(3) == 4.0

    def test_calculate_delay_respects_max(self) -> None:
        policy = RetryPolicy(RetryConfig(initial_delay=1.0, max_delay=5.0))
        assert policy.calculate_delay(10) == 5.0

    def test_calculate_delay_fixed(self) -> None:
        policy = RetryPolicy(RetryConfig.fixed(4, 0.5))
        assert [policy.calculate_delay(n) for n in (1, 2, 3)] == [0.5, 0.5, 0.5]

    def test_retry_after_hint(self) -> None:
        policy = RetryPolicy(RetryConfig(initial_delay=1.0, max_delay=10.0))
        assert policy.calculate_delay(1, retry_after=3.0) == 3.0
        assert policy.calculate_delay(1, retry_after=30.0) == 10.0

    def test_full_jitter_bounds(self) -> None:
        policy = RetryPolicy(RetryConfig(initial_delay=1.0, jitter=JitterStrategy.FULL))
        for _ in range(50):
            assert 0.0 <= policy.calculate_delay(2) <= 2.0

    def test_equal_jitter_bounds(self) -> None:
        policy = RetryPolicy(RetryConfig(initial_delay=1.0, jitter=JitterStrategy.EQUAL))
        for _ in range(50):
            assert 1.0 <= policy.calculate_delay(2) <= 2.0

    def test_should_retry(self) -> None:
        policy = RetryPolicy(RetryConfig(max_attempts=3))
        assert policy.should_retry(rate_limited(), 1)
        assert policy.should_retry(rate_limited(), 2)
        assert not policy.should_retry(rate_limited(), 3)
        assert not policy.should_retry(ValueError("bug"), 1)

    def test_custom_predicate(self) -> None:
        policy = RetryPolicy(RetryConfig(max_attempts=2), retry_on=lambda e: isinstance(e, KeyError))
        assert policy.should_retry(KeyError("k"), 1)
        assert not policy.should_retry(rate_limited(), 1)

    @pytest.mark.asyncio
    async def test_execute_success_after_failures(self) -> None:
        attempts = 0

        async def operation() -> str:
            nonlocal attempts
            attempts += 1
            if attempts < 3:
                raise TransportError("connection reset")
            return "ok"

        seen: list[int] = []
        policy = RetryPolicy(RetryConfig(max_attempts=5, initial_delay=0.001))
        result = await policy.execute(operation, on_retry=lambda n, e, d: seen.append(n))

        assert result.success
        assert result.value == "ok"
        assert result.attempts == 3
        assert result.failures == 2
        assert seen == [1, 2]

    @pytest.mark.asyncio
    async def test_execute_gives_up(self) -> None:
        async def operation() -> None:
            raise rate_limited()

        policy = RetryPolicy(RetryConfig(max_attempts=2, initial_delay=0.001))
        result = await policy.execute(operation)

        assert not result.success
        assert isinstance(result.error, RemoteError)
        assert result.attempts == 2
        assert result.failures == 2

    @pytest.mark.asyncio
    async def test_non_retryable_stops_immediately(self) -> None:
        async def operation() -> None:
            raise InvalidParametersError("bad args")

        result = await RetryPolicy(RetryConfig(max_attempts=5, initial_delay=0.001)).execute(operation)
        assert result.attempts == 1
        assert result.total_delay == 0.0

    @pytest.mark.asyncio
    async def test_retry_after_used_between_attempts(self) -> None:
        attempts = 0

        async def operation() -> str:
            nonlocal attempts
            attempts += 1
            if attempts == 1:
                raise rate_limited(retry_after=0.01)
            return "ok"

        result = await RetryPolicy(RetryConfig(max_attempts=2, initial_delay=5.0)).execute(operation)
        assert result.success
        assert result.total_delay == pytest.approx(0.01)


class TestRetryPredicate:
    """Tests for is_retryable_error."""

    def test_defaults(self) -> None:
        assert is_retryable_error(TransportError("reset"))
        assert is_retryable_error(rate_limited())
        assert is_retryable_error(ExecutionFailedError("boom"))
        assert not is_retryable_error(InvalidParametersError("bad"))
        assert not is_retryable_error(RuntimeError("bug"))


class TestWithRetry:
    """Tests for with_retry."""

    @pytest.mark.asyncio
    async def test_returns_value(self) -> None:
        async def operation() -> int:
            return 7

        assert await with_retry(operation) == 7

    @pytest.mark.asyncio
    async def test_raises_last_error(self) -> None:
        async def operation() -> None:
            raise TransportError("down")

        with pytest.raises(TransportError):
            await with_retry(operation, RetryConfig(max_attempts=2, initial_delay=0.001))

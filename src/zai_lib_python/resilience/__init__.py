"""
Resilience helpers: retry with backoff.
"""

from zai_lib_python.resilience.retry import (
    BackoffStrategy,
    JitterStrategy,
    RetryConfig,
    RetryPolicy,
    RetryResult,
    is_retryable_error,
    with_retry,
)

__all__ = [
    "BackoffStrategy",
    "JitterStrategy",
    "RetryConfig",
    "RetryPolicy",
    "RetryResult",
    "is_retryable_error",
    "with_retry",
]

"""错误体系：提供结构化错误类型。

Error hierarchy for zai-lib-python.
"""

from zai_lib_python.errors.base import (
    DecodeError,
    ErrorContext,
    RealtimeError,
    RemoteError,
    RequestTimeoutError,
    TransportError,
    ValidationError,
    ZaiError,
)
from zai_lib_python.errors.classification import (
    ErrorClass,
    classify_business_code,
    classify_http_error,
    is_retryable,
)
from zai_lib_python.errors.tools import (
    ExecutionFailedError,
    InvalidParametersError,
    RegistrationError,
    ToolError,
    ToolNotFoundError,
    ToolTimeoutError,
)

__all__ = [
    # Base errors
    "DecodeError",
    "ErrorContext",
    "RealtimeError",
    "RemoteError",
    "RequestTimeoutError",
    "TransportError",
    "ValidationError",
    "ZaiError",
    # Classification
    "ErrorClass",
    "classify_business_code",
    "classify_http_error",
    "is_retryable",
    # Tool errors
    "ExecutionFailedError",
    "InvalidParametersError",
    "RegistrationError",
    "ToolError",
    "ToolNotFoundError",
    "ToolTimeoutError",
]

"""错误分类模块：将 HTTP 状态码和业务错误码映射到标准错误类别。

Error classification for remote API failures.

The service reports failures through the HTTP status and, inside the
body, a numeric business code (``{"error": {"code": "1214", ...}}``).
Both are folded into one ErrorClass.
"""

from __future__ import annotations

from enum import Enum
from typing import Any


class ErrorClass(str, Enum):
    """Standard error classification."""

    INVALID_REQUEST = "invalid_request"
    """Malformed request body, invalid parameters, or unsupported operation."""

    AUTHENTICATION = "authentication"
    """Missing/invalid credentials (API key/token)."""

    PERMISSION_DENIED = "permission_denied"
    """Caller is authenticated but not permitted to access the resource."""

    NOT_FOUND = "not_found"
    """Requested resource not found."""

    QUOTA_EXHAUSTED = "quota_exhausted"
    """Account balance, quota or plan limit exceeded."""

    RATE_LIMITED = "rate_limited"
    """Throttled due to request/token limits; typically retryable with backoff."""

    REQUEST_TOO_LARGE = "request_too_large"
    """Payload too large."""

    TIMEOUT = "timeout"
    """Request timed out or deadline exceeded."""

    SERVER_ERROR = "server_error"
    """Transient server-side failure (5xx)."""

    OVERLOADED = "overloaded"
    """Service overloaded / temporarily unavailable."""

    OTHER = "other"
    """Unknown classification."""


_RETRYABLE_CLASSES: set[ErrorClass] = {
    ErrorClass.RATE_LIMITED,
    ErrorClass.TIMEOUT,
    ErrorClass.SERVER_ERROR,
    ErrorClass.OVERLOADED,
}

_DEFAULT_STATUS_MAPPING: dict[int, ErrorClass] = {
    400: ErrorClass.INVALID_REQUEST,
    401: ErrorClass.AUTHENTICATION,
    403: ErrorClass.PERMISSION_DENIED,
    404: ErrorClass.NOT_FOUND,
    408: ErrorClass.TIMEOUT,
    413: ErrorClass.REQUEST_TOO_LARGE,
    422: ErrorClass.INVALID_REQUEST,
    429: ErrorClass.RATE_LIMITED,
    434: ErrorClass.PERMISSION_DENIED,  # no API permission for this feature
    435: ErrorClass.REQUEST_TOO_LARGE,  # file size over 100MB
    500: ErrorClass.SERVER_ERROR,
    502: ErrorClass.SERVER_ERROR,
    503: ErrorClass.OVERLOADED,
    504: ErrorClass.TIMEOUT,
}

# Business code ranges, inclusive
_BUSINESS_CODE_RANGES: list[tuple[int, int, ErrorClass]] = [
    (1000, 1004, ErrorClass.AUTHENTICATION),
    (1100, 1100, ErrorClass.AUTHENTICATION),
    (1110, 1121, ErrorClass.QUOTA_EXHAUSTED),
    (1200, 1234, ErrorClass.INVALID_REQUEST),
    (1300, 1309, ErrorClass.RATE_LIMITED),
]


def classify_business_code(code: int) -> ErrorClass | None:
    """Map a service business error code to an ErrorClass.

    Args:
        code: Numeric business code from the error body

    Returns:
        ErrorClass, or None when the code is outside the known ranges
    """
    for low, high, error_class in _BUSINESS_CODE_RANGES:
        if low <= code <= high:
            return error_class
    return None


def classify_http_error(
    status_code: int,
    body: dict[str, Any] | None = None,
) -> ErrorClass:
    """Classify an HTTP error into a standard error class.

    A recognised business code wins over the status code, except for
    statuses that are unambiguous on their own (401, 5xx).

    Args:
        status_code: HTTP status code
        body: Response body (parsed JSON)

    Returns:
        ErrorClass representing the error type
    """
    if status_code != 401 and status_code < 500:
        code = extract_business_code(body)
        if code is not None:
            by_code = classify_business_code(code)
            if by_code is not None:
                return by_code

    if status_code in _DEFAULT_STATUS_MAPPING:
        return _DEFAULT_STATUS_MAPPING[status_code]

    if 400 <= status_code < 500:
        return ErrorClass.INVALID_REQUEST
    if 500 <= status_code < 600:
        return ErrorClass.SERVER_ERROR

    return ErrorClass.OTHER


def is_retryable(error_class: ErrorClass) -> bool:
    """Check if an error class is retryable by default.

    Args:
        error_class: The error class to check

    Returns:
        True if the error is typically retryable
    """
    return error_class in _RETRYABLE_CLASSES


def extract_business_code(body: dict[str, Any] | None) -> int | None:
    """Extract the numeric business code from an error body.

    The service sends the code as a string (``"1214"``); ints are
    accepted too.
    """
    if not body:
        return None
    error = body.get("error")
    raw = error.get("code") if isinstance(error, dict) else body.get("code")
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def extract_error_message(body: dict[str, Any] | None) -> str | None:
    """Extract error message from response body.

    Supports:
    - {"error": {"code": "...", "message": "..."}}
    - {"error": "..."}
    - {"message": "..."} / {"msg": "..."}

    Args:
        body: Response body (parsed JSON)

    Returns:
        Error message if found, None otherwise
    """
    if not body:
        return None

    if "error" in body:
        error = body["error"]
        if isinstance(error, dict):
            msg = error.get("message")
            if isinstance(msg, str):
                return msg
        elif isinstance(error, str):
            return error

    for key in ("message", "msg"):
        msg = body.get(key)
        if isinstance(msg, str):
            return msg

    return None

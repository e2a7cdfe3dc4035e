"""错误基类：提供分层错误体系和结构化错误上下文。

Base error classes for zai-lib-python.

Provides a layered error hierarchy:
- ZaiError: Base class for all library errors
- TransportError: HTTP/WebSocket/network errors
- RequestTimeoutError: Overall request deadline exceeded
- DecodeError: Malformed JSON on the wire
- ValidationError: Local request validation errors
- RealtimeError: Realtime session protocol errors
- RemoteError: Remote API errors with classification
"""

from __future__ import annotations

import contextlib
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from zai_lib_python.errors.classification import ErrorClass


@dataclass
class ErrorContext:
    """Structured error context for diagnostics.

    Provides actionable information for debugging and error handling.
    """

    field_path: str | None = None
    """Path to the problematic field (e.g., 'messages[0].content')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'transport', 'decode', 'tools')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class ZaiError(Exception):
    """Base class for all zai-lib-python errors.

    All errors from this library inherit from this class, making it easy
    to catch all library errors with a single except clause.

    Attributes:
        message: Human-readable error message
        context: Optional structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message."""
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self, hint: str) -> ZaiError:
        """Add a hint to this error."""
        self.context.hint = hint
        return self


class TransportError(ZaiError):
    """Error during HTTP or WebSocket transport.

    Raised when:
    - Network connection failure
    - Socket closed unexpectedly
    - SSL/TLS errors
    - Proxy errors
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        url: str | None = None,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        if status_code:
            ctx.details["status_code"] = status_code
        super().__init__(message, ctx)
        self.url = url
        self.status_code = status_code
        self.__cause__ = cause


class RequestTimeoutError(TransportError):
    """The caller's overall deadline expired before the request finished."""

    def __init__(
        self,
        message: str,
        *,
        timeout: float | None = None,
        url: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="transport")
        if timeout is not None:
            ctx.details["timeout"] = timeout
        super().__init__(message, ctx, url=url)
        self.timeout = timeout


class DecodeError(ZaiError):
    """Malformed data received on the wire.

    Fatal to the stream or session that produced it; partial output is
    never dropped silently.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        payload: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="decode")
        if payload is not None:
            ctx.details["payload"] = payload[:200]
        super().__init__(message, ctx)
        self.payload = payload
        self.__cause__ = cause


class ValidationError(ZaiError):
    """Validation error for requests built locally.

    Raised when:
    - A message has neither content nor tool calls
    - Missing required fields
    - Capability mismatch (e.g., images sent to a text-only model)
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        field: str | None = None,
        expected: Any = None,
        actual: Any = None,
    ) -> None:
        ctx = context or ErrorContext(source="validation")
        if field:
            ctx.field_path = field
        if expected is not None:
            ctx.details["expected"] = expected
        if actual is not None:
            ctx.details["actual"] = actual
        super().__init__(message, ctx)
        self.field = field
        self.expected = expected
        self.actual = actual


class RealtimeError(ZaiError):
    """Realtime session error.

    Raised when the server answers the session handshake with an error
    event, or when a session is used outside its lifecycle.
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        code: str | None = None,
        error_type: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="realtime")
        if code:
            ctx.details["code"] = code
        if error_type:
            ctx.details["type"] = error_type
        super().__init__(message, ctx)
        self.code = code
        self.error_type = error_type


class RemoteError(ZaiError):
    """Error from the remote API.

    Represents errors returned by the service, with structured
    classification for retry decisions.

    Attributes:
        status_code: HTTP status code
        error_class: Standardized error classification
        business_code: Service business error code (e.g. 1214)
        retryable: Whether the error is retryable
        raw_error: Raw error response from the API
        retry_after: Suggested retry delay in seconds (from header)
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int,
        error_class: ErrorClass,
        business_code: int | None = None,
        retryable: bool = False,
        raw_error: dict[str, Any] | None = None,
        retry_after: float | None = None,
        request_id: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="remote")
        ctx.details["status_code"] = status_code
        ctx.details["error_class"] = error_class.value
        ctx.details["retryable"] = retryable
        if business_code is not None:
            ctx.details["business_code"] = business_code
        if request_id:
            ctx.details["request_id"] = request_id

        super().__init__(message, ctx)

        self.status_code = status_code
        self.error_class = error_class
        self.business_code = business_code
        self.retryable = retryable
        self.raw_error = raw_error or {}
        self.retry_after = retry_after
        self.request_id = request_id

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> RemoteError:
        """Create RemoteError from HTTP response.

        Args:
            status_code: HTTP status code
            body: Response body (parsed JSON)
            headers: Response headers

        Returns:
            RemoteError with appropriate classification
        """
        from zai_lib_python.errors.classification import (
            classify_http_error,
            extract_business_code,
            extract_error_message,
            is_retryable,
        )

        error_class = classify_http_error(status_code, body)
        message = extract_error_message(body) or f"HTTP {status_code}"

        retry_after = None
        if headers:
            retry_after_str = headers.get("retry-after") or headers.get("Retry-After")
            if retry_after_str:
                with contextlib.suppress(ValueError):
                    retry_after = float(retry_after_str)

        request_id = None
        if headers:
            request_id = headers.get("x-request-id") or headers.get("X-Request-Id")
        if body and isinstance(body.get("request_id"), str):
            request_id = body["request_id"]

        return cls(
            message=message,
            status_code=status_code,
            error_class=error_class,
            business_code=extract_business_code(body),
            retryable=is_retryable(error_class),
            raw_error=body,
            retry_after=retry_after,
            request_id=request_id,
        )

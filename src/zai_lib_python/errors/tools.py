"""工具错误：工具注册与执行过程中的错误类型。

Tool registration and execution errors.

Each error carries an ``error_type`` string that is used verbatim in the
JSON error payload sent back to the model and in ExecutionResult.
"""

from __future__ import annotations

from typing import ClassVar

from zai_lib_python.errors.base import ErrorContext, ZaiError


class ToolError(ZaiError):
    """Base class for tool errors.

    Attributes:
        tool_name: Name of the tool involved, if known
        retryable: Whether the executor may retry after this error
    """

    error_type: ClassVar[str] = "tool_error"
    retryable: ClassVar[bool] = False

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
        *,
        tool_name: str | None = None,
    ) -> None:
        ctx = context or ErrorContext(source="tools")
        if tool_name:
            ctx.details["tool_name"] = tool_name
        super().__init__(message, ctx)
        self.tool_name = tool_name


class ToolNotFoundError(ToolError):
    """No enabled tool is registered under the requested name."""

    error_type = "tool_not_found"

    def __init__(self, tool_name: str, message: str | None = None) -> None:
        super().__init__(message or f"Tool not found: {tool_name}", tool_name=tool_name)


class InvalidParametersError(ToolError):
    """Tool arguments are unparseable or fail the input schema."""

    error_type = "invalid_parameters"

    def __init__(
        self,
        message: str,
        *,
        tool_name: str | None = None,
        field: str | None = None,
    ) -> None:
        ctx = ErrorContext(source="tools", field_path=field)
        super().__init__(message, ctx, tool_name=tool_name)


class ExecutionFailedError(ToolError):
    """The tool handler raised while running."""

    error_type = "execution_failed"
    retryable = True

    def __init__(
        self,
        message: str,
        *,
        tool_name: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, tool_name=tool_name)
        self.__cause__ = cause


class ToolTimeoutError(ToolError):
    """The tool handler did not finish within its timeout."""

    error_type = "timeout"
    retryable = True

    def __init__(self, tool_name: str, timeout: float) -> None:
        super().__init__(
            f"Tool '{tool_name}' timed out after {timeout:g}s",
            tool_name=tool_name,
        )
        self.timeout = timeout


class RegistrationError(ToolError):
    """A tool could not be registered (duplicate or invalid name)."""

    error_type = "registration_error"

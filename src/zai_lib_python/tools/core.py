"""工具核心：工具元数据、抽象接口与函数工具适配器。

Tool abstractions.

- ToolMetadata: name, description, version, author, tags, enabled, retry_safe
- Tool: abstract ``(metadata, input_schema, invoke)`` interface
- FunctionTool: adapts a plain or async callable, validating its input
  against a JSON Schema with jsonschema
- tool: decorator for handlers typed with a pydantic model argument
"""

from __future__ import annotations

import asyncio
import inspect
import re
import typing
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from jsonschema.exceptions import SchemaError, best_match
from jsonschema.validators import validator_for
from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from zai_lib_python.errors import InvalidParametersError, RegistrationError
from zai_lib_python.types.tool import ToolDefinition

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_]+$")


@dataclass
class ToolMetadata:
    """Descriptive data for a registered tool.

    Attributes:
        name: Unique tool name (ASCII letters, digits and ``_``)
        description: Human-readable description sent to the model
        version: Tool version
        author: Tool author, if known
        tags: Free-form labels used for filtering exports
        enabled: Disabled tools are neither exported nor executed
        retry_safe: Whether the handler may be invoked again after a failure
    """

    name: str
    description: str | None = None
    version: str = "1.0.0"
    author: str | None = None
    tags: frozenset[str] = field(default_factory=frozenset)
    enabled: bool = True
    retry_safe: bool = True

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not _NAME_PATTERN.fullmatch(self.name):
            raise RegistrationError(
                f"Invalid tool name {self.name!r}: use letters, digits and '_' only",
                tool_name=self.name if isinstance(self.name, str) else None,
            )
        self.tags = frozenset(self.tags)


class Tool(ABC):
    """A callable capability the model can invoke."""

    @property
    @abstractmethod
    def metadata(self) -> ToolMetadata:
        ...

    @property
    @abstractmethod
    def input_schema(self) -> dict[str, Any]:
        """JSON Schema describing the ``arguments`` object."""
        ...

    @abstractmethod
    async def invoke(self, arguments: dict[str, Any]) -> Any:
        """Run the tool and return a JSON-serializable result."""
        ...

    @property
    def name(self) -> str:
        return self.metadata.name

    def validate(self, arguments: dict[str, Any]) -> None:
        """Check ``arguments`` against the input schema.

        Raises:
            InvalidParametersError: With the most relevant violation
        """
        validator_cls = validator_for(self.input_schema)
        _raise_first_error(validator_cls(self.input_schema), arguments, self.name)

    def definition(self) -> ToolDefinition:
        """Declaration for the ``tools`` request field."""
        return ToolDefinition.from_function(
            name=self.metadata.name,
            description=self.metadata.description,
            parameters=self.input_schema,
        )


def _raise_first_error(validator: Any, arguments: dict[str, Any], tool_name: str) -> None:
    error = best_match(validator.iter_errors(arguments))
    if error is None:
        return
    path = ".".join(str(p) for p in error.absolute_path) or None
    raise InvalidParametersError(error.message, tool_name=tool_name, field=path)


class FunctionTool(Tool):
    """Tool backed by a Python callable.

    The handler receives the parsed ``arguments`` dict. Coroutine functions
    are awaited; plain functions run in a worker thread so a slow handler
    cannot stall the event loop. A thread cannot be cancelled: when the
    executor's timeout fires the caller gets a timeout error, but a plain
    handler keeps running to completion in its thread and its result is
    discarded. Handlers with side effects that must stop on timeout should
    be coroutine functions.

    Example:
        >>> def get_weather(args):
        ...     return {"city": args["city"], "temp_c": 21}
        >>> weather = FunctionTool(
        ...     "get_weather",
        ...     {"type": "object", "properties": {"city": {"type": "string"}}, "required": ["city"]},
        ...     get_weather,
        ...     description="Current weather for a city",
        ... )
    """

    def __init__(
        self,
        name: str,
        schema: dict[str, Any],
        handler: Callable[[dict[str, Any]], Any],
        *,
        description: str | None = None,
        version: str = "1.0.0",
        author: str | None = None,
        tags: Iterable[str] = (),
        enabled: bool = True,
        retry_safe: bool = True,
    ) -> None:
        self._metadata = ToolMetadata(
            name=name,
            description=description,
            version=version,
            author=author,
            tags=frozenset(tags),
            enabled=enabled,
            retry_safe=retry_safe,
        )
        if not callable(handler):
            raise RegistrationError(f"Handler for tool '{name}' is not callable", tool_name=name)

        validator_cls = validator_for(schema)
        try:
            validator_cls.check_schema(schema)
        except SchemaError as e:
            raise RegistrationError(
                f"Invalid input schema for tool '{name}': {e.message}", tool_name=name
            ) from e

        self._schema = schema
        self._validator = validator_cls(schema)
        self._handler = handler

    @property
    def metadata(self) -> ToolMetadata:
        return self._metadata

    @property
    def input_schema(self) -> dict[str, Any]:
        return self._schema

    @property
    def handler(self) -> Callable[[dict[str, Any]], Any]:
        return self._handler

    def validate(self, arguments: dict[str, Any]) -> None:
        _raise_first_error(self._validator, arguments, self.name)

    async def invoke(self, arguments: dict[str, Any]) -> Any:
        """Run the handler.

        Plain functions go through ``asyncio.to_thread``; cancelling this
        coroutine does not stop the thread.
        """
        if inspect.iscoroutinefunction(self._handler):
            result = await self._handler(arguments)
        else:
            result = await asyncio.to_thread(self._handler, arguments)
            if inspect.isawaitable(result):
                result = await result
        if isinstance(result, BaseModel):
            return result.model_dump(mode="json")
        return result

    @classmethod
    def from_model(
        cls,
        handler: Callable[[Any], Any],
        model: type[BaseModel],
        *,
        name: str | None = None,
        description: str | None = None,
        version: str = "1.0.0",
        author: str | None = None,
        tags: Iterable[str] = (),
        enabled: bool = True,
        retry_safe: bool = True,
    ) -> FunctionTool:
        """Adapt a handler that takes a pydantic model instance.

        The input schema is the model's JSON Schema; arguments are
        validated into the model before the handler runs.
        """
        tool_name = name or handler.__name__

        if inspect.iscoroutinefunction(handler):

            async def call(arguments: dict[str, Any]) -> Any:
                return await handler(_coerce(model, arguments, tool_name))

        else:

            def call(arguments: dict[str, Any]) -> Any:
                return handler(_coerce(model, arguments, tool_name))

        return cls(
            tool_name,
            model.model_json_schema(),
            call,
            description=description or _first_doc_line(handler),
            version=version,
            author=author,
            tags=tags,
            enabled=enabled,
            retry_safe=retry_safe,
        )


def _coerce(model: type[BaseModel], arguments: dict[str, Any], tool_name: str) -> BaseModel:
    try:
        return model.model_validate(arguments)
    except PydanticValidationError as e:
        first = e.errors()[0]
        path = ".".join(str(p) for p in first["loc"]) or None
        raise InvalidParametersError(first["msg"], tool_name=tool_name, field=path) from e


def _first_doc_line(func: Callable[..., Any]) -> str | None:
    doc = inspect.getdoc(func)
    return doc.splitlines()[0] if doc else None


def tool(
    name: str | None = None,
    *,
    description: str | None = None,
    version: str = "1.0.0",
    author: str | None = None,
    tags: Iterable[str] = (),
    enabled: bool = True,
    retry_safe: bool = True,
) -> Callable[[Callable[[Any], Any]], FunctionTool]:
    """Decorator turning a pydantic-typed handler into a FunctionTool.

    Example:
        >>> class WeatherArgs(BaseModel):
        ...     city: str
        >>> @tool(description="Current weather for a city")
        ... async def get_weather(args: WeatherArgs) -> dict:
        ...     return {"city": args.city, "temp_c": 21}
    """

    def decorator(func: Callable[[Any], Any]) -> FunctionTool:
        hints = typing.get_type_hints(func)
        params = list(inspect.signature(func).parameters)
        model = hints.get(params[0]) if params else None
        if not (inspect.isclass(model) and issubclass(model, BaseModel)):
            raise RegistrationError(
                f"Tool '{name or func.__name__}' must take a single pydantic model argument",
                tool_name=name or func.__name__,
            )
        return FunctionTool.from_model(
            func,
            model,
            name=name,
            description=description,
            version=version,
            author=author,
            tags=tags,
            enabled=enabled,
            retry_safe=retry_safe,
        )

    return decorator

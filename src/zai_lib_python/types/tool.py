"""
Tool types for function calling support.

Tool declarations sent to the model and the tool calls it sends back.
On the wire a call looks like::

    {"id": "call_1", "type": "function",
     "function": {"name": "get_weather", "arguments": "{\\"city\\": \\"Beijing\\"}"}}

``arguments`` stays a JSON-encoded string end to end; it is parsed only
when the call is dispatched.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from zai_lib_python.errors import InvalidParametersError


class ToolChoice(str, Enum):
    """Tool choice policy for requests."""

    AUTO = "auto"
    NONE = "none"
    REQUIRED = "required"


class FunctionDefinition(BaseModel):
    """Function definition within a tool declaration."""

    model_config = ConfigDict(extra="allow")

    name: str = Field(description="Function name")
    description: str | None = Field(default=None, description="Function description")
    parameters: dict[str, Any] = Field(
        default_factory=lambda: {"type": "object", "properties": {}},
        description="JSON Schema for parameters",
    )


class ToolDefinition(BaseModel):
    """Tool declaration for the ``tools`` request field.

    Example:
        >>> tool = ToolDefinition.from_function(
        ...     name="get_weather",
        ...     description="Get weather for a city",
        ...     parameters={
        ...         "type": "object",
        ...         "properties": {"city": {"type": "string"}},
        ...         "required": ["city"],
        ...     },
        ... )
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(default="function", description="Tool type")
    function: FunctionDefinition = Field(description="Function definition")

    @classmethod
    def from_function(
        cls,
        name: str,
        description: str | None = None,
        parameters: dict[str, Any] | None = None,
    ) -> ToolDefinition:
        func_def = FunctionDefinition(
            name=name,
            description=description,
            parameters=parameters or {"type": "object", "properties": {}},
        )
        return cls(function=func_def)

    @classmethod
    def from_spec(cls, spec: dict[str, Any]) -> ToolDefinition:
        """Parse a function spec in either accepted shape.

        - ``{"name": ..., "description": ..., "parameters": {...}}``
        - ``{"type": "function", "function": {...}}``

        Raises:
            ValueError: If the spec has no function name
        """
        body = spec.get("function") if isinstance(spec.get("function"), dict) else spec
        name = body.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("function spec is missing 'name'")
        return cls.from_function(
            name=name,
            description=body.get("description"),
            parameters=body.get("parameters"),
        )

    @property
    def name(self) -> str:
        return self.function.name

    @property
    def description(self) -> str | None:
        return self.function.description


class FunctionCall(BaseModel):
    """Function name and JSON-encoded arguments of a tool call."""

    model_config = ConfigDict(extra="allow")

    name: str = ""
    arguments: str = ""


class ToolCall(BaseModel):
    """A tool call requested by the model.

    Example:
        >>> call = ToolCall.create("call_abc", "get_weather", {"city": "Beijing"})
        >>> call.parse_arguments()
        {'city': 'Beijing'}
    """

    model_config = ConfigDict(extra="allow")

    id: str = Field(description="Unique tool call identifier")
    type: str = Field(default="function", description="Tool type")
    function: FunctionCall = Field(default_factory=FunctionCall)

    @classmethod
    def create(
        cls,
        id: str,
        name: str,
        arguments: str | dict[str, Any] | None = None,
    ) -> ToolCall:
        """Build a call; dict arguments are JSON encoded."""
        if arguments is None:
            arguments = "{}"
        elif not isinstance(arguments, str):
            arguments = json.dumps(arguments, ensure_ascii=False)
        return cls(id=id, function=FunctionCall(name=name, arguments=arguments))

    @property
    def name(self) -> str:
        return self.function.name

    @property
    def arguments(self) -> str:
        return self.function.arguments

    def parse_arguments(self) -> dict[str, Any]:
        """Parse the arguments string into a JSON object.

        An empty string is treated as ``{}``.

        Raises:
            InvalidParametersError: If arguments are malformed or not an object
        """
        return parse_arguments(self.function.arguments, tool_name=self.function.name)


def parse_arguments(raw: str | dict[str, Any], *, tool_name: str | None = None) -> dict[str, Any]:
    """Parse JSON-encoded tool arguments into a dict.

    Raises:
        InvalidParametersError: If ``raw`` is malformed JSON or not an object
    """
    if isinstance(raw, dict):
        return raw
    if not raw or not raw.strip():
        return {}
    try:
        parsed = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InvalidParametersError(
            f"Arguments are not valid JSON: {e.msg}", tool_name=tool_name
        ) from e
    if not isinstance(parsed, dict):
        raise InvalidParametersError(
            f"Arguments must be a JSON object, got {type(parsed).__name__}",
            tool_name=tool_name,
        )
    return parsed

"""线协议编解码：流式分块、实时事件与工具调用的 JSON 编解码。

Wire codec for zai-lib-python.

Pure, synchronous (de)serialization of the JSON envelopes used by the
chat stream and the realtime socket:

- encode(value) -> bytes
- decode_server_event / decode_client_event -> event | UnknownEvent
- decode_stream_chunk -> StreamChunk
- encode_tool_calls / decode_tool_calls / extract_tool_calls

Malformed JSON raises DecodeError. A missing or undeclared ``type`` tag
is not an error: the payload comes back as UnknownEvent.
"""

from __future__ import annotations

import json
from typing import Any, get_args

import pydantic
from pydantic import BaseModel, TypeAdapter

from zai_lib_python.errors import DecodeError, RemoteError
from zai_lib_python.realtime.events import ClientEvent, ServerEvent, UnknownEvent
from zai_lib_python.telemetry import get_logger
from zai_lib_python.types.message import Message
from zai_lib_python.types.stream import StreamChunk
from zai_lib_python.types.tool import FunctionCall, ToolCall

logger = get_logger(__name__)

_SERVER_ADAPTER: TypeAdapter[Any] = TypeAdapter(ServerEvent)
_CLIENT_ADAPTER: TypeAdapter[Any] = TypeAdapter(ClientEvent)
_TOOL_CALLS_ADAPTER: TypeAdapter[list[ToolCall]] = TypeAdapter(list[ToolCall])


def _declared_types(union: Any) -> frozenset[str]:
    members = get_args(get_args(union)[0])
    return frozenset(m.model_fields["type"].default for m in members)


SERVER_EVENT_TYPES = _declared_types(ServerEvent)
CLIENT_EVENT_TYPES = _declared_types(ClientEvent)


def loads(data: bytes | bytearray | str) -> Any:
    """Parse raw wire data as JSON.

    Raises:
        DecodeError: If the data is not UTF-8 or not valid JSON
    """
    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError("Payload is not valid UTF-8", cause=e) from e
    else:
        text = data
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise DecodeError(f"Malformed JSON: {e.msg}", payload=text, cause=e) from e


def encode(value: BaseModel | list[ToolCall] | dict[str, Any]) -> bytes:
    """Serialize an event, chunk, message or tool-call list to JSON bytes.

    Messages are validated first, so an empty message cannot be encoded.

    Raises:
        ValidationError: If ``value`` is a Message that breaks its invariants
    """
    if isinstance(value, UnknownEvent):
        return json.dumps(value.payload, ensure_ascii=False).encode("utf-8")
    if isinstance(value, Message):
        return json.dumps(value.to_wire(), ensure_ascii=False).encode("utf-8")
    if isinstance(value, list):
        return encode_tool_calls(value)
    if isinstance(value, dict):
        return json.dumps(value, ensure_ascii=False).encode("utf-8")
    return value.model_dump_json(exclude_none=True).encode("utf-8")


def _decode_tagged(
    payload: Any,
    adapter: TypeAdapter[Any],
    declared: frozenset[str],
) -> Any:
    if not isinstance(payload, dict) or payload.get("type") not in declared:
        return UnknownEvent.from_payload(payload)
    try:
        return adapter.validate_python(payload)
    except pydantic.ValidationError as e:
        logger.warning(
            "Event failed validation, passing through as unknown",
            event_type=payload["type"],
            error_count=e.error_count(),
        )
        return UnknownEvent.from_payload(payload)


def decode_server_event(data: bytes | bytearray | str) -> Any:
    """Decode a server-to-client frame.

    Returns:
        A ServerEvent member, or UnknownEvent

    Raises:
        DecodeError: If the frame is not valid JSON
    """
    return _decode_tagged(loads(data), _SERVER_ADAPTER, SERVER_EVENT_TYPES)


def decode_client_event(data: bytes | bytearray | str) -> Any:
    """Decode a client-to-server frame (mostly useful for tests and proxies)."""
    return _decode_tagged(loads(data), _CLIENT_ADAPTER, CLIENT_EVENT_TYPES)


decode = decode_server_event


def decode_stream_chunk(data: bytes | bytearray | str | dict[str, Any]) -> StreamChunk:
    """Decode one chat stream record.

    An in-band error object (``{"error": {...}}`` without choices) is
    raised as RemoteError rather than returned as an empty chunk.

    Raises:
        DecodeError: If the record is not JSON or not a chunk
        RemoteError: If the record is an error object
    """
    payload = data if isinstance(data, dict) else loads(data)
    if not isinstance(payload, dict):
        raise DecodeError(
            f"Stream record must be a JSON object, got {type(payload).__name__}",
            payload=json.dumps(payload),
        )
    if "error" in payload and "choices" not in payload:
        raise RemoteError.from_response(status_code=200, body=payload)
    try:
        return StreamChunk.model_validate(payload)
    except pydantic.ValidationError as e:
        raise DecodeError(
            f"Stream record does not match chunk shape ({e.error_count()} errors)",
            payload=json.dumps(payload, ensure_ascii=False),
            cause=e,
        ) from e


def encode_tool_calls(calls: list[ToolCall]) -> bytes:
    """Serialize tool calls in the ``{"id", "type", "function"}`` wire shape."""
    return _TOOL_CALLS_ADAPTER.dump_json(calls, exclude_none=True)


def decode_tool_calls(data: bytes | bytearray | str) -> list[ToolCall]:
    """Decode a JSON array of tool calls.

    Raises:
        DecodeError: If the data is not a list of tool calls
    """
    payload = loads(data)
    try:
        return _TOOL_CALLS_ADAPTER.validate_python(payload)
    except pydantic.ValidationError as e:
        raise DecodeError("Not a list of tool calls", cause=e) from e


def extract_tool_calls(body: dict[str, Any]) -> list[ToolCall]:
    """Find tool calls in a completion body, tolerating several layouts.

    Looks at, in order:
    - ``choices[*].message.tool_calls``
    - top-level ``tool_calls``
    - legacy ``choices[*].message.function_call`` / top-level ``function_call``

    Dict-valued arguments are re-encoded to a JSON string; calls without
    an id get a positional one (``call_<n>``).
    """
    raw: list[Any] = []
    legacy: list[Any] = []
    for choice in body.get("choices") or []:
        message = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(message, dict):
            continue
        raw.extend(message.get("tool_calls") or [])
        if isinstance(message.get("function_call"), dict):
            legacy.append(message["function_call"])
    if not raw:
        raw.extend(body.get("tool_calls") or [])
    if not raw and isinstance(body.get("function_call"), dict):
        legacy.append(body["function_call"])

    calls: list[ToolCall] = []
    for position, item in enumerate(raw):
        if not isinstance(item, dict):
            continue
        function = item.get("function") or {}
        calls.append(
            ToolCall(
                id=item.get("id") or f"call_{position}",
                type=item.get("type") or "function",
                function=_function_call(function),
            )
        )
    if not calls:
        for position, function in enumerate(legacy):
            calls.append(ToolCall(id=f"call_{position}", function=_function_call(function)))
    return calls


def _function_call(function: dict[str, Any]) -> FunctionCall:
    arguments = function.get("arguments")
    if arguments is None:
        arguments = ""
    elif not isinstance(arguments, str):
        arguments = json.dumps(arguments, ensure_ascii=False)
    return FunctionCall(name=function.get("name") or "", arguments=arguments)

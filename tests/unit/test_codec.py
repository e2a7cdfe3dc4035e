"""Tests for the wire codec."""

import json
import typing

import pytest

from zai_lib_python import codec
from zai_lib_python.errors import DecodeError, RemoteError, ValidationError
from zai_lib_python.realtime.events import (
    ClientEvent,
    ConversationItemCreateEvent,
    ErrorDetail,
    ErrorEvent,
    HeartbeatEvent,
    InputAudioBufferAppendEvent,
    ResponseAudioDeltaEvent,
    ResponseDoneEvent,
    ResponseTextDeltaEvent,
    ServerEvent,
    SessionCreatedEvent,
    SessionUpdateEvent,
    UnknownEvent,
)
from zai_lib_python.realtime.session import (
    ConversationItem,
    ItemContent,
    Modality,
    ResponseInfo,
    SessionConfig,
    SessionInfo,
    TranscriptionConfig,
)
from zai_lib_python.types.message import Message
from zai_lib_python.types.tool import ToolCall


class TestServerEvents:
    """Decoding server frames."""

    def test_session_created(self) -> None:
        frame = json.dumps(
            {
                "type": "session.created",
                "event_id": "evt_1",
                "session": {"id": "sess_1", "model": "glm-realtime", "modalities": ["text", "audio"]},
            }
        )
        event = codec.decode_server_event(frame)
        assert isinstance(event, SessionCreatedEvent)
        assert event.session.id == "sess_1"
        assert event.session.modalities == ["text", "audio"]

    def test_text_delta(self) -> None:
        event = codec.decode_server_event(b'{"type": "response.text.delta", "delta": "\xe4\xbd\xa0"}')
        assert isinstance(event, ResponseTextDeltaEvent)
        assert event.delta == "你"

    def test_audio_delta_bytes(self) -> None:
        event = codec.decode_server_event('{"type": "response.audio.delta", "delta": "AAEC"}')
        assert isinstance(event, ResponseAudioDeltaEvent)
        assert event.audio_bytes() == b"\x00\x01\x02"

    def test_error_event(self) -> None:
        event = codec.decode_server_event(
            '{"type": "error", "error": {"type": "invalid_request_error", "code": "1214", "message": "bad"}}'
        )
        assert isinstance(event, ErrorEvent)
        assert event.error.code == "1214"
        assert event.error.message == "bad"

    def test_response_done_usage(self) -> None:
        event = codec.decode_server_event(
            '{"type": "response.done", "response": {"id": "resp_1", "usage": {"total_tokens": 42}}}'
        )
        assert isinstance(event, ResponseDoneEvent)
        assert event.response is not None
        assert event.response.usage is not None
        assert event.response.usage.total_tokens == 42

    def test_heartbeat(self) -> None:
        assert isinstance(codec.decode_server_event('{"type": "heartbeat"}'), HeartbeatEvent)

    def test_unknown_type_passes_through(self) -> None:
        payload = {"type": "response.future_feature", "value": [1, 2]}
        event = codec.decode_server_event(json.dumps(payload))
        assert isinstance(event, UnknownEvent)
        assert event.type == "response.future_feature"
        assert event.payload == payload

    def test_missing_type(self) -> None:
        event = codec.decode_server_event('{"value": 1}')
        assert isinstance(event, UnknownEvent)
        assert event.type is None

    def test_non_object_frame(self) -> None:
        event = codec.decode_server_event("[1, 2, 3]")
        assert isinstance(event, UnknownEvent)
        assert event.payload == [1, 2, 3]

    def test_declared_type_with_bad_shape(self) -> None:
        event = codec.decode_server_event('{"type": "response.text.delta", "delta": {"nested": 1}}')
        assert isinstance(event, UnknownEvent)
        assert event.type == "response.text.delta"

    def test_malformed_json(self) -> None:
        with pytest.raises(DecodeError):
            codec.decode_server_event('{"type": "heartbeat"')

    def test_invalid_utf8(self) -> None:
        with pytest.raises(DecodeError):
            codec.decode_server_event(b'{"type": "\xff"}')

    def test_client_tags_are_not_server_events(self) -> None:
        event = codec.decode_server_event('{"type": "response.create"}')
        assert isinstance(event, UnknownEvent)


class TestClientEvents:
    """Encoding client frames."""

    def test_session_update_round_trip(self) -> None:
        event = SessionUpdateEvent(
            session=SessionConfig(model="glm-realtime", modalities=[Modality.TEXT], instructions="hi")
        )
        data = json.loads(codec.encode(event))
        assert data["type"] == "session.update"
        assert data["session"] == {"model": "glm-realtime", "modalities": ["text"], "instructions": "hi"}
        assert data["event_id"].startswith("evt_")
        assert isinstance(data["client_timestamp"], int)

        decoded = codec.decode_client_event(codec.encode(event))
        assert decoded == event

    def test_audio_append(self) -> None:
        data = json.loads(codec.encode(InputAudioBufferAppendEvent(audio="AAEC")))
        assert data["type"] == "input_audio_buffer.append"
        assert data["audio"] == "AAEC"

    def test_conversation_item(self) -> None:
        event = ConversationItemCreateEvent(item=ConversationItem.user_text("你好"))
        data = json.loads(codec.encode(event))
        assert "previous_item_id" not in data
        assert data["item"]["type"] == "message"
        assert data["item"]["content"] == [{"type": "input_text", "text": "你好"}]

    def test_unknown_event_encodes_payload(self) -> None:
        event = UnknownEvent.from_payload({"type": "custom", "x": 1})
        assert json.loads(codec.encode(event)) == {"type": "custom", "x": 1}

    def test_raw_dict(self) -> None:
        assert json.loads(codec.encode({"type": "response.create"})) == {"type": "response.create"}

    def test_empty_message_cannot_be_encoded(self) -> None:
        with pytest.raises(ValidationError):
            codec.encode(Message.user(""))


def _variants(union: typing.Any) -> list[type]:
    members = typing.get_args(typing.get_args(union)[0])
    return sorted(members, key=lambda cls: cls.model_fields["type"].default)


def _tag(cls: type) -> str:
    return cls.model_fields["type"].default


ITEM = ConversationItem.user_text("你好")

CLIENT_FIELDS = {
    "session.update": {"session": SessionConfig(model="glm-realtime", voice="tongtong")},
    "transcription_session.update": {"session": TranscriptionConfig(input_audio_format="pcm16")},
    "input_audio_buffer.append": {"audio": "AAEC"},
    "input_audio_buffer.append_video_frame": {"video_frame": "/9j/4AAQ"},
    "conversation.item.create": {"previous_item_id": "item_0", "item": ITEM},
    "conversation.item.delete": {"item_id": "item_1"},
    "conversation.item.retrieve": {"item_id": "item_1"},
}

SERVER_FIELDS = {
    "error": {"error": ErrorDetail(type="invalid_request_error", code="1214", message="bad")},
    "session.created": {"session": SessionInfo(id="sess_1", model="glm-realtime")},
    "session.updated": {"session": SessionInfo(id="sess_1", voice="tongtong")},
    "transcription_session.updated": {"session": {"input_audio_format": "pcm16"}},
    "conversation.item.created": {"previous_item_id": "item_0", "item": ITEM},
    "conversation.item.deleted": {"item_id": "item_1"},
    "conversation.item.retrieved": {"item": ITEM},
    "conversation.item.input_audio_transcription.completed": {
        "item_id": "item_1",
        "content_index": 0,
        "transcript": "你好",
    },
    "conversation.item.input_audio_transcription.failed": {
        "item_id": "item_1",
        "error": ErrorDetail(message="no speech"),
    },
    "input_audio_buffer.committed": {"previous_item_id": "item_0", "item_id": "item_1"},
    "input_audio_buffer.speech_started": {"audio_start_ms": 120, "item_id": "item_1"},
    "input_audio_buffer.speech_stopped": {"audio_end_ms": 980, "item_id": "item_1"},
    "response.output_item.added": {"response_id": "resp_1", "output_index": 0, "item": ITEM},
    "response.output_item.done": {"response_id": "resp_1", "output_index": 0, "item": ITEM},
    "response.content_part.added": {"item_id": "item_2", "part": ItemContent(type="text", text="")},
    "response.content_part.done": {"item_id": "item_2", "part": ItemContent(type="text", text="好")},
    "response.function_call_arguments.done": {"name": "get_weather", "arguments": '{"city": "北京"}'},
    "response.function_call.simple_browser": {"name": "search", "session": {"query": "天气"}},
    "response.text.delta": {"delta": "你"},
    "response.text.done": {"text": "你好"},
    "response.audio_transcript.delta": {"delta": "你"},
    "response.audio_transcript.done": {"transcript": "你好"},
    "response.audio.delta": {"delta": "AAEC"},
    "response.created": {"response": ResponseInfo(id="resp_1", status="in_progress")},
    "response.cancelled": {"response": ResponseInfo(id="resp_1", status="cancelled")},
    "response.done": {"response": ResponseInfo(id="resp_1", status="completed")},
    "rate_limits.updated": {"rate_limits": [{"name": "requests", "remaining": 9}]},
}


class TestEventVariants:
    """Every declared event type survives encode then decode."""

    @pytest.mark.parametrize("cls", _variants(ClientEvent), ids=_tag)
    def test_client_event(self, cls: type) -> None:
        event = cls(**CLIENT_FIELDS.get(_tag(cls), {}))
        decoded = codec.decode_client_event(codec.encode(event))
        assert type(decoded) is cls
        assert decoded == event

    @pytest.mark.parametrize("cls", _variants(ServerEvent), ids=_tag)
    def test_server_event(self, cls: type) -> None:
        event = cls(event_id="evt_1", **SERVER_FIELDS.get(_tag(cls), {}))
        decoded = codec.decode_server_event(codec.encode(event))
        assert type(decoded) is cls
        assert decoded == event

    def test_declared_tags_match_variants(self) -> None:
        assert codec.CLIENT_EVENT_TYPES == {_tag(cls) for cls in _variants(ClientEvent)}
        assert codec.SERVER_EVENT_TYPES == {_tag(cls) for cls in _variants(ServerEvent)}


class TestStreamChunks:
    """Decoding chat stream records."""

    def test_chunk(self) -> None:
        chunk = codec.decode_stream_chunk(
            '{"id": "c1", "choices": [{"index": 0, "delta": {"content": "Hi"}}]}'
        )
        assert chunk.id == "c1"
        assert chunk.content == "Hi"

    def test_in_band_error(self) -> None:
        with pytest.raises(RemoteError) as exc_info:
            codec.decode_stream_chunk('{"error": {"code": "1301", "message": "unsafe content"}}')
        assert exc_info.value.business_code == 1301

    def test_non_object_record(self) -> None:
        with pytest.raises(DecodeError):
            codec.decode_stream_chunk("42")

    def test_bad_chunk_shape(self) -> None:
        with pytest.raises(DecodeError):
            codec.decode_stream_chunk('{"choices": "nope"}')


class TestToolCalls:
    """Tool call encoding and extraction."""

    def test_round_trip(self) -> None:
        calls = [
            ToolCall.create("call_1", "get_weather", {"city": "Beijing"}),
            ToolCall.create("call_2", "get_time"),
        ]
        assert codec.decode_tool_calls(codec.encode(calls)) == calls

    def test_decode_rejects_non_list(self) -> None:
        with pytest.raises(DecodeError):
            codec.decode_tool_calls('{"id": "call_1"}')

    def test_extract_from_choices(self) -> None:
        body = {
            "choices": [
                {
                    "message": {
                        "role": "assistant",
                        "tool_calls": [
                            {
                                "id": "call_a",
                                "type": "function",
                                "function": {"name": "get_weather", "arguments": {"city": "Shanghai"}},
                            },
                            {"function": {"name": "get_time"}},
                        ],
                    }
                }
            ]
        }
        calls = codec.extract_tool_calls(body)
        assert [c.id for c in calls] == ["call_a", "call_1"]
        assert calls[0].parse_arguments() == {"city": "Shanghai"}
        assert calls[1].arguments == ""

    def test_extract_top_level(self) -> None:
        body = {"tool_calls": [{"id": "call_x", "function": {"name": "lookup", "arguments": "{}"}}]}
        assert codec.extract_tool_calls(body)[0].name == "lookup"

    def test_extract_legacy_function_call(self) -> None:
        body = {"choices": [{"message": {"function_call": {"name": "lookup", "arguments": "{}"}}}]}
        calls = codec.extract_tool_calls(body)
        assert len(calls) == 1
        assert calls[0].id == "call_0"
        assert calls[0].name == "lookup"

    def test_extract_none(self) -> None:
        assert codec.extract_tool_calls({"choices": [{"message": {"content": "hi"}}]}) == []

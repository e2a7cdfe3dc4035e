"""实时事件：客户端与服务端 WebSocket 事件的标签联合类型。

Realtime WebSocket events.

Every frame is a JSON object with a ``type`` discriminator. ClientEvent
and ServerEvent are closed tagged unions over the declared types;
anything else decodes to UnknownEvent with its payload preserved.
"""

from __future__ import annotations

import base64
import time
import uuid
from typing import Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from zai_lib_python.realtime.session import (
    ConversationItem,
    ItemContent,
    ResponseInfo,
    SessionConfig,
    SessionInfo,
    TranscriptionConfig,
)


def _new_event_id() -> str:
    return f"evt_{uuid.uuid4().hex}"


def _now_ms() -> int:
    return int(time.time() * 1000)


class RealtimeEvent(BaseModel):
    """Fields shared by all realtime events."""

    model_config = ConfigDict(extra="allow")

    event_id: str | None = None
    client_timestamp: int | None = None


class ClientEventBase(RealtimeEvent):
    """Client events are stamped with an id and a millisecond timestamp."""

    event_id: str | None = Field(default_factory=_new_event_id)
    client_timestamp: int | None = Field(default_factory=_now_ms)


# --- client events ------------------------------------------------------


class SessionUpdateEvent(ClientEventBase):
    type: Literal["session.update"] = "session.update"
    session: SessionConfig


class TranscriptionSessionUpdateEvent(ClientEventBase):
    type: Literal["transcription_session.update"] = "transcription_session.update"
    session: TranscriptionConfig


class InputAudioBufferAppendEvent(ClientEventBase):
    """Append base64 audio to the input buffer."""

    type: Literal["input_audio_buffer.append"] = "input_audio_buffer.append"
    audio: str


class InputAudioBufferAppendVideoFrameEvent(ClientEventBase):
    """Append one base64 video frame (jpg) to the input buffer."""

    type: Literal["input_audio_buffer.append_video_frame"] = "input_audio_buffer.append_video_frame"
    video_frame: str


class InputAudioBufferCommitEvent(ClientEventBase):
    type: Literal["input_audio_buffer.commit"] = "input_audio_buffer.commit"


class InputAudioBufferClearEvent(ClientEventBase):
    type: Literal["input_audio_buffer.clear"] = "input_audio_buffer.clear"


class ConversationItemCreateEvent(ClientEventBase):
    type: Literal["conversation.item.create"] = "conversation.item.create"
    previous_item_id: str | None = None
    item: ConversationItem


class ConversationItemDeleteEvent(ClientEventBase):
    type: Literal["conversation.item.delete"] = "conversation.item.delete"
    item_id: str


class ConversationItemRetrieveEvent(ClientEventBase):
    type: Literal["conversation.item.retrieve"] = "conversation.item.retrieve"
    item_id: str


class ResponseCreateEvent(ClientEventBase):
    type: Literal["response.create"] = "response.create"


class ResponseCancelEvent(ClientEventBase):
    type: Literal["response.cancel"] = "response.cancel"


ClientEvent = Annotated[
    SessionUpdateEvent
    | TranscriptionSessionUpdateEvent
    | InputAudioBufferAppendEvent
    | InputAudioBufferAppendVideoFrameEvent
    | InputAudioBufferCommitEvent
    | InputAudioBufferClearEvent
    | ConversationItemCreateEvent
    | ConversationItemDeleteEvent
    | ConversationItemRetrieveEvent
    | ResponseCreateEvent
    | ResponseCancelEvent,
    Field(discriminator="type"),
]


# --- server events ------------------------------------------------------


class ErrorDetail(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str | None = None
    code: str | int | None = None
    message: str | None = None
    param: str | None = None


class ErrorEvent(RealtimeEvent):
    type: Literal["error"] = "error"
    error: ErrorDetail = Field(default_factory=ErrorDetail)


class SessionCreatedEvent(RealtimeEvent):
    type: Literal["session.created"] = "session.created"
    session: SessionInfo = Field(default_factory=SessionInfo)


class SessionUpdatedEvent(RealtimeEvent):
    type: Literal["session.updated"] = "session.updated"
    session: SessionInfo = Field(default_factory=SessionInfo)


class TranscriptionSessionUpdatedEvent(RealtimeEvent):
    type: Literal["transcription_session.updated"] = "transcription_session.updated"
    session: dict[str, Any] = Field(default_factory=dict)


class ConversationItemCreatedEvent(RealtimeEvent):
    type: Literal["conversation.item.created"] = "conversation.item.created"
    previous_item_id: str | None = None
    item: ConversationItem | None = None


class ConversationItemDeletedEvent(RealtimeEvent):
    type: Literal["conversation.item.deleted"] = "conversation.item.deleted"
    item_id: str | None = None


class ConversationItemRetrievedEvent(RealtimeEvent):
    type: Literal["conversation.item.retrieved"] = "conversation.item.retrieved"
    item: ConversationItem | None = None


class InputAudioTranscriptionCompletedEvent(RealtimeEvent):
    type: Literal["conversation.item.input_audio_transcription.completed"] = (
        "conversation.item.input_audio_transcription.completed"
    )
    item_id: str | None = None
    content_index: int | None = None
    transcript: str | None = None


class InputAudioTranscriptionFailedEvent(RealtimeEvent):
    type: Literal["conversation.item.input_audio_transcription.failed"] = (
        "conversation.item.input_audio_transcription.failed"
    )
    item_id: str | None = None
    content_index: int | None = None
    error: ErrorDetail | None = None


class InputAudioBufferCommittedEvent(RealtimeEvent):
    type: Literal["input_audio_buffer.committed"] = "input_audio_buffer.committed"
    previous_item_id: str | None = None
    item_id: str | None = None


class InputAudioBufferClearedEvent(RealtimeEvent):
    type: Literal["input_audio_buffer.cleared"] = "input_audio_buffer.cleared"


class InputAudioBufferSpeechStartedEvent(RealtimeEvent):
    type: Literal["input_audio_buffer.speech_started"] = "input_audio_buffer.speech_started"
    audio_start_ms: int | None = None
    item_id: str | None = None


class InputAudioBufferSpeechStoppedEvent(RealtimeEvent):
    type: Literal["input_audio_buffer.speech_stopped"] = "input_audio_buffer.speech_stopped"
    audio_end_ms: int | None = None
    item_id: str | None = None


class _ResponsePartEvent(RealtimeEvent):
    response_id: str | None = None
    item_id: str | None = None
    output_index: int | None = None
    content_index: int | None = None


class ResponseOutputItemAddedEvent(_ResponsePartEvent):
    type: Literal["response.output_item.added"] = "response.output_item.added"
    item: ConversationItem | None = None


class ResponseOutputItemDoneEvent(_ResponsePartEvent):
    type: Literal["response.output_item.done"] = "response.output_item.done"
    item: ConversationItem | None = None


class ResponseContentPartAddedEvent(_ResponsePartEvent):
    type: Literal["response.content_part.added"] = "response.content_part.added"
    part: ItemContent | None = None


class ResponseContentPartDoneEvent(_ResponsePartEvent):
    type: Literal["response.content_part.done"] = "response.content_part.done"
    part: ItemContent | None = None


class ResponseFunctionCallArgumentsDoneEvent(_ResponsePartEvent):
    """The model finished emitting a function call."""

    type: Literal["response.function_call_arguments.done"] = "response.function_call_arguments.done"
    name: str | None = None
    arguments: str | None = None


class ResponseFunctionCallSimpleBrowserEvent(_ResponsePartEvent):
    """Built-in web search invoked by the model."""

    type: Literal["response.function_call.simple_browser"] = "response.function_call.simple_browser"
    name: str | None = None
    session: dict[str, Any] | None = None


class ResponseTextDeltaEvent(_ResponsePartEvent):
    type: Literal["response.text.delta"] = "response.text.delta"
    delta: str = ""


class ResponseTextDoneEvent(_ResponsePartEvent):
    type: Literal["response.text.done"] = "response.text.done"
    text: str | None = None


class ResponseAudioTranscriptDeltaEvent(_ResponsePartEvent):
    type: Literal["response.audio_transcript.delta"] = "response.audio_transcript.delta"
    delta: str = ""


class ResponseAudioTranscriptDoneEvent(_ResponsePartEvent):
    type: Literal["response.audio_transcript.done"] = "response.audio_transcript.done"
    transcript: str | None = None


class ResponseAudioDeltaEvent(_ResponsePartEvent):
    """A chunk of base64 output audio."""

    type: Literal["response.audio.delta"] = "response.audio.delta"
    delta: str = ""

    def audio_bytes(self) -> bytes:
        return base64.b64decode(self.delta) if self.delta else b""


class ResponseAudioDoneEvent(_ResponsePartEvent):
    type: Literal["response.audio.done"] = "response.audio.done"


class ResponseCreatedEvent(RealtimeEvent):
    type: Literal["response.created"] = "response.created"
    response: ResponseInfo | None = None


class ResponseCancelledEvent(RealtimeEvent):
    type: Literal["response.cancelled"] = "response.cancelled"
    response: ResponseInfo | None = None


class ResponseDoneEvent(RealtimeEvent):
    """Final event of a response; carries usage."""

    type: Literal["response.done"] = "response.done"
    response: ResponseInfo | None = None


class RateLimitsUpdatedEvent(RealtimeEvent):
    type: Literal["rate_limits.updated"] = "rate_limits.updated"
    rate_limits: list[dict[str, Any]] = Field(default_factory=list)


class HeartbeatEvent(RealtimeEvent):
    """Keep-alive from the server. Informational only."""

    type: Literal["heartbeat"] = "heartbeat"


ServerEvent = Annotated[
    ErrorEvent
    | SessionCreatedEvent
    | SessionUpdatedEvent
    | TranscriptionSessionUpdatedEvent
    | ConversationItemCreatedEvent
    | ConversationItemDeletedEvent
    | ConversationItemRetrievedEvent
    | InputAudioTranscriptionCompletedEvent
    | InputAudioTranscriptionFailedEvent
    | InputAudioBufferCommittedEvent
    | InputAudioBufferClearedEvent
    | InputAudioBufferSpeechStartedEvent
    | InputAudioBufferSpeechStoppedEvent
    | ResponseOutputItemAddedEvent
    | ResponseOutputItemDoneEvent
    | ResponseContentPartAddedEvent
    | ResponseContentPartDoneEvent
    | ResponseFunctionCallArgumentsDoneEvent
    | ResponseFunctionCallSimpleBrowserEvent
    | ResponseTextDeltaEvent
    | ResponseTextDoneEvent
    | ResponseAudioTranscriptDeltaEvent
    | ResponseAudioTranscriptDoneEvent
    | ResponseAudioDeltaEvent
    | ResponseAudioDoneEvent
    | ResponseCreatedEvent
    | ResponseCancelledEvent
    | ResponseDoneEvent
    | RateLimitsUpdatedEvent
    | HeartbeatEvent,
    Field(discriminator="type"),
]


class UnknownEvent(BaseModel):
    """A frame whose ``type`` is missing or not declared.

    ``payload`` is the full decoded JSON value, untouched.
    """

    type: str | None = None
    payload: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> UnknownEvent:
        tag = payload.get("type") if isinstance(payload, dict) else None
        return cls(type=tag if isinstance(tag, str) else None, payload=payload)

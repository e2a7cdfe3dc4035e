"""
Realtime session configuration and conversation item models.

SessionConfig is what the client sends in ``session.update``;
SessionInfo is what the server reports in ``session.created`` /
``session.updated`` and adds the server-assigned session id.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Modality(str, Enum):
    TEXT = "text"
    AUDIO = "audio"


class AudioFormat(str, Enum):
    WAV = "wav"
    PCM = "pcm"
    MP3 = "mp3"


class VadType(str, Enum):
    """Who decides when the speaker has finished talking."""

    SERVER_VAD = "server_vad"
    CLIENT_VAD = "client_vad"


class TurnDetection(BaseModel):
    """Voice activity detection settings."""

    model_config = ConfigDict(extra="allow")

    type: VadType = VadType.SERVER_VAD
    create_response: bool | None = None
    interrupt_response: bool | None = None
    prefix_padding_ms: int | None = None
    silence_duration_ms: int | None = None
    threshold: float | None = None


class NoiseReduction(BaseModel):
    model_config = ConfigDict(extra="allow")

    type: str = "near_field"


class RealtimeTool(BaseModel):
    """Function declared to the realtime model."""

    model_config = ConfigDict(extra="allow")

    type: str = "function"
    name: str
    description: str | None = None
    parameters: dict[str, Any] = Field(default_factory=lambda: {"type": "object", "properties": {}})


class GreetingConfig(BaseModel):
    model_config = ConfigDict(extra="allow")

    enable: bool = False
    content: str | None = None


class BetaFields(BaseModel):
    """Service-specific session options."""

    model_config = ConfigDict(extra="allow")

    chat_mode: str | None = None
    tts_source: str | None = None
    auto_search: bool | None = None
    greeting_config: GreetingConfig | None = None


class SessionConfig(BaseModel):
    """Client-side session configuration.

    Example:
        >>> config = SessionConfig(
        ...     modalities=[Modality.TEXT, Modality.AUDIO],
        ...     instructions="You are a friendly assistant.",
        ...     turn_detection=TurnDetection(type=VadType.SERVER_VAD),
        ... )
    """

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    model: str | None = None
    modalities: list[Modality] | None = None
    instructions: str | None = None
    voice: str | None = None
    input_audio_format: AudioFormat | None = None
    output_audio_format: AudioFormat | None = None
    input_audio_noise_reduction: NoiseReduction | None = None
    turn_detection: TurnDetection | None = None
    temperature: float | None = None
    max_response_output_tokens: int | str | None = None
    tools: list[RealtimeTool] | None = None
    beta_fields: BetaFields | None = None


class SessionInfo(SessionConfig):
    """Session as reported by the server."""

    id: str | None = None
    object: str | None = None


class TranscriptionConfig(BaseModel):
    """Configuration for ``transcription_session.update``."""

    model_config = ConfigDict(extra="allow")

    input_audio_format: str | None = None
    input_audio_transcription: dict[str, Any] | None = None
    turn_detection: TurnDetection | None = None


class ItemType(str, Enum):
    MESSAGE = "message"
    FUNCTION_CALL = "function_call"
    FUNCTION_CALL_OUTPUT = "function_call_output"


class ItemContent(BaseModel):
    """Content part of a conversation item."""

    model_config = ConfigDict(extra="allow")

    type: str = "input_text"
    text: str | None = None
    audio: str | None = None
    transcript: str | None = None


class ConversationItem(BaseModel):
    """An item in the server-side conversation."""

    model_config = ConfigDict(extra="allow", use_enum_values=True)

    id: str | None = None
    type: ItemType = ItemType.MESSAGE
    object: str | None = None
    status: str | None = None
    role: str | None = None
    content: list[ItemContent] | None = None
    name: str | None = None
    arguments: str | None = None
    output: str | None = None

    @classmethod
    def user_text(cls, text: str) -> ConversationItem:
        return cls(role="user", content=[ItemContent(type="input_text", text=text)])

    @classmethod
    def function_output(cls, output: str) -> ConversationItem:
        return cls(type=ItemType.FUNCTION_CALL_OUTPUT, output=output)


class TokenDetails(BaseModel):
    model_config = ConfigDict(extra="allow")

    text_tokens: int | None = None
    audio_tokens: int | None = None
    cached_tokens: int | None = None


class ResponseUsage(BaseModel):
    model_config = ConfigDict(extra="allow")

    total_tokens: int | None = None
    input_tokens: int | None = None
    output_tokens: int | None = None
    input_token_details: TokenDetails | None = None
    output_token_details: TokenDetails | None = None


class ResponseInfo(BaseModel):
    """Response object carried by ``response.created`` / ``response.done``."""

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    object: str | None = None
    status: str | None = None
    usage: ResponseUsage | None = None

"""
Conversation message types.

Provides Pythonic APIs for building messages with support for:
- Text messages
- Rich content (images, video, files, audio)
- Assistant tool calls and tool results
"""

from __future__ import annotations

import base64
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from zai_lib_python.errors import ValidationError
from zai_lib_python.types.tool import ToolCall


class MessageRole(str, Enum):
    """Message role enumeration."""

    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class MediaUrl(BaseModel):
    """URL (or data URI / base64 string) wrapper used by rich content parts."""

    url: str


class InputAudio(BaseModel):
    """Base64 audio attached to a voice-model message."""

    data: str
    format: str = "wav"


class ContentPart(BaseModel):
    """One part of structured message content.

    Supported types:
    - text: Plain text
    - image_url: Image URL or base64 data
    - video_url: Video URL (mp4)
    - file_url: Document URL
    - input_audio: Base64 audio (voice models)
    """

    model_config = ConfigDict(extra="allow")

    type: str = Field(description="Content part type")
    text: str | None = None
    image_url: MediaUrl | None = None
    video_url: MediaUrl | None = None
    file_url: MediaUrl | None = None
    input_audio: InputAudio | None = None

    @classmethod
    def text_part(cls, text: str) -> ContentPart:
        return cls(type="text", text=text)

    @classmethod
    def image(cls, url: str) -> ContentPart:
        """Create an image part from a URL or base64 string."""
        return cls(type="image_url", image_url=MediaUrl(url=url))

    @classmethod
    def image_from_file(cls, path: str | Path) -> ContentPart:
        """Create an image part from a local file (base64 encoded)."""
        data = Path(path).read_bytes()
        return cls.image(base64.standard_b64encode(data).decode("ascii"))

    @classmethod
    def video(cls, url: str) -> ContentPart:
        return cls(type="video_url", video_url=MediaUrl(url=url))

    @classmethod
    def file(cls, url: str) -> ContentPart:
        return cls(type="file_url", file_url=MediaUrl(url=url))

    @classmethod
    def audio(cls, data: bytes | str, format: str = "wav") -> ContentPart:
        """Create an audio part; raw bytes are base64 encoded."""
        if isinstance(data, bytes):
            data = base64.standard_b64encode(data).decode("ascii")
        return cls(type="input_audio", input_audio=InputAudio(data=data, format=format))

    def is_empty(self) -> bool:
        if self.type == "text":
            return not self.text
        return False


MessageContent = str | list[ContentPart]


class Message(BaseModel):
    """One conversation turn.

    A message must carry non-empty content or at least one tool call.
    The check runs in ``to_wire()`` so partially built messages can
    still be constructed and inspected.

    Examples:
        >>> Message.user("Hello!")
        >>> Message.tool('{"temp": 21}', tool_call_id="call_1")
        >>> Message.with_content(
        ...     MessageRole.USER,
        ...     [ContentPart.text_part("Describe this:"), ContentPart.image("https://...")],
        ... )
    """

    model_config = ConfigDict(use_enum_values=True, extra="allow")

    role: MessageRole = Field(description="Message role")
    content: MessageContent | None = Field(default=None, description="Text or content parts")
    tool_call_id: str | None = Field(default=None, description="Call answered by a tool message")
    tool_calls: list[ToolCall] | None = Field(default=None, description="Calls requested by the assistant")
    reasoning_content: str | None = Field(default=None, description="Assistant reasoning text")

    @classmethod
    def system(cls, text: str) -> Message:
        return cls(role=MessageRole.SYSTEM, content=text)

    @classmethod
    def user(cls, text: str) -> Message:
        return cls(role=MessageRole.USER, content=text)

    @classmethod
    def assistant(
        cls,
        text: str | None = None,
        tool_calls: list[ToolCall] | None = None,
    ) -> Message:
        """Create an assistant message, optionally carrying tool calls."""
        return cls(role=MessageRole.ASSISTANT, content=text, tool_calls=tool_calls or None)

    @classmethod
    def tool(cls, content: str, tool_call_id: str | None = None) -> Message:
        """Create a tool result message.

        Args:
            content: JSON string with the tool result
            tool_call_id: ID of the tool call being answered
        """
        return cls(role=MessageRole.TOOL, content=content, tool_call_id=tool_call_id)

    @classmethod
    def with_content(cls, role: MessageRole, content: list[ContentPart]) -> Message:
        return cls(role=role, content=content)

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)

    def has_content(self) -> bool:
        if self.content is None:
            return False
        if isinstance(self.content, str):
            return bool(self.content)
        return any(not part.is_empty() for part in self.content)

    def content_types(self) -> set[str]:
        """Return the set of content part types (``{"text"}`` for plain text)."""
        if self.content is None:
            return set()
        if isinstance(self.content, str):
            return {"text"}
        return {part.type for part in self.content}

    def get_text_content(self) -> str:
        """Extract text from the message, joining text parts with newlines."""
        if self.content is None:
            return ""
        if isinstance(self.content, str):
            return self.content
        return "\n".join(p.text for p in self.content if p.type == "text" and p.text)

    def validate_for_send(self) -> None:
        """Check the message invariants.

        Raises:
            ValidationError: If the message is empty or malformed for its role
        """
        if not self.has_content() and not self.has_tool_calls:
            raise ValidationError(
                f"Empty {self.role} message: content or tool_calls required",
                field="content",
            )
        if self.tool_calls and self.role != MessageRole.ASSISTANT.value:
            raise ValidationError(
                "Only assistant messages may carry tool_calls",
                field="tool_calls",
                actual=self.role,
            )

    def to_wire(self) -> dict[str, Any]:
        """Encode the message as a request body entry.

        Raises:
            ValidationError: If the message is empty
        """
        self.validate_for_send()
        return self.model_dump(mode="json", exclude_none=True)

"""
Streaming chat completion chunk types.

One ``data:`` record of a chat completion stream decodes into a
StreamChunk. Chunks are ordered; the final chunk for a choice carries a
non-null ``finish_reason`` and the last chunk usually carries ``usage``.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class Usage(BaseModel):
    """Token usage reported by the service."""

    model_config = ConfigDict(extra="allow")

    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0


class FunctionCallDelta(BaseModel):
    """Partial function name/arguments of a streamed tool call."""

    model_config = ConfigDict(extra="allow")

    name: str | None = None
    arguments: str | None = None


class ToolCallDelta(BaseModel):
    """One tool-call fragment inside a delta.

    Fragments of the same call share ``index``; ``id`` and ``type``
    usually arrive with the first fragment only.
    """

    model_config = ConfigDict(extra="allow")

    index: int = 0
    id: str | None = None
    type: str | None = None
    function: FunctionCallDelta | None = None


class Delta(BaseModel):
    """Incremental fragment of an assistant message."""

    model_config = ConfigDict(extra="allow")

    role: str | None = None
    content: str | None = None
    reasoning_content: str | None = None
    tool_calls: list[ToolCallDelta] | None = None


class StreamChoice(BaseModel):
    model_config = ConfigDict(extra="allow")

    index: int = 0
    delta: Delta = Field(default_factory=Delta)
    finish_reason: str | None = None


class StreamChunk(BaseModel):
    """A decoded chat completion stream record.

    ``id`` may be a string or a number depending on the endpoint.
    """

    model_config = ConfigDict(extra="allow")

    id: str | int | None = None
    created: int | None = None
    model: str | None = None
    choices: list[StreamChoice] = Field(default_factory=list)
    usage: Usage | None = None

    @property
    def content(self) -> str:
        """Concatenated content fragments of all choices in this chunk."""
        return "".join(c.delta.content for c in self.choices if c.delta.content)

    @property
    def reasoning_content(self) -> str:
        return "".join(c.delta.reasoning_content for c in self.choices if c.delta.reasoning_content)

    @property
    def finish_reason(self) -> str | None:
        for choice in self.choices:
            if choice.finish_reason:
                return choice.finish_reason
        return None

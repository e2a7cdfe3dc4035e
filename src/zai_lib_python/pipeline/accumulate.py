"""
Accumulator for chat completion streams.

Folds StreamChunk values into the complete assistant reply: content and
reasoning text, finish reason, usage, and tool calls reassembled from
index-keyed fragments. The accumulator is threaded through the decode
loop and handed to the caller once the stream ends.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from zai_lib_python.utils.tool_call_assembler import ToolCallAssembler

if TYPE_CHECKING:
    from zai_lib_python.client.response import ChatResponse
    from zai_lib_python.types.stream import StreamChunk, Usage
    from zai_lib_python.types.tool import ToolCall


@dataclass
class ChoiceState:
    """Accumulated state of one choice."""

    index: int
    role: str | None = None
    content: list[str] = field(default_factory=list)
    reasoning: list[str] = field(default_factory=list)
    finish_reason: str | None = None
    tool_calls: ToolCallAssembler = field(default_factory=ToolCallAssembler)


class StreamAccumulator:
    """Accumulates streamed chunks into a complete reply.

    Example:
        >>> acc = StreamAccumulator()
        >>> async for chunk in SSEDecoder().chunks(body):
        ...     acc.add(chunk)
        >>> response = acc.to_response()
    """

    def __init__(self) -> None:
        self._choices: dict[int, ChoiceState] = {}
        self.id: str | int | None = None
        self.model: str | None = None
        self.created: int | None = None
        self.usage: Usage | None = None
        self.chunk_count = 0

    def _choice(self, index: int) -> ChoiceState:
        state = self._choices.get(index)
        if state is None:
            state = ChoiceState(index=index)
            self._choices[index] = state
        return state

    def add(self, chunk: StreamChunk) -> None:
        """Merge one chunk; chunks must be added in arrival order."""
        self.chunk_count += 1
        if chunk.id is not None and self.id is None:
            self.id = chunk.id
        if chunk.model:
            self.model = chunk.model
        if chunk.created is not None and self.created is None:
            self.created = chunk.created
        if chunk.usage is not None:
            self.usage = chunk.usage

        for choice in chunk.choices:
            state = self._choice(choice.index)
            delta = choice.delta
            if delta.role:
                state.role = delta.role
            if delta.content:
                state.content.append(delta.content)
            if delta.reasoning_content:
                state.reasoning.append(delta.reasoning_content)
            for fragment in delta.tool_calls or []:
                state.tool_calls.on_delta(fragment)
            if choice.finish_reason:
                state.finish_reason = choice.finish_reason

    def content(self, index: int = 0) -> str:
        state = self._choices.get(index)
        return "".join(state.content) if state else ""

    def reasoning_content(self, index: int = 0) -> str:
        state = self._choices.get(index)
        return "".join(state.reasoning) if state else ""

    def finish_reason(self, index: int = 0) -> str | None:
        state = self._choices.get(index)
        return state.finish_reason if state else None

    def tool_calls(self, index: int = 0) -> list[ToolCall]:
        state = self._choices.get(index)
        return state.tool_calls.finalize() if state else []

    @property
    def is_finished(self) -> bool:
        """True once every choice seen so far has a finish reason."""
        return bool(self._choices) and all(s.finish_reason for s in self._choices.values())

    def to_response(self, index: int = 0) -> ChatResponse:
        """Build the ChatResponse for one choice."""
        from zai_lib_python.client.response import ChatResponse

        return ChatResponse(
            id=None if self.id is None else str(self.id),
            content=self.content(index),
            reasoning_content=self.reasoning_content(index) or None,
            tool_calls=self.tool_calls(index),
            finish_reason=self.finish_reason(index),
            usage=self.usage,
            model=self.model,
        )

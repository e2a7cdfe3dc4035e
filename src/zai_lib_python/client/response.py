"""
Response types for client operations.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from zai_lib_python.types.message import Message

if TYPE_CHECKING:
    from zai_lib_python.tools.executor import ExecutionResult
    from zai_lib_python.types.stream import Usage
    from zai_lib_python.types.tool import ToolCall


@dataclass
class ChatResponse:
    """Response from a chat completion request.

    Attributes:
        id: Completion id assigned by the service
        content: The generated text content
        reasoning_content: Thinking output, when thinking is enabled
        tool_calls: List of tool calls requested by the model
        finish_reason: Why the model stopped generating
        usage: Token usage information
        model: Model that generated the response
        raw_response: Raw response data from the API (non-streaming only)
    """

    id: str | None = None
    content: str = ""
    reasoning_content: str | None = None
    tool_calls: list[ToolCall] = field(default_factory=list)
    finish_reason: str | None = None
    usage: Usage | None = None
    model: str | None = None
    raw_response: dict[str, Any] | None = None

    def to_message(self) -> Message:
        """Convert the response to the assistant message that continues the conversation."""
        return Message.assistant(
            self.content or None,
            tool_calls=list(self.tool_calls) or None,
        )

    @property
    def has_tool_calls(self) -> bool:
        return len(self.tool_calls) > 0

    @property
    def prompt_tokens(self) -> int | None:
        return self.usage.prompt_tokens if self.usage else None

    @property
    def completion_tokens(self) -> int | None:
        return self.usage.completion_tokens if self.usage else None

    @property
    def total_tokens(self) -> int | None:
        return self.usage.total_tokens if self.usage else None


@dataclass
class CallStats:
    """Statistics for a single API call.

    Attributes:
        client_request_id: Client-generated request ID for tracking
        latency_ms: Total latency in milliseconds
        time_to_first_token_ms: Time to first token (streaming only)
        retry_count: Number of retries performed
        model: Model used for the call
        endpoint: API endpoint used
        prompt_tokens: Prompt token count
        completion_tokens: Completion token count
    """

    client_request_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    latency_ms: float = 0.0
    time_to_first_token_ms: float | None = None
    retry_count: int = 0
    model: str | None = None
    endpoint: str | None = None
    prompt_tokens: int | None = None
    completion_tokens: int | None = None

    # Internal timing
    _start_time: float = field(default_factory=time.monotonic, repr=False)
    _first_token_time: float | None = field(default=None, repr=False)

    def record_first_token(self) -> None:
        if self._first_token_time is None:
            self._first_token_time = time.monotonic()
            self.time_to_first_token_ms = (self._first_token_time - self._start_time) * 1000

    def record_end(self) -> None:
        self.latency_ms = (time.monotonic() - self._start_time) * 1000

    def record_usage(self, usage: Usage | None) -> None:
        if usage:
            self.prompt_tokens = usage.prompt_tokens
            self.completion_tokens = usage.completion_tokens

    @property
    def total_tokens(self) -> int | None:
        if self.prompt_tokens is not None and self.completion_tokens is not None:
            return self.prompt_tokens + self.completion_tokens
        return None


@dataclass
class ToolRound:
    """One tool-calling round: the calls the model made and their results."""

    calls: list[ToolCall]
    results: list[ExecutionResult]

    @property
    def failed(self) -> list[ExecutionResult]:
        return [r for r in self.results if not r.success]

    @property
    def all_succeeded(self) -> bool:
        return all(r.success for r in self.results)


@dataclass
class ConversationResult:
    """Outcome of a tool-calling conversation loop.

    Attributes:
        response: The final model reply (no tool calls, unless the round
            limit was reached)
        rounds: Every tool round executed along the way
        completed: False if the loop stopped at the round limit
    """

    response: ChatResponse
    rounds: list[ToolRound] = field(default_factory=list)
    completed: bool = True

    @property
    def content(self) -> str:
        return self.response.content

    @property
    def tool_results(self) -> list[ExecutionResult]:
        return [r for rnd in self.rounds for r in rnd.results]

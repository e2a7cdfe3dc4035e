"""对话补全：消息管理、流式/非流式请求与工具调用循环。

Chat completion orchestration.

ChatCompletion owns the conversation messages, builds request bodies,
sends them (streaming or not) and drives the tool-calling loop through a
ToolExecutor.
"""

from __future__ import annotations

import asyncio
import inspect
from typing import TYPE_CHECKING, Any

from zai_lib_python import codec
from zai_lib_python.client.response import CallStats, ChatResponse, ConversationResult, ToolRound
from zai_lib_python.errors import RemoteError, RequestTimeoutError, ValidationError
from zai_lib_python.pipeline import StreamAccumulator, stream_chunks
from zai_lib_python.resilience.retry import RetryPolicy
from zai_lib_python.telemetry import get_logger, log_context
from zai_lib_python.tools.executor import tool_messages
from zai_lib_python.types.models import Capability, capability_for_content, require_capability
from zai_lib_python.types.stream import Usage
from zai_lib_python.types.tool import ToolChoice, ToolDefinition

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from zai_lib_python.pipeline import ChunkCallback
    from zai_lib_python.resilience.retry import RetryConfig
    from zai_lib_python.tools.executor import ToolExecutor
    from zai_lib_python.transport.http import HttpTransport
    from zai_lib_python.types.message import Message
    from zai_lib_python.types.stream import StreamChunk

logger = get_logger(__name__)

CHAT_COMPLETIONS_PATH = "/chat/completions"


def parse_completion(body: dict[str, Any]) -> ChatResponse:
    """Build a ChatResponse from a non-streaming completion body.

    Raises:
        RemoteError: If the body is an error object instead of a completion
    """
    if body.get("error") and not body.get("choices"):
        raise RemoteError.from_response(200, body)

    choices = body.get("choices") or []
    first = choices[0] if choices and isinstance(choices[0], dict) else {}
    message = first.get("message") or {}
    content = message.get("content")
    usage = body.get("usage")

    return ChatResponse(
        id=None if body.get("id") is None else str(body["id"]),
        content=content if isinstance(content, str) else "",
        reasoning_content=message.get("reasoning_content") or None,
        tool_calls=codec.extract_tool_calls(body),
        finish_reason=first.get("finish_reason"),
        usage=Usage.model_validate(usage) if isinstance(usage, dict) else None,
        model=body.get("model"),
        raw_response=body,
    )


class ChatCompletion:
    """A conversation with one model.

    Setters return ``self`` so requests can be configured fluently.

    Example:
        >>> chat = (
        ...     client.chat("glm-4.6", [Message.user("What's the weather in Beijing?")])
        ...     .temperature(0.7)
        ...     .max_tokens(1024)
        ... )
        >>> response = await chat.send()
        >>> print(response.content)

        >>> # Streaming
        >>> response = await chat.stream(lambda chunk: print(chunk.content, end=""))

        >>> # Tool loop
        >>> result = await client.chat("glm-4.6", msgs, executor=executor).run()
    """

    def __init__(
        self,
        transport: HttpTransport,
        model: str,
        messages: Iterable[Message] | None = None,
        *,
        executor: ToolExecutor | None = None,
    ) -> None:
        """Initialize the conversation.

        Raises:
            ValidationError: If a known model cannot chat, or a message
                carries content the model cannot accept
        """
        require_capability(model, Capability.CHAT, field="model")
        self._transport = transport
        self._model = model
        self._executor = executor
        self._messages: list[Message] = []
        self._params: dict[str, Any] = {}
        self._tools: list[ToolDefinition] | None = None
        self._retry: RetryConfig | None = None
        self._stats: CallStats | None = None
        for message in messages or []:
            self.add_message(message)

    @property
    def model(self) -> str:
        return self._model

    @property
    def messages(self) -> list[Message]:
        """Conversation so far (a copy)."""
        return list(self._messages)

    @property
    def stats(self) -> CallStats | None:
        """Statistics of the most recent request."""
        return self._stats

    def add_message(self, message: Message) -> ChatCompletion:
        """Append a message after checking its content against the model."""
        self._check_content(message, len(self._messages))
        self._messages.append(message)
        return self

    def _check_content(self, message: Message, position: int) -> None:
        if isinstance(message.content, str) or message.content is None:
            return
        for part in message.content:
            capability = capability_for_content(part.type)
            if capability is not None:
                require_capability(
                    self._model, capability, field=f"messages[{position}].content"
                )

    # --- request parameters ---------------------------------------------

    def temperature(self, value: float) -> ChatCompletion:
        self._params["temperature"] = value
        return self

    def top_p(self, value: float) -> ChatCompletion:
        self._params["top_p"] = value
        return self

    def max_tokens(self, value: int) -> ChatCompletion:
        self._params["max_tokens"] = value
        return self

    def stop(self, sequences: str | list[str]) -> ChatCompletion:
        self._params["stop"] = [sequences] if isinstance(sequences, str) else list(sequences)
        return self

    def do_sample(self, enabled: bool = True) -> ChatCompletion:
        self._params["do_sample"] = enabled
        return self

    def thinking(self, enabled: bool = True) -> ChatCompletion:
        """Turn deep thinking on or off.

        Raises:
            ValidationError: If the model is known not to support thinking
        """
        require_capability(self._model, Capability.THINKING, field="thinking")
        self._params["thinking"] = {"type": "enabled" if enabled else "disabled"}
        return self

    def tool_stream(self, enabled: bool = True) -> ChatCompletion:
        """Stream tool-call arguments as they are generated.

        Raises:
            ValidationError: If the model is known not to support it
        """
        require_capability(self._model, Capability.TOOL_STREAM, field="tool_stream")
        self._params["tool_stream"] = enabled
        return self

    def tools(self, tools: Iterable[ToolDefinition | dict[str, Any]]) -> ChatCompletion:
        """Declare the tools the model may call.

        When no tools are declared, a configured executor's enabled tools
        are declared automatically.
        """
        self._tools = [
            t if isinstance(t, ToolDefinition) else ToolDefinition.from_spec(t) for t in tools
        ]
        return self

    def tool_choice(self, choice: ToolChoice | str) -> ChatCompletion:
        self._params["tool_choice"] = choice.value if isinstance(choice, ToolChoice) else choice
        return self

    def response_format(self, format_type: str = "json_object") -> ChatCompletion:
        """Request ``text`` or ``json_object`` output."""
        self._params["response_format"] = {"type": format_type}
        return self

    def user_id(self, value: str) -> ChatCompletion:
        self._params["user_id"] = value
        return self

    def request_id(self, value: str) -> ChatCompletion:
        self._params["request_id"] = value
        return self

    def param(self, key: str, value: Any) -> ChatCompletion:
        """Set an extra body parameter."""
        self._params[key] = value
        return self

    def retry(self, config: RetryConfig) -> ChatCompletion:
        """Retry retryable remote and transport errors on non-streaming requests."""
        self._retry = config
        return self

    def build_payload(self, stream: bool = False) -> dict[str, Any]:
        """Build the request body.

        Raises:
            ValidationError: If there are no messages, or one is empty
        """
        if not self._messages:
            raise ValidationError("At least one message is required", field="messages")

        payload: dict[str, Any] = {
            "model": self._model,
            "messages": [m.to_wire() for m in self._messages],
        }

        tools = self._tools
        if tools is None and self._executor is not None:
            tools = self._executor.registry.export_definitions()
        if tools:
            payload["tools"] = [t.model_dump(exclude_none=True) for t in tools]

        payload.update(self._params)
        if stream:
            payload["stream"] = True
        return payload

    # --- execution ------------------------------------------------------

    async def _with_deadline(self, operation: Any, timeout: float | None) -> Any:
        if timeout is None:
            return await operation
        try:
            return await asyncio.wait_for(operation, timeout=timeout)
        except asyncio.TimeoutError as e:
            raise RequestTimeoutError(
                f"Chat request did not finish within {timeout:g}s",
                timeout=timeout,
                url=f"{self._transport.base_url}{CHAT_COMPLETIONS_PATH}",
            ) from e

    async def _send_once(self) -> ChatResponse:
        payload = self.build_payload(stream=False)
        stats = CallStats(model=self._model, endpoint=CHAT_COMPLETIONS_PATH)
        self._stats = stats

        async def call() -> dict[str, Any]:
            return await self._transport.post_json(CHAT_COMPLETIONS_PATH, payload)

        if self._retry is None:
            body = await call()
        else:
            outcome = await RetryPolicy(self._retry).execute(call)
            stats.retry_count = outcome.attempts - 1
            if outcome.error is not None:
                raise outcome.error
            body = outcome.value

        response = parse_completion(body)
        stats.record_end()
        stats.record_usage(response.usage)
        return response

    async def _stream_once(self, on_chunk: ChunkCallback | None) -> ChatResponse:
        payload = self.build_payload(stream=True)
        stats = CallStats(model=self._model, endpoint=CHAT_COMPLETIONS_PATH)
        self._stats = stats

        def observe(chunk: StreamChunk) -> Any:
            stats.record_first_token()
            return on_chunk(chunk) if on_chunk is not None else None

        async with self._transport.stream_post(CHAT_COMPLETIONS_PATH, payload) as response:
            accumulator = await stream_chunks(
                response.aiter_bytes(), observe, accumulator=StreamAccumulator()
            )

        result = accumulator.to_response()
        stats.record_end()
        stats.record_usage(result.usage)
        return result

    async def send(self, timeout: float | None = None) -> ChatResponse:
        """Send the conversation and wait for the complete reply.

        Args:
            timeout: Overall deadline in seconds

        Raises:
            RequestTimeoutError: If the deadline passes
            RemoteError: If the service rejects the request
            TransportError: On network failure
        """
        with log_context(model=self._model):
            return await self._with_deadline(self._send_once(), timeout)

    async def stream(
        self,
        on_chunk: ChunkCallback | None = None,
        timeout: float | None = None,
    ) -> ChatResponse:
        """Stream the reply, calling ``on_chunk`` for each chunk in order.

        Args:
            on_chunk: Per-chunk callback (sync or async)
            timeout: Overall deadline in seconds; cancels the in-flight read

        Returns:
            The complete reply assembled from the chunks

        Raises:
            RequestTimeoutError: If the deadline passes
            DecodeError: If a record is malformed
        """
        with log_context(model=self._model):
            return await self._with_deadline(self._stream_once(on_chunk), timeout)

    async def run(
        self,
        max_rounds: int = 8,
        *,
        stream: bool = False,
        on_chunk: ChunkCallback | None = None,
        on_tool_results: Callable[[ToolRound], Any] | None = None,
        timeout: float | None = None,
    ) -> ConversationResult:
        """Run the tool-calling loop until the model answers without tools.

        Each round sends the conversation; if the reply requests tools,
        they are executed concurrently, the assistant turn and one
        ``tool`` reply per call are appended, and the request is re-issued.

        Args:
            max_rounds: Maximum number of requests
            stream: Use streaming requests
            on_chunk: Per-chunk callback when streaming
            on_tool_results: Called after each tool round (sync or async)
            timeout: Overall deadline for the whole loop, in seconds

        Returns:
            ConversationResult with the final reply and every tool round

        Raises:
            ValidationError: If no executor is configured
            RequestTimeoutError: If the deadline passes
        """
        if self._executor is None:
            raise ValidationError("A ToolExecutor is required to run the tool loop", field="executor")
        if max_rounds < 1:
            raise ValidationError("max_rounds must be at least 1", field="max_rounds", actual=max_rounds)

        with log_context(model=self._model):
            return await self._with_deadline(
                self._run_loop(self._executor, max_rounds, stream, on_chunk, on_tool_results), timeout
            )

    async def _run_loop(
        self,
        executor: ToolExecutor,
        max_rounds: int,
        stream: bool,
        on_chunk: ChunkCallback | None,
        on_tool_results: Callable[[ToolRound], Any] | None,
    ) -> ConversationResult:
        rounds: list[ToolRound] = []
        number = 0

        while True:
            number += 1
            response = await (self._stream_once(on_chunk) if stream else self._send_once())

            if not response.has_tool_calls:
                if response.content:
                    self._messages.append(response.to_message())
                return ConversationResult(response=response, rounds=rounds)

            if number >= max_rounds:
                logger.warning(
                    "Tool loop stopped at round limit",
                    max_rounds=max_rounds,
                    pending_calls=len(response.tool_calls),
                )
                return ConversationResult(response=response, rounds=rounds, completed=False)

            calls = response.tool_calls
            results = await executor.execute_parallel(calls)
            self._messages.append(response.to_message())
            self._messages.extend(tool_messages(calls, results))

            tool_round = ToolRound(calls=list(calls), results=results)
            rounds.append(tool_round)
            logger.info(
                "Tool round complete",
                round=number,
                calls=len(calls),
                failed=len(tool_round.failed),
            )

            if on_tool_results is not None:
                outcome = on_tool_results(tool_round)
                if inspect.isawaitable(outcome):
                    await outcome

"""
SSE stream decoder for chat completion streams.

Parses the line-oriented format::

    data: {"id": "...", "choices": [...]}

    data: [DONE]

Only ``data:`` lines are interpreted. Empty keep-alive lines, comments
(``:``) and other SSE fields (``event:``, ``id:``, ``retry:``) are
skipped. A record that is not valid JSON aborts the stream with
DecodeError.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from zai_lib_python import codec
from zai_lib_python.errors import DecodeError
from zai_lib_python.pipeline.base import Decoder
from zai_lib_python.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from zai_lib_python.types.stream import StreamChunk

logger = get_logger(__name__)


class SSEDecoder(Decoder):
    """Server-Sent Events decoder.

    Bytes are buffered until a newline so multi-byte characters and
    records split across network reads decode correctly. A final record
    without a trailing newline is still delivered.

    Attributes:
        prefix: Data line prefix (default: "data:")
        done_signal: End of stream payload (default: "[DONE]")
    """

    def __init__(
        self,
        prefix: str = "data:",
        done_signal: str = "[DONE]",
    ) -> None:
        self._prefix = prefix
        self._done_signal = done_signal

    def _payload(self, raw: bytes) -> str | None:
        try:
            line = raw.decode("utf-8").strip()
        except UnicodeDecodeError as e:
            raise DecodeError("Stream line is not valid UTF-8", cause=e) from e
        if not line.startswith(self._prefix):
            return None
        return line[len(self._prefix) :].strip() or None

    async def records(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[str]:
        """Yield raw ``data:`` payloads until ``[DONE]`` or end of body."""
        buffer = b""

        async for chunk in byte_stream:
            buffer += chunk
            while (newline := buffer.find(b"\n")) >= 0:
                line, buffer = buffer[:newline], buffer[newline + 1 :]
                payload = self._payload(line)
                if payload is None:
                    continue
                if payload == self._done_signal:
                    logger.debug("Stream finished")
                    return
                yield payload

        if buffer:
            payload = self._payload(buffer)
            if payload is not None and payload != self._done_signal:
                yield payload

    async def decode(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[dict[str, Any]]:
        """Yield each record parsed as a JSON object.

        Raises:
            DecodeError: On malformed JSON or a non-object record
        """
        async for payload in self.records(byte_stream):
            frame = codec.loads(payload)
            if not isinstance(frame, dict):
                raise DecodeError("Stream record must be a JSON object", payload=payload)
            yield frame

    async def chunks(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[StreamChunk]:
        """Yield each record as a StreamChunk.

        Raises:
            DecodeError: On malformed JSON or a record that is not a chunk
            RemoteError: On an in-band error record
        """
        async for payload in self.records(byte_stream):
            chunk = codec.decode_stream_chunk(payload)
            logger.debug("Stream chunk", chunk_id=chunk.id, finish_reason=chunk.finish_reason)
            yield chunk

"""
Callback-driven consumption of a chat completion stream.
"""

from __future__ import annotations

import inspect
from typing import TYPE_CHECKING

from zai_lib_python.pipeline.accumulate import StreamAccumulator
from zai_lib_python.pipeline.decode import SSEDecoder

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from zai_lib_python.pipeline.base import ChunkCallback


async def stream_chunks(
    byte_stream: AsyncIterator[bytes],
    on_chunk: ChunkCallback | None = None,
    *,
    decoder: SSEDecoder | None = None,
    accumulator: StreamAccumulator | None = None,
) -> StreamAccumulator:
    """Decode a stream, delivering each chunk to ``on_chunk`` in order.

    The callback for chunk N (awaited if it returns an awaitable)
    completes before chunk N+1 is requested from the byte stream, so a
    slow consumer throttles the producer.

    Args:
        byte_stream: Raw response body
        on_chunk: Optional per-chunk callback
        decoder: Decoder to use (default: SSEDecoder())
        accumulator: Accumulator to fold into (default: a new one)

    Returns:
        The accumulator holding the complete reply

    Raises:
        DecodeError: If a record is malformed; the stream is abandoned
    """
    decoder = decoder or SSEDecoder()
    accumulator = accumulator if accumulator is not None else StreamAccumulator()

    async for chunk in decoder.chunks(byte_stream):
        accumulator.add(chunk)
        if on_chunk is not None:
            result = on_chunk(chunk)
            if inspect.isawaitable(result):
                await result

    return accumulator

"""
Base abstractions for the pipeline layer.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from zai_lib_python.types.stream import StreamChunk

ChunkCallback = Callable[["StreamChunk"], Any]
"""Per-chunk consumer; may be a plain function or a coroutine function."""


class Decoder(ABC):
    """Abstract decoder that converts a byte stream to record payloads.

    Decoders handle the transport-level framing of streaming responses.
    They are stateless between calls: each ``decode`` call starts a fresh
    sequence over its own byte stream.
    """

    @abstractmethod
    def records(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[str]:
        """Yield the raw text payload of each record, in arrival order."""
        ...

    @abstractmethod
    def decode(self, byte_stream: AsyncIterator[bytes]) -> AsyncIterator[dict[str, Any]]:
        """Yield each record parsed as a JSON object."""
        ...

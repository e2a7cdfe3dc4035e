"""
Pipeline layer - chat stream processing.

- SSEDecoder: splits the response body into ``data:`` records and
  decodes them into StreamChunk values
- StreamAccumulator: folds chunks into the complete reply
- stream_chunks: drives decoding with a per-chunk callback
"""

from zai_lib_python.pipeline.accumulate import ChoiceState, StreamAccumulator
from zai_lib_python.pipeline.base import ChunkCallback, Decoder
from zai_lib_python.pipeline.decode import SSEDecoder
from zai_lib_python.pipeline.stream import stream_chunks

__all__ = [
    "ChoiceState",
    "ChunkCallback",
    "Decoder",
    "SSEDecoder",
    "StreamAccumulator",
    "stream_chunks",
]

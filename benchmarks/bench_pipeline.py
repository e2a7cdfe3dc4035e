#!/usr/bin/env python3
"""
Streaming and codec performance benchmarks.

Measures throughput and latency of the SSE decoder, the stream
accumulator and realtime event decoding.
"""

import asyncio
import json
import time
from typing import Any

from zai_lib_python import codec
from zai_lib_python.pipeline import SSEDecoder, StreamAccumulator


def generate_sse_chunks(count: int) -> list[bytes]:
    """Generate mock SSE chunks for benchmarking."""
    chunks = []
    for i in range(count):
        data = {
            "id": "bench",
            "model": "glm-4.6",
            "choices": [{"index": 0, "delta": {"content": f"Token{i}"}}],
        }
        chunks.append(f"data: {json.dumps(data)}\n\n".encode())
    chunks.append(b"data: [DONE]\n\n")
    return chunks


async def byte_stream(chunks: list[bytes]):
    for chunk in chunks:
        yield chunk


def summarize(name: str, iterations: int, items: int, elapsed: float) -> dict[str, Any]:
    return {
        "name": name,
        "iterations": iterations,
        "items": items,
        "elapsed_seconds": elapsed,
        "throughput": items / elapsed if items else 0,
        "latency_us": (elapsed / items) * 1_000_000 if items else 0,
    }


async def benchmark_sse_decoder(iterations: int = 1000) -> dict[str, Any]:
    """Benchmark raw SSE record decoding."""
    chunks = generate_sse_chunks(iterations)
    decoder = SSEDecoder()

    start = time.perf_counter()
    frames = [frame async for frame in decoder.decode(byte_stream(chunks))]
    elapsed = time.perf_counter() - start

    return summarize("SSEDecoder.decode", iterations, len(frames), elapsed)


async def benchmark_chunk_decoding(iterations: int = 1000) -> dict[str, Any]:
    """Benchmark decoding records into typed StreamChunks."""
    chunks = generate_sse_chunks(iterations)
    decoder = SSEDecoder()

    start = time.perf_counter()
    parsed = [chunk async for chunk in decoder.chunks(byte_stream(chunks))]
    elapsed = time.perf_counter() - start

    return summarize("SSEDecoder.chunks", iterations, len(parsed), elapsed)


async def benchmark_accumulator(iterations: int = 1000) -> dict[str, Any]:
    """Benchmark decoding plus accumulation into a ChatResponse."""
    chunks = generate_sse_chunks(iterations)
    decoder = SSEDecoder()
    accumulator = StreamAccumulator()

    start = time.perf_counter()
    async for chunk in decoder.chunks(byte_stream(chunks)):
        accumulator.add(chunk)
    response = accumulator.to_response()
    elapsed = time.perf_counter() - start

    assert response.content.endswith(f"Token{iterations - 1}")
    return summarize("StreamAccumulator", iterations, iterations, elapsed)


async def benchmark_realtime_events(iterations: int = 1000) -> dict[str, Any]:
    """Benchmark realtime server event decoding."""
    frames = [
        json.dumps(
            {
                "type": "response.text.delta",
                "event_id": f"evt_{i}",
                "response_id": "resp_1",
                "item_id": "item_1",
                "delta": f"Token{i}",
            }
        )
        for i in range(iterations)
    ]

    start = time.perf_counter()
    events = [codec.decode_server_event(frame) for frame in frames]
    elapsed = time.perf_counter() - start

    return summarize("decode_server_event", iterations, len(events), elapsed)


async def run_benchmarks() -> None:
    """Run all benchmarks and print results."""
    print("=" * 60)
    print("Streaming Benchmarks")
    print("=" * 60)
    print()

    benchmarks = [
        benchmark_sse_decoder,
        benchmark_chunk_decoding,
        benchmark_accumulator,
        benchmark_realtime_events,
    ]

    for bench in benchmarks:
        result = await bench()
        print(f"{result['name']}:")
        print(f"  Iterations: {result['iterations']}")
        print(f"  Elapsed: {result['elapsed_seconds']:.4f}s")
        print(f"  Throughput: {result['throughput']:.0f} items/sec")
        print(f"  Latency: {result['latency_us']:.2f} µs/item")
        print()


if __name__ == "__main__":
    asyncio.run(run_benchmarks())

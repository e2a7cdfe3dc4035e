#!/usr/bin/env python3
"""
Streaming response example.

Usage:
    export ZAI_API_KEY="your-api-key"
    python examples/streaming.py
"""

import asyncio

from zai_lib_python import Message, ZaiClient
from zai_lib_python.types import StreamChunk


def print_chunk(chunk: StreamChunk) -> None:
    print(chunk.content, end="", flush=True)


async def main() -> None:
    """Run streaming example."""
    async with ZaiClient() as client:
        print("Streaming response:\n")
        print("-" * 50)

        chat = client.chat(
            "glm-4.5-air",
            [
                Message.system("You are a creative storyteller."),
                Message.user("Tell me a very short story about a robot learning to paint."),
            ],
        ).max_tokens(500)
        response = await chat.stream(print_chunk, timeout=60)

        print("\n" + "-" * 50)
        print(f"Finish reason: {response.finish_reason}")
        if response.usage:
            print(f"Total tokens: {response.usage.total_tokens}")
        if chat.stats and chat.stats.time_to_first_token_ms is not None:
            print(f"Time to first token: {chat.stats.time_to_first_token_ms:.0f}ms")


if __name__ == "__main__":
    asyncio.run(main())

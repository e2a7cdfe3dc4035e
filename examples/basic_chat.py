#!/usr/bin/env python3
"""
Basic chat completion example.

Usage:
    export ZAI_API_KEY="your-api-key"
    python examples/basic_chat.py
"""

import asyncio

from zai_lib_python import Message, ZaiClient


async def main() -> None:
    """Run basic chat example."""
    async with ZaiClient() as client:
        # Method 1: Fluent parameters on a conversation
        chat = (
            client.chat("glm-4.6")
            .add_message(Message.system("You are a helpful assistant."))
            .add_message(Message.user("What is the capital of France?"))
            .temperature(0.7)
        )
        response = await chat.send()
        print(f"Response: {response.content}")
        print(f"Finish reason: {response.finish_reason}")
        print()

        # Method 2: Pass messages up front, with deep thinking enabled
        chat = client.chat(
            "glm-4.6",
            [
                Message.system("You are a Python expert."),
                Message.user("Write a one-liner to read a file."),
            ],
        ).thinking()
        response = await chat.max_tokens(200).send()
        if response.reasoning_content:
            print(f"Reasoning: {response.reasoning_content[:120]}...")
        print(f"Python tip: {response.content}")
        print()

        # Method 3: Call statistics
        stats = chat.stats
        if stats is not None:
            print(f"Latency: {stats.latency_ms:.0f}ms, retries: {stats.retry_count}")
            if stats.prompt_tokens and stats.completion_tokens:
                print(f"Tokens: {stats.prompt_tokens} in, {stats.completion_tokens} out")


if __name__ == "__main__":
    asyncio.run(main())

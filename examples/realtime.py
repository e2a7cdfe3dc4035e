#!/usr/bin/env python3
"""
Realtime session example.

Opens a text-only realtime session, sends one user message and prints
the reply as it arrives.

Usage:
    export ZAI_API_KEY="your-api-key"
    python examples/realtime.py
"""

import asyncio

from zai_lib_python import EventHandler, SessionConfig, ZaiClient
from zai_lib_python.realtime import ConversationItem, Modality


class PrintingHandler(EventHandler):
    def __init__(self, session) -> None:
        self.session = session

    def on_text_delta(self, event) -> None:
        print(event.delta, end="", flush=True)

    async def on_response_done(self, event) -> None:
        print()
        await self.session.close()

    def on_error(self, event) -> None:
        print(f"\nServer error: {event.error.message}")


async def main() -> None:
    """Run realtime example."""
    async with ZaiClient() as client:
        session = client.realtime()

        info = await session.connect(
            "glm-realtime",
            SessionConfig(modalities=[Modality.TEXT], instructions="Answer in one sentence."),
        )
        print(f"Session {info.id} ready")

        await session.create_conversation_item(ConversationItem.user_text("Say hello in Chinese."))
        await session.create_response()
        await session.listen_for_events(PrintingHandler(session))


if __name__ == "__main__":
    asyncio.run(main())

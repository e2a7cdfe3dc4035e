"""
Integration test helper utilities.

Builders for chat completion bodies and SSE streams in the shape the
Zhipu API returns them, plus client fixtures.
"""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any

import pytest_asyncio

from zai_lib_python import ZaiClient

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

CHAT_URL = "https://open.bigmodel.cn/api/paas/v4/chat/completions"


def completion_body(
    content: str | None = "Hello from GLM!",
    *,
    model: str = "glm-4.6",
    tool_calls: list[dict[str, Any]] | None = None,
    finish_reason: str = "stop",
    reasoning_content: str | None = None,
    usage: dict[str, int] | None = None,
) -> dict[str, Any]:
    """Create a non-streaming completion body."""
    message: dict[str, Any] = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = tool_calls
    if reasoning_content:
        message["reasoning_content"] = reasoning_content
    return {
        "id": "20251019120000abcdef",
        "request_id": "req_20251019",
        "created": 1760846400,
        "model": model,
        "choices": [{"index": 0, "message": message, "finish_reason": finish_reason}],
        "usage": usage or {"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
    }


def tool_call(call_id: str, name: str, arguments: dict[str, Any]) -> dict[str, Any]:
    return {
        "id": call_id,
        "type": "function",
        "function": {"name": name, "arguments": json.dumps(arguments, ensure_ascii=False)},
    }


def stream_records(content: str, *, model: str = "glm-4.6") -> list[dict[str, Any]]:
    """One chunk per character, then a final chunk with usage."""
    records = [
        {
            "id": "20251019120000abcdef",
            "created": 1760846400,
            "model": model,
            "choices": [{"index": 0, "delta": {"role": "assistant", "content": char}}],
        }
        for char in content
    ]
    records.append(
        {
            "id": "20251019120000abcdef",
            "created": 1760846400,
            "model": model,
            "choices": [{"index": 0, "delta": {}, "finish_reason": "stop"}],
            "usage": {"prompt_tokens": 8, "completion_tokens": len(content), "total_tokens": 8 + len(content)},
        }
    )
    return records


def sse_body(records: list[dict[str, Any]], *, done: bool = True) -> bytes:
    lines = [f"data: {json.dumps(r, ensure_ascii=False)}\n\n" for r in records]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


@pytest_asyncio.fixture
async def client(api_key: str) -> AsyncIterator[ZaiClient]:
    async with ZaiClient(api_key) as zai:
        yield zai

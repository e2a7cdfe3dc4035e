"""
WebSocket transport for realtime sessions, using websockets.
"""

from __future__ import annotations

import os
from typing import Any

import websockets

DEFAULT_REALTIME_URL = "wss://open.bigmodel.cn/api/paas/v4/realtime"


def resolve_realtime_url(url: str | None = None) -> str:
    """Explicit URL, then ``ZAI_REALTIME_URL``, then the default endpoint."""
    return url or os.getenv("ZAI_REALTIME_URL") or DEFAULT_REALTIME_URL


async def connect_websocket(url: str, headers: dict[str, str]) -> Any:
    """Open a client connection.

    Frames are not size-limited; audio deltas can be large.

    Returns:
        A ``websockets`` ClientConnection
    """
    return await websockets.connect(url, additional_headers=headers, max_size=None)

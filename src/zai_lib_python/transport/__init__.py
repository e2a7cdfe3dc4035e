"""
Transport layer: HTTP (httpx) and WebSocket (websockets) connections.
"""

from zai_lib_python.transport.auth import get_auth_header, require_api_key, resolve_api_key
from zai_lib_python.transport.http import DEFAULT_BASE_URL, HttpTransport
from zai_lib_python.transport.websocket import (
    DEFAULT_REALTIME_URL,
    connect_websocket,
    resolve_realtime_url,
)

__all__ = [
    "DEFAULT_BASE_URL",
    "DEFAULT_REALTIME_URL",
    "HttpTransport",
    "connect_websocket",
    "get_auth_header",
    "require_api_key",
    "resolve_api_key",
    "resolve_realtime_url",
]

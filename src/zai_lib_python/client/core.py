"""核心客户端实现：智谱 GLM 对话与实时会话的统一入口。

Core ZaiClient implementation.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from zai_lib_python.client.chat import ChatCompletion
from zai_lib_python.realtime import RealtimeSession
from zai_lib_python.transport import HttpTransport

if TYPE_CHECKING:
    from collections.abc import Iterable

    import httpx

    from zai_lib_python.realtime import EventHandler
    from zai_lib_python.tools import ToolExecutor
    from zai_lib_python.types.message import Message


class ZaiClient:
    """Client for the Zhipu GLM API.

    Holds one HTTP connection pool shared by every conversation it
    creates. Configuration comes from explicit arguments first, then
    ``ZAI_*`` environment variables.

    Example:
        >>> async with ZaiClient() as client:
        ...     response = await client.chat("glm-4.6", [Message.user("Hello!")]).send()
        ...     print(response.content)

        >>> # Realtime
        >>> session = client.realtime(handler=MyHandler())
        >>> info = await session.connect("glm-realtime")
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        realtime_url: str | None = None,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            api_key: API key (falls back to ZAI_API_KEY)
            base_url: REST base URL (falls back to ZAI_BASE_URL)
            timeout: Per-request HTTP timeout in seconds
            realtime_url: WebSocket endpoint (falls back to ZAI_REALTIME_URL)
            http_client: Pre-built httpx client; the caller keeps ownership

        Raises:
            ValidationError: If no API key is configured
        """
        self._transport = HttpTransport(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            client=http_client,
        )
        self._realtime_url = realtime_url

    @property
    def transport(self) -> HttpTransport:
        return self._transport

    def chat(
        self,
        model: str,
        messages: Iterable[Message] | None = None,
        *,
        executor: ToolExecutor | None = None,
    ) -> ChatCompletion:
        """Start a conversation with ``model``.

        Raises:
            ValidationError: If the model or message content is not supported
        """
        return ChatCompletion(self._transport, model, messages, executor=executor)

    def realtime(
        self,
        handler: EventHandler | None = None,
        **kwargs: Any,
    ) -> RealtimeSession:
        """Create an unconnected realtime session using this client's key.

        Extra keyword arguments go to RealtimeSession
        (``connect_timeout``, ``connector``).
        """
        return RealtimeSession(
            self._transport.api_key,
            url=self._realtime_url,
            handler=handler,
            **kwargs,
        )

    async def request_json(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body to any API path and return the JSON reply."""
        return await self._transport.post_json(path, body)

    async def close(self) -> None:
        await self._transport.close()

    async def __aenter__(self) -> ZaiClient:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

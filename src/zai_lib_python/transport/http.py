"""HTTP 传输层：基于 httpx 的异步 HTTP 客户端，支持流式传输和代理。

HTTP transport using httpx for async requests.

Provides:
- Async streaming support
- Configurable timeouts
- Proxy support
- Automatic header management
"""

from __future__ import annotations

import json as json_module
import os
from contextlib import asynccontextmanager, suppress
from typing import TYPE_CHECKING, Any

import httpx

from zai_lib_python.errors import DecodeError, RemoteError, TransportError
from zai_lib_python.transport.auth import get_auth_header, require_api_key

if TYPE_CHECKING:
    from collections.abc import AsyncIterator


DEFAULT_BASE_URL = "https://open.bigmodel.cn/api/paas/v4"

# Default timeouts
_DEFAULT_TIMEOUT = 30.0
_DEFAULT_CONNECT_TIMEOUT = 10.0


_UA_VERSION: str | None = None


def _trust_env_enabled() -> bool:
    """Use env proxy settings only when explicitly enabled."""
    return os.getenv("ZAI_HTTP_TRUST_ENV", "0") == "1"


def _env_timeout() -> float:
    """ZAI_HTTP_TIMEOUT_SECS, or the default when unset or not a number."""
    env_timeout = os.getenv("ZAI_HTTP_TIMEOUT_SECS")
    if env_timeout:
        with suppress(ValueError):
            return float(env_timeout)
    return _DEFAULT_TIMEOUT


def _get_ua_version() -> str:
    """Get package version for User-Agent (cached)."""
    global _UA_VERSION
    if _UA_VERSION is None:
        try:
            from importlib.metadata import PackageNotFoundError, version

            _UA_VERSION = version("zai-lib-python")
        except PackageNotFoundError:
            _UA_VERSION = "0.1.0"
    return _UA_VERSION


def _parse_body(raw: bytes) -> dict[str, Any] | None:
    with suppress(ValueError):
        body = json_module.loads(raw)
        if isinstance(body, dict):
            return body
    return None


class HttpTransport:
    """HTTP transport for the Zhipu API.

    Uses httpx for async HTTP requests with streaming support.

    Example:
        >>> transport = HttpTransport(api_key="...")
        >>> async with transport.stream_post("/chat/completions", payload) as response:
        ...     async for chunk in response.aiter_bytes():
        ...         process(chunk)
    """

    def __init__(
        self,
        *,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        proxy: str | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize HTTP transport.

        Args:
            api_key: Explicit API key (overrides ZAI_API_KEY)
            base_url: Override the default base URL
            timeout: Request timeout in seconds
            proxy: Proxy URL
            client: Pre-built httpx client (caller keeps ownership)
        """
        self._api_key = require_api_key(api_key)

        self._base_url = (base_url or os.getenv("ZAI_BASE_URL") or DEFAULT_BASE_URL).rstrip("/")

        self._timeout: float = timeout if timeout is not None else _env_timeout()

        # Resolve proxy: default to direct connection unless trust_env is enabled.
        if proxy is not None:
            self._proxy = proxy
        elif _trust_env_enabled():
            self._proxy = os.getenv("ZAI_PROXY_URL")
        else:
            self._proxy = None

        self._auth_headers = get_auth_header(self._api_key)

        self._client = client
        self._owns_client = client is None

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def api_key(self) -> str:
        return self._api_key

    @property
    def timeout(self) -> float:
        return self._timeout

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            timeout = httpx.Timeout(
                self._timeout,
                connect=_DEFAULT_CONNECT_TIMEOUT,
            )

            self._client = httpx.AsyncClient(
                timeout=timeout,
                proxy=self._proxy,
                trust_env=_trust_env_enabled(),
            )
            self._owns_client = True

        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    def _url(self, path: str) -> str:
        if path.startswith(("http://", "https://")):
            return path
        return f"{self._base_url}/{path.lstrip('/')}"

    def _build_headers(self, extra_headers: dict[str, str] | None = None) -> dict[str, str]:
        """Build request headers.

        Args:
            extra_headers: Additional headers to include

        Returns:
            Complete headers dictionary
        """
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"zai-lib-python/{_get_ua_version()}",
        }
        headers.update(self._auth_headers)
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def _transport_error(self, e: httpx.HTTPError, url: str) -> TransportError:
        if isinstance(e, httpx.ConnectError):
            message = f"Connection failed: {e}"
        elif isinstance(e, httpx.TimeoutException):
            message = f"Request timed out: {e}"
        else:
            message = f"HTTP error: {e}"
        return TransportError(message, url=url, cause=e)

    async def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
    ) -> httpx.Response:
        """Make an HTTP request.

        Args:
            method: HTTP method
            path: Request path (relative to base URL)
            json: JSON body
            headers: Additional headers
            params: Query parameters

        Returns:
            HTTP response

        Raises:
            TransportError: On network/connection errors
            RemoteError: On API errors (4xx, 5xx)
        """
        client = self._get_client()
        url = self._url(path)

        try:
            response = await client.request(
                method=method,
                url=url,
                json=json,
                headers=self._build_headers(headers),
                params=params,
            )
        except httpx.HTTPError as e:
            raise self._transport_error(e, url) from e

        if response.status_code >= 400:
            raise RemoteError.from_response(
                status_code=response.status_code,
                body=_parse_body(response.content),
                headers=dict(response.headers),
            )

        return response

    async def post(
        self,
        path: str,
        json: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        return await self.request("POST", path, json=json, headers=headers)

    async def post_json(self, path: str, body: dict[str, Any]) -> dict[str, Any]:
        """POST a JSON body and return the decoded JSON object.

        Raises:
            DecodeError: If the response body is not a JSON object
        """
        from zai_lib_python import codec

        response = await self.post(path, body)
        data = codec.loads(response.content)
        if not isinstance(data, dict):
            raise DecodeError("Expected a JSON object", payload=response.text)
        return data

    @asynccontextmanager
    async def stream_request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """Make a streaming HTTP request.

        Args:
            method: HTTP method
            path: Request path
            json: JSON body
            headers: Additional headers

        Yields:
            HTTP response for streaming

        Example:
            >>> async with transport.stream_request("POST", "/chat/completions", json=payload) as resp:
            ...     async for chunk in resp.aiter_bytes():
            ...         process(chunk)
        """
        client = self._get_client()
        url = self._url(path)
        request_headers = self._build_headers(headers)
        request_headers["Accept"] = "text/event-stream"

        try:
            async with client.stream(
                method=method,
                url=url,
                json=json,
                headers=request_headers,
            ) as response:
                if response.status_code >= 400:
                    body_text = await response.aread()
                    raise RemoteError.from_response(
                        status_code=response.status_code,
                        body=_parse_body(body_text),
                        headers=dict(response.headers),
                    )

                yield response

        except httpx.HTTPError as e:
            raise self._transport_error(e, url) from e

    @asynccontextmanager
    async def stream_post(
        self,
        path: str,
        json: dict[str, Any],
        *,
        headers: dict[str, str] | None = None,
    ) -> AsyncIterator[httpx.Response]:
        async with self.stream_request("POST", path, json=json, headers=headers) as resp:
            yield resp

    async def __aenter__(self) -> HttpTransport:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

"""实时会话：基于 WebSocket 的音视频实时对话客户端。

Realtime session over WebSocket.

One session owns one socket. Sends are serialized through an
``asyncio.Lock``; a single receive loop owns reading and drives the
session state from server events.
"""

from __future__ import annotations

import asyncio
import base64
from collections import deque
from enum import Enum
from typing import TYPE_CHECKING, Any

from websockets.exceptions import ConnectionClosed, ConnectionClosedOK, WebSocketException

from zai_lib_python import codec
from zai_lib_python.errors import DecodeError, RealtimeError, TransportError
from zai_lib_python.realtime.events import (
    ConversationItemCreateEvent,
    ConversationItemDeleteEvent,
    ConversationItemRetrieveEvent,
    ErrorEvent,
    InputAudioBufferAppendEvent,
    InputAudioBufferAppendVideoFrameEvent,
    InputAudioBufferClearEvent,
    InputAudioBufferCommitEvent,
    ResponseCancelEvent,
    ResponseCreateEvent,
    SessionCreatedEvent,
    SessionUpdatedEvent,
    SessionUpdateEvent,
    TranscriptionSessionUpdateEvent,
)
from zai_lib_python.realtime.handler import EventHandler
from zai_lib_python.realtime.session import SessionConfig
from zai_lib_python.telemetry import get_logger
from zai_lib_python.transport.auth import get_auth_header, require_api_key
from zai_lib_python.transport.websocket import connect_websocket, resolve_realtime_url

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from zai_lib_python.realtime.session import ConversationItem, SessionInfo, TranscriptionConfig

    Connector = Callable[[str, dict[str, str]], Awaitable[Any]]

logger = get_logger(__name__)

_DEFAULT_CONNECT_TIMEOUT = 10.0


class SessionState(str, Enum):
    """Lifecycle of a realtime session."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    LISTENING = "listening"
    PROCESSING = "processing"
    SPEAKING = "speaking"
    ERROR = "error"


# Server event type -> state entered on receipt.
_TRANSITIONS: dict[str, SessionState] = {
    "input_audio_buffer.speech_started": SessionState.LISTENING,
    "input_audio_buffer.speech_stopped": SessionState.PROCESSING,
    "input_audio_buffer.committed": SessionState.PROCESSING,
    "response.created": SessionState.PROCESSING,
    "response.text.delta": SessionState.SPEAKING,
    "response.audio.delta": SessionState.SPEAKING,
    "response.audio_transcript.delta": SessionState.SPEAKING,
    "response.done": SessionState.CONNECTED,
    "response.cancelled": SessionState.CONNECTED,
}

_ACTIVE_STATES = frozenset(
    {
        SessionState.CONNECTED,
        SessionState.LISTENING,
        SessionState.PROCESSING,
        SessionState.SPEAKING,
    }
)


class RealtimeSession:
    """Realtime audio/video conversation session.

    Example:
        >>> async with RealtimeSession(api_key, handler=MyHandler()) as session:
        ...     info = await session.connect("glm-realtime", SessionConfig(modalities=["text", "audio"]))
        ...     listener = asyncio.create_task(session.listen_for_events())
        ...     await session.send_audio(pcm_bytes)
        ...     await session.commit_audio_buffer()
        ...     await session.create_response()
    """

    def __init__(
        self,
        api_key: str | None = None,
        *,
        url: str | None = None,
        handler: EventHandler | None = None,
        connect_timeout: float = _DEFAULT_CONNECT_TIMEOUT,
        connector: Connector | None = None,
    ) -> None:
        """Initialize a session (no I/O happens until ``connect``).

        Args:
            api_key: API key (falls back to ZAI_API_KEY)
            url: WebSocket endpoint (falls back to ZAI_REALTIME_URL)
            handler: Default event handler for ``listen_for_events``
            connect_timeout: Seconds allowed for the socket open and
                for the session acknowledgement
            connector: Coroutine ``(url, headers) -> connection``; the
                websockets client is used when omitted
        """
        self._api_key = require_api_key(api_key)
        self._url = resolve_realtime_url(url)
        self._handler = handler or EventHandler()
        self._connect_timeout = connect_timeout
        self._connector = connector or connect_websocket

        self._ws: Any = None
        self._state = SessionState.DISCONNECTED
        self._session: SessionInfo | None = None
        self._started = False
        self._send_lock = asyncio.Lock()
        self._pending: deque[Any] = deque()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session(self) -> SessionInfo | None:
        """Session as last acknowledged by the server."""
        return self._session

    @property
    def url(self) -> str:
        return self._url

    @property
    def is_connected(self) -> bool:
        return self._state in _ACTIVE_STATES

    def _set_state(self, state: SessionState) -> None:
        if state != self._state:
            logger.debug("Realtime state change", old=self._state.value, new=state.value)
            self._state = state

    def _track(self, event: Any) -> None:
        if isinstance(event, (SessionCreatedEvent, SessionUpdatedEvent)):
            self._session = event.session
        state = _TRANSITIONS.get(getattr(event, "type", None) or "")
        if state is not None:
            self._set_state(state)

    # --- lifecycle ------------------------------------------------------

    async def connect(
        self,
        model: str | None = None,
        session_config: SessionConfig | None = None,
    ) -> SessionInfo:
        """Open the socket, configure the session and wait for the ack.

        Args:
            model: Realtime model id, e.g. ``glm-realtime``
            session_config: Initial session configuration

        Returns:
            The session as reported by ``session.created`` or
            ``session.updated``

        Raises:
            RealtimeError: If already used, or the server answers with an
                ``error`` event
            TransportError: If the socket cannot be opened or closes
                before the acknowledgement
        """
        if self._started:
            raise RealtimeError("Realtime session has already been connected")
        self._started = True
        self._set_state(SessionState.CONNECTING)

        try:
            self._ws = await asyncio.wait_for(
                self._connector(self._url, get_auth_header(self._api_key)),
                timeout=self._connect_timeout,
            )
        except asyncio.TimeoutError as e:
            self._set_state(SessionState.ERROR)
            raise TransportError(
                f"Realtime connect timed out after {self._connect_timeout:g}s",
                url=self._url,
                cause=e,
            ) from e
        except (OSError, WebSocketException) as e:
            self._set_state(SessionState.ERROR)
            raise TransportError(f"Realtime connect failed: {e}", url=self._url, cause=e) from e

        self._set_state(SessionState.CONNECTED)
        logger.info("Realtime socket open", url=self._url, model=model)

        config = session_config or SessionConfig()
        if model is not None:
            config = config.model_copy(update={"model": model})

        try:
            await self.send_event(SessionUpdateEvent(session=config))
            return await asyncio.wait_for(self._await_ack(), timeout=self._connect_timeout)
        except asyncio.TimeoutError as e:
            await self._abort()
            raise TransportError(
                "Timed out waiting for session acknowledgement",
                url=self._url,
                cause=e,
            ) from e
        except (RealtimeError, TransportError, DecodeError):
            await self._abort()
            raise

    async def _await_ack(self) -> SessionInfo:
        while True:
            try:
                message = await self._ws.recv()
            except ConnectionClosed as e:
                raise TransportError(
                    "Realtime socket closed during handshake", url=self._url, cause=e
                ) from e

            event = codec.decode_server_event(message)
            if isinstance(event, ErrorEvent):
                code = event.error.code
                raise RealtimeError(
                    event.error.message or "Realtime session rejected",
                    code=str(code) if code is not None else None,
                    error_type=event.error.type,
                )

            self._track(event)
            self._pending.append(event)
            if isinstance(event, (SessionCreatedEvent, SessionUpdatedEvent)):
                return event.session

    async def _abort(self) -> None:
        self._set_state(SessionState.ERROR)
        if self._ws is not None:
            try:
                await self._ws.close()
            except (OSError, WebSocketException) as e:
                logger.debug("Ignoring close failure", error=str(e))

    async def close(self) -> None:
        """Close the socket. Safe to call more than once."""
        if self._ws is not None:
            ws, self._ws = self._ws, None
            try:
                await ws.close()
            except (OSError, WebSocketException) as e:
                logger.debug("Ignoring close failure", error=str(e))
        if self._state != SessionState.ERROR:
            self._set_state(SessionState.DISCONNECTED)

    async def __aenter__(self) -> RealtimeSession:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    # --- receiving ------------------------------------------------------

    async def listen_for_events(self, handler: EventHandler | None = None) -> None:
        """Receive and dispatch events until the socket closes.

        Events buffered during ``connect`` are delivered first. Returns
        normally on a clean close.

        Raises:
            RealtimeError: If the session is not connected
            DecodeError: If a frame is not valid JSON
            TransportError: If the socket fails
        """
        if self._ws is None or not self.is_connected:
            raise RealtimeError("Realtime session is not connected")
        handler = handler or self._handler

        while self._pending:
            await handler.dispatch(self._pending.popleft())

        try:
            async for message in self._ws:
                event = codec.decode_server_event(message)
                self._track(event)
                await handler.dispatch(event)
        except ConnectionClosedOK:
            pass
        except ConnectionClosed as e:
            self._set_state(SessionState.ERROR)
            raise TransportError(
                f"Realtime socket closed: {e}", url=self._url, cause=e
            ) from e
        except DecodeError:
            self._set_state(SessionState.ERROR)
            raise
        except (OSError, WebSocketException) as e:
            self._set_state(SessionState.ERROR)
            raise TransportError(f"Realtime receive failed: {e}", url=self._url, cause=e) from e

        logger.info("Realtime socket closed", session_id=self._session.id if self._session else None)
        self._set_state(SessionState.DISCONNECTED)

    # --- sending --------------------------------------------------------

    async def send_event(self, event: Any) -> None:
        """Send one client event (a model or a raw dict).

        Raises:
            RealtimeError: If the session is not connected
            TransportError: If the socket write fails
        """
        if self._ws is None or not self.is_connected:
            raise RealtimeError("Realtime session is not connected")

        frame = codec.encode(event).decode("utf-8")
        async with self._send_lock:
            try:
                await self._ws.send(frame)
            except (ConnectionClosed, OSError) as e:
                self._set_state(SessionState.ERROR)
                raise TransportError(f"Realtime send failed: {e}", url=self._url, cause=e) from e

    async def send_audio(self, audio: bytes) -> None:
        """Append raw audio to the server input buffer."""
        await self.send_event(InputAudioBufferAppendEvent(audio=base64.b64encode(audio).decode("ascii")))

    async def send_video_frame(self, frame: bytes) -> None:
        """Append one jpg video frame to the server input buffer."""
        await self.send_event(
            InputAudioBufferAppendVideoFrameEvent(video_frame=base64.b64encode(frame).decode("ascii"))
        )

    async def commit_audio_buffer(self) -> None:
        await self.send_event(InputAudioBufferCommitEvent())

    async def clear_audio_buffer(self) -> None:
        await self.send_event(InputAudioBufferClearEvent())

    async def create_response(self) -> None:
        await self.send_event(ResponseCreateEvent())

    async def cancel_response(self) -> None:
        await self.send_event(ResponseCancelEvent())

    async def update_session(self, config: SessionConfig) -> None:
        await self.send_event(SessionUpdateEvent(session=config))

    async def update_transcription_session(self, config: TranscriptionConfig) -> None:
        await self.send_event(TranscriptionSessionUpdateEvent(session=config))

    async def create_conversation_item(
        self,
        item: ConversationItem,
        previous_item_id: str | None = None,
    ) -> None:
        await self.send_event(ConversationItemCreateEvent(item=item, previous_item_id=previous_item_id))

    async def delete_conversation_item(self, item_id: str) -> None:
        await self.send_event(ConversationItemDeleteEvent(item_id=item_id))

    async def retrieve_conversation_item(self, item_id: str) -> None:
        await self.send_event(ConversationItemRetrieveEvent(item_id=item_id))

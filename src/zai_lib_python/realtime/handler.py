"""
Realtime event handlers.

A handler receives every decoded server event through exactly one of its
``on_*`` methods. Methods may be plain functions or coroutines; the
session awaits whatever they return.
"""

from __future__ import annotations

import inspect
from typing import Any

from zai_lib_python.realtime.events import UnknownEvent
from zai_lib_python.telemetry import get_logger

logger = get_logger(__name__)

# Event type -> handler method name. Declared types not listed go to on_event.
_DISPATCH: dict[str, str] = {
    "response.text.delta": "on_text_delta",
    "response.text.done": "on_text_done",
    "response.audio.delta": "on_audio_delta",
    "response.audio.done": "on_audio_done",
    "response.done": "on_response_done",
    "error": "on_error",
    "session.created": "on_session_created",
    "session.updated": "on_session_updated",
    "heartbeat": "on_heartbeat",
}


def handler_method_for(event: Any) -> str:
    """Name of the handler method that receives ``event``."""
    if isinstance(event, UnknownEvent):
        return "on_unknown_event"
    return _DISPATCH.get(getattr(event, "type", None) or "", "on_event")


class EventHandler:
    """Base handler; every method is a no-op.

    Subclass and override the methods you care about.

    Example:
        >>> class Printer(EventHandler):
        ...     def on_text_delta(self, event):
        ...         print(event.delta, end="")
    """

    def on_text_delta(self, event: Any) -> Any:
        pass

    def on_text_done(self, event: Any) -> Any:
        pass

    def on_audio_delta(self, event: Any) -> Any:
        pass

    def on_audio_done(self, event: Any) -> Any:
        pass

    def on_response_done(self, event: Any) -> Any:
        pass

    def on_error(self, event: Any) -> Any:
        pass

    def on_session_created(self, event: Any) -> Any:
        pass

    def on_session_updated(self, event: Any) -> Any:
        pass

    def on_heartbeat(self, event: Any) -> Any:
        pass

    def on_unknown_event(self, event: UnknownEvent) -> Any:
        pass

    def on_event(self, event: Any) -> Any:
        """Declared events without a dedicated method."""

    async def dispatch(self, event: Any) -> None:
        """Deliver ``event`` to its handler method, awaiting if needed."""
        result = getattr(self, handler_method_for(event))(event)
        if inspect.isawaitable(result):
            await result


class LoggingEventHandler(EventHandler):
    """Logs every event through the library logger."""

    def on_text_delta(self, event: Any) -> None:
        logger.debug("Text delta", response_id=event.response_id, delta=event.delta)

    def on_text_done(self, event: Any) -> None:
        logger.info("Text done", response_id=event.response_id, text=event.text)

    def on_audio_delta(self, event: Any) -> None:
        logger.debug("Audio delta", response_id=event.response_id, size=len(event.delta or ""))

    def on_audio_done(self, event: Any) -> None:
        logger.info("Audio done", response_id=event.response_id)

    def on_response_done(self, event: Any) -> None:
        usage = event.response.usage if event.response else None
        logger.info(
            "Response done",
            response_id=event.response.id if event.response else None,
            total_tokens=usage.total_tokens if usage else None,
        )

    def on_error(self, event: Any) -> None:
        logger.error(
            "Realtime error",
            code=event.error.code,
            error_type=event.error.type,
            message=event.error.message,
        )

    def on_session_created(self, event: Any) -> None:
        logger.info("Session created", session_id=event.session.id)

    def on_session_updated(self, event: Any) -> None:
        logger.info("Session updated", session_id=event.session.id)

    def on_heartbeat(self, event: Any) -> None:
        logger.debug("Heartbeat")

    def on_unknown_event(self, event: UnknownEvent) -> None:
        logger.warning("Unknown realtime event", event_type=event.type)

    def on_event(self, event: Any) -> None:
        logger.debug("Realtime event", event_type=event.type)

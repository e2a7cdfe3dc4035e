"""实时模块：WebSocket 实时音视频会话。

Realtime sessions over WebSocket.

- RealtimeSession: connect, send client events, listen for server events
- EventHandler: per-event-type callbacks (sync or async)
- events / session: the wire models
"""

from zai_lib_python.realtime.client import RealtimeSession, SessionState
from zai_lib_python.realtime.events import (
    ClientEvent,
    ErrorEvent,
    HeartbeatEvent,
    ResponseAudioDeltaEvent,
    ResponseDoneEvent,
    ResponseTextDeltaEvent,
    ServerEvent,
    SessionCreatedEvent,
    SessionUpdatedEvent,
    UnknownEvent,
)
from zai_lib_python.realtime.handler import EventHandler, LoggingEventHandler
from zai_lib_python.realtime.session import (
    AudioFormat,
    ConversationItem,
    Modality,
    SessionConfig,
    SessionInfo,
    TranscriptionConfig,
    TurnDetection,
    VadType,
)

__all__ = [
    # Session
    "RealtimeSession",
    "SessionState",
    # Handlers
    "EventHandler",
    "LoggingEventHandler",
    # Events
    "ClientEvent",
    "ErrorEvent",
    "HeartbeatEvent",
    "ResponseAudioDeltaEvent",
    "ResponseDoneEvent",
    "ResponseTextDeltaEvent",
    "ServerEvent",
    "SessionCreatedEvent",
    "SessionUpdatedEvent",
    "UnknownEvent",
    # Configuration
    "AudioFormat",
    "ConversationItem",
    "Modality",
    "SessionConfig",
    "SessionInfo",
    "TranscriptionConfig",
    "TurnDetection",
    "VadType",
]

"""智谱 GLM 的 Python 客户端：对话补全、流式输出、工具调用与实时会话。

zai-lib-python: Python client for the Zhipu GLM API.

Chat completions (streaming or not), a tool-calling loop over a
registry of function tools, and realtime audio/video sessions over
WebSocket.
"""
from __future__ import annotations

from zai_lib_python.client import (
    CallStats,
    ChatCompletion,
    ChatResponse,
    ConversationResult,
    ToolRound,
    ZaiClient,
)
from zai_lib_python.errors import (
    DecodeError,
    RealtimeError,
    RemoteError,
    RequestTimeoutError,
    ToolError,
    TransportError,
    ValidationError,
    ZaiError,
)
from zai_lib_python.realtime import EventHandler, RealtimeSession, SessionConfig
from zai_lib_python.telemetry import MetricsCollector
from zai_lib_python.tools import (
    ExecutionConfig,
    ExecutionResult,
    FunctionTool,
    Tool,
    ToolCallCache,
    ToolExecutor,
    ToolRegistry,
    tool,
)
from zai_lib_python.types.message import ContentPart, Message, MessageRole
from zai_lib_python.types.tool import ToolCall, ToolDefinition

__version__ = "0.1.0"

__all__ = [
    # Client
    "CallStats",
    "ChatCompletion",
    "ChatResponse",
    "ConversationResult",
    "ToolRound",
    "ZaiClient",
    # Errors
    "DecodeError",
    "RealtimeError",
    "RemoteError",
    "RequestTimeoutError",
    "ToolError",
    "TransportError",
    "ValidationError",
    "ZaiError",
    # Realtime
    "EventHandler",
    "RealtimeSession",
    "SessionConfig",
    # Tools
    "ExecutionConfig",
    "ExecutionResult",
    "FunctionTool",
    "MetricsCollector",
    "Tool",
    "ToolCallCache",
    "ToolExecutor",
    "ToolRegistry",
    "tool",
    # Types
    "ContentPart",
    "Message",
    "MessageRole",
    "ToolCall",
    "ToolDefinition",
    # Version
    "__version__",
]

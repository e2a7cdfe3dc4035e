"""
Client layer - User-facing API.

This module provides:
- ZaiClient: Main entry point
- ChatCompletion: Conversation with fluent request settings and the
  tool-calling loop
- Response types
"""

from zai_lib_python.client.chat import CHAT_COMPLETIONS_PATH, ChatCompletion, parse_completion
from zai_lib_python.client.core import ZaiClient
from zai_lib_python.client.response import CallStats, ChatResponse, ConversationResult, ToolRound

__all__ = [
    "CHAT_COMPLETIONS_PATH",
    "CallStats",
    "ChatCompletion",
    "ChatResponse",
    "ConversationResult",
    "ToolRound",
    "ZaiClient",
    "parse_completion",
]

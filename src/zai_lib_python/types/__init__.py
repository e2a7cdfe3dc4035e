"""
Type definitions for zai-lib-python.

Includes:
- Message types (Message, ContentPart, MessageRole)
- Tool types (ToolDefinition, ToolCall, ToolChoice)
- Stream chunk types (StreamChunk, Delta, ToolCallDelta)
- Model capability table
"""

from zai_lib_python.types.message import (
    ContentPart,
    InputAudio,
    MediaUrl,
    Message,
    MessageContent,
    MessageRole,
)
from zai_lib_python.types.models import (
    MODEL_CAPABILITIES,
    Capability,
    capabilities_of,
    require_capability,
    supports,
)
from zai_lib_python.types.stream import (
    Delta,
    FunctionCallDelta,
    StreamChoice,
    StreamChunk,
    ToolCallDelta,
    Usage,
)
from zai_lib_python.types.tool import (
    FunctionCall,
    FunctionDefinition,
    ToolCall,
    ToolChoice,
    ToolDefinition,
    parse_arguments,
)

__all__ = [
    # Message types
    "ContentPart",
    "InputAudio",
    "MediaUrl",
    "Message",
    "MessageContent",
    "MessageRole",
    # Models
    "MODEL_CAPABILITIES",
    "Capability",
    "capabilities_of",
    "require_capability",
    "supports",
    # Stream types
    "Delta",
    "FunctionCallDelta",
    "StreamChoice",
    "StreamChunk",
    "ToolCallDelta",
    "Usage",
    # Tool types
    "FunctionCall",
    "FunctionDefinition",
    "ToolCall",
    "ToolChoice",
    "ToolDefinition",
    "parse_arguments",
]

"""工具模块：工具注册、参数校验与执行。

Function tools for the chat tool-calling loop.

- Tool / FunctionTool / tool: define tools
- ToolRegistry: name -> tool mapping, exports declarations
- ToolExecutor: validated, timed, retried execution
- ToolCallCache: optional cache of successful results
"""

from zai_lib_python.tools.cache import CacheConfig, CacheStats, ToolCallCache, cache_key
from zai_lib_python.tools.core import FunctionTool, Tool, ToolMetadata, tool
from zai_lib_python.tools.executor import (
    ExecutionConfig,
    ExecutionResult,
    ToolExecutor,
    tool_messages,
)
from zai_lib_python.tools.registry import ToolRegistry

__all__ = [
    "CacheConfig",
    "CacheStats",
    "ExecutionConfig",
    "ExecutionResult",
    "FunctionTool",
    "Tool",
    "ToolCallCache",
    "ToolExecutor",
    "ToolMetadata",
    "ToolRegistry",
    "cache_key",
    "tool",
    "tool_messages",
]

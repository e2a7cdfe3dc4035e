"""
Utility helpers for zai-lib-python.
"""

from zai_lib_python.utils.tool_call_assembler import ToolCallAssembler, ToolCallFragment

__all__ = [
    "ToolCallAssembler",
    "ToolCallFragment",
]

"""
Tool call assembler for streaming responses.

Streamed tool calls arrive as fragments that share an ``index``; the id
and type usually come with the first fragment, while the function name
and arguments may each be split across several chunks. The assembler
concatenates fragments per index in arrival order and finalizes them
into complete ToolCall objects.
"""

from __future__ import annotations

from dataclasses import dataclass

from zai_lib_python.types.stream import ToolCallDelta
from zai_lib_python.types.tool import FunctionCall, ToolCall


@dataclass
class ToolCallFragment:
    """Tool call being assembled.

    Attributes:
        index: Position in the tool calls array (the merge key)
        id: Tool call identifier, once seen
        type: Tool type
        name: Accumulated function name
        arguments_buffer: Accumulated arguments string
    """

    index: int
    id: str = ""
    type: str = "function"
    name: str = ""
    arguments_buffer: str = ""


class ToolCallAssembler:
    """Assembles tool calls from streaming fragments keyed by index.

    Example:
        >>> assembler = ToolCallAssembler()
        >>> assembler.on_started(0, "call_123", "get_wea")
        >>> assembler.on_name(0, "ther")
        >>> assembler.on_partial(0, '{"loc')
        >>> assembler.on_partial(0, 'ation": "NYC"}')
        >>> call = assembler.finalize()[0]
        >>> call.name, call.arguments
        ('get_weather', '{"location": "NYC"}')
    """

    def __init__(self) -> None:
        self._fragments: dict[int, ToolCallFragment] = {}

    def _fragment(self, index: int) -> ToolCallFragment:
        fragment = self._fragments.get(index)
        if fragment is None:
            fragment = ToolCallFragment(index=index)
            self._fragments[index] = fragment
        return fragment

    def on_started(self, index: int, tool_call_id: str, name: str = "") -> None:
        """Record the id (first one wins) and an initial name fragment."""
        fragment = self._fragment(index)
        if tool_call_id and not fragment.id:
            fragment.id = tool_call_id
        if name:
            fragment.name += name

    def on_name(self, index: int, name_fragment: str) -> None:
        self._fragment(index).name += name_fragment

    def on_partial(self, index: int, arguments_fragment: str) -> None:
        self._fragment(index).arguments_buffer += arguments_fragment

    def on_delta(self, delta: ToolCallDelta) -> None:
        """Merge one streamed fragment."""
        fragment = self._fragment(delta.index)
        if delta.id and not fragment.id:
            fragment.id = delta.id
        if delta.type:
            fragment.type = delta.type
        if delta.function is not None:
            if delta.function.name:
                fragment.name += delta.function.name
            if delta.function.arguments:
                fragment.arguments_buffer += delta.function.arguments

    def finalize(self) -> list[ToolCall]:
        """Build ToolCall objects ordered by index.

        Arguments are kept as the raw concatenated string; they are
        parsed when the call is executed. Calls that never received an
        id get ``call_<index>``.
        """
        return [
            ToolCall(
                id=fragment.id or f"call_{fragment.index}",
                type=fragment.type,
                function=FunctionCall(name=fragment.name, arguments=fragment.arguments_buffer),
            )
            for fragment in sorted(self._fragments.values(), key=lambda f: f.index)
        ]

    def reset(self) -> None:
        self._fragments.clear()

    def has_tool_calls(self) -> bool:
        return len(self._fragments) > 0

    def get_fragment(self, index: int) -> ToolCallFragment | None:
        return self._fragments.get(index)

    def __len__(self) -> int:
        return len(self._fragments)

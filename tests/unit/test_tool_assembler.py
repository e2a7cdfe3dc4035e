"""Tests for ToolCallAssembler."""

from zai_lib_python.types.stream import FunctionCallDelta, ToolCallDelta
from zai_lib_python.types.tool import ToolCall
from zai_lib_python.utils import ToolCallAssembler, ToolCallFragment


class TestToolCallFragment:
    """Tests for ToolCallFragment."""

    def test_defaults(self) -> None:
        fragment = ToolCallFragment(index=0)
        assert fragment.id == ""
        assert fragment.type == "function"
        assert fragment.arguments_buffer == ""


class TestToolCallAssembler:
    """Tests for ToolCallAssembler."""

    def test_on_started(self) -> None:
        assembler = ToolCallAssembler()
        assembler.on_started(0, "call_123", "get_weather")

        assert assembler.has_tool_calls()
        fragment = assembler.get_fragment(0)
        assert fragment is not None
        assert fragment.id == "call_123"
        assert fragment.name == "get_weather"

    def test_first_id_wins(self) -> None:
        assembler = ToolCallAssembler()
        assembler.on_started(0, "call_1")
        assembler.on_started(0, "call_2")
        assert assembler.finalize()[0].id == "call_1"

    def test_split_name_and_arguments(self) -> None:
        assembler = ToolCallAssembler()
        assembler.on_started(0, "call_123", "get_wea")
        assembler.on_name(0, "ther")
        assembler.on_partial(0, '{"loc')
        assembler.on_partial(0, 'ation": "NYC"}')

        call = assembler.finalize()[0]
        assert call.name == "get_weather"
        assert call.arguments == '{"location": "NYC"}'

    def test_split_fragments_equal_whole_call(self) -> None:
        """Reassembling arbitrary splits yields the same call as the unsplit one."""
        whole = ToolCall.create("call_9", "search_docs", {"query": "智谱 GLM", "limit": 5})
        args = whole.arguments
        name = whole.name

        for cut in range(1, len(args)):
            assembler = ToolCallAssembler()
            assembler.on_delta(
                ToolCallDelta(index=0, id="call_9", type="function", function=FunctionCallDelta(name=name[:3]))
            )
            assembler.on_delta(ToolCallDelta(index=0, function=FunctionCallDelta(name=name[3:], arguments=args[:cut])))
            assembler.on_delta(ToolCallDelta(index=0, function=FunctionCallDelta(arguments=args[cut:])))
            assert assembler.finalize() == [whole]

    def test_interleaved_indices_sorted(self) -> None:
        assembler = ToolCallAssembler()
        assembler.on_delta(ToolCallDelta(index=1, id="call_b", function=FunctionCallDelta(name="b", arguments="{")))
        assembler.on_delta(ToolCallDelta(index=0, id="call_a", function=FunctionCallDelta(name="a", arguments="{}")))
        assembler.on_delta(ToolCallDelta(index=1, function=FunctionCallDelta(arguments="}")))

        calls = assembler.finalize()
        assert [c.id for c in calls] == ["call_a", "call_b"]
        assert calls[1].arguments == "{}"

    def test_missing_id_gets_positional_id(self) -> None:
        assembler = ToolCallAssembler()
        assembler.on_partial(2, "{}")
        assert assembler.finalize()[0].id == "call_2"

    def test_reset(self) -> None:
        assembler = ToolCallAssembler()
        assembler.on_started(0, "call_1", "x")
        assert len(assembler) == 1
        assembler.reset()
        assert not assembler.has_tool_calls()
        assert assembler.finalize() == []

"""Tests for ToolRegistry."""

import json
import threading

import pytest

from zai_lib_python.errors import RegistrationError
from zai_lib_python.tools import FunctionTool, ToolRegistry

SCHEMA = {"type": "object", "properties": {"q": {"type": "string"}}}


def echo(args: dict) -> dict:
    return args


class TestToolRegistry:
    """Tests for ToolRegistry."""

    def test_register_and_lookup(self) -> None:
        registry = ToolRegistry()
        registered = registry.register("search", SCHEMA, echo, description="Search")

        assert isinstance(registered, FunctionTool)
        assert registry.lookup("search") is registered
        assert "search" in registry
        assert len(registry) == 1
        assert registry.input_schema("search") == SCHEMA
        assert registry.lookup("missing") is None
        assert registry.input_schema("missing") is None

    def test_register_version_and_author(self) -> None:
        registry = ToolRegistry()
        registry.register("search", SCHEMA, echo, version="2.0.0", author="search-team")
        metadata = registry.lookup("search").metadata
        assert (metadata.version, metadata.author) == ("2.0.0", "search-team")

    def test_register_rejects_hyphenated_name(self) -> None:
        registry = ToolRegistry()
        with pytest.raises(RegistrationError):
            registry.register("web-search", SCHEMA, echo)
        assert len(registry) == 0

    def test_duplicate_keeps_first(self) -> None:
        registry = ToolRegistry()
        first = registry.register("search", SCHEMA, echo, description="first")
        with pytest.raises(RegistrationError):
            registry.register("search", SCHEMA, echo, description="second")
        assert registry.lookup("search") is first
        assert len(registry) == 1

    def test_unregister(self) -> None:
        registry = ToolRegistry()
        registry.register("search", SCHEMA, echo)
        assert registry.unregister("search")
        assert not registry.unregister("search")
        assert "search" not in registry

    def test_all_names(self) -> None:
        registry = ToolRegistry()
        registry.register("a", SCHEMA, echo)
        registry.register("b", SCHEMA, echo)
        assert registry.all_names() == {"a", "b"}

    def test_export_skips_disabled(self) -> None:
        registry = ToolRegistry()
        registry.register("b_tool", SCHEMA, echo)
        registry.register("hidden", SCHEMA, echo, enabled=False)
        registry.register("a_tool", SCHEMA, echo, tags=["io"])

        assert [d.name for d in registry.export_definitions()] == ["b_tool", "a_tool"]
        assert registry.export_definition("hidden") is None
        assert registry.export_definition("a_tool") is not None

    def test_export_filter(self) -> None:
        registry = ToolRegistry()
        registry.register("plain", SCHEMA, echo)
        registry.register("io_tool", SCHEMA, echo, tags=["io"])
        exported = registry.export_definitions(filter=lambda t: "io" in t.metadata.tags)
        assert [d.name for d in exported] == ["io_tool"]

    def test_concurrent_registration(self) -> None:
        """Racing registrations of one name leave exactly one winner."""
        registry = ToolRegistry()
        errors: list[Exception] = []

        def worker() -> None:
            try:
                registry.register("shared", SCHEMA, echo)
            except RegistrationError as e:
                errors.append(e)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(registry) == 1
        assert len(errors) == 7


class TestRegisterFromDir:
    """Tests for loading tool specs from a directory."""

    def test_loads_both_spec_shapes(self, tmp_path) -> None:
        (tmp_path / "b_weather.json").write_text(
            json.dumps({"type": "function", "function": {"name": "get_weather", "parameters": SCHEMA}})
        )
        (tmp_path / "a_search.json").write_text(
            json.dumps({"name": "search", "description": "Search docs", "parameters": SCHEMA})
        )
        (tmp_path / "notes.txt").write_text("ignored")

        registry = ToolRegistry()
        names = registry.register_from_dir(tmp_path, {"search": echo, "get_weather": echo})

        assert names == ["search", "get_weather"]
        search = registry.lookup("search")
        assert search is not None
        assert search.metadata.description == "Search docs"

    def test_skips_unusable_files(self, tmp_path) -> None:
        (tmp_path / "bad.json").write_text("{not json")
        (tmp_path / "orphan.json").write_text(json.dumps({"name": "orphan"}))
        (tmp_path / "ok.json").write_text(json.dumps({"name": "search"}))

        registry = ToolRegistry()
        assert registry.register_from_dir(tmp_path, {"search": echo}) == ["search"]

    def test_strict_mode(self, tmp_path) -> None:
        (tmp_path / "bad.json").write_text("[1, 2]")
        with pytest.raises(RegistrationError):
            ToolRegistry().register_from_dir(tmp_path, {}, strict=True)

    def test_strict_missing_handler(self, tmp_path) -> None:
        (tmp_path / "orphan.json").write_text(json.dumps({"name": "orphan"}))
        with pytest.raises(RegistrationError) as exc_info:
            ToolRegistry().register_from_dir(tmp_path, {}, strict=True)
        assert exc_info.value.tool_name == "orphan"

    def test_missing_directory(self, tmp_path) -> None:
        with pytest.raises(RegistrationError):
            ToolRegistry().register_from_dir(tmp_path / "nope", {})

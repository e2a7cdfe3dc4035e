"""
Tool registry.

Maps unique tool names to Tool instances. Registries are explicit
objects; there is no process-wide default. All operations are guarded by
a re-entrant lock so a registry can be shared across threads.
"""

from __future__ import annotations

import json
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any

from zai_lib_python.errors import RegistrationError
from zai_lib_python.telemetry import get_logger
from zai_lib_python.tools.core import FunctionTool, Tool
from zai_lib_python.types.tool import ToolDefinition

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable, Mapping

logger = get_logger(__name__)


class ToolRegistry:
    """Registry of tools available to the model.

    Example:
        >>> registry = ToolRegistry()
        >>> registry.register(
        ...     "get_weather",
        ...     {"type": "object", "properties": {"city": {"type": "string"}}},
        ...     get_weather,
        ...     description="Current weather for a city",
        ... )
        >>> definitions = registry.export_definitions()
    """

    def __init__(self) -> None:
        self._tools: dict[str, Tool] = {}
        self._lock = threading.RLock()

    def add(self, tool: Tool) -> Tool:
        """Register a tool instance.

        Raises:
            RegistrationError: If a tool with the same name exists; the
                existing tool is kept
        """
        with self._lock:
            if tool.name in self._tools:
                raise RegistrationError(
                    f"Tool '{tool.name}' is already registered", tool_name=tool.name
                )
            self._tools[tool.name] = tool
        logger.debug("Tool registered", tool_name=tool.name)
        return tool

    def register(
        self,
        name: str,
        schema: dict[str, Any],
        handler: Callable[[dict[str, Any]], Any],
        *,
        description: str | None = None,
        version: str = "1.0.0",
        author: str | None = None,
        tags: Iterable[str] = (),
        enabled: bool = True,
        retry_safe: bool = True,
    ) -> FunctionTool:
        """Wrap ``handler`` in a FunctionTool and register it."""
        tool = FunctionTool(
            name,
            schema,
            handler,
            description=description,
            version=version,
            author=author,
            tags=tags,
            enabled=enabled,
            retry_safe=retry_safe,
        )
        self.add(tool)
        return tool

    def unregister(self, name: str) -> bool:
        """Remove a tool. Returns False if it was not registered."""
        with self._lock:
            return self._tools.pop(name, None) is not None

    def lookup(self, name: str) -> Tool | None:
        with self._lock:
            return self._tools.get(name)

    def all_names(self) -> set[str]:
        with self._lock:
            return set(self._tools)

    def input_schema(self, name: str) -> dict[str, Any] | None:
        tool = self.lookup(name)
        return tool.input_schema if tool is not None else None

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._tools

    def __len__(self) -> int:
        with self._lock:
            return len(self._tools)

    def export_definitions(
        self,
        filter: Callable[[Tool], bool] | None = None,
    ) -> list[ToolDefinition]:
        """Declarations of enabled tools, in registration order.

        Args:
            filter: Optional predicate selecting which tools to include
        """
        with self._lock:
            tools = list(self._tools.values())
        return [
            t.definition()
            for t in tools
            if t.metadata.enabled and (filter is None or filter(t))
        ]

    def export_definition(self, name: str) -> ToolDefinition | None:
        tool = self.lookup(name)
        if tool is None or not tool.metadata.enabled:
            return None
        return tool.definition()

    def register_from_dir(
        self,
        directory: str | Path,
        handlers: Mapping[str, Callable[[dict[str, Any]], Any]],
        *,
        strict: bool = False,
    ) -> list[str]:
        """Register tools from ``*.json`` function specs in a directory.

        Each file holds one spec, either ``{"name", "description",
        "parameters"}`` or ``{"type": "function", "function": {...}}``.
        Specs are bound to ``handlers`` by name.

        Args:
            directory: Directory to scan (not recursive)
            handlers: Handler per tool name
            strict: Raise on the first unusable file instead of skipping it

        Returns:
            Names registered, in file name order

        Raises:
            RegistrationError: If the directory is missing, or in strict
                mode when a file is malformed, has no handler or collides
        """
        path = Path(directory)
        if not path.is_dir():
            raise RegistrationError(f"Tool directory not found: {path}")

        registered: list[str] = []
        for file in sorted(path.glob("*.json")):
            try:
                spec = json.loads(file.read_text(encoding="utf-8"))
                if not isinstance(spec, dict):
                    raise ValueError("spec must be a JSON object")
                definition = ToolDefinition.from_spec(spec)
                handler = handlers.get(definition.name)
                if handler is None:
                    raise RegistrationError(
                        f"No handler for tool '{definition.name}'", tool_name=definition.name
                    )
                self.register(
                    definition.name,
                    definition.function.parameters,
                    handler,
                    description=definition.description,
                )
            except (OSError, ValueError, RegistrationError) as e:
                if strict:
                    if isinstance(e, RegistrationError):
                        raise
                    raise RegistrationError(f"Cannot load tool spec {file.name}: {e}") from e
                logger.warning("Skipping tool spec", file=file.name, error=str(e))
                continue
            registered.append(definition.name)

        return registered

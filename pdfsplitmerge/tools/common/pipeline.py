"""Plugin registry for pdfsplitmerge tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable

from .interfaces import BaseTool, ToolContext, ToolFactory


@dataclass(frozen=True, slots=True)
class ToolEntry:
    name: str
    tool_class: type[BaseTool]

    @property
    def summary(self) -> str:
        doc = (self.tool_class.__doc__ or "").strip()
        return doc.splitlines()[0] if doc else ""


class ToolRegistry:
    """Tool classes by command name."""

    def __init__(self) -> None:
        self._entries: Dict[str, ToolEntry] = {}

    def register(self, name: str, tool_class: type[BaseTool]) -> None:
        if name in self._entries:
            raise ValueError(f"Tool '{name}' is already registered")
        self._entries[name] = ToolEntry(name, tool_class)

    def create(self, name: str, context: ToolContext) -> BaseTool:
        entry = self._entries.get(name)
        if entry is None:
            raise KeyError(f"Tool '{name}' is not registered")
        return entry.tool_class(context)

    def names(self) -> Iterable[str]:
        return sorted(self._entries)

    def describe(self) -> dict[str, str]:
        """Map each tool name to the first line of its docstring."""

        return {name: self._entries[name].summary for name in self.names()}

    def __contains__(self, name: object) -> bool:
        return name in self._entries


registry = ToolRegistry()


def register_tool(name: str):
    def decorator(cls: type[BaseTool]) -> type[BaseTool]:
        cls.name = name
        registry.register(name, cls)
        return cls

    return decorator


__all__ = ["ToolEntry", "ToolRegistry", "registry", "register_tool", "ToolContext", "BaseTool", "ToolFactory"]

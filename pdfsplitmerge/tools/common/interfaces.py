"""Core interfaces and context objects shared by pdfsplitmerge tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable

from ...core.utils import resolve_path
from ...options import AssemblyOptions, WorkspaceSettings
from ...workspace import WorkspaceService


@dataclass
class ToolContext:
    """Holds shared execution state for a tool invocation."""

    input_path: Path | None = None
    output_path: Path | None = None
    workspace: WorkspaceService | None = None
    resources: dict[str, Any] = field(default_factory=dict)
    config: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.input_path is not None:
            self.input_path = resolve_path(self.input_path)
        if self.output_path is not None:
            self.output_path = resolve_path(self.output_path)

    def read_input(self) -> bytes:
        if self.input_path is None:
            raise ValueError("ToolContext requires an input_path to read from")
        return self.input_path.read_bytes()

    def ensure_workspace(self) -> WorkspaceService:
        if self.workspace is None:
            settings = WorkspaceSettings.from_env(self.config.get("workspace"))
            self.workspace = WorkspaceService(settings)
        return self.workspace

    def assembly_options(self) -> AssemblyOptions:
        return AssemblyOptions.from_config(self.config)


class BaseTool:
    """Base class for all pluggable pdfsplitmerge tools."""

    name: str

    def __init__(self, context: ToolContext) -> None:
        self.context = context

    def run(self) -> Any:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError


ToolFactory = Callable[[ToolContext], BaseTool]

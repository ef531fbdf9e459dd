"""Configuration objects for assembly operations and the upload workspace."""

from __future__ import annotations

from dataclasses import dataclass, field, fields
import os
from pathlib import Path
from typing import Any, Mapping, Sequence

WORKSPACE_ENV = "PDFSPLITMERGE_WORKSPACE"
MAX_FILES_ENV = "PDFSPLITMERGE_MAX_FILES"


@dataclass(slots=True)
class AssemblyOptions:
    """Options controlling extraction and merging."""

    strict_pages: bool = False
    copy_metadata: bool = True
    document_info: Mapping[str, object] | None = None
    bookmarks: Sequence[str | None] | None = None
    workers: int = 1
    verify: bool = False

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "AssemblyOptions":
        """Build options from a tool configuration dictionary."""

        options = cls()
        for item in fields(cls):
            value = config.get(item.name)
            if value is not None:
                setattr(options, item.name, value)
        return options


@dataclass(slots=True)
class WorkspaceSettings:
    """Where uploaded files and their records live."""

    root: Path = field(default_factory=lambda: Path("uploads"))
    records_file: Path | None = None
    max_upload_files: int = 10

    def __post_init__(self) -> None:
        self.root = Path(self.root).expanduser()
        if self.records_file is None:
            self.records_file = self.root / "records.json"

    @classmethod
    def from_env(cls, root: str | Path | None = None) -> "WorkspaceSettings":
        root_value = root or os.environ.get(WORKSPACE_ENV) or "uploads"
        max_files = os.environ.get(MAX_FILES_ENV)
        return cls(
            root=Path(root_value),
            max_upload_files=int(max_files) if max_files else 10,
        )


__all__ = ["AssemblyOptions", "WorkspaceSettings", "WORKSPACE_ENV", "MAX_FILES_ENV"]

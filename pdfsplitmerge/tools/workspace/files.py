"""Workspace tools: upload files and list what is stored."""

from __future__ import annotations

from ...core.utils import get_logger
from ...workspace import FileRecord
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool

LOGGER = get_logger("pdfsplitmerge.tools.workspace")


@register_tool("upload")
class UploadTool(BaseTool):
    """Store PDF files in the workspace."""

    name = "upload"

    def run(self) -> list[FileRecord]:
        context = self.context
        paths = list(context.config.get("inputs") or [])
        records = context.ensure_workspace().upload(paths)
        LOGGER.debug("Created records %s", [record.id for record in records])
        context.resources["result"] = records
        return records


@register_tool("files")
class ListFilesTool(BaseTool):
    """List uploaded files that have not been merged."""

    name = "files"

    def run(self) -> list[FileRecord]:
        records = self.context.ensure_workspace().files()
        self.context.resources["result"] = records
        return records

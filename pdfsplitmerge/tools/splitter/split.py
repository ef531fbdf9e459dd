"""Page counting and extraction tools."""

from __future__ import annotations

from pathlib import Path

from ...core import operations
from ...core.utils import get_logger
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool
from .utils import selected_pages

LOGGER = get_logger("pdfsplitmerge.tools.split")


@register_tool("pages")
class PageCountTool(BaseTool):
    """Count the pages of a PDF."""

    name = "pages"

    def run(self) -> int:
        count = operations.page_count(self.context.read_input())
        self.context.resources["page_count"] = count
        return count


@register_tool("extract")
class ExtractTool(BaseTool):
    """Copy selected pages into a new PDF."""

    name = "extract"

    def run(self) -> Path:
        context = self.context
        output = context.output_path
        if output is None:
            raise ValueError("Extract tool requires an output path")
        pages = selected_pages(context.config.get("pages"), context.config.get("ranges"))

        LOGGER.debug("Extracting pages %s from %s", pages, context.input_path)
        data = operations.extract_pages(
            context.read_input(), pages, options=context.assembly_options()
        )
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(data)
        context.resources["result"] = output
        return output


@register_tool("split-file")
class SplitFileTool(BaseTool):
    """Extract pages into the workspace instead of a caller-chosen path."""

    name = "split-file"

    def run(self) -> Path:
        context = self.context
        source = context.config.get("source")
        if not source:
            raise ValueError("Split tool requires a record id or input path")
        pages = selected_pages(context.config.get("pages"), context.config.get("ranges"))
        location = context.ensure_workspace().split(
            source, pages, options=context.assembly_options()
        )
        context.resources["result"] = location
        return location

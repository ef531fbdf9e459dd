"""Plugin exposing document merging through the registry."""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from ...core import operations
from ...core.utils import get_logger
from ...workspace import WorkspaceError
from ..common.interfaces import BaseTool
from ..common.pipeline import register_tool

LOGGER = get_logger("pdfsplitmerge.tools.merge")


def _read_sources(inputs: Iterable[str | Path]) -> list[bytes | None]:
    sources: list[bytes | None] = []
    for item in inputs:
        path = Path(item).expanduser()
        try:
            sources.append(path.read_bytes())
        except OSError as exc:
            LOGGER.warning("Skipping unreadable input %s: %s", path, exc)
            sources.append(None)
    return sources


@register_tool("merge")
class MergeTool(BaseTool):
    """Concatenate PDF files in the order given."""

    name = "merge"

    def run(self) -> Path:
        context = self.context
        inputs: Iterable[str | Path] | None = context.config.get("inputs")
        if not inputs:
            raise ValueError("No input PDFs provided")

        output = context.output_path
        if output is None:
            raise ValueError("Merge tool requires an output path")

        inputs_list = list(inputs)
        LOGGER.debug("Merging %d input(s) into %s", len(inputs_list), output)
        report = operations.merge_documents_report(
            _read_sources(inputs_list), options=context.assembly_options()
        )
        for item in report.skipped:
            LOGGER.warning("Input %s was skipped: %s", inputs_list[item.index], item.reason)
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_bytes(report.data)
        context.resources["report"] = report
        context.resources["result"] = output
        return output


@register_tool("merge-files")
class MergeFilesTool(BaseTool):
    """Merge uploaded workspace records in the order given."""

    name = "merge-files"

    def run(self) -> Path:
        context = self.context
        record_ids = list(context.config.get("records") or [])
        if not record_ids:
            raise WorkspaceError("No file ids provided")
        outcome = context.ensure_workspace().merge(record_ids, options=context.assembly_options())
        context.resources["report"] = outcome.report
        context.resources["result"] = outcome.record
        return Path(outcome.record.file_path)

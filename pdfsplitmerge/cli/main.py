"""Command line interface for pdfsplitmerge."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

from ..core.exceptions import PdfAssemblyError
from ..core.utils import set_log_level
from ..tools import load_builtin_plugins
from ..tools.common.interfaces import ToolContext
from ..tools.common.pipeline import registry
from ..workspace import FileRecord, WorkspaceError
from .commands import extract, merge, pages, workspace

COMMAND_MODULES = [pages, extract, merge, workspace]


def _create_parser() -> argparse.ArgumentParser:
    epilog = "\n".join(f"  {name:<12} {summary}" for name, summary in registry.describe().items())
    parser = argparse.ArgumentParser(
        prog="pdfsplitmerge",
        description="Extract, merge and manage PDF pages",
        epilog="tools:\n" + epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    parser.add_argument(
        "--workspace",
        default=None,
        help="Directory for uploaded files (defaults to $PDFSPLITMERGE_WORKSPACE or ./uploads)",
    )
    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True
    for module in COMMAND_MODULES:
        module.configure_parser(subparsers)
    return parser


def _render(result: object) -> None:
    if isinstance(result, list):
        for item in result:
            _render(item)
    elif isinstance(result, FileRecord):
        print(f"{result.id}\t{result.file_name}\t{result.upload_date.isoformat()}")
    elif isinstance(result, (int, Path)):
        print(result)


def main(argv: Sequence[str] | None = None) -> object:
    load_builtin_plugins()
    parser = _create_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        set_log_level(logging.DEBUG)
    context: ToolContext = args.build_context(args)
    context.config.setdefault("workspace", args.workspace)
    tool = registry.create(args.tool_name, context)
    try:
        result = tool.run()
    except (PdfAssemblyError, WorkspaceError, ValueError, OSError) as exc:
        print(f"pdfsplitmerge: error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc
    _render(result)
    return result


if __name__ == "__main__":  # pragma: no cover
    main()

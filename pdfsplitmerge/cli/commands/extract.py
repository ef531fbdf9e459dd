"""CLI helpers for the extract command."""

from __future__ import annotations

from argparse import ArgumentParser, _SubParsersAction

from ...tools.common.interfaces import ToolContext


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("extract", help="Copy selected pages into a new PDF")
    parser.add_argument("input", help="Input PDF file")
    parser.add_argument("output", help="Output PDF path")
    add_page_arguments(parser)
    parser.set_defaults(tool_name="extract", build_context=_build_context)


def add_page_arguments(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--pages",
        nargs="+",
        help="Page numbers (1-based) in output order",
        default=None,
    )
    parser.add_argument("--ranges", help="Comma separated page ranges, e.g. 1-3,5", default=None)
    parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail instead of ignoring page numbers outside the document",
    )


def _build_context(args) -> ToolContext:
    return ToolContext(
        input_path=args.input,
        output_path=args.output,
        config={"pages": args.pages, "ranges": args.ranges, "strict_pages": args.strict},
    )

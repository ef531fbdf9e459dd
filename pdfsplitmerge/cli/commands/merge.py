"""CLI helpers for merging PDFs."""

from __future__ import annotations

from argparse import ArgumentParser, _SubParsersAction

from ...tools.common.interfaces import ToolContext


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("merge", help="Merge multiple PDFs into one")
    parser.add_argument("inputs", nargs="+", help="Input PDF files")
    parser.add_argument("output", help="Output PDF path")
    add_merge_arguments(parser)
    parser.set_defaults(tool_name="merge", build_context=_build_context)


def add_merge_arguments(parser: ArgumentParser) -> None:
    parser.add_argument(
        "--bookmark",
        dest="bookmarks",
        action="append",
        help="Add bookmark titles matching each input",
    )
    parser.add_argument(
        "--no-metadata",
        action="store_true",
        help="Do not copy metadata from the first document",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=1,
        help="Number of threads used to parse inputs",
    )
    parser.add_argument(
        "--verify",
        action="store_true",
        help="Re-read the output with pypdf before writing it",
    )


def merge_config(args) -> dict:
    return {
        "bookmarks": args.bookmarks,
        "copy_metadata": not args.no_metadata,
        "workers": args.workers,
        "verify": args.verify,
    }


def _build_context(args) -> ToolContext:
    config = merge_config(args)
    config["inputs"] = args.inputs
    return ToolContext(output_path=args.output, config=config)

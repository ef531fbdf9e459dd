"""CLI helpers for counting pages."""

from __future__ import annotations

from argparse import ArgumentParser, _SubParsersAction

from ...tools.common.interfaces import ToolContext


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    parser = subparsers.add_parser("pages", help="Print the number of pages in a PDF")
    parser.add_argument("input", help="Input PDF file")
    parser.set_defaults(tool_name="pages", build_context=_build_context)


def _build_context(args) -> ToolContext:
    return ToolContext(input_path=args.input)

"""CLI helpers for the upload workspace."""

from __future__ import annotations

from argparse import ArgumentParser, _SubParsersAction

from ...tools.common.interfaces import ToolContext
from .extract import add_page_arguments
from .merge import add_merge_arguments, merge_config


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    upload = subparsers.add_parser("upload", help="Store PDFs in the workspace")
    upload.add_argument("inputs", nargs="+", help="PDF files to upload")
    upload.set_defaults(tool_name="upload", build_context=_build_upload_context)

    files = subparsers.add_parser("files", help="List uploaded files that were not merged")
    files.set_defaults(tool_name="files", build_context=_build_files_context)

    merge_files = subparsers.add_parser(
        "merge-files", help="Merge uploaded files in the given order"
    )
    merge_files.add_argument("records", nargs="+", help="Ids of uploaded files")
    add_merge_arguments(merge_files)
    merge_files.set_defaults(tool_name="merge-files", build_context=_build_merge_context)

    split_file = subparsers.add_parser(
        "split-file", help="Extract pages of an uploaded file or path into the workspace"
    )
    split_file.add_argument("source", help="Record id or PDF path")
    add_page_arguments(split_file)
    split_file.set_defaults(tool_name="split-file", build_context=_build_split_context)


def _build_upload_context(args) -> ToolContext:
    return ToolContext(config={"workspace": args.workspace, "inputs": args.inputs})


def _build_files_context(args) -> ToolContext:
    return ToolContext(config={"workspace": args.workspace})


def _build_merge_context(args) -> ToolContext:
    config = merge_config(args)
    config.update({"workspace": args.workspace, "records": args.records})
    return ToolContext(config=config)


def _build_split_context(args) -> ToolContext:
    return ToolContext(
        config={
            "workspace": args.workspace,
            "source": args.source,
            "pages": args.pages,
            "ranges": args.ranges,
            "strict_pages": args.strict,
        }
    )

"""Byte-in/byte-out entry points of the assembly engine.

Each call parses its inputs, builds a fresh destination graph and copied
object map, and returns serialized bytes; nothing is shared between calls.
"""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from ..options import AssemblyOptions
from . import assembler
from .assembler import SkippedSource
from .exceptions import ParseError, StructureError
from .objects import DocumentGraph
from .pages import enumerate_pages
from .parser import parse
from .serializer import serialize
from .utils import get_logger
from .validator import verify_pdf_bytes

__all__ = ["MergeReport", "page_count", "extract_pages", "merge_documents", "merge_documents_report"]

LOGGER = get_logger("pdfsplitmerge.operations")


@dataclass(slots=True)
class MergeReport:
    """Merged bytes plus a summary of sources that were skipped."""

    data: bytes
    page_count: int
    skipped: list[SkippedSource] = field(default_factory=list)


def page_count(data: bytes) -> int:
    """Return the number of pages in the PDF ``data``.

    A page tree that cannot be walked is reported as :class:`ParseError`.
    """

    graph = parse(data)
    try:
        return len(enumerate_pages(graph))
    except StructureError as exc:
        raise ParseError(exc.reason) from exc


def extract_pages(
    data: bytes,
    page_numbers: Iterable[object],
    *,
    options: AssemblyOptions | None = None,
) -> bytes:
    """Return a new PDF holding ``page_numbers`` (1-based) of ``data`` in order."""

    options = options or AssemblyOptions()
    graph = assembler.extract_pages(
        parse(data),
        page_numbers,
        strict=options.strict_pages,
        copy_metadata=options.copy_metadata,
        document_info=options.document_info,
    )
    output = serialize(graph)
    if options.verify:
        verify_pdf_bytes(output, expected_pages=len(enumerate_pages(graph)))
    return output


def _parse_source(index: int, data: bytes | None) -> tuple[DocumentGraph | None, str | None]:
    if data is None:
        return None, None
    try:
        return parse(data), None
    except ParseError as exc:
        LOGGER.warning("Merge source %d could not be parsed: %s", index, exc)
        return None, f"parse error: {exc}"


def _parse_sources(
    sources: Sequence[bytes | None], workers: int
) -> list[tuple[DocumentGraph | None, str | None]]:
    if workers > 1 and len(sources) > 1:
        with ThreadPoolExecutor(max_workers=workers) as executor:
            return list(executor.map(_parse_source, range(len(sources)), sources))
    return [_parse_source(index, data) for index, data in enumerate(sources)]


def merge_documents_report(
    sources: Sequence[bytes | None],
    *,
    options: AssemblyOptions | None = None,
) -> MergeReport:
    """Merge ``sources`` in order and report which inputs were skipped.

    Sources may be parsed concurrently (``options.workers``); copying always
    happens on the calling thread in caller order, so the output does not
    depend on the worker count.
    """

    options = options or AssemblyOptions()
    parsed = _parse_sources(list(sources), options.workers)
    failures = {index: reason for index, (_, reason) in enumerate(parsed) if reason is not None}
    result = assembler.merge_documents(
        [graph for graph, _ in parsed],
        bookmarks=options.bookmarks,
        copy_metadata=options.copy_metadata,
        document_info=options.document_info,
    )
    skipped = [
        SkippedSource(item.index, failures[item.index]) if item.index in failures else item
        for item in result.skipped
    ]
    output = serialize(result.graph)
    if options.verify:
        verify_pdf_bytes(output, expected_pages=result.page_count)
    return MergeReport(data=output, page_count=result.page_count, skipped=skipped)


def merge_documents(
    sources: Sequence[bytes | None],
    *,
    options: AssemblyOptions | None = None,
) -> bytes:
    """Merge ``sources`` in order into a single PDF; ``None`` marks a missing source."""

    return merge_documents_report(sources, options=options).data

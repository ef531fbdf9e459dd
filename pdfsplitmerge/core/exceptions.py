"""Custom exceptions raised by the :mod:`pdfsplitmerge` assembly engine."""

from __future__ import annotations

from typing import Iterable


class PdfAssemblyError(Exception):
    """Base exception for all errors raised by :mod:`pdfsplitmerge.core`."""


class ParseError(PdfAssemblyError):
    """Raised when input bytes cannot be decoded into a document graph."""

    def __init__(self, reason: str, *, offset: int | None = None) -> None:
        self.reason = reason
        self.offset = offset
        if offset is not None:
            reason = f"{reason} (at byte {offset})"
        super().__init__(reason)


class StructureError(PdfAssemblyError):
    """Raised when a page tree or reference chain is cyclic or invalid."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(reason)


class EmptySelection(PdfAssemblyError):
    """Raised when no pages remain for the requested operation."""


class PageRangeError(PdfAssemblyError):
    """Raised in strict mode when requested page numbers are out of range."""

    def __init__(self, invalid: Iterable[object], total_pages: int) -> None:
        self.invalid = list(invalid)
        self.total_pages = total_pages
        super().__init__(
            f"Invalid page numbers {self.invalid!r} for a document with {total_pages} page(s)"
        )


__all__ = [
    "PdfAssemblyError",
    "ParseError",
    "StructureError",
    "EmptySelection",
    "PageRangeError",
]

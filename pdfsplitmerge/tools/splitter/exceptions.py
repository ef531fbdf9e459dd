"""Custom exceptions raised by :mod:`pdfsplitmerge.tools.splitter`."""

from __future__ import annotations

from typing import Iterable

from ...core.exceptions import PdfAssemblyError


class InvalidPageRangeError(PdfAssemblyError):
    """Raised when a page range expression cannot be parsed."""

    def __init__(self, ranges: Iterable[object]) -> None:
        self.ranges = list(ranges)
        message = f"Invalid or empty page ranges provided: {self.ranges!r}"
        super().__init__(message)

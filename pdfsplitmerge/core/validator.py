"""Conformance check of produced PDF bytes with an independent reader."""

from __future__ import annotations

from io import BytesIO

from pypdf import PdfReader
from pypdf.errors import PdfReadError

from .exceptions import StructureError
from .utils import get_logger

LOGGER = get_logger("pdfsplitmerge.validator")


def verify_pdf_bytes(data: bytes, *, expected_pages: int | None = None) -> int:
    """Open ``data`` with pypdf in strict mode and return its page count.

    Raises :class:`StructureError` when pypdf cannot read the document or
    reports a different number of pages than ``expected_pages``.
    """

    try:
        reader = PdfReader(BytesIO(data), strict=True)
        page_count = len(reader.pages)
    except (PdfReadError, ValueError, KeyError) as exc:
        raise StructureError(f"Output rejected by conformant reader: {exc}") from exc

    if expected_pages is not None and page_count != expected_pages:
        raise StructureError(
            f"Conformant reader found {page_count} page(s), expected {expected_pages}"
        )
    LOGGER.debug("Verified output with pypdf: %d page(s)", page_count)
    return page_count


__all__ = ["verify_pdf_bytes"]

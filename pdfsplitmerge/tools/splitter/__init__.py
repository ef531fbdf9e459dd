"""Extraction tools exposed through the pdfsplitmerge tools namespace."""

from __future__ import annotations

from .exceptions import InvalidPageRangeError
from .utils import PageRange, expand_page_ranges, normalize_pages, parse_page_ranges, selected_pages

__all__ = [
    "PageRange",
    "InvalidPageRangeError",
    "expand_page_ranges",
    "normalize_pages",
    "parse_page_ranges",
    "selected_pages",
]

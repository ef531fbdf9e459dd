"""Page selection helpers for the split tools."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from .exceptions import InvalidPageRangeError


@dataclass(frozen=True)
class PageRange:
    """Represents an inclusive page range."""

    start: int
    end: int

    def pages(self) -> List[int]:
        return list(range(self.start, self.end + 1))


def parse_page_ranges(ranges: str | None) -> List[PageRange]:
    """Parse a comma separated expression such as ``"1-3,5"``.

    Ranges keep the order they were written in.  Whether the pages exist is
    decided later against the source document.

    Raises:
        InvalidPageRangeError: If a token is not a number or a ``start-end``
            pair with ``1 <= start <= end``.
    """

    if ranges is None:
        raise InvalidPageRangeError([ranges])

    tokens = [token.strip() for token in ranges.split(",") if token.strip()]
    parsed: List[PageRange] = []
    for token in tokens:
        if "-" in token:
            start_str, end_str = token.split("-", 1)
            try:
                start = int(start_str)
                end = int(end_str)
            except ValueError as exc:
                raise InvalidPageRangeError([token]) from exc
            if start < 1 or start > end:
                raise InvalidPageRangeError([token])
        else:
            try:
                start = end = int(token)
            except ValueError as exc:
                raise InvalidPageRangeError([token]) from exc
        parsed.append(PageRange(start, end))

    if not parsed:
        raise InvalidPageRangeError([ranges])
    return parsed


def expand_page_ranges(ranges: str) -> List[int]:
    """Return the page numbers named by ``ranges`` in order, duplicates kept."""

    numbers: List[int] = []
    for page_range in parse_page_ranges(ranges):
        numbers.extend(page_range.pages())
    return numbers


def normalize_pages(pages: Iterable[int | str]) -> List[int]:
    """Convert ``pages`` to integers, keeping order and duplicates."""

    normalised: List[int] = []
    for page in pages:
        if isinstance(page, str):
            if not page.strip():
                continue
            try:
                number = int(page)
            except ValueError as exc:
                raise InvalidPageRangeError([page]) from exc
        else:
            number = int(page)
        normalised.append(number)
    return normalised


def selected_pages(pages: Iterable[int | str] | None, ranges: str | None) -> List[int]:
    """Combine ``--pages`` and ``--ranges`` style inputs into one selection."""

    selection: List[int] = []
    if pages:
        selection.extend(normalize_pages(pages))
    if ranges:
        selection.extend(expand_page_ranges(ranges))
    if not selection:
        raise InvalidPageRangeError([pages, ranges])
    return selection

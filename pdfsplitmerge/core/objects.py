"""In-memory PDF object model.

PDF values are represented by a closed set of Python types::

    None        null
    bool        true / false
    int, float  numbers
    PdfName     /Name (stored with its leading slash)
    PdfString   literal or hexadecimal string
    PdfRef      indirect reference ``n g R``
    PdfArray    [ ... ]
    PdfDict     << ... >>
    PdfStream   dictionary plus raw (still encoded) stream bytes

Every consumer dispatches over these types with :func:`isinstance`.  A
:class:`DocumentGraph` is an arena mapping object numbers to
:class:`IndirectObject` values; references are plain ``(number, generation)``
pairs that are only meaningful inside the graph defining them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import count
from typing import Any, Callable, Iterator, Union

from .exceptions import StructureError

__all__ = [
    "PdfName",
    "PdfString",
    "PdfRef",
    "PdfArray",
    "PdfDict",
    "PdfStream",
    "PdfValue",
    "IndirectObject",
    "DocumentGraph",
    "is_type",
]


class PdfName(str):
    """A PDF name such as ``/Type``; the leading slash is part of the value."""

    __slots__ = ()

    def __new__(cls, value: str) -> "PdfName":
        if not value.startswith("/"):
            value = "/" + value
        return super().__new__(cls, value)


@dataclass(frozen=True, slots=True)
class PdfString:
    """A PDF string; ``hex`` records whether it was written as ``<...>``."""

    value: bytes
    hex: bool = False

    def text(self) -> str:
        """Decode the string as PDF text (UTF-16 with BOM or PDFDocEncoding)."""

        if self.value.startswith(b"\xfe\xff"):
            return self.value[2:].decode("utf-16-be", "replace")
        if self.value.startswith(b"\xef\xbb\xbf"):
            return self.value[3:].decode("utf-8", "replace")
        return self.value.decode("latin-1")

    @classmethod
    def from_text(cls, text: str) -> "PdfString":
        try:
            return cls(text.encode("latin-1"))
        except UnicodeEncodeError:
            return cls(b"\xfe\xff" + text.encode("utf-16-be"))


@dataclass(frozen=True, slots=True, order=True)
class PdfRef:
    number: int
    generation: int = 0

    def __str__(self) -> str:
        return f"{self.number} {self.generation} R"


class PdfArray(list):
    """A PDF array."""


class PdfDict(dict):
    """A PDF dictionary keyed by :class:`PdfName`."""

    def get_name(self, key: str) -> str | None:
        value = self.get(key)
        return value if isinstance(value, PdfName) else None


@dataclass(slots=True)
class PdfStream:
    """A stream object; ``data`` holds the raw bytes exactly as stored."""

    dictionary: PdfDict
    data: bytes

    @property
    def filters(self) -> list[str]:
        value = self.dictionary.get("/Filter")
        if isinstance(value, PdfName):
            return [value]
        if isinstance(value, list):
            return [item for item in value if isinstance(item, PdfName)]
        return []


PdfValue = Union[
    None, bool, int, float, PdfName, PdfString, PdfRef, PdfArray, PdfDict, PdfStream
]


@dataclass(slots=True)
class IndirectObject:
    number: int
    generation: int
    value: Any

    @property
    def ref(self) -> PdfRef:
        return PdfRef(self.number, self.generation)


def is_type(value: Any, *names: str) -> bool:
    """Return ``True`` when ``value`` is a dictionary whose ``/Type`` is one of ``names``."""

    if isinstance(value, PdfStream):
        value = value.dictionary
    return isinstance(value, PdfDict) and value.get_name("/Type") in names


ObjectLoader = Callable[[int], Union[IndirectObject, None]]

_graph_tokens = count(1)


@dataclass
class DocumentGraph:
    """Arena of indirect objects plus the trailer describing the document.

    Parsed graphs are backed by a *loader* which materialises objects from the
    cross-reference index on first access; assembled graphs are populated via
    :meth:`reserve`, :meth:`set` and :meth:`add`.
    """

    version: str = "1.7"
    trailer: PdfDict = field(default_factory=PdfDict)
    token: int = field(default_factory=lambda: next(_graph_tokens))
    _objects: dict[int, IndirectObject] = field(default_factory=dict, init=False, repr=False)
    _known: set[int] = field(default_factory=set, init=False, repr=False)
    _loader: ObjectLoader | None = field(default=None, init=False, repr=False)
    _next_number: int = field(default=1, init=False, repr=False)

    def attach_loader(self, loader: ObjectLoader, numbers: set[int]) -> None:
        self._loader = loader
        self._known = set(numbers)
        if numbers:
            self._next_number = max(self._next_number, max(numbers) + 1)

    # -- Identifier allocation ----------------------------------------------

    def reserve(self) -> PdfRef:
        """Allocate a fresh object number; its value is filled in by :meth:`set`."""

        number = self._next_number
        self._next_number += 1
        self._objects[number] = IndirectObject(number, 0, None)
        return PdfRef(number, 0)

    def set(self, ref: PdfRef, value: Any) -> None:
        self._objects[ref.number] = IndirectObject(ref.number, ref.generation, value)
        if ref.number >= self._next_number:
            self._next_number = ref.number + 1

    def add(self, value: Any) -> PdfRef:
        ref = self.reserve()
        self.set(ref, value)
        return ref

    # -- Lookup -------------------------------------------------------------

    def __contains__(self, number: object) -> bool:
        return number in self._objects or number in self._known

    def __len__(self) -> int:
        return len(self._known.union(self._objects))

    def numbers(self) -> list[int]:
        """Return every object number in the graph in ascending order."""

        return sorted(self._known.union(self._objects))

    def indirect(self, number: int) -> IndirectObject | None:
        entry = self._objects.get(number)
        if entry is None and self._loader is not None and number in self._known:
            entry = self._loader(number)
            if entry is not None:
                self._objects[number] = entry
        return entry

    def get(self, ref: PdfRef) -> Any:
        """Return the value stored under ``ref`` or ``None`` when absent."""

        entry = self.indirect(ref.number)
        if entry is None or entry.generation != ref.generation:
            return None
        return entry.value

    def resolve(self, value: Any) -> Any:
        """Follow ``value`` through any chain of references."""

        seen: set[PdfRef] = set()
        while isinstance(value, PdfRef):
            if value in seen:
                raise StructureError(f"Circular reference chain through {value}")
            seen.add(value)
            value = self.get(value)
        return value

    def iter_objects(self) -> Iterator[IndirectObject]:
        for number in self.numbers():
            entry = self.indirect(number)
            if entry is not None:
                yield entry

    # -- Document level accessors ------------------------------------------

    @property
    def root_ref(self) -> PdfRef | None:
        root = self.trailer.get("/Root")
        return root if isinstance(root, PdfRef) else None

    @property
    def catalog(self) -> PdfDict:
        catalog = self.resolve(self.trailer.get("/Root"))
        if not isinstance(catalog, PdfDict):
            raise StructureError("Document catalog is missing or not a dictionary")
        return catalog

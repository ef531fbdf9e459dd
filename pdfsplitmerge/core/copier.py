"""Deep copy of objects from source graphs into a destination graph.

A :class:`ResourceCopier` is created per assembly operation together with its
:class:`CopiedObjectMap`.  Every object reachable from a copied value is
copied exactly once per source graph: the destination number is reserved and
recorded in the map as soon as the object is discovered, so shared resources
are reused and reference cycles terminate.
"""

from __future__ import annotations

from collections import deque
from typing import Any, Iterable

from .objects import DocumentGraph, PdfArray, PdfDict, PdfRef, PdfStream, is_type
from .utils import get_logger

__all__ = ["CopiedObjectMap", "ResourceCopier", "copy_object", "load_reachable"]

LOGGER = get_logger("pdfsplitmerge.copier")

# Page-tree structure is rebuilt by the assembler and never copied wholesale.
_STRUCTURAL_TYPES = ("/Page", "/Pages", "/Catalog")


class CopiedObjectMap:
    """Mapping of ``(source graph, source reference)`` to destination reference."""

    def __init__(self) -> None:
        self._entries: dict[tuple[int, PdfRef], PdfRef] = {}

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def lookup(self, source: DocumentGraph, ref: PdfRef) -> PdfRef | None:
        return self._entries.get((source.token, ref))

    def register(self, source: DocumentGraph, ref: PdfRef, destination: PdfRef) -> None:
        key = (source.token, ref)
        if key in self._entries:
            raise ValueError(f"{ref} from graph {source.token} is already mapped")
        self._entries[key] = destination


class ResourceCopier:
    """Copy values from source graphs into ``destination``."""

    def __init__(self, destination: DocumentGraph, copied: CopiedObjectMap | None = None) -> None:
        self.destination = destination
        self.copied = copied if copied is not None else CopiedObjectMap()
        self._pending: deque[tuple[DocumentGraph, PdfRef, PdfRef]] = deque()
        self.objects_copied = 0

    def copy_object(self, source: DocumentGraph, ref: PdfRef) -> PdfRef | None:
        """Copy the object ``ref`` and everything it references.

        Returns the destination reference, or ``None`` when ``ref`` does not
        resolve in ``source`` or names a page-tree node that is not part of
        the output.
        """

        destination = self._reference(source, ref)
        self._drain()
        return destination

    def copy_value(self, source: DocumentGraph, value: Any) -> Any:
        """Copy a direct value, copying every object it references."""

        copied = self._translate(source, value)
        self._drain()
        return copied

    def _drain(self) -> None:
        while self._pending:
            source, ref, destination = self._pending.popleft()
            value = source.get(ref)
            self.destination.set(destination, self._translate(source, value))
            self.objects_copied += 1

    def _reference(self, source: DocumentGraph, ref: PdfRef) -> PdfRef | None:
        existing = self.copied.lookup(source, ref)
        if existing is not None:
            return existing

        value = source.get(ref)
        if value is None:
            LOGGER.debug("Dropping reference to missing object %s", ref)
            return None
        if is_type(value, *_STRUCTURAL_TYPES):
            LOGGER.debug("Dropping reference to page tree node %s outside the selection", ref)
            return None

        destination = self.destination.reserve()
        self.copied.register(source, ref, destination)
        self._pending.append((source, ref, destination))
        return destination

    def _translate(self, source: DocumentGraph, value: Any) -> Any:
        if isinstance(value, PdfRef):
            return self._reference(source, value)
        if isinstance(value, PdfDict):
            return PdfDict((key, self._translate(source, item)) for key, item in value.items())
        if isinstance(value, PdfArray):
            return PdfArray(self._translate(source, item) for item in value)
        if isinstance(value, PdfStream):
            dictionary = PdfDict(
                (key, self._translate(source, item))
                for key, item in value.dictionary.items()
                if key != "/Length"
            )
            return PdfStream(dictionary, value.data)
        # Names, strings, numbers, booleans and null are immutable.
        return value


def copy_object(
    source: DocumentGraph,
    source_ref: PdfRef,
    destination: DocumentGraph,
    copied: CopiedObjectMap,
) -> PdfRef | None:
    """Copy ``source_ref`` from ``source`` into ``destination`` using ``copied``."""

    return ResourceCopier(destination, copied).copy_object(source, source_ref)


def load_reachable(source: DocumentGraph, values: Iterable[Any]) -> int:
    """Load every object a copy of ``values`` would visit.

    References are followed with the same rules as :class:`ResourceCopier`,
    so loader errors surface here instead of halfway through a copy.  Returns
    the number of references visited.
    """

    seen: set[PdfRef] = set()
    pending: deque[Any] = deque(values)
    while pending:
        value = pending.popleft()
        if isinstance(value, PdfRef):
            if value in seen:
                continue
            seen.add(value)
            target = source.get(value)
            if target is not None and not is_type(target, *_STRUCTURAL_TYPES):
                pending.append(target)
        elif isinstance(value, PdfDict):
            pending.extend(value.values())
        elif isinstance(value, PdfArray):
            pending.extend(value)
        elif isinstance(value, PdfStream):
            pending.extend(value.dictionary.values())
    return len(seen)

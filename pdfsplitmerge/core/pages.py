"""Page tree traversal with attribute inheritance."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .exceptions import StructureError
from .filters import decode_stream
from .objects import DocumentGraph, PdfArray, PdfDict, PdfRef, PdfStream

__all__ = ["INHERITABLE_ATTRIBUTES", "PageRef", "enumerate_pages"]

INHERITABLE_ATTRIBUTES = ("/Resources", "/MediaBox", "/CropBox", "/Rotate")


@dataclass(slots=True)
class PageRef:
    """A leaf of the page tree together with its resolved inherited attributes."""

    number: int
    ref: PdfRef | None
    node: PdfDict
    inherited: dict[str, Any] = field(default_factory=dict)
    graph: DocumentGraph | None = field(default=None, repr=False)

    def attribute(self, key: str) -> Any:
        """Return ``key`` from the leaf itself or its nearest ancestor."""

        if key in self.node:
            return self.node[key]
        return self.inherited.get(key)

    def _source(self) -> DocumentGraph:
        if self.graph is None:
            raise ValueError(f"Page {self.number} is not attached to a document graph")
        return self.graph

    def content_streams(self) -> list[PdfStream]:
        graph = self._source()
        contents = graph.resolve(self.node.get("/Contents"))
        if isinstance(contents, PdfStream):
            return [contents]
        if isinstance(contents, PdfArray):
            streams = (graph.resolve(item) for item in contents)
            return [stream for stream in streams if isinstance(stream, PdfStream)]
        return []

    def content(self, *, decode: bool = False) -> bytes:
        """Concatenate the page's content streams (raw unless ``decode``)."""

        graph = self._source()
        parts = [
            decode_stream(stream, graph.resolve) if decode else stream.data
            for stream in self.content_streams()
        ]
        return b"\n".join(parts)


def _is_intermediate(node: PdfDict) -> bool:
    node_type = node.get_name("/Type")
    if node_type == "/Pages":
        return True
    if node_type == "/Page":
        return False
    return isinstance(node.get("/Kids"), PdfArray)


def enumerate_pages(graph: DocumentGraph) -> list[PageRef]:
    """Flatten the page tree of ``graph`` into document order.

    Traversal is depth-first, left to right.  Inheritable attributes are
    carried down the current path so each leaf sees the value of its nearest
    ancestor.  A node that reappears on its own path raises
    :class:`StructureError`.
    """

    root_value = graph.catalog.get("/Pages")
    pages: list[PageRef] = []
    # Each frame: (value, path of node keys, inherited attributes)
    stack: list[tuple[Any, tuple[Any, ...], dict[str, Any]]] = [(root_value, (), {})]

    while stack:
        value, path, inherited = stack.pop()
        key: Any = value if isinstance(value, PdfRef) else id(value)
        if key in path:
            raise StructureError(f"Page tree cycle detected at {value}")
        node = graph.resolve(value)
        if not isinstance(node, PdfDict):
            if not path:
                raise StructureError("Document catalog has no page tree root")
            continue
        path = path + (key,)

        if _is_intermediate(node):
            local = dict(inherited)
            for attribute in INHERITABLE_ATTRIBUTES:
                if attribute in node:
                    local[attribute] = node[attribute]
            kids = graph.resolve(node.get("/Kids"))
            if not isinstance(kids, PdfArray):
                continue
            for kid in reversed(kids):
                stack.append((kid, path, local))
            continue

        pages.append(
            PageRef(
                number=len(pages) + 1,
                ref=value if isinstance(value, PdfRef) else None,
                node=node,
                inherited=dict(inherited),
                graph=graph,
            )
        )
    return pages

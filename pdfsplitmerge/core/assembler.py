"""Page extraction and document merging on top of the resource copier."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

from .copier import CopiedObjectMap, ResourceCopier, load_reachable
from .exceptions import EmptySelection, PageRangeError, ParseError, StructureError
from .objects import DocumentGraph, PdfArray, PdfDict, PdfName, PdfRef, PdfString
from .pages import INHERITABLE_ATTRIBUTES, PageRef, enumerate_pages
from .utils import get_logger

__all__ = [
    "DEFAULT_MEDIA_BOX",
    "SkippedSource",
    "MergeResult",
    "DocumentAssembler",
    "select_pages",
    "extract_pages",
    "merge_documents",
]

LOGGER = get_logger("pdfsplitmerge.assembler")

DEFAULT_MEDIA_BOX = (0, 0, 612, 792)

_INFO_KEY_MAP = {
    "title": "/Title",
    "author": "/Author",
    "subject": "/Subject",
    "keywords": "/Keywords",
    "creator": "/Creator",
    "producer": "/Producer",
}


@dataclass(slots=True)
class SkippedSource:
    """A merge input that contributed no pages and why."""

    index: int
    reason: str


@dataclass(slots=True)
class MergeResult:
    graph: DocumentGraph
    page_count: int
    skipped: list[SkippedSource] = field(default_factory=list)


def _version_key(version: str) -> tuple[int, ...]:
    try:
        return tuple(int(part) for part in version.split("."))
    except ValueError:
        return (1, 4)


def _info_from_mapping(document_info: Mapping[str, object]) -> PdfDict:
    info = PdfDict()
    for key, value in document_info.items():
        if value is None:
            continue
        text = str(value).strip()
        if not text:
            continue
        pdf_key = _INFO_KEY_MAP.get(str(key).lower())
        if pdf_key is None:
            pdf_key = key if str(key).startswith("/") else f"/{key}"
        info[PdfName(pdf_key)] = PdfString.from_text(text)
    return info


class DocumentAssembler:
    """Build a new document from an ordered selection of source pages.

    The destination always gets a flat page tree: one ``/Pages`` node whose
    kids are the copied leaves in selection order.  Inherited attributes are
    written onto each leaf so sources with different inheritance schemes can
    be mixed freely.
    """

    def __init__(self) -> None:
        self.graph = DocumentGraph(version="1.0")
        self.copier = ResourceCopier(self.graph, CopiedObjectMap())
        self._pages_ref = self.graph.reserve()
        self._catalog_ref = self.graph.reserve()
        self._selection: list[tuple[DocumentGraph, PageRef, PdfRef]] = []
        self._bookmarks: list[tuple[str, int]] = []
        self._info: PdfDict | None = None
        self._built = False

    @property
    def page_count(self) -> int:
        return len(self._selection)

    def add_pages(self, source: DocumentGraph, pages: Iterable[PageRef]) -> int:
        """Queue ``pages`` from ``source``; return the index of the first one.

        Destination numbers for the leaves are reserved immediately so that
        references between selected pages (links, annotation back pointers)
        resolve no matter which page is copied first.
        """

        first_index = len(self._selection)
        for page in pages:
            destination: PdfRef | None = None
            if page.ref is not None and self.copier.copied.lookup(source, page.ref) is None:
                destination = self.graph.reserve()
                self.copier.copied.register(source, page.ref, destination)
            if destination is None:
                # Repeated page: a fresh leaf that shares the copied resources.
                destination = self.graph.reserve()
            self._selection.append((source, page, destination))
        if _version_key(source.version) > _version_key(self.graph.version):
            self.graph.version = source.version
        return first_index

    def add_bookmark(self, title: str, page_index: int) -> None:
        self._bookmarks.append((title, page_index))

    def set_info(self, info: PdfDict) -> None:
        self._info = info

    def copy_info_from(self, source: DocumentGraph) -> None:
        """Use the ``/Info`` dictionary of ``source`` for the new document."""

        info_value = source.trailer.get("/Info")
        try:
            load_reachable(source, [info_value])
            info = source.resolve(info_value)
        except (ParseError, StructureError) as exc:
            LOGGER.warning("Ignoring unreadable document information of graph %d: %s", source.token, exc)
            return
        if isinstance(info, PdfDict):
            self._info = self.copier.copy_value(source, info)

    def build(self) -> DocumentGraph:
        if self._built:
            raise RuntimeError("DocumentAssembler.build() may only be called once")
        if not self._selection:
            raise EmptySelection("No pages selected")
        self._built = True

        kids = PdfArray()
        for source, page, destination in self._selection:
            LOGGER.debug("Copying page %d of graph %d into %s", page.number, source.token, destination)
            self.graph.set(destination, self._copy_leaf(source, page))
            kids.append(destination)

        self.graph.set(
            self._pages_ref,
            PdfDict(
                {
                    PdfName("/Type"): PdfName("/Pages"),
                    PdfName("/Kids"): kids,
                    PdfName("/Count"): len(kids),
                }
            ),
        )
        catalog = PdfDict(
            {
                PdfName("/Type"): PdfName("/Catalog"),
                PdfName("/Pages"): self._pages_ref,
            }
        )
        if self._bookmarks:
            catalog[PdfName("/Outlines")] = self._build_outline(kids)
            catalog[PdfName("/PageMode")] = PdfName("/UseOutlines")
        self.graph.set(self._catalog_ref, catalog)

        self.graph.trailer[PdfName("/Root")] = self._catalog_ref
        if self._info:
            self.graph.trailer[PdfName("/Info")] = self.graph.add(self._info)
        LOGGER.debug(
            "Assembled %d page(s) with %d copied object(s)",
            len(kids),
            self.copier.objects_copied,
        )
        return self.graph

    def _copy_leaf(self, source: DocumentGraph, page: PageRef) -> PdfDict:
        copier = self.copier
        leaf = PdfDict()
        for key, value in page.node.items():
            if key == "/Parent":
                continue
            leaf[key] = copier.copy_value(source, value)
        for attribute in INHERITABLE_ATTRIBUTES:
            if attribute not in leaf and attribute in page.inherited:
                leaf[PdfName(attribute)] = copier.copy_value(source, page.inherited[attribute])

        if leaf.get("/MediaBox") is None:
            LOGGER.warning(
                "Page %d of graph %d has no media box; using US Letter", page.number, source.token
            )
            leaf[PdfName("/MediaBox")] = PdfArray(DEFAULT_MEDIA_BOX)
        if leaf.get("/Resources") is None:
            leaf[PdfName("/Resources")] = PdfDict()
        leaf[PdfName("/Type")] = PdfName("/Page")
        leaf[PdfName("/Parent")] = self._pages_ref
        return leaf

    def _build_outline(self, kids: PdfArray) -> PdfRef:
        outline_ref = self.graph.reserve()
        item_refs = [self.graph.reserve() for _ in self._bookmarks]
        for position, (title, page_index) in enumerate(self._bookmarks):
            item = PdfDict(
                {
                    PdfName("/Title"): PdfString.from_text(title),
                    PdfName("/Parent"): outline_ref,
                    PdfName("/Dest"): PdfArray([kids[page_index], PdfName("/Fit")]),
                }
            )
            if position > 0:
                item[PdfName("/Prev")] = item_refs[position - 1]
            if position < len(item_refs) - 1:
                item[PdfName("/Next")] = item_refs[position + 1]
            self.graph.set(item_refs[position], item)
        self.graph.set(
            outline_ref,
            PdfDict(
                {
                    PdfName("/Type"): PdfName("/Outlines"),
                    PdfName("/First"): item_refs[0],
                    PdfName("/Last"): item_refs[-1],
                    PdfName("/Count"): len(item_refs),
                }
            ),
        )
        return outline_ref


def _page_values(page: PageRef) -> list[object]:
    values = [value for key, value in page.node.items() if key != "/Parent"]
    values.extend(page.inherited.values())
    return values


def select_pages(
    page_numbers: Iterable[object], total_pages: int, *, strict: bool = False
) -> list[int]:
    """Filter ``page_numbers`` to valid 1-based numbers, keeping caller order.

    Out-of-range or non-integer entries are dropped with a warning, or raise
    :class:`PageRangeError` when ``strict`` is set.  Duplicates are kept.
    """

    valid: list[int] = []
    invalid: list[object] = []
    for number in page_numbers:
        if isinstance(number, bool) or not isinstance(number, int):
            invalid.append(number)
        elif 1 <= number <= total_pages:
            valid.append(number)
        else:
            invalid.append(number)
    if invalid:
        if strict:
            raise PageRangeError(invalid, total_pages)
        LOGGER.warning(
            "Ignoring invalid page numbers %s for a document with %d page(s)", invalid, total_pages
        )
    return valid


def extract_pages(
    source: DocumentGraph,
    page_numbers: Iterable[object],
    *,
    strict: bool = False,
    copy_metadata: bool = True,
    document_info: Mapping[str, object] | None = None,
) -> DocumentGraph:
    """Build a new graph holding the requested pages of ``source`` in order."""

    pages = enumerate_pages(source)
    selected = select_pages(page_numbers, len(pages), strict=strict)
    if not selected:
        raise EmptySelection(f"No valid pages selected from a document with {len(pages)} page(s)")

    assembler = DocumentAssembler()
    assembler.add_pages(source, [pages[number - 1] for number in selected])
    if document_info:
        assembler.set_info(_info_from_mapping(document_info))
    elif copy_metadata:
        assembler.copy_info_from(source)
    graph = assembler.build()
    LOGGER.info("Extracted %d page(s) out of %d", len(selected), len(pages))
    return graph


def merge_documents(
    sources: Sequence[DocumentGraph | None],
    *,
    bookmarks: Sequence[str | None] | None = None,
    copy_metadata: bool = True,
    document_info: Mapping[str, object] | None = None,
) -> MergeResult:
    """Concatenate every page of ``sources`` in the given order.

    ``None`` entries stand for sources that are missing or failed to parse;
    they, and sources whose page tree is invalid or whose pages reference
    unreadable objects, are skipped and reported in
    :attr:`MergeResult.skipped`.  When bookmarks are requested, each
    contributing source gets an outline entry pointing at its first page.
    """

    assembler = DocumentAssembler()
    skipped: list[SkippedSource] = []
    metadata_source: DocumentGraph | None = None

    for index, source in enumerate(sources):
        if source is None:
            LOGGER.warning("Skipping merge source %d: source is missing or unreadable", index)
            skipped.append(SkippedSource(index, "source is missing or unreadable"))
            continue
        try:
            pages = enumerate_pages(source)
            for page in pages:
                load_reachable(source, _page_values(page))
        except (ParseError, StructureError) as exc:
            LOGGER.warning("Skipping merge source %d: %s", index, exc)
            skipped.append(SkippedSource(index, str(exc)))
            continue
        if not pages:
            LOGGER.warning("Skipping merge source %d: document has no pages", index)
            skipped.append(SkippedSource(index, "document has no pages"))
            continue

        first_index = assembler.add_pages(source, pages)
        LOGGER.debug("Queued %d page(s) from merge source %d", len(pages), index)
        if bookmarks is not None:
            title = bookmarks[index] if index < len(bookmarks) else None
            assembler.add_bookmark(title or f"Document {index + 1}", first_index)
        if metadata_source is None:
            metadata_source = source

    if assembler.page_count == 0:
        raise EmptySelection("None of the merge sources contributed any pages")

    if document_info:
        assembler.set_info(_info_from_mapping(document_info))
    elif copy_metadata and metadata_source is not None:
        assembler.copy_info_from(metadata_source)

    graph = assembler.build()
    contributed = len(sources) - len(skipped)
    LOGGER.info("Merged %d page(s) from %d source(s)", assembler.page_count, contributed)
    return MergeResult(graph=graph, page_count=assembler.page_count, skipped=skipped)

"""Object model parser turning raw PDF bytes into a :class:`DocumentGraph`.

The parser reads the cross-reference chain backwards from the last
``startxref`` marker, honouring classic tables, cross-reference streams,
hybrid ``/XRefStm`` sections and ``/Prev`` links left by incremental updates.
Objects are not decoded up front: the resulting graph materialises each
indirect object on first access from the index built here.  Only the
structural streams (cross-reference and object streams) are ever decoded;
every other stream keeps its raw bytes.

When the cross-reference data is unusable the parser falls back to scanning
the file for ``N G obj`` headers, which is how most readers cope with files
that were truncated or edited by hand.
"""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any

from .exceptions import ParseError, StructureError
from .filters import decode_stream
from .lexer import WHITESPACE, read_int, read_keyword, read_object_header, read_value, skip_ws
from .objects import DocumentGraph, IndirectObject, PdfArray, PdfDict, PdfRef, PdfStream, is_type
from .utils import get_logger

__all__ = ["XrefEntry", "PDFParser", "parse"]

LOGGER = get_logger("pdfsplitmerge.parser")

_HEADER_WINDOW = 1024
_VERSION = re.compile(rb"%PDF-(\d+\.\d+)")
_XREF_ENTRY = re.compile(rb"[\x00\t\n\x0c\r ]*(\d+)[ ]+(\d+)[ ]+([nf])")
_OBJECT_SCAN = re.compile(rb"(?<![0-9])(\d+)[\x00\t\n\x0c\r ]+(\d+)[\x00\t\n\x0c\r ]+obj(?![A-Za-z])")
# Keys that describe a cross-reference section rather than the document.
_SECTION_KEYS = {"/Prev", "/XRefStm", "/Type", "/W", "/Index", "/Length", "/Filter", "/DecodeParms", "/DL"}


@dataclass(slots=True)
class XrefEntry:
    """Location of one object: a byte offset or a slot in an object stream."""

    offset: int | None = None
    generation: int = 0
    container: int | None = None
    index: int = 0
    free: bool = False


def _search_object_offset(data: bytes, number: int, generation: int) -> int | None:
    """Best-effort search for the last ``number generation obj`` header."""

    pattern = re.compile(
        rb"(?<![0-9])%d[\x00\t\n\x0c\r ]+%d[\x00\t\n\x0c\r ]+obj(?![A-Za-z])" % (number, generation)
    )
    offset = None
    for match in pattern.finditer(data):
        offset = match.start()
    return offset


def _as_int(value: Any) -> int | None:
    if isinstance(value, bool) or not isinstance(value, int):
        return None
    return value


class PDFParser:
    """Build a lazily loaded :class:`DocumentGraph` from ``data``."""

    def __init__(self, data: bytes) -> None:
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise ParseError(f"Expected PDF bytes, got {type(data).__name__}")
        self.data = bytes(data)
        self.entries: dict[int, XrefEntry] = {}
        self.trailer = PdfDict()
        self.version = "1.4"
        self._structural: set[int] = set()
        self._object_streams: dict[int, tuple[bytes, int, list[tuple[int, int]]]] = {}
        self._loading: set[int] = set()
        self._recovered = False

    # -- Entry point ---------------------------------------------------------

    def parse(self) -> DocumentGraph:
        self.version = self._detect_version()
        try:
            startxref = self._locate_startxref()
            self._read_cross_reference_chain(startxref)
        except ParseError as exc:
            LOGGER.warning("Cross-reference data unreadable (%s); scanning for objects", exc)
            self._recover()

        graph = self._build_graph()
        try:
            self._validate_root(graph)
        except ParseError as exc:
            if self._recovered:
                raise
            LOGGER.warning("Document root unreachable via cross-reference (%s); scanning for objects", exc)
            self._recover()
            graph = self._build_graph()
            self._validate_root(graph)

        LOGGER.debug("Parsed PDF %s with %d indexed object(s)", self.version, len(graph))
        return graph

    def _build_graph(self) -> DocumentGraph:
        if "/Encrypt" in self.trailer:
            raise ParseError("Encrypted documents are not supported")
        self._structural.update(
            entry.container for entry in self.entries.values() if entry.container is not None
        )
        numbers = {
            number
            for number, entry in self.entries.items()
            if not entry.free and number not in self._structural and number > 0
        }
        graph = DocumentGraph(version=self.version, trailer=PdfDict(self.trailer))
        graph.attach_loader(self._load, numbers)
        return graph

    @staticmethod
    def _validate_root(graph: DocumentGraph) -> None:
        root = graph.trailer.get("/Root")
        if not isinstance(root, PdfRef):
            raise ParseError("Trailer has no /Root reference")
        try:
            catalog = graph.resolve(root)
            pages = graph.resolve(catalog.get("/Pages")) if isinstance(catalog, PdfDict) else None
        except StructureError as exc:
            raise ParseError(exc.reason) from exc
        if not isinstance(catalog, PdfDict):
            raise ParseError(f"Root object {root} is missing or not a dictionary")
        if not isinstance(pages, PdfDict):
            raise ParseError("Document catalog has no /Pages dictionary")

    # -- Header and trailer --------------------------------------------------

    def _detect_version(self) -> str:
        header = self.data.find(b"%PDF-", 0, _HEADER_WINDOW)
        if header == -1:
            raise ParseError("Missing %PDF- header")
        match = _VERSION.match(self.data, header)
        return match.group(1).decode("ascii") if match else "1.4"

    def _locate_startxref(self) -> int:
        marker = b"startxref"
        index = self.data.rfind(marker)
        if index == -1:
            raise ParseError("Unable to locate startxref marker")
        try:
            offset, _ = read_int(self.data, index + len(marker))
        except ParseError as exc:
            raise ParseError("startxref offset not found", offset=index) from exc
        return offset

    def _read_cross_reference_chain(self, startxref: int) -> None:
        visited: set[int] = set()
        trailers: list[PdfDict] = []
        next_offset: int | None = startxref

        while next_offset is not None and next_offset not in visited:
            visited.add(next_offset)
            if not 0 <= next_offset < len(self.data):
                raise ParseError("Cross-reference offset out of range", offset=next_offset)
            position = skip_ws(self.data, next_offset)
            if self.data.startswith(b"xref", position):
                section, trailer = self._read_xref_table(position)
                hybrid = _as_int(trailer.get("/XRefStm"))
                if hybrid is not None and hybrid not in visited:
                    visited.add(hybrid)
                    hidden, _ = self._read_xref_stream(hybrid)
                    # Entries hidden from pre-1.5 readers live in the stream.
                    section.update(hidden)
            else:
                section, trailer = self._read_xref_stream(position)

            for number, entry in section.items():
                # Walking backwards: the newest definition is seen first.
                self.entries.setdefault(number, entry)
            trailers.append(trailer)
            next_offset = _as_int(trailer.get("/Prev"))

        merged = PdfDict()
        for trailer in trailers:
            for key, value in trailer.items():
                if key not in _SECTION_KEYS:
                    merged.setdefault(key, value)
        self.trailer = merged

    def _read_xref_table(self, start: int) -> tuple[dict[int, XrefEntry], PdfDict]:
        data = self.data
        section: dict[int, XrefEntry] = {}
        index = start + len(b"xref")

        while True:
            keyword, after = read_keyword(data, index)
            if keyword == b"trailer":
                trailer, _ = read_value(data, after)
                if not isinstance(trailer, PdfDict):
                    raise ParseError("Trailer is not a dictionary", offset=after)
                return section, trailer
            first, index = read_int(data, index)
            count, index = read_int(data, index)
            for number in range(first, first + count):
                match = _XREF_ENTRY.match(data, index)
                if not match:
                    raise ParseError("Malformed cross-reference entry", offset=index)
                offset, generation, kind = match.groups()
                if kind == b"n":
                    section[number] = XrefEntry(offset=int(offset), generation=int(generation))
                else:
                    section[number] = XrefEntry(generation=int(generation), free=True)
                index = match.end()

    def _read_xref_stream(self, start: int) -> tuple[dict[int, XrefEntry], PdfDict]:
        header = read_object_header(self.data, start)
        if header is None:
            raise ParseError("Expected cross-reference table or stream", offset=start)
        number, _, body = header
        stream = self._read_object_body(body, number)
        if not isinstance(stream, PdfStream) or not is_type(stream, "/XRef"):
            raise ParseError("Cross-reference stream is not a /XRef stream", offset=start)
        self._structural.add(number)

        dictionary = stream.dictionary
        decoded = decode_stream(stream)
        widths = dictionary.get("/W")
        if not isinstance(widths, PdfArray) or len(widths) != 3 or any(_as_int(w) is None for w in widths):
            raise ParseError("Cross-reference stream has an invalid /W array", offset=start)
        entry_width = sum(widths)
        if entry_width <= 0:
            raise ParseError("Cross-reference stream has zero-width entries", offset=start)

        size = _as_int(dictionary.get("/Size")) or 0
        index_obj = dictionary.get("/Index")
        if isinstance(index_obj, PdfArray) and len(index_obj) % 2 == 0:
            subsections = [(index_obj[i], index_obj[i + 1]) for i in range(0, len(index_obj), 2)]
        else:
            subsections = [(0, size)]

        section: dict[int, XrefEntry] = {}
        position = 0
        w1, w2, w3 = widths
        for first, count in subsections:
            for number in range(first, first + count):
                end = position + entry_width
                if end > len(decoded):
                    break
                row = decoded[position:end]
                position = end
                kind = int.from_bytes(row[:w1], "big") if w1 else 1
                field2 = int.from_bytes(row[w1 : w1 + w2], "big")
                field3 = int.from_bytes(row[w1 + w2 :], "big")
                if kind == 1:
                    section[number] = XrefEntry(offset=field2, generation=field3)
                elif kind == 2:
                    section[number] = XrefEntry(container=field2, index=field3)
                elif kind == 0:
                    section[number] = XrefEntry(generation=field3, free=True)
        return section, dictionary

    # -- Object loading ------------------------------------------------------

    def _load(self, number: int) -> IndirectObject | None:
        entry = self.entries.get(number)
        if entry is None or entry.free:
            return None
        if entry.container is not None:
            return IndirectObject(number, 0, self._object_stream_member(entry, number))
        if number in self._loading:
            raise StructureError(f"Object {number} refers to itself while loading")

        self._loading.add(number)
        try:
            offset = self._locate(number, entry)
            header = read_object_header(self.data, offset)
            if header is None:
                raise ParseError(f"Object {number} has no object header", offset=offset)
            value = self._read_object_body(header[2], number)
        finally:
            self._loading.discard(number)
        return IndirectObject(number, entry.generation, value)

    def _locate(self, number: int, entry: XrefEntry) -> int:
        if entry.offset is not None and 0 <= entry.offset < len(self.data):
            header = read_object_header(self.data, entry.offset)
            if header is not None and header[0] == number:
                return entry.offset
        offset = _search_object_offset(self.data, number, entry.generation)
        if offset is None:
            raise ParseError(f"Object {number} {entry.generation} not found")
        LOGGER.debug("Object %d found at %d instead of indexed offset %s", number, offset, entry.offset)
        return offset

    def _resolve(self, value: Any) -> Any:
        seen: set[int] = set()
        while isinstance(value, PdfRef) and value.number not in seen:
            seen.add(value.number)
            loaded = self._load(value.number)
            value = loaded.value if loaded is not None else None
        return None if isinstance(value, PdfRef) else value

    def _read_object_body(self, index: int, number: int) -> Any:
        data = self.data
        value, index = read_value(data, index)
        keyword, after = read_keyword(data, index)
        if keyword != b"stream" or not isinstance(value, PdfDict):
            return value

        start = after
        if data.startswith(b"\r\n", start):
            start += 2
        elif data[start : start + 1] in (b"\n", b"\r"):
            start += 1

        end: int | None = None
        length = _as_int(self._resolve_length(value.get("/Length")))
        if length is not None and 0 <= length and start + length <= len(data):
            if data.startswith(b"endstream", skip_ws(data, start + length)):
                end = start + length
        if end is None:
            found = data.find(b"endstream", start)
            if found == -1:
                raise ParseError(f"Unterminated stream in object {number}", offset=start)
            end = found
            if data[end - 2 : end] == b"\r\n" and end - 2 >= start:
                end -= 2
            elif end > start and data[end - 1] in b"\r\n":
                end -= 1
            LOGGER.debug("Stream length of object %d recovered by scanning for endstream", number)
        return PdfStream(value, data[start:end])

    def _resolve_length(self, value: Any) -> Any:
        if isinstance(value, PdfRef):
            if value.number in self._loading:
                return None
            try:
                return self._resolve(value)
            except (ParseError, StructureError):
                return None
        return value

    def _object_stream_member(self, entry: XrefEntry, number: int) -> Any:
        container = entry.container
        if container is None:
            raise ParseError(f"Object {number} is not stored in an object stream")
        cached = self._object_streams.get(container)
        if cached is None:
            stream = self._resolve(PdfRef(container, 0))
            if not isinstance(stream, PdfStream) or not is_type(stream, "/ObjStm"):
                raise ParseError(f"Object {container} is not an object stream")
            decoded = decode_stream(stream, self._resolve)
            count = _as_int(self._resolve(stream.dictionary.get("/N"))) or 0
            first = _as_int(self._resolve(stream.dictionary.get("/First"))) or 0
            pairs: list[tuple[int, int]] = []
            position = 0
            for _ in range(count):
                member, position = read_int(decoded, position)
                offset, position = read_int(decoded, position)
                pairs.append((member, offset))
            cached = (decoded, first, pairs)
            self._object_streams[container] = cached

        decoded, first, pairs = cached
        if entry.index < len(pairs) and pairs[entry.index][0] == number:
            offset = pairs[entry.index][1]
        else:
            offsets = [offset for member, offset in pairs if member == number]
            if not offsets:
                raise ParseError(f"Object {number} missing from object stream {container}")
            offset = offsets[0]
        value, _ = read_value(decoded, first + offset)
        return value

    # -- Recovery ------------------------------------------------------------

    def _recover(self) -> None:
        """Rebuild the object index by scanning the file for object headers."""

        self._recovered = True
        self.entries = {}
        self._structural = set()
        self._object_streams = {}
        for match in _OBJECT_SCAN.finditer(self.data):
            number, generation = int(match.group(1)), int(match.group(2))
            self.entries[number] = XrefEntry(offset=match.start(), generation=generation)

        direct = list(self.entries.items())
        for number, entry in direct:
            window = self.data[entry.offset : entry.offset + 256]
            if b"/ObjStm" not in window and b"/XRef" not in window:
                continue
            try:
                loaded = self._load(number)
            except (ParseError, StructureError):
                continue
            if loaded is None:
                continue
            if is_type(loaded.value, "/XRef"):
                self._structural.add(number)
            elif is_type(loaded.value, "/ObjStm"):
                self._index_object_stream(number, loaded.value)

        self.trailer = self._recover_trailer()
        LOGGER.warning("Recovered %d object(s) by scanning", len(self.entries))

    def _index_object_stream(self, container: int, stream: PdfStream) -> None:
        try:
            decoded = decode_stream(stream, self._resolve)
            count = _as_int(stream.dictionary.get("/N")) or 0
            position = 0
            for slot in range(count):
                member, position = read_int(decoded, position)
                _, position = read_int(decoded, position)
                self.entries.setdefault(member, XrefEntry(container=container, index=slot))
        except ParseError as exc:
            LOGGER.warning("Skipping unreadable object stream %d: %s", container, exc)

    def _recover_trailer(self) -> PdfDict:
        data = self.data
        position = len(data)
        while True:
            position = data.rfind(b"trailer", 0, position)
            if position == -1:
                break
            try:
                trailer, _ = read_value(data, position + len(b"trailer"))
            except ParseError:
                continue
            if isinstance(trailer, PdfDict) and isinstance(trailer.get("/Root"), PdfRef):
                return PdfDict((k, v) for k, v in trailer.items() if k not in _SECTION_KEYS)

        for number in sorted(self._structural, reverse=True):
            loaded = self._load(number)
            if loaded is not None and isinstance(loaded.value, PdfStream):
                candidate = loaded.value.dictionary
                if isinstance(candidate.get("/Root"), PdfRef):
                    return PdfDict((k, v) for k, v in candidate.items() if k not in _SECTION_KEYS)

        catalog: PdfRef | None = None
        for number, entry in sorted(self.entries.items()):
            if entry.free or number in self._structural:
                continue
            try:
                loaded = self._load(number)
            except (ParseError, StructureError):
                continue
            if loaded is not None and is_type(loaded.value, "/Catalog"):
                catalog = loaded.ref
        if catalog is None:
            raise ParseError("No trailer or document catalog found")
        return PdfDict({"/Root": catalog})


def parse(data: bytes) -> DocumentGraph:
    """Parse ``data`` into a :class:`DocumentGraph` or raise :class:`ParseError`."""

    return PDFParser(data).parse()

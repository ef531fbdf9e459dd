"""Serialize a :class:`DocumentGraph` into PDF bytes."""

from __future__ import annotations

from typing import Any

from .exceptions import StructureError
from .objects import DocumentGraph, PdfArray, PdfDict, PdfName, PdfRef, PdfStream, PdfString
from .utils import get_logger

__all__ = ["encode_value", "serialize"]

LOGGER = get_logger("pdfsplitmerge.serializer")

_BINARY_MARKER = b"%\xe2\xe3\xcf\xd3\n"
_REGULAR_NAME_BYTES = frozenset(
    byte for byte in range(0x21, 0x7F) if byte not in b"()<>[]{}/%#"
)
_TRAILER_KEYS = ("/Info", "/ID")


def _encode_name(name: str) -> bytes:
    raw = name[1:].encode("latin-1", "replace") if name.startswith("/") else name.encode("latin-1", "replace")
    encoded = bytearray(b"/")
    for byte in raw:
        if byte in _REGULAR_NAME_BYTES:
            encoded.append(byte)
        else:
            encoded += b"#%02X" % byte
    return bytes(encoded)


def _encode_string(value: PdfString) -> bytes:
    if value.hex:
        return b"<" + value.value.hex().upper().encode("ascii") + b">"
    escaped = (
        value.value.replace(b"\\", b"\\\\")
        .replace(b"(", b"\\(")
        .replace(b")", b"\\)")
        .replace(b"\r", b"\\r")
    )
    return b"(" + escaped + b")"


def _encode_number(value: float) -> bytes:
    if value != value or value in (float("inf"), float("-inf")):
        raise StructureError(f"Cannot serialize non-finite number {value!r}")
    if value == int(value):
        return str(int(value)).encode("ascii")
    text = repr(value)
    if "e" in text or "E" in text:
        text = f"{value:.10f}".rstrip("0").rstrip(".")
    return text.encode("ascii")


def encode_value(value: Any) -> bytes:
    """Encode a direct value; streams are only valid as indirect objects."""

    if value is None:
        return b"null"
    if isinstance(value, bool):
        return b"true" if value else b"false"
    if isinstance(value, int):
        return str(value).encode("ascii")
    if isinstance(value, float):
        return _encode_number(value)
    if isinstance(value, PdfName):
        return _encode_name(value)
    if isinstance(value, PdfString):
        return _encode_string(value)
    if isinstance(value, PdfRef):
        return f"{value.number} {value.generation} R".encode("ascii")
    if isinstance(value, PdfArray):
        return b"[" + b" ".join(encode_value(item) for item in value) + b"]"
    if isinstance(value, PdfDict):
        parts = [_encode_name(key) + b" " + encode_value(item) for key, item in value.items()]
        return b"<<" + b" ".join(parts) + b">>"
    if isinstance(value, PdfStream):
        raise StructureError("Stream objects must be indirect")
    raise StructureError(f"Cannot serialize value of type {type(value).__name__}")


def _encode_indirect(value: Any) -> bytes:
    if isinstance(value, PdfStream):
        dictionary = PdfDict(value.dictionary)
        dictionary[PdfName("/Length")] = len(value.data)
        return encode_value(dictionary) + b"\nstream\n" + value.data + b"\nendstream"
    return encode_value(value)


def _xref_subsections(numbers: list[int]) -> list[list[int]]:
    sections: list[list[int]] = []
    for number in numbers:
        if sections and sections[-1][-1] + 1 == number:
            sections[-1].append(number)
        else:
            sections.append([number])
    return sections


def serialize(graph: DocumentGraph) -> bytes:
    """Return ``graph`` as PDF bytes.

    Objects are written in ascending number order followed by a classic
    cross-reference table whose offsets are the exact positions of each
    ``N G obj`` header, and a trailer naming the root.
    """

    root = graph.root_ref
    if root is None:
        raise StructureError("Graph has no /Root reference to serialize")

    output = bytearray()
    output += f"%PDF-{graph.version}\n".encode("ascii")
    output += _BINARY_MARKER

    offsets: dict[int, tuple[int, int]] = {}
    for entry in graph.iter_objects():
        offsets[entry.number] = (len(output), entry.generation)
        output += f"{entry.number} {entry.generation} obj\n".encode("ascii")
        output += _encode_indirect(entry.value)
        output += b"\nendobj\n"

    if root.number not in offsets:
        raise StructureError(f"Root object {root} is not part of the graph")

    size = max(offsets, default=0) + 1
    xref_offset = len(output)
    output += b"xref\n"
    for section in _xref_subsections([0] + sorted(offsets)):
        output += f"{section[0]} {len(section)}\n".encode("ascii")
        for number in section:
            if number == 0:
                output += b"0000000000 65535 f\r\n"
            else:
                offset, generation = offsets[number]
                output += f"{offset:010d} {generation:05d} n\r\n".encode("ascii")

    trailer = PdfDict({PdfName("/Size"): size, PdfName("/Root"): root})
    for key in _TRAILER_KEYS:
        value = graph.trailer.get(key)
        if value is None:
            continue
        if isinstance(value, PdfRef) and value.number not in offsets:
            LOGGER.debug("Dropping trailer %s pointing at missing object %s", key, value)
            continue
        trailer[PdfName(key)] = value
    output += b"trailer\n" + encode_value(trailer) + b"\n"
    output += f"startxref\n{xref_offset}\n%%EOF\n".encode("ascii")

    LOGGER.debug("Serialized %d object(s) into %d bytes", len(offsets), len(output))
    return bytes(output)

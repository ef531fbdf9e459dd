from __future__ import annotations

from io import BytesIO
from pathlib import Path
from typing import Callable
import sys
import zlib

import pytest
from pypdf import PdfReader, PdfWriter
from pypdf.generic import DecodedStreamObject, DictionaryObject, NameObject

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


def page_marker(label: str, number: int) -> bytes:
    return f"({label} page {number})".encode("ascii")


def _font(base_font: str) -> DictionaryObject:
    return DictionaryObject(
        {
            NameObject("/Type"): NameObject("/Font"),
            NameObject("/Subtype"): NameObject("/Type1"),
            NameObject("/BaseFont"): NameObject(base_font),
        }
    )


def make_pdf_bytes(
    page_count: int,
    *,
    label: str = "doc",
    title: str | None = None,
    font: str = "/Helvetica",
    size: tuple[int, int] = (200, 200),
) -> bytes:
    """Build a PDF whose pages share one font and carry distinct content."""

    writer = PdfWriter()
    font_ref = writer._add_object(_font(font))
    for number in range(1, page_count + 1):
        page = writer.add_blank_page(width=size[0], height=size[1])
        stream = DecodedStreamObject()
        stream.set_data(b"BT /F1 12 Tf 20 100 Td " + page_marker(label, number) + b" Tj ET")
        page[NameObject("/Contents")] = writer._add_object(stream)
        page[NameObject("/Resources")] = DictionaryObject(
            {NameObject("/Font"): DictionaryObject({NameObject("/F1"): font_ref})}
        )
    if title is not None:
        writer.add_metadata({"/Title": title})
    buffer = BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def stream_object(data: bytes, extra: bytes = b"") -> bytes:
    return b"<< /Length %d%s >>\nstream\n" % (len(data), extra) + data + b"\nendstream"


def build_raw_pdf(objects: dict[int, bytes], *, root: int = 1, version: str = "1.4") -> bytes:
    """Assemble ``objects`` into a PDF with a classic cross-reference table."""

    output = bytearray(b"%PDF-" + version.encode("ascii") + b"\n")
    offsets: dict[int, int] = {}
    for number in sorted(objects):
        offsets[number] = len(output)
        output += b"%d 0 obj\n" % number + objects[number] + b"\nendobj\n"
    xref = len(output)
    size = max(objects) + 1
    output += b"xref\n0 %d\n0000000000 65535 f \n" % size
    for number in range(1, size):
        if number in offsets:
            output += b"%010d 00000 n \n" % offsets[number]
        else:
            output += b"0000000000 00000 f \n"
    output += b"trailer\n<< /Size %d /Root %d 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, root, xref)
    return bytes(output)


def append_update(base: bytes, objects: dict[int, bytes], *, root: int = 1) -> bytes:
    """Append an incremental update redefining ``objects`` on top of ``base``."""

    previous = int(base.rsplit(b"startxref", 1)[1].split()[0])
    output = bytearray(base)
    offsets: dict[int, int] = {}
    for number in sorted(objects):
        offsets[number] = len(output)
        output += b"%d 0 obj\n" % number + objects[number] + b"\nendobj\n"
    xref = len(output)
    output += b"xref\n"
    for number in sorted(offsets):
        output += b"%d 1\n%010d 00000 n \n" % (number, offsets[number])
    size = max(offsets) + 1
    output += (
        b"trailer\n<< /Size %d /Root %d 0 R /Prev %d >>\nstartxref\n%d\n%%%%EOF\n"
        % (size, root, previous, xref)
    )
    return bytes(output)


def nested_tree_objects() -> dict[int, bytes]:
    """Three pages under a two-level tree with inherited attributes.

    Document order is objects 5, 6, 4 with contents ``first``, ``second`` and
    ``third``; pages 5 and 6 inherit their media box and resources from the
    root and their rotation from the intermediate node.
    """

    return {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        2: (
            b"<< /Type /Pages /Kids [3 0 R 4 0 R] /Count 3 /MediaBox [0 0 300 400]"
            b" /Resources << /Font << /F1 7 0 R >> >> >>"
        ),
        3: b"<< /Type /Pages /Parent 2 0 R /Kids [5 0 R 6 0 R] /Count 2 /Rotate 90 >>",
        4: b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 100 100] /Contents 10 0 R >>",
        5: b"<< /Type /Page /Parent 3 0 R /Contents 8 0 R >>",
        6: b"<< /Type /Page /Parent 3 0 R /Contents 9 0 R >>",
        7: b"<< /Type /Font /Subtype /Type1 /BaseFont /Courier >>",
        8: stream_object(b"BT /F1 10 Tf (first) Tj ET"),
        9: stream_object(b"BT /F1 10 Tf (second) Tj ET"),
        10: stream_object(b"BT /F1 10 Tf (third) Tj ET"),
    }


def build_object_stream_pdf() -> bytes:
    """A PDF 1.5 file whose catalog, page tree and page live in an object stream."""

    members = [
        (1, b"<< /Type /Catalog /Pages 2 0 R >>"),
        (2, b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>"),
        (3, b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 200 200] /Contents 5 0 R >>"),
    ]
    header = b""
    body = b""
    for number, source in members:
        header += b"%d %d " % (number, len(body))
        body += source + b" "
    payload = zlib.compress(header + body)

    output = bytearray(b"%PDF-1.5\n")
    offsets: dict[int, int] = {}
    offsets[4] = len(output)
    output += (
        b"4 0 obj\n<< /Type /ObjStm /N 3 /First %d /Filter /FlateDecode /Length %d >>\nstream\n"
        % (len(header), len(payload))
        + payload
        + b"\nendstream\nendobj\n"
    )
    offsets[5] = len(output)
    output += b"5 0 obj\n" + stream_object(b"BT (compressed) Tj ET") + b"\nendobj\n"

    xref = len(output)
    rows = [(0, 0, 65535)]
    rows += [(2, 4, slot) for slot in range(len(members))]
    rows += [(1, offsets[4], 0), (1, offsets[5], 0), (1, xref, 0)]
    table = zlib.compress(
        b"".join(bytes([kind]) + a.to_bytes(4, "big") + b.to_bytes(2, "big") for kind, a, b in rows)
    )
    output += (
        b"6 0 obj\n<< /Type /XRef /Size 7 /W [1 4 2] /Root 1 0 R /Filter /FlateDecode /Length %d >>"
        b"\nstream\n" % len(table)
        + table
        + b"\nendstream\nendobj\n"
    )
    output += b"startxref\n%d\n%%%%EOF\n" % xref
    return bytes(output)


def reader_for(data: bytes) -> PdfReader:
    return PdfReader(BytesIO(data))


def pypdf_page_content(data: bytes, index: int) -> bytes:
    return reader_for(data).pages[index].get_contents().get_data()


@pytest.fixture()
def five_page_pdf() -> bytes:
    return make_pdf_bytes(5, label="five", title="Five Pages")


@pytest.fixture()
def pdf_factory() -> Callable[..., bytes]:
    return make_pdf_bytes


@pytest.fixture()
def nested_pdf() -> bytes:
    return build_raw_pdf(nested_tree_objects())


@pytest.fixture()
def object_stream_pdf() -> bytes:
    return build_object_stream_pdf()


@pytest.fixture()
def pdf_file_factory(tmp_path: Path) -> Callable[..., Path]:
    def _create(filename: str, page_count: int = 1, **kwargs) -> Path:
        path = tmp_path / filename
        path.write_bytes(make_pdf_bytes(page_count, **kwargs))
        return path

    return _create

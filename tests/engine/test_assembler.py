from __future__ import annotations

import pytest

from conftest import build_raw_pdf, make_pdf_bytes, nested_tree_objects
from pdfsplitmerge.core.assembler import (
    DEFAULT_MEDIA_BOX,
    DocumentAssembler,
    extract_pages,
    merge_documents,
    select_pages,
)
from pdfsplitmerge.core.exceptions import EmptySelection, PageRangeError
from pdfsplitmerge.core.objects import PdfDict, PdfRef, is_type
from pdfsplitmerge.core.pages import enumerate_pages
from pdfsplitmerge.core.parser import parse


def _with_links() -> bytes:
    objects = nested_tree_objects()
    objects[5] = b"<< /Type /Page /Parent 3 0 R /Contents 8 0 R /Annots [11 0 R] >>"
    objects[11] = b"<< /Type /Annot /Subtype /Link /Rect [0 0 10 10] /Dest [6 0 R /Fit] >>"
    return build_raw_pdf(objects)


def test_select_pages_keeps_order_and_duplicates() -> None:
    assert select_pages([3, 1, 3], 5) == [3, 1, 3]


def test_select_pages_drops_invalid_entries() -> None:
    assert select_pages([0, 3, 99, -1, True, "2"], 5) == [3]


def test_select_pages_strict_mode() -> None:
    with pytest.raises(PageRangeError) as excinfo:
        select_pages([0, 3, 99], 5, strict=True)
    assert excinfo.value.invalid == [0, 99]
    assert excinfo.value.total_pages == 5


def test_extract_materialises_inherited_attributes(nested_pdf: bytes) -> None:
    graph = extract_pages(parse(nested_pdf), [2])
    (page,) = enumerate_pages(graph)
    assert page.node["/MediaBox"] == [0, 0, 300, 400]
    assert page.node["/Rotate"] == 90
    font = graph.resolve(page.node["/Resources"]["/Font"]["/F1"])
    assert font["/BaseFont"] == "/Courier"
    assert page.content() == b"BT /F1 10 Tf (second) Tj ET"


def test_output_page_tree_is_flat(nested_pdf: bytes) -> None:
    graph = extract_pages(parse(nested_pdf), [3, 1])
    pages_root = graph.resolve(graph.catalog["/Pages"])
    assert pages_root["/Count"] == 2
    for kid in pages_root["/Kids"]:
        leaf = graph.resolve(kid)
        assert is_type(leaf, "/Page")
        assert leaf["/Parent"] == graph.catalog["/Pages"]


def test_missing_media_box_defaults_to_letter() -> None:
    objects = nested_tree_objects()
    objects[2] = b"<< /Type /Pages /Kids [3 0 R 4 0 R] /Count 3 >>"
    graph = extract_pages(parse(build_raw_pdf(objects)), [1])
    (page,) = enumerate_pages(graph)
    assert page.node["/MediaBox"] == list(DEFAULT_MEDIA_BOX)
    assert page.node["/Resources"] == {}


def test_links_to_unselected_pages_become_null() -> None:
    graph = extract_pages(parse(_with_links()), [1])
    (page,) = enumerate_pages(graph)
    annotation = graph.resolve(page.node["/Annots"][0])
    assert annotation["/Dest"][0] is None
    # Nothing but the single leaf is a page object.
    assert sum(1 for entry in graph.iter_objects() if is_type(entry.value, "/Page")) == 1


def test_links_to_selected_pages_are_rewired() -> None:
    graph = extract_pages(parse(_with_links()), [1, 2])
    first, second = enumerate_pages(graph)
    annotation = graph.resolve(first.node["/Annots"][0])
    assert annotation["/Dest"][0] == second.ref


def test_repeated_page_gets_its_own_leaf(nested_pdf: bytes) -> None:
    graph = extract_pages(parse(nested_pdf), [1, 1])
    first, second = enumerate_pages(graph)
    assert first.ref != second.ref
    assert first.node["/Contents"] == second.node["/Contents"]


def test_extract_empty_selection(nested_pdf: bytes) -> None:
    with pytest.raises(EmptySelection):
        extract_pages(parse(nested_pdf), [0, 99])


def test_document_info_is_copied_or_replaced() -> None:
    source = parse(make_pdf_bytes(2, title="Original"))
    copied = extract_pages(source, [1])
    info = copied.resolve(copied.trailer["/Info"])
    assert info["/Title"].text() == "Original"

    replaced = extract_pages(source, [1], document_info={"title": "Replaced", "author": "Tests"})
    info = replaced.resolve(replaced.trailer["/Info"])
    assert info["/Title"].text() == "Replaced"
    assert info["/Author"].text() == "Tests"

    bare = extract_pages(source, [1], copy_metadata=False)
    assert "/Info" not in bare.trailer


def test_merge_skips_missing_and_broken_sources() -> None:
    cyclic = parse(
        build_raw_pdf(
            {
                1: b"<< /Type /Catalog /Pages 2 0 R >>",
                2: b"<< /Type /Pages /Kids [2 0 R] /Count 1 >>",
            }
        )
    )
    good = parse(make_pdf_bytes(2, label="good"))
    result = merge_documents([None, cyclic, good])
    assert result.page_count == 2
    assert [item.index for item in result.skipped] == [0, 1]
    assert "cycle" in result.skipped[1].reason


def test_merge_with_no_pages_fails() -> None:
    with pytest.raises(EmptySelection):
        merge_documents([None, None])


def test_merge_bookmarks_point_at_first_pages() -> None:
    first = parse(make_pdf_bytes(2, label="a"))
    second = parse(make_pdf_bytes(3, label="b"))
    result = merge_documents([first, second], bookmarks=["Alpha"])
    graph = result.graph
    outlines = graph.resolve(graph.catalog["/Outlines"])
    assert outlines["/Count"] == 2
    item = graph.resolve(outlines["/First"])
    last = graph.resolve(outlines["/Last"])
    assert item["/Title"].text() == "Alpha"
    assert last["/Title"].text() == "Document 2"
    kids = graph.resolve(graph.catalog["/Pages"])["/Kids"]
    assert item["/Dest"][0] == kids[0]
    assert last["/Dest"][0] == kids[2]
    assert graph.resolve(item["/Next"]) is last


def test_version_is_highest_of_sources(nested_pdf: bytes, object_stream_pdf: bytes) -> None:
    result = merge_documents([parse(nested_pdf), parse(object_stream_pdf)])
    assert result.graph.version == "1.5"


def test_assembler_builds_once(nested_pdf: bytes) -> None:
    source = parse(nested_pdf)
    assembler = DocumentAssembler()
    assembler.add_pages(source, enumerate_pages(source)[:1])
    graph = assembler.build()
    assert isinstance(graph.catalog, PdfDict)
    assert graph.root_ref == PdfRef(2)
    with pytest.raises(RuntimeError):
        assembler.build()

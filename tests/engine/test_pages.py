from __future__ import annotations

import pytest

from conftest import build_raw_pdf, nested_tree_objects
from pdfsplitmerge.core.exceptions import StructureError
from pdfsplitmerge.core.objects import PdfDict, PdfRef
from pdfsplitmerge.core.pages import PageRef, enumerate_pages
from pdfsplitmerge.core.parser import parse


def test_depth_first_order(nested_pdf: bytes) -> None:
    pages = enumerate_pages(parse(nested_pdf))
    assert [page.ref for page in pages] == [PdfRef(5), PdfRef(6), PdfRef(4)]
    assert [page.number for page in pages] == [1, 2, 3]


def test_inherited_attributes_come_from_nearest_ancestor(nested_pdf: bytes) -> None:
    first, _, third = enumerate_pages(parse(nested_pdf))
    assert first.attribute("/MediaBox") == [0, 0, 300, 400]
    assert first.attribute("/Rotate") == 90
    assert first.attribute("/Resources")["/Font"]["/F1"] == PdfRef(7)
    assert third.attribute("/MediaBox") == [0, 0, 100, 100]
    assert third.attribute("/Rotate") is None


def test_content_is_raw_unless_decoded(nested_pdf: bytes) -> None:
    pages = enumerate_pages(parse(nested_pdf))
    assert pages[1].content() == b"BT /F1 10 Tf (second) Tj ET"
    assert pages[1].content(decode=True) == b"BT /F1 10 Tf (second) Tj ET"


def test_empty_page_tree() -> None:
    data = build_raw_pdf(
        {
            1: b"<< /Type /Catalog /Pages 2 0 R >>",
            2: b"<< /Type /Pages /Kids [] /Count 0 >>",
        }
    )
    assert enumerate_pages(parse(data)) == []


def test_cycle_raises_structure_error() -> None:
    data = build_raw_pdf(
        {
            1: b"<< /Type /Catalog /Pages 2 0 R >>",
            2: b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
            3: b"<< /Type /Pages /Parent 2 0 R /Kids [2 0 R] /Count 1 >>",
        }
    )
    with pytest.raises(StructureError, match="cycle"):
        enumerate_pages(parse(data))


def test_shared_subtree_is_not_a_cycle() -> None:
    objects = nested_tree_objects()
    # The same intermediate node appears twice under the root.
    objects[2] = (
        b"<< /Type /Pages /Kids [3 0 R 3 0 R] /Count 4 /MediaBox [0 0 300 400] >>"
    )
    pages = enumerate_pages(parse(build_raw_pdf(objects)))
    assert [page.ref for page in pages] == [PdfRef(5), PdfRef(6), PdfRef(5), PdfRef(6)]


def test_missing_kid_is_ignored() -> None:
    objects = nested_tree_objects()
    objects[3] = b"<< /Type /Pages /Parent 2 0 R /Kids [5 0 R 42 0 R 6 0 R] /Count 2 >>"
    pages = enumerate_pages(parse(build_raw_pdf(objects)))
    assert len(pages) == 3


def test_leaf_without_type_is_a_page() -> None:
    objects = nested_tree_objects()
    objects[4] = b"<< /Parent 2 0 R /Contents 10 0 R >>"
    pages = enumerate_pages(parse(build_raw_pdf(objects)))
    assert pages[-1].ref == PdfRef(4)


def test_detached_page_has_no_content() -> None:
    page = PageRef(number=1, ref=None, node=PdfDict())
    with pytest.raises(ValueError):
        page.content()


def test_kids_without_type_make_an_intermediate_node() -> None:
    objects = nested_tree_objects()
    objects[3] = b"<< /Type (Pages) /Parent 2 0 R /Kids [5 0 R 6 0 R] /Count 2 >>"
    pages = enumerate_pages(parse(build_raw_pdf(objects)))
    assert [page.ref for page in pages] == [PdfRef(5), PdfRef(6), PdfRef(4)]

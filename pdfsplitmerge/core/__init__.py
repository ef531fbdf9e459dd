"""PDF document assembly engine: parse, enumerate, copy, assemble, serialize."""

from __future__ import annotations

from .assembler import DocumentAssembler, MergeResult, SkippedSource, extract_pages, merge_documents
from .copier import CopiedObjectMap, ResourceCopier, copy_object
from .exceptions import EmptySelection, PageRangeError, ParseError, PdfAssemblyError, StructureError
from .objects import (
    DocumentGraph,
    IndirectObject,
    PdfArray,
    PdfDict,
    PdfName,
    PdfRef,
    PdfStream,
    PdfString,
)
from .pages import PageRef, enumerate_pages
from .parser import PDFParser, parse
from .serializer import serialize

__all__ = [
    "DocumentAssembler",
    "MergeResult",
    "SkippedSource",
    "extract_pages",
    "merge_documents",
    "CopiedObjectMap",
    "ResourceCopier",
    "copy_object",
    "PdfAssemblyError",
    "ParseError",
    "StructureError",
    "EmptySelection",
    "PageRangeError",
    "DocumentGraph",
    "IndirectObject",
    "PdfArray",
    "PdfDict",
    "PdfName",
    "PdfRef",
    "PdfStream",
    "PdfString",
    "PageRef",
    "enumerate_pages",
    "PDFParser",
    "parse",
    "serialize",
]

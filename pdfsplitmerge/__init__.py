"""Top-level package for pdfsplitmerge.

The byte-level entry points parse PDF documents with the package's own
object-model parser, copy pages and the resources they reference into a new
document, and serialize the result.
"""

from __future__ import annotations

from .core.assembler import SkippedSource
from .core.exceptions import (
    EmptySelection,
    PageRangeError,
    ParseError,
    PdfAssemblyError,
    StructureError,
)
from .core.operations import (
    MergeReport,
    extract_pages,
    merge_documents,
    merge_documents_report,
    page_count,
)
from .options import AssemblyOptions, WorkspaceSettings

__all__ = [
    "AssemblyOptions",
    "WorkspaceSettings",
    "MergeReport",
    "SkippedSource",
    "page_count",
    "extract_pages",
    "merge_documents",
    "merge_documents_report",
    "PdfAssemblyError",
    "ParseError",
    "StructureError",
    "EmptySelection",
    "PageRangeError",
]

__version__ = "0.1.0"

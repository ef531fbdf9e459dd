"""Reference storage, record keeping and orchestration for uploaded PDFs."""

from __future__ import annotations

from .exceptions import RecordNotFoundError, WorkspaceError
from .records import FileRecord, RecordStore
from .service import MergeOutcome, WorkspaceService
from .storage import FileStorage

__all__ = [
    "FileRecord",
    "FileStorage",
    "MergeOutcome",
    "RecordNotFoundError",
    "RecordStore",
    "WorkspaceError",
    "WorkspaceService",
]

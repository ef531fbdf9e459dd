"""Errors raised by the upload workspace."""

from __future__ import annotations


class WorkspaceError(Exception):
    """Raised when a workspace operation cannot be completed."""


class RecordNotFoundError(WorkspaceError):
    """Raised when a file record id is unknown."""

    def __init__(self, record_id: str) -> None:
        self.record_id = record_id
        super().__init__(f"No file record with id {record_id!r}")

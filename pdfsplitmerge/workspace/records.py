"""Record store tracking uploaded and merged files."""

from __future__ import annotations

from datetime import datetime, timezone
import json
from pathlib import Path
from threading import Lock
from typing import Dict, Optional
import uuid

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import RecordNotFoundError, WorkspaceError


def _new_id() -> str:
    return uuid.uuid4().hex


def _now() -> datetime:
    return datetime.now(timezone.utc)


class FileRecord(BaseModel):
    """An uploaded or generated PDF known to the workspace."""

    id: str = Field(default_factory=_new_id)
    file_name: str
    file_path: str
    upload_date: datetime = Field(default_factory=_now)
    is_merged: bool = False

    model_config = ConfigDict(frozen=True)


class RecordStore:
    """Thread-safe record repository persisted as a JSON file.

    Passing ``path=None`` keeps records in memory only.
    """

    def __init__(self, path: str | Path | None = None) -> None:
        self._path = Path(path) if path is not None else None
        self._records: Dict[str, FileRecord] = {}
        self._lock = Lock()
        if self._path is not None and self._path.exists():
            self._load(self._path)

    def _load(self, path: Path) -> None:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise WorkspaceError(f"Unable to read records from {path}: {exc}") from exc
        for item in payload:
            record = FileRecord.model_validate(item)
            self._records[record.id] = record

    def _save(self) -> None:
        if self._path is None:
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        payload = [record.model_dump(mode="json") for record in self._records.values()]
        self._path.write_text(json.dumps(payload, indent=2), encoding="utf-8")

    def create(self, file_name: str, file_path: str | Path, *, is_merged: bool = False) -> FileRecord:
        record = FileRecord(file_name=file_name, file_path=str(file_path), is_merged=is_merged)
        with self._lock:
            self._records[record.id] = record
            self._save()
        return record

    def get(self, record_id: str) -> FileRecord:
        record = self.find(record_id)
        if record is None:
            raise RecordNotFoundError(record_id)
        return record

    def find(self, record_id: str) -> Optional[FileRecord]:
        return self._records.get(record_id)

    def list_unmerged(self) -> list[FileRecord]:
        return [record for record in self._records.values() if not record.is_merged]

    def delete(self, record_id: str) -> Optional[FileRecord]:
        """Remove and return the record ``record_id`` if it exists."""

        with self._lock:
            record = self._records.pop(record_id, None)
            if record is not None:
                self._save()
            return record


__all__ = ["FileRecord", "RecordStore"]

"""Upload, merge and split orchestration around the assembly engine.

The engine only transforms bytes.  This layer owns everything around it:
reading stored files in the order the caller chose, persisting the result,
and removing merged sources once the merged document has been stored.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from ..core import operations
from ..core.utils import get_logger
from ..options import AssemblyOptions, WorkspaceSettings
from .exceptions import WorkspaceError
from .records import FileRecord, RecordStore
from .storage import FileStorage

LOGGER = get_logger("pdfsplitmerge.workspace")


@dataclass(slots=True)
class MergeOutcome:
    record: FileRecord
    report: operations.MergeReport


class WorkspaceService:
    """Coordinate storage, records and the byte-level operations."""

    def __init__(
        self,
        settings: WorkspaceSettings | None = None,
        *,
        storage: FileStorage | None = None,
        records: RecordStore | None = None,
    ) -> None:
        self.settings = settings or WorkspaceSettings.from_env()
        self.storage = storage or FileStorage(self.settings.root)
        self.records = records or RecordStore(self.settings.records_file)

    def upload(self, paths: Iterable[str | Path]) -> list[FileRecord]:
        """Store each file in ``paths`` and create a record for it."""

        files = [Path(path) for path in paths]
        if not files:
            raise WorkspaceError("No files uploaded")
        if len(files) > self.settings.max_upload_files:
            raise WorkspaceError(
                f"At most {self.settings.max_upload_files} files can be uploaded at once"
            )

        created: list[FileRecord] = []
        for path in files:
            data = self.storage.read_bytes(path)
            if not data:
                raise WorkspaceError(f"File '{path.name}' is empty")
            location = self.storage.write_bytes(path.name, data)
            created.append(self.records.create(path.name, location))
        LOGGER.info("Uploaded %d file(s)", len(created))
        return created

    def files(self) -> list[FileRecord]:
        return self.records.list_unmerged()

    def page_count(self, record_id: str) -> int:
        record = self.records.get(record_id)
        return operations.page_count(self.storage.read_bytes(record.file_path))

    def _read_source(self, record_id: str) -> bytes | None:
        record = self.records.find(record_id)
        if record is None:
            LOGGER.warning("Merge request names unknown record %s", record_id)
            return None
        try:
            return self.storage.read_bytes(record.file_path)
        except WorkspaceError as exc:
            LOGGER.warning("Stored file for record %s is unavailable: %s", record_id, exc)
            return None

    def merge(
        self,
        record_ids: Sequence[str],
        *,
        options: AssemblyOptions | None = None,
    ) -> MergeOutcome:
        """Merge the records ``record_ids`` in exactly the order given.

        Sources are deleted only after the merged document has been written
        and recorded; sources that were skipped during the merge are kept.
        """

        if len(record_ids) < 2:
            raise WorkspaceError("At least two PDFs are required for merging")

        sources = [self._read_source(record_id) for record_id in record_ids]
        report = operations.merge_documents_report(sources, options=options)

        location = self.storage.write_bytes("merged.pdf", report.data)
        merged = self.records.create(location.name, location, is_merged=True)

        skipped = {item.index for item in report.skipped}
        for index, record_id in enumerate(record_ids):
            if index in skipped:
                continue
            record = self.records.delete(record_id)
            if record is not None:
                self.storage.delete(record.file_path)
        LOGGER.info(
            "Merged %d record(s) into %s (%d skipped)",
            len(record_ids) - len(skipped),
            merged.file_path,
            len(skipped),
        )
        return MergeOutcome(record=merged, report=report)

    def split(
        self,
        source: str | Path,
        page_numbers: Sequence[object],
        *,
        options: AssemblyOptions | None = None,
    ) -> Path:
        """Extract ``page_numbers`` from ``source`` into the workspace.

        ``source`` is either the id of a stored record or a file path.
        """

        if not page_numbers:
            raise WorkspaceError("No pages specified")
        record = self.records.find(str(source))
        if record is not None:
            source = record.file_path
        data = self.storage.read_bytes(source)
        output = operations.extract_pages(data, page_numbers, options=options)
        location = self.storage.write_bytes("split.pdf", output)
        LOGGER.info("Split %s into %s", source, location)
        return location


__all__ = ["MergeOutcome", "WorkspaceService"]

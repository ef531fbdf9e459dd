from __future__ import annotations

from pathlib import Path
from typing import Callable

import pytest

from conftest import page_marker, pypdf_page_content, reader_for
from pdfsplitmerge.options import MAX_FILES_ENV, WORKSPACE_ENV, AssemblyOptions, WorkspaceSettings
from pdfsplitmerge.workspace import (
    FileStorage,
    RecordNotFoundError,
    RecordStore,
    WorkspaceError,
    WorkspaceService,
)


@pytest.fixture()
def service(tmp_path: Path) -> WorkspaceService:
    return WorkspaceService(WorkspaceSettings(root=tmp_path / "uploads", max_upload_files=3))


def test_upload_stores_copies_and_records(
    service: WorkspaceService, pdf_file_factory: Callable[..., Path]
) -> None:
    source = pdf_file_factory("report.pdf", 2)
    (record,) = service.upload([source])

    stored = Path(record.file_path)
    assert stored.parent == service.settings.root
    assert stored.name.endswith("-report.pdf")
    assert stored.read_bytes() == source.read_bytes()
    assert record.file_name == "report.pdf"
    assert not record.is_merged
    assert service.files() == [record]
    assert service.page_count(record.id) == 2


def test_upload_limits(service: WorkspaceService, pdf_file_factory: Callable[..., Path], tmp_path: Path) -> None:
    with pytest.raises(WorkspaceError):
        service.upload([])
    many = [pdf_file_factory(f"{n}.pdf") for n in range(4)]
    with pytest.raises(WorkspaceError):
        service.upload(many)
    empty = tmp_path / "empty.pdf"
    empty.write_bytes(b"")
    with pytest.raises(WorkspaceError):
        service.upload([empty])


def test_merge_in_caller_order_and_cleanup(
    service: WorkspaceService, pdf_file_factory: Callable[..., Path]
) -> None:
    first, second = service.upload(
        [pdf_file_factory("a.pdf", 1, label="a"), pdf_file_factory("b.pdf", 2, label="b")]
    )

    outcome = service.merge([second.id, first.id])

    merged_path = Path(outcome.record.file_path)
    data = merged_path.read_bytes()
    assert outcome.record.is_merged
    assert outcome.report.page_count == 3
    assert page_marker("b", 1) in pypdf_page_content(data, 0)
    assert page_marker("a", 1) in pypdf_page_content(data, 2)
    # Sources are gone, the merged record is not listed as an upload.
    assert service.files() == []
    assert not Path(first.file_path).exists()
    assert not Path(second.file_path).exists()
    assert service.records.find(outcome.record.id) == outcome.record


def test_merge_keeps_skipped_sources(
    service: WorkspaceService, pdf_file_factory: Callable[..., Path], tmp_path: Path
) -> None:
    broken_file = tmp_path / "broken.pdf"
    broken_file.write_bytes(b"not a pdf")
    good, broken = service.upload([pdf_file_factory("good.pdf", 1), broken_file])

    outcome = service.merge([good.id, broken.id, "unknown-id"])

    assert [item.index for item in outcome.report.skipped] == [1, 2]
    assert service.files() == [broken]
    assert Path(broken.file_path).exists()


def test_merge_requires_two_records(service: WorkspaceService) -> None:
    with pytest.raises(WorkspaceError):
        service.merge(["only-one"])


def test_split_from_record_or_path(
    service: WorkspaceService, pdf_file_factory: Callable[..., Path]
) -> None:
    source = pdf_file_factory("five.pdf", 5, label="five")
    (record,) = service.upload([source])

    from_record = service.split(record.id, [4, 2])
    from_path = service.split(source, [1], options=AssemblyOptions(copy_metadata=False))

    assert from_record.name.endswith("-split.pdf")
    assert len(reader_for(from_record.read_bytes()).pages) == 2
    assert page_marker("five", 4) in pypdf_page_content(from_record.read_bytes(), 0)
    assert len(reader_for(from_path.read_bytes()).pages) == 1
    with pytest.raises(WorkspaceError):
        service.split(record.id, [])


def test_records_persist_between_instances(tmp_path: Path) -> None:
    path = tmp_path / "records.json"
    created = RecordStore(path).create("a.pdf", tmp_path / "a.pdf")

    reloaded = RecordStore(path)

    assert reloaded.get(created.id) == created
    assert reloaded.delete(created.id) == created
    assert RecordStore(path).find(created.id) is None
    with pytest.raises(RecordNotFoundError):
        reloaded.get(created.id)


def test_storage_names_do_not_collide(tmp_path: Path) -> None:
    storage = FileStorage(tmp_path)
    first = storage.write_bytes("same name.pdf", b"1")
    second = storage.write_bytes("same name.pdf", b"2")
    assert first != second
    assert first.read_bytes() == b"1"
    assert second.name.endswith("same_name.pdf")
    storage.delete(first)
    assert not first.exists()
    with pytest.raises(WorkspaceError):
        storage.read_bytes(first)


def test_settings_from_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv(WORKSPACE_ENV, str(tmp_path / "env-root"))
    monkeypatch.setenv(MAX_FILES_ENV, "4")
    settings = WorkspaceSettings.from_env()
    assert settings.root == tmp_path / "env-root"
    assert settings.records_file == tmp_path / "env-root" / "records.json"
    assert settings.max_upload_files == 4

    explicit = WorkspaceSettings.from_env(tmp_path / "explicit")
    assert explicit.root == tmp_path / "explicit"

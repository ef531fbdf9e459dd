"""Filesystem storage for uploaded and generated PDFs."""

from __future__ import annotations

from pathlib import Path
import time

from ..core.utils import get_logger
from .exceptions import WorkspaceError

LOGGER = get_logger("pdfsplitmerge.workspace.storage")


def _timestamp_ms() -> int:
    return time.time_ns() // 1_000_000


class FileStorage:
    """Store PDF bytes under ``root``; locations are paths inside it."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).expanduser()
        self.root.mkdir(parents=True, exist_ok=True)

    def location_for(self, name: str) -> Path:
        safe_name = Path(name).name.replace(" ", "_") or "document.pdf"
        stamp = _timestamp_ms()
        candidate = self.root / f"{stamp}-{safe_name}"
        suffix = 1
        while candidate.exists():
            candidate = self.root / f"{stamp}-{suffix}-{safe_name}"
            suffix += 1
        return candidate

    def read_bytes(self, location: str | Path) -> bytes:
        path = Path(location)
        try:
            return path.read_bytes()
        except OSError as exc:
            raise WorkspaceError(f"Unable to read {path}: {exc}") from exc

    def write_bytes(self, name: str, data: bytes) -> Path:
        """Write ``data`` under a timestamped name derived from ``name``."""

        destination = self.location_for(name)
        try:
            destination.write_bytes(data)
        except OSError as exc:
            raise WorkspaceError(f"Unable to write {destination}: {exc}") from exc
        LOGGER.debug("Stored %d bytes at %s", len(data), destination)
        return destination

    def delete(self, location: str | Path) -> None:
        path = Path(location)
        if path.exists():
            path.unlink()
            LOGGER.debug("Deleted %s", path)


__all__ = ["FileStorage"]

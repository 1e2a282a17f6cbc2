"""
Host function set for the desktop build.

The desktop shell persists each drawing as two files in the user data
directory: `<id>.i.json` holds the metadata and `<id>.excalidraw` holds the
raw scene payload.
"""

from __future__ import annotations

import json
import logging
import os
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional, Protocol

from excaliapp.shared.errors import BadRequest, FileNotFound, UnknownStorageError
from excaliapp.shared.types import FileRecord, StorageKind, utc_now_iso

logger = logging.getLogger(__name__)

APP_DIR_NAME = "excaliapp"
METADATA_SUFFIX = ".i.json"
DATA_SUFFIX = ".excalidraw"


class DesktopBridge(Protocol):
    """Functions the desktop host exposes to the client."""

    def list_files(self) -> list[FileRecord]:
        ...

    def get_file(self, file_id: str) -> FileRecord:
        ...

    def save_file(self, record: FileRecord) -> None:
        ...

    def delete_file(self, file_id: str) -> None:
        ...


def user_data_dir() -> Path:
    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg)
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    if os.name == "nt":
        return Path(os.environ.get("APPDATA") or Path.home() / "AppData" / "Roaming")
    config_home = os.environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home)
    return Path.home() / ".config"


def default_storage_directory() -> Path:
    return user_data_dir() / APP_DIR_NAME


class DirectoryBridge:
    """DesktopBridge implementation over a plain directory."""

    def __init__(self, storage_directory: Optional[str | Path] = None):
        self.storage_directory = Path(storage_directory or default_storage_directory())
        self.storage_directory.mkdir(parents=True, exist_ok=True)
        logger.info("Storage directory: %s", self.storage_directory)

    def _path(self, file_id: str, suffix: str) -> Path:
        path = self.storage_directory / f"{file_id}{suffix}"
        if path.resolve().parent != self.storage_directory.resolve():
            raise BadRequest(f"invalid file id: {file_id!r}")
        return path

    def _metadata_path(self, file_id: str) -> Path:
        return self._path(file_id, METADATA_SUFFIX)

    def _data_path(self, file_id: str) -> Path:
        return self._path(file_id, DATA_SUFFIX)

    def _read_metadata(self, path: Path) -> FileRecord:
        try:
            payload = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise UnknownStorageError(
                f"failed to unmarshal file {path.name}: {exc}"
            ) from exc
        return FileRecord.from_json(payload).tagged(StorageKind.LOCAL)

    def list_files(self) -> list[FileRecord]:
        files: list[FileRecord] = []
        for path in sorted(self.storage_directory.glob(f"*{METADATA_SUFFIX}")):
            files.append(self._read_metadata(path))
        return files

    def get_file(self, file_id: str) -> FileRecord:
        metadata_path = self._metadata_path(file_id)
        data_path = self._data_path(file_id)
        if not metadata_path.exists() or not data_path.exists():
            raise FileNotFound(file_id)
        record = self._read_metadata(metadata_path)
        return replace(record, data=data_path.read_text(encoding="utf-8"))

    def save_file(self, record: FileRecord) -> None:
        metadata_path = self._metadata_path(record.id)
        created_at = record.created_at
        if metadata_path.exists():
            try:
                existing = json.loads(metadata_path.read_text(encoding="utf-8"))
                created_at = existing.get("createdAt") or created_at
            except json.JSONDecodeError:
                logger.warning("Ignoring unreadable metadata for %s", record.id)

        self._data_path(record.id).write_text(record.data, encoding="utf-8")

        now = utc_now_iso()
        # The payload lives in its own file, keep it out of the metadata.
        metadata = replace(
            record,
            data="",
            created_at=created_at or now,
            updated_at=now,
        )
        payload = metadata.to_json(include_storage=False)
        payload.pop("data")
        metadata_path.write_text(json.dumps(payload), encoding="utf-8")

    def delete_file(self, file_id: str) -> None:
        metadata_path = self._metadata_path(file_id)
        if not metadata_path.exists():
            raise FileNotFound(file_id)
        metadata_path.unlink()
        self._data_path(file_id).unlink(missing_ok=True)

"""
Storage backends: local key-value store, desktop bridge and remote API.

Exactly one backend is active per running client; see `storage.service`.
"""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional, Protocol
from urllib.parse import quote

import requests

from excaliapp.config import StorageMode
from excaliapp.shared.errors import FileNotFound, error_from_response
from excaliapp.shared.types import (
    DEFAULT_FILE_NAME,
    FileRecord,
    SaveFileRequest,
    StorageKind,
    next_timestamp,
)
from excaliapp.storage.bridge import DesktopBridge
from excaliapp.storage.kv import KeyValueStore

logger = logging.getLogger(__name__)

LOCAL_FILES_KEY = "excaliapp_files"
MIN_AUTH_KEY_LENGTH = 10
REQUEST_TIMEOUT = 30  # seconds


class StorageBackend(Protocol):
    """Operations the storage service needs from a concrete medium."""

    kind: StorageKind

    def list_files(self) -> dict[str, FileRecord]:
        ...

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        ...

    def save_file(self, request: SaveFileRequest) -> FileRecord:
        ...

    def delete_file(self, file_id: str) -> None:
        ...

    def is_available(self) -> bool:
        ...


def new_file_id() -> str:
    return uuid.uuid4().hex


class LocalStorageBackend:
    """
    Keeps the whole file set as one JSON object under a single key.

    Every call reads the full mapping and writes it back, so two writers
    sharing the same store race and the last write wins.
    """

    kind = StorageKind.LOCAL

    def __init__(self, store: KeyValueStore, key: str = LOCAL_FILES_KEY):
        self.store = store
        self.key = key

    def _read_all(self) -> dict[str, FileRecord]:
        raw = self.store.get_item(self.key)
        if not raw:
            return {}
        payload = json.loads(raw)
        return {
            file_id: FileRecord.from_json(item).tagged(self.kind)
            for file_id, item in payload.items()
        }

    def _write_all(self, files: dict[str, FileRecord]) -> None:
        payload = {
            file_id: record.to_json(include_storage=False)
            for file_id, record in files.items()
        }
        self.store.set_item(self.key, json.dumps(payload))

    def is_available(self) -> bool:
        return True

    def list_files(self) -> dict[str, FileRecord]:
        return self._read_all()

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        return self._read_all().get(file_id)

    def save_file(self, request: SaveFileRequest) -> FileRecord:
        files = self._read_all()
        file_id = request.id or new_file_id()
        existing = files.get(file_id)
        now = next_timestamp(existing.updated_at if existing else None)

        record = FileRecord(
            id=file_id,
            user_id=request.user_id,
            name=request.name or DEFAULT_FILE_NAME,
            data=request.data or "",
            thumbnail=request.thumbnail,
            created_at=existing.created_at if existing else now,
            updated_at=now,
            is_public=bool(request.is_public),
            in_storage=self.kind,
        )
        files[file_id] = record
        self._write_all(files)
        return record

    def delete_file(self, file_id: str) -> None:
        files = self._read_all()
        if file_id not in files:
            raise FileNotFound(file_id)
        del files[file_id]
        self._write_all(files)


class DesktopBridgeBackend:
    """Delegates to the functions the desktop host binds into the client."""

    kind = StorageKind.WAILS

    def __init__(self, bridge: DesktopBridge, mode: StorageMode = StorageMode.WAILS):
        self.bridge = bridge
        self.mode = mode

    def is_available(self) -> bool:
        return self.mode == StorageMode.WAILS

    def list_files(self) -> dict[str, FileRecord]:
        return {
            record.id: record.tagged(self.kind) for record in self.bridge.list_files()
        }

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        try:
            record = self.bridge.get_file(file_id)
        except FileNotFound:
            return None
        return record.tagged(self.kind)

    def save_file(self, request: SaveFileRequest) -> FileRecord:
        record = FileRecord(
            id=request.id or new_file_id(),
            user_id=request.user_id,
            name=request.name or DEFAULT_FILE_NAME,
            data=request.data or "",
            thumbnail=request.thumbnail,
            is_public=bool(request.is_public),
        )
        self.bridge.save_file(record)
        return self.bridge.get_file(record.id).tagged(self.kind)

    def delete_file(self, file_id: str) -> None:
        self.bridge.delete_file(file_id)


@dataclass
class ApiStorageBackend:
    """Client for the drawings API. One request per call, no retries."""

    base_url: str
    auth_key: str = ""
    api_prefix: str = "/api"
    timeout: float = REQUEST_TIMEOUT
    session: requests.Session = field(default_factory=requests.Session)

    kind = StorageKind.API

    def set_auth_key(self, key: str) -> None:
        self.auth_key = key

    def _url(self, path: str) -> str:
        return f"{self.base_url.rstrip('/')}{self.api_prefix}{path}"

    def _headers(self, **extra: str) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self.auth_key}",
        }
        headers.update(extra)
        return headers

    def is_available(self) -> bool:
        if not self.auth_key or len(self.auth_key.strip()) < MIN_AUTH_KEY_LENGTH:
            logger.warning("API storage is not available: auth key is empty")
            return False
        return True

    def list_files(self) -> dict[str, FileRecord]:
        response = self.session.get(
            self._url("/drawings/"), headers=self._headers(), timeout=self.timeout
        )
        if not response.ok:
            raise error_from_response("fetch files from API", response)
        return {
            file_id: FileRecord.from_json(item).tagged(self.kind)
            for file_id, item in response.json().items()
        }

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        response = self.session.get(
            self._url(f"/drawings/{quote(file_id, safe='')}/"),
            headers=self._headers(),
            timeout=self.timeout,
        )
        if not response.ok:
            return None
        return FileRecord.from_json(response.json()).tagged(self.kind)

    def save_file(self, request: SaveFileRequest) -> FileRecord:
        body = {key: value for key, value in request.to_json().items() if value is not None}
        response = self.session.put(
            self._url("/drawings/"),
            json=body,
            headers=self._headers(**{"Content-Type": "application/json"}),
            timeout=self.timeout,
        )
        if not response.ok:
            raise error_from_response("save file", response)
        return FileRecord.from_json(response.json()).tagged(self.kind)

    def delete_file(self, file_id: str) -> None:
        response = self.session.delete(
            self._url(f"/drawings/{quote(file_id, safe='')}"),
            headers=self._headers(),
            timeout=self.timeout,
        )
        if response.status_code == 404:
            raise FileNotFound(file_id)
        if not response.ok:
            raise error_from_response("delete file", response)

"""
Storage service facade used by the dashboard and the editor.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional

from excaliapp.config import Settings, StorageMode, get_settings
from excaliapp.shared.errors import FileNotFound
from excaliapp.shared.types import FileRecord, SaveFileRequest, StorageKind
from excaliapp.storage.backends import (
    ApiStorageBackend,
    DesktopBridgeBackend,
    LocalStorageBackend,
    StorageBackend,
    new_file_id,
)
from excaliapp.storage.bridge import DesktopBridge, DirectoryBridge
from excaliapp.storage.kv import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    KeyValueStore,
    RedisKeyValueStore,
)

logger = logging.getLogger(__name__)

COPY_SUFFIX = " (Copy)"


def create_key_value_store(settings: Settings) -> KeyValueStore:
    if settings.redis_url:
        return RedisKeyValueStore(url=settings.redis_url)
    if settings.local_store_dir:
        return FileKeyValueStore(settings.local_store_dir)
    return InMemoryKeyValueStore()


def create_backend(
    mode: StorageMode,
    *,
    auth_key: str = "",
    settings: Optional[Settings] = None,
    store: Optional[KeyValueStore] = None,
    bridge: Optional[DesktopBridge] = None,
) -> StorageBackend:
    """Build the single backend for `mode`. This is the only place mode is read."""
    settings = settings or get_settings()
    if mode == StorageMode.WAILS:
        return DesktopBridgeBackend(
            bridge or DirectoryBridge(settings.desktop_data_dir), mode=mode
        )
    if mode == StorageMode.BROWSER:
        return LocalStorageBackend(store or create_key_value_store(settings))
    return ApiStorageBackend(
        base_url=settings.api_base_url,
        auth_key=auth_key,
        api_prefix=settings.api_prefix,
        timeout=settings.api_timeout_seconds,
    )


class StorageService:
    """Wraps exactly one backend and exposes a backend-agnostic interface."""

    def __init__(
        self,
        auth_key: str = "",
        *,
        mode: Optional[StorageMode] = None,
        settings: Optional[Settings] = None,
        backend: Optional[StorageBackend] = None,
    ):
        settings = settings or get_settings()
        self.mode = StorageMode(mode or settings.storage_mode)
        self.backend = backend or create_backend(
            self.mode, auth_key=auth_key, settings=settings
        )
        logger.info(
            "Storage mode %s using %s", self.mode.value, self.backend.__class__.__name__
        )

    @property
    def storage_kind(self) -> StorageKind:
        return self.backend.kind

    def set_auth_key(self, key: str) -> None:
        if isinstance(self.backend, ApiStorageBackend):
            self.backend.set_auth_key(key)

    def is_available(self) -> bool:
        return self.backend.is_available()

    def get_user_files(self) -> dict[str, FileRecord]:
        return self.backend.list_files()

    def get_file(self, file_id: str) -> Optional[FileRecord]:
        return self.backend.get_file(file_id)

    def save_file(self, request: SaveFileRequest) -> FileRecord:
        if not request.has_id:
            request = replace(request, id=new_file_id())
        return self.backend.save_file(request)

    def delete_file(self, file_id: str) -> None:
        self.backend.delete_file(file_id)

    def duplicate_file(self, file_id: str, new_name: Optional[str] = None) -> FileRecord:
        original = self.get_file(file_id)
        if original is None:
            raise FileNotFound(file_id)

        copy = replace(
            SaveFileRequest.from_record(original),
            id=None,
            name=new_name or f"{original.name}{COPY_SUFFIX}",
        )
        return self.save_file(copy)

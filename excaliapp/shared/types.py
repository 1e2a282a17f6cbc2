"""
File records and save requests shared by the storage backends and the API.
"""

from dataclasses import asdict, dataclass, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from dacite import Config, from_dict

from excaliapp.shared.json_utils import convert_keys

DEFAULT_FILE_NAME = "Untitled"


class StorageKind(str, Enum):
    """Which backend produced an in-memory copy of a file."""

    WAILS = "wails"
    LOCAL = "local"
    API = "api"


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")


def next_timestamp(previous: Optional[str] = None) -> str:
    """Returns the current time, never earlier than `previous`."""
    now = utc_now_iso()
    if previous and previous > now:
        return previous
    return now


@dataclass
class FileRecord:
    """A single stored drawing."""

    id: str
    user_id: str
    name: str = DEFAULT_FILE_NAME
    # Serialized scene from the drawing library; opaque to storage.
    data: str = ""
    thumbnail: Optional[str] = None
    created_at: str = ""
    updated_at: str = ""
    is_public: bool = False
    in_storage: Optional[StorageKind] = None

    def tagged(self, kind: StorageKind) -> "FileRecord":
        return replace(self, in_storage=kind)

    def to_json(self, include_storage: bool = True) -> dict:
        payload = asdict(self)
        if self.in_storage is not None:
            payload["in_storage"] = self.in_storage.value
        if not include_storage:
            payload.pop("in_storage")
        return convert_keys(payload, "snake_to_camel")

    @classmethod
    def from_json(cls, payload: dict) -> "FileRecord":
        data = convert_keys(payload, "camel_to_snake")
        # Stores that keep NULL columns hand back None for these.
        for key in ("name", "data", "created_at", "updated_at"):
            if data.get(key) is None:
                data.pop(key, None)
        if data.get("is_public") is None:
            data.pop("is_public", None)
        if not data.get("in_storage"):
            data.pop("in_storage", None)
        return from_dict(
            data_class=cls,
            data=data,
            config=Config(check_types=False, cast=[StorageKind, bool]),
        )


@dataclass
class SaveFileRequest:
    """Upsert payload. Omitted fields fall back to defaults or stored values."""

    user_id: str = ""
    id: Optional[str] = None
    name: Optional[str] = None
    data: Optional[str] = None
    thumbnail: Optional[str] = None
    is_public: Optional[bool] = None

    @property
    def has_id(self) -> bool:
        return bool(self.id)

    @classmethod
    def from_record(cls, record: FileRecord) -> "SaveFileRequest":
        return cls(
            user_id=record.user_id,
            id=record.id,
            name=record.name,
            data=record.data,
            thumbnail=record.thumbnail,
            is_public=record.is_public,
        )

    def to_json(self) -> dict:
        return convert_keys(asdict(self), "snake_to_camel")

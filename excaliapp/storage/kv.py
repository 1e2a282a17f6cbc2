"""
Key-value store abstraction backing the local storage backend.

Supports an in-memory store for tests, a directory of JSON files for a
single-user install, and a Redis-backed store for shared deployments.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol

import redis


class KeyValueStore(Protocol):
    """String-to-string persistent store, modelled on browser localStorage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


@dataclass
class InMemoryKeyValueStore:
    """Simple dict-backed store for testing/dev."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileKeyValueStore:
    """One file per key inside `root_dir`."""

    def __init__(self, root_dir: str | Path):
        self._root = Path(root_dir)
        self._root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, key: str) -> Path:
        safe_key = re.sub(r"[^A-Za-z0-9_.-]", "_", key)
        return self._root / f"{safe_key}.json"

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key: str, value: str) -> None:
        self._path_for(key).write_text(value, encoding="utf-8")

    def remove_item(self, key: str) -> None:
        self._path_for(key).unlink(missing_ok=True)


@dataclass
class RedisKeyValueStore:
    """Redis-backed store using plain string keys under a namespace."""

    url: str
    namespace: str = "excaliapp"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get_item(self, key: str) -> Optional[str]:
        value = self.client.get(self._key(key))
        if value is None:
            return None
        return value.decode("utf-8")

    def set_item(self, key: str, value: str) -> None:
        self.client.set(self._key(key), value)

    def remove_item(self, key: str) -> None:
        self.client.delete(self._key(key))

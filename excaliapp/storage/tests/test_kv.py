import tempfile
import unittest
from pathlib import Path
from unittest.mock import MagicMock, patch

from excaliapp.storage.kv import (
    FileKeyValueStore,
    InMemoryKeyValueStore,
    RedisKeyValueStore,
)


class KeyValueStoreTests(unittest.TestCase):
    def test_in_memory(self):
        store = InMemoryKeyValueStore()
        self.assertIsNone(store.get_item("k"))
        store.set_item("k", "v")
        self.assertEqual(store.get_item("k"), "v")
        store.remove_item("k")
        store.remove_item("k")
        self.assertIsNone(store.get_item("k"))

    def test_file_store_survives_reopen(self):
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp) / "nested"
            FileKeyValueStore(root).set_item("excaliapp_files", '{"a": 1}')
            reopened = FileKeyValueStore(root)
            self.assertEqual(reopened.get_item("excaliapp_files"), '{"a": 1}')
            reopened.remove_item("excaliapp_files")
            self.assertIsNone(reopened.get_item("excaliapp_files"))

    def test_file_store_sanitizes_keys(self):
        with tempfile.TemporaryDirectory() as tmp:
            store = FileKeyValueStore(tmp)
            store.set_item("../escape", "x")
            self.assertEqual(store.get_item("../escape"), "x")
            self.assertEqual([p.parent for p in Path(tmp).iterdir()], [Path(tmp)])

    @patch("excaliapp.storage.kv.redis.Redis.from_url")
    def test_redis_store_namespaces_keys(self, mock_from_url):
        client = MagicMock()
        client.get.return_value = b"payload"
        mock_from_url.return_value = client

        store = RedisKeyValueStore(url="redis://localhost:6379/0")
        store.set_item("excaliapp_files", "payload")
        client.set.assert_called_once_with("excaliapp:excaliapp_files", "payload")
        self.assertEqual(store.get_item("excaliapp_files"), "payload")

        client.get.return_value = None
        self.assertIsNone(store.get_item("missing"))

        store.remove_item("excaliapp_files")
        client.delete.assert_called_once_with("excaliapp:excaliapp_files")


if __name__ == "__main__":
    unittest.main()

import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

from excaliapp.backend.app import create_app
from excaliapp.backend.db import InMemoryDbClient
from excaliapp.backend.dependencies import get_db_client, get_identity_provider
from excaliapp.backend.identity import StaticIdentityProvider

ALICE = {"Authorization": "Bearer token-alice"}
BOB = {"Authorization": "Bearer token-bob"}


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.db = InMemoryDbClient()
        self.identity = StaticIdentityProvider(
            tokens={
                "token-alice": {"email": "alice@example.com"},
                "token-bob": {"email": "bob@example.com"},
                "token-anon": {"sub": "12345"},
            }
        )
        self.app = create_app()
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.app.dependency_overrides[get_identity_provider] = lambda: self.identity
        self.client = TestClient(self.app, raise_server_exceptions=False)

    def _put(self, body, headers=ALICE):
        return self.client.put("/api/drawings/", json=body, headers=headers)

    def test_preflight_is_answered_without_auth(self):
        response = self.client.options("/api/drawings/")
        self.assertEqual(response.status_code, 204)
        self.assertEqual(response.headers["Access-Control-Allow-Origin"], "*")

    def test_testing_route_is_public(self):
        response = self.client.get("/api/testing")
        self.assertEqual(response.status_code, 200)
        self.assertIn("working", response.json()["message"])

    def test_health_requires_token(self):
        self.assertEqual(self.client.get("/api/health/").status_code, 401)
        response = self.client.get("/api/health/", headers=ALICE)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["status"], "ok")

    def test_missing_or_rejected_token(self):
        self.assertEqual(self.client.get("/api/drawings/").status_code, 401)
        response = self.client.get(
            "/api/drawings/", headers={"Authorization": "Bearer "}
        )
        self.assertEqual(response.status_code, 401)
        response = self.client.get(
            "/api/drawings/", headers={"Authorization": "Bearer unknown"}
        )
        self.assertEqual(response.status_code, 401)

    def test_token_without_email(self):
        response = self.client.get(
            "/api/drawings/", headers={"Authorization": "Bearer token-anon"}
        )
        self.assertEqual(response.status_code, 400)

    def test_list_empty(self):
        response = self.client.get("/api/drawings/", headers=ALICE)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {})

    def test_put_creates_row_for_caller(self):
        response = self._put({"id": "f1", "data": "{}"})
        self.assertEqual(response.status_code, 201)
        payload = response.json()
        self.assertEqual(payload["userId"], "alice@example.com")
        self.assertEqual(payload["name"], "Untitled")
        self.assertFalse(payload["isPublic"])
        self.assertEqual(payload["createdAt"], payload["updatedAt"])
        self.assertEqual(self.db.find_file("f1").user_id, "alice@example.com")

    def test_put_ignores_client_supplied_owner(self):
        response = self._put({"id": "f1", "data": "{}", "userId": "bob@example.com"})
        self.assertEqual(response.status_code, 201)
        self.assertEqual(response.json()["userId"], "alice@example.com")

    def test_put_requires_id_and_data(self):
        self.assertEqual(self._put({"data": "{}"}).status_code, 400)
        self.assertEqual(self._put({"id": "f1"}).status_code, 400)
        self.assertEqual(self._put({"id": "f1", "data": ""}).status_code, 400)
        self.assertEqual(self._put({"id": "f1", "data": {"x": 1}}).status_code, 400)

    def test_put_updates_own_row_with_fallbacks(self):
        created = self._put(
            {"id": "f1", "name": "First", "data": "{}", "thumbnail": "t1", "isPublic": True}
        ).json()
        response = self._put({"id": "f1", "data": '{"v":2}'})
        self.assertEqual(response.status_code, 200)
        updated = response.json()
        self.assertEqual(updated["name"], "First")
        self.assertEqual(updated["data"], '{"v":2}')
        self.assertEqual(updated["thumbnail"], "t1")
        self.assertTrue(updated["isPublic"])
        self.assertEqual(updated["createdAt"], created["createdAt"])
        self.assertGreaterEqual(updated["updatedAt"], created["updatedAt"])

    def test_put_on_other_users_row_is_forbidden(self):
        self._put({"id": "f1", "data": "{}"})
        response = self._put({"id": "f1", "data": "{}"}, headers=BOB)
        self.assertEqual(response.status_code, 403)
        self.assertEqual(self.db.find_file("f1").data, "{}")

    def test_get_is_scoped_to_owner(self):
        self._put({"id": "f1", "name": "Mine", "data": "{}"})
        response = self.client.get("/api/drawings/f1", headers=ALICE)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["name"], "Mine")

        response = self.client.get("/api/drawings/f1/", headers=ALICE)
        self.assertEqual(response.status_code, 200)

        response = self.client.get("/api/drawings/f1", headers=BOB)
        self.assertEqual(response.status_code, 404)

    def test_list_is_scoped_to_owner(self):
        self._put({"id": "f1", "data": "{}"})
        self._put({"id": "f2", "data": "{}"})
        self._put({"id": "f3", "data": "{}"}, headers=BOB)

        alice_files = self.client.get("/api/drawings/", headers=ALICE).json()
        self.assertEqual(sorted(alice_files), ["f1", "f2"])
        bob_files = self.client.get("/api/drawings/", headers=BOB).json()
        self.assertEqual(list(bob_files), ["f3"])

    def test_delete(self):
        self._put({"id": "f1", "data": "{}"})
        self.assertEqual(
            self.client.delete("/api/drawings/f1", headers=BOB).status_code, 404
        )
        response = self.client.delete("/api/drawings/f1", headers=ALICE)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            self.client.get("/api/drawings/f1", headers=ALICE).status_code, 404
        )
        self.assertEqual(
            self.client.delete("/api/drawings/f1", headers=ALICE).status_code, 404
        )

    def test_other_methods_not_allowed(self):
        response = self.client.post("/api/drawings/", json={}, headers=ALICE)
        self.assertEqual(response.status_code, 405)
        self.assertEqual(self.client.get("/api/unknown", headers=ALICE).status_code, 405)
        # Authorization still runs first.
        self.assertEqual(self.client.post("/api/drawings/", json={}).status_code, 401)

    def test_unexpected_error_becomes_500(self):
        broken = MagicMock()
        broken.list_files.side_effect = RuntimeError("database is gone")
        self.app.dependency_overrides[get_db_client] = lambda: broken
        response = self.client.get("/api/drawings/", headers=ALICE)
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json()["error"], "database is gone")


if __name__ == "__main__":
    unittest.main()

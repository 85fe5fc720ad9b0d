import unittest
from unittest.mock import MagicMock

from fastapi.testclient import TestClient

import main_testing_utils
from backend.app import create_app
from backend.auth import InMemoryAuthClient
from backend.dependencies import get_auth_client, get_db_client
from main_testing_utils import docs
from shared.firebase_constants import (
    APPLICATIONS_COLLECTION,
    INTERNSHIPS_COLLECTION,
    NOTIFICATIONS_COLLECTION,
    PROFILES_COLLECTION,
)

TOKENS = {"tok-r1": "r1", "tok-r2": "r2", "tok-s1": "s1"}


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


class BackendApiTests(unittest.TestCase):
    def setUp(self):
        self.app = create_app()
        self.db = main_testing_utils.create_db()
        main_testing_utils.seed_marketplace(self.db)
        self.auth_client = InMemoryAuthClient(tokens=dict(TOKENS))
        self.app.dependency_overrides[get_db_client] = lambda: self.db
        self.app.dependency_overrides[get_auth_client] = lambda: self.auth_client
        self.client = TestClient(self.app)

    def test_requires_bearer_token(self):
        response = self.client.get("/api/recruiter-status")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(
            response.json(), {"error": "Missing or invalid Authorization header"}
        )

    def test_client_identity_header_is_ignored(self):
        response = self.client.get("/api/recruiter-status", headers={"x-user-id": "r1"})
        self.assertEqual(response.status_code, 401)

    def test_invalid_token(self):
        response = self.client.get("/api/recruiter-status", headers=bearer("forged"))
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"error": "Invalid or expired token"})

    def test_recruiter_status(self):
        response = self.client.get("/api/recruiter-status", headers=bearer("tok-r1"))
        self.assertEqual(response.status_code, 200)
        self.assertTrue(response.json()["isRecruiter"])
        self.assertEqual(response.json()["status"], "active")

    def test_owner_accepts_and_other_recruiter_is_denied(self):
        denied = self.client.put(
            "/api/update-application-status",
            json={"applicationId": "a1", "status": "accepted"},
            headers=bearer("tok-r2"),
        )
        self.assertEqual(denied.status_code, 403)
        self.assertEqual(docs(self.db, NOTIFICATIONS_COLLECTION), {})

        accepted = self.client.put(
            "/api/update-application-status",
            json={"applicationId": "a1", "status": "accepted"},
            headers=bearer("tok-r1"),
        )
        self.assertEqual(accepted.status_code, 200)
        self.assertEqual(docs(self.db, APPLICATIONS_COLLECTION)["a1"]["status"], "accepted")
        self.assertEqual(len(docs(self.db, NOTIFICATIONS_COLLECTION)), 1)

        again = self.client.put(
            "/api/update-application-status",
            json={"applicationId": "a1", "status": "rejected"},
            headers=bearer("tok-r1"),
        )
        self.assertEqual(again.status_code, 409)

    def test_create_and_delete_internship(self):
        created = self.client.post(
            "/api/create-internship",
            json={
                "title": "QA Intern",
                "description": "Testing",
                "location": "Pune",
                "sector": "Technology",
                "workMode": "Onsite",
                "skills": ["Selenium"],
            },
            headers=bearer("tok-r1"),
        )
        self.assertEqual(created.status_code, 201)
        internship_id = created.json()["internshipId"]
        self.assertEqual(
            docs(self.db, INTERNSHIPS_COLLECTION)[internship_id]["workMode"], "Onsite"
        )

        deleted = self.client.request(
            "DELETE",
            "/api/delete-internship",
            json={"internshipId": internship_id},
            headers=bearer("tok-r1"),
        )
        self.assertEqual(deleted.status_code, 200)
        self.assertNotIn(internship_id, docs(self.db, INTERNSHIPS_COLLECTION))

    def test_bulk_update(self):
        response = self.client.put(
            "/api/bulk-update-applications",
            json={"applicationIds": ["a1", "a2"], "status": "in-review"},
            headers=bearer("tok-r1"),
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["updatedCount"], 1)

    def test_request_validation_error_is_400(self):
        response = self.client.put(
            "/api/bulk-update-applications",
            json={"applicationIds": "a1", "status": "accepted"},
            headers=bearer("tok-r1"),
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("error", response.json())

    def test_get_applications(self):
        response = self.client.get(
            "/api/get-applications",
            params={"internshipId": "i1", "limit": 10},
            headers=bearer("tok-r1"),
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual([a["id"] for a in body["applications"]], ["a1"])
        self.assertFalse(body["hasMore"])

        too_many = self.client.get(
            "/api/get-applications", params={"limit": 500}, headers=bearer("tok-r1")
        )
        self.assertEqual(too_many.status_code, 400)

    def test_export_data_is_attachment(self):
        response = self.client.post("/api/export-data", headers=bearer("tok-s1"))
        self.assertEqual(response.status_code, 200)
        self.assertIn("attachment", response.headers["content-disposition"])
        self.assertEqual(response.json()["data"]["profile"]["id"], "s1")

    def test_delete_account(self):
        response = self.client.post(
            "/api/delete-account", json={"confirm": "DELETE"}, headers=bearer("tok-s1")
        )
        self.assertEqual(response.status_code, 200)
        self.assertNotIn("s1", docs(self.db, PROFILES_COLLECTION))
        self.assertEqual(self.auth_client.deleted_users, ["s1"])

    def test_og_routes_need_no_auth(self):
        response = self.client.get("/api/og/internship/i1")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["company"], "Acme Labs")
        self.assertEqual(response.json()["work_mode"], "Not specified")

        batch = self.client.get("/api/og/internships", params={"ids": "i1,i2"})
        self.assertEqual(batch.json()["count"], 2)

        missing = self.client.get("/api/og/internship/missing")
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json(), {"error": "Internship not found"})

    def test_cors_headers_on_errors_and_preflight(self):
        origin = {"Origin": "https://app.example.com"}
        response = self.client.get("/api/recruiter-status", headers=origin)
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.headers["access-control-allow-origin"], "*")

        preflight = self.client.options(
            "/api/update-application-status",
            headers={**origin, "Access-Control-Request-Method": "PUT"},
        )
        self.assertEqual(preflight.status_code, 200)

    def test_unexpected_errors_are_sanitized(self):
        broken_db = MagicMock()
        broken_db.get.side_effect = RuntimeError("connection string with secret")
        self.app.dependency_overrides[get_db_client] = lambda: broken_db
        client = TestClient(self.app, raise_server_exceptions=False)

        response = client.get("/api/recruiter-status", headers=bearer("tok-r1"))

        self.assertEqual(response.status_code, 500)
        body = response.json()
        self.assertEqual(body["error"], "Internal server error")
        self.assertTrue(body["correlationId"])
        self.assertNotIn("secret", response.text)


if __name__ == "__main__":
    unittest.main()

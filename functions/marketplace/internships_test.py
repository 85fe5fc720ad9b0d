# Copyright 2025 Google LLC
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
# ==============================================================================
import unittest

import main_testing_utils
from main_testing_utils import FIXED_NOW, docs
from marketplace import internships
from marketplace.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    UnauthenticatedError,
)
from shared.firebase_constants import (
    ANALYTICS_COLLECTION,
    APPLICATIONS_COLLECTION,
    INTERNSHIPS_COLLECTION,
    RECRUITERS_COLLECTION,
)

NEW_INTERNSHIP = {
    "title": "Data Intern",
    "description": "Dashboards and pipelines",
    "location": "Remote",
    "sector": "Technology",
    "stipend": "12000",
    "skills": [" Python ", ""],
}


class CreateInternshipTest(unittest.TestCase):

    def setUp(self):
        self.db = main_testing_utils.create_db()
        main_testing_utils.add_recruiter(self.db, "r1")

    def test_create_internship(self):
        result = internships.create_internship(self.db, "r1", dict(NEW_INTERNSHIP))

        self.assertTrue(result["success"])
        doc = docs(self.db, INTERNSHIPS_COLLECTION)[result["internshipId"]]
        self.assertEqual(doc["status"], "draft")
        self.assertEqual(doc["recruiterId"], "r1")
        self.assertEqual(doc["companyName"], "Acme Labs")
        self.assertEqual(doc["skills"], ["Python"])
        self.assertEqual(doc["views"], 0)
        self.assertEqual(doc["createdAt"], FIXED_NOW)
        self.assertIsNone(doc["publishedAt"])
        self.assertEqual(
            docs(self.db, RECRUITERS_COLLECTION)["r1"]["internshipsCreated"], 1
        )

    def test_create_internship_missing_fields(self):
        with self.assertRaises(InvalidArgumentError):
            internships.create_internship(self.db, "r1", {"title": "Only a title"})

        self.assertEqual(docs(self.db, INTERNSHIPS_COLLECTION), {})
        self.assertEqual(self.db.commit_count, 0)

    def test_create_internship_requires_active_recruiter(self):
        main_testing_utils.add_recruiter(self.db, "pending", status="pending", is_verified=False)

        with self.assertRaises(PermissionDeniedError):
            internships.create_internship(self.db, "pending", dict(NEW_INTERNSHIP))
        with self.assertRaises(UnauthenticatedError):
            internships.create_internship(self.db, None, dict(NEW_INTERNSHIP))


class UpdateInternshipTest(unittest.TestCase):

    def setUp(self):
        self.db = main_testing_utils.create_db()
        main_testing_utils.seed_marketplace(self.db)
        main_testing_utils.add_internship(self.db, "draft1", "r1", status="draft")

    def test_non_owner_is_denied_regardless_of_payload(self):
        for payload in [{"title": "Hijacked"}, {}, "not an object", None]:
            with self.assertRaises(PermissionDeniedError):
                internships.update_internship(self.db, "r2", "draft1", payload)

        self.assertEqual(docs(self.db, INTERNSHIPS_COLLECTION)["draft1"]["title"], "Backend Intern")

    def test_update_strips_protected_fields(self):
        internships.update_internship(
            self.db,
            "r1",
            "draft1",
            {
                "title": "Platform Intern",
                "status": "published",
                "views": 999,
                "recruiterId": "r2",
                "applications": 50,
            },
        )

        doc = docs(self.db, INTERNSHIPS_COLLECTION)["draft1"]
        self.assertEqual(doc["title"], "Platform Intern")
        self.assertEqual(doc["status"], "draft")
        self.assertEqual(doc["views"], 0)
        self.assertEqual(doc["recruiterId"], "r1")
        self.assertEqual(doc["applications"], 0)
        self.assertEqual(doc["updatedAt"], FIXED_NOW)

    def test_update_rejects_blank_required_field(self):
        with self.assertRaises(InvalidArgumentError):
            internships.update_internship(self.db, "r1", "draft1", {"title": "  "})


class DeleteInternshipTest(unittest.TestCase):

    def setUp(self):
        self.db = main_testing_utils.create_db()
        main_testing_utils.seed_marketplace(self.db)
        docs(self.db, RECRUITERS_COLLECTION)["r1"]["internshipsCreated"] = 1
        main_testing_utils.add_application(self.db, "a3", "i1", "r1", "s2")
        main_testing_utils.add_application(self.db, "a4", "i1", "r1", "s3")

    def test_delete_cascades_and_decrements(self):
        result = internships.delete_internship(self.db, "r1", "i1")

        self.assertEqual(result["deletedApplications"], 3)
        self.assertNotIn("i1", docs(self.db, INTERNSHIPS_COLLECTION))
        self.assertEqual(list(docs(self.db, APPLICATIONS_COLLECTION)), ["a2"])
        self.assertEqual(
            docs(self.db, RECRUITERS_COLLECTION)["r1"]["internshipsCreated"], 0
        )
        self.assertEqual(self.db.commit_count, 1)

    def test_delete_by_non_owner_changes_nothing(self):
        with self.assertRaises(PermissionDeniedError):
            internships.delete_internship(self.db, "r2", "i1")

        self.assertIn("i1", docs(self.db, INTERNSHIPS_COLLECTION))
        self.assertEqual(len(docs(self.db, APPLICATIONS_COLLECTION)), 4)
        self.assertEqual(
            docs(self.db, RECRUITERS_COLLECTION)["r1"]["internshipsCreated"], 1
        )

    def test_delete_with_more_applications_than_one_batch(self):
        for n in range(600):
            main_testing_utils.add_application(self.db, f"bulk{n}", "i1", "r1", f"u{n}")

        result = internships.delete_internship(self.db, "r1", "i1")

        self.assertEqual(result["deletedApplications"], 603)
        self.assertEqual(list(docs(self.db, APPLICATIONS_COLLECTION)), ["a2"])
        self.assertNotIn("i1", docs(self.db, INTERNSHIPS_COLLECTION))
        self.assertEqual(
            docs(self.db, RECRUITERS_COLLECTION)["r1"]["internshipsCreated"], 0
        )
        self.assertEqual(self.db.commit_count, 2)


class PublishAndCloseTest(unittest.TestCase):

    def setUp(self):
        self.db = main_testing_utils.create_db()
        main_testing_utils.seed_marketplace(self.db)
        main_testing_utils.add_internship(self.db, "draft1", "r1", status="draft")

    def test_publish_draft(self):
        result = internships.publish_internship(self.db, "r1", "draft1")

        self.assertEqual(result["message"], "Internship published successfully")
        doc = docs(self.db, INTERNSHIPS_COLLECTION)["draft1"]
        self.assertEqual(doc["status"], "published")
        self.assertEqual(doc["publishedAt"], FIXED_NOW)

    def test_publish_is_idempotent(self):
        internships.publish_internship(self.db, "r1", "draft1")
        result = internships.publish_internship(self.db, "r1", "draft1")

        self.assertEqual(result["message"], "Internship is already published")
        self.assertEqual(self.db.commit_count, 1)

    def test_publish_closed_internship_fails(self):
        main_testing_utils.add_internship(self.db, "old", "r1", status="inactive")

        with self.assertRaises(FailedPreconditionError):
            internships.publish_internship(self.db, "r1", "old")

    def test_publish_by_non_owner(self):
        with self.assertRaises(PermissionDeniedError):
            internships.publish_internship(self.db, "r2", "draft1")

    def test_close(self):
        result = internships.close_internship(self.db, "r1", "i1")
        again = internships.close_internship(self.db, "r1", "i1")

        self.assertEqual(result["message"], "Internship closed successfully")
        self.assertEqual(again["message"], "Internship is already closed")
        self.assertEqual(docs(self.db, INTERNSHIPS_COLLECTION)["i1"]["status"], "closed")


class TrackViewTest(unittest.TestCase):

    def setUp(self):
        self.db = main_testing_utils.create_db()
        main_testing_utils.seed_marketplace(self.db)

    def test_track_view_counts_and_records_event(self):
        internships.track_internship_view(self.db, "i1")
        internships.track_internship_view(self.db, "i1", "s1")

        self.assertEqual(docs(self.db, INTERNSHIPS_COLLECTION)["i1"]["views"], 2)
        events = list(docs(self.db, ANALYTICS_COLLECTION).values())
        self.assertEqual(
            sorted(e["userId"] for e in events), ["anonymous", "s1"]
        )
        self.assertTrue(all(e["eventType"] == "view" for e in events))
        self.assertTrue(all(e["timestamp"] == FIXED_NOW for e in events))

    def test_track_view_missing_internship(self):
        with self.assertRaises(NotFoundError):
            internships.track_internship_view(self.db, "missing")

        self.assertEqual(docs(self.db, ANALYTICS_COLLECTION), {})

    def test_track_view_requires_id(self):
        with self.assertRaises(InvalidArgumentError):
            internships.track_internship_view(self.db, "")


if __name__ == "__main__":
    unittest.main()

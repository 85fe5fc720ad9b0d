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
from main_testing_utils import docs
from marketplace import og_tags
from marketplace.errors import InvalidArgumentError, NotFoundError
from shared.firebase_constants import INTERNSHIPS_COLLECTION


class OgTagsTest(unittest.TestCase):

    def setUp(self):
        self.db = main_testing_utils.create_db()
        main_testing_utils.seed_marketplace(self.db)

    def test_recruiter_schema(self):
        main_testing_utils.add_internship(
            self.db,
            "i1",
            "r1",
            workMode="Hybrid",
            companyLogoUrl="https://cdn.example.com/acme.png",
        )

        result = og_tags.get_internship_for_og(self.db, "i1")

        self.assertEqual(
            result,
            {
                "id": "i1",
                "title": "Backend Intern",
                "company": "Acme Labs",
                "description": "Build APIs",
                "location": "Bengaluru",
                "stipend": "15000",
                "sector": "Technology",
                "logo": "https://cdn.example.com/acme.png",
                "work_mode": "Hybrid",
            },
        )

    def test_scraped_schema(self):
        docs(self.db, INTERNSHIPS_COLLECTION)["scraped"] = {
            "title": "ML Intern",
            "company": "Infosys",
            "logo": "https://cdn.example.com/infosys.png",
            "work_mode": "Remote",
            "status": "active",
        }

        result = og_tags.get_internship_for_og(self.db, "scraped")

        self.assertEqual(result["company"], "Infosys")
        self.assertEqual(result["logo"], "https://cdn.example.com/infosys.png")
        self.assertEqual(result["work_mode"], "Remote")

    def test_placeholders(self):
        docs(self.db, INTERNSHIPS_COLLECTION)["bare"] = {"status": "published"}

        result = og_tags.get_internship_for_og(self.db, "bare")

        self.assertEqual(
            result,
            {
                "id": "bare",
                "title": "Internship",
                "company": "Company",
                "description": "",
                "location": "India",
                "stipend": "Competitive",
                "sector": "Technology",
                "logo": None,
                "work_mode": "Not specified",
            },
        )

    def test_drafts_and_missing_are_not_found(self):
        main_testing_utils.add_internship(self.db, "draft1", "r1", status="draft")

        with self.assertRaises(NotFoundError):
            og_tags.get_internship_for_og(self.db, "draft1")
        with self.assertRaises(NotFoundError):
            og_tags.get_internship_for_og(self.db, "missing")
        with self.assertRaises(InvalidArgumentError):
            og_tags.get_internship_for_og(self.db, "")

    def test_batch(self):
        main_testing_utils.add_internship(self.db, "draft1", "r1", status="draft")

        result = og_tags.get_internships_for_og(self.db, "i2, missing,draft1,i1")

        self.assertEqual(result["count"], 2)
        self.assertEqual([i["id"] for i in result["internships"]], ["i2", "i1"])
        self.assertEqual(
            og_tags.get_internships_for_og(self.db, ["i1"])["count"], 1
        )

    def test_batch_limits(self):
        with self.assertRaises(InvalidArgumentError):
            og_tags.get_internships_for_og(self.db, "")
        with self.assertRaises(InvalidArgumentError):
            og_tags.get_internships_for_og(
                self.db, ",".join(f"id{n}" for n in range(11))
            )
        with self.assertRaises(NotFoundError):
            og_tags.get_internships_for_og(self.db, "missing,other")


if __name__ == "__main__":
    unittest.main()

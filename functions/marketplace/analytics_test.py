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
from marketplace import analytics
from marketplace.errors import PermissionDeniedError


class RecruiterAnalyticsTest(unittest.TestCase):

    def setUp(self):
        self.db = main_testing_utils.create_db()
        main_testing_utils.seed_marketplace(self.db)

    def test_analytics(self):
        main_testing_utils.add_internship(self.db, "i1", "r1", views=10)
        main_testing_utils.add_internship(self.db, "i3", "r1", status="draft")
        main_testing_utils.add_application(
            self.db, "a3", "i1", "r1", "s2", status="under_review"
        )
        main_testing_utils.add_application(
            self.db, "a5", "i3", "r1", "s3", status="accepted"
        )

        result = analytics.get_recruiter_analytics(self.db, "r1")

        self.assertEqual(result["totalInternships"], 2)
        self.assertEqual(result["totalViews"], 10)
        self.assertEqual(result["totalApplications"], 3)
        self.assertEqual(result["conversionRate"], 30.0)
        self.assertEqual(
            result["statusBreakdown"], {"pending": 1, "in-review": 1, "accepted": 1}
        )
        by_id = {s["internshipId"]: s for s in result["internships"]}
        self.assertEqual(by_id["i1"]["applications"], 2)
        self.assertEqual(by_id["i1"]["conversionRate"], 20.0)
        self.assertEqual(by_id["i3"]["status"], "draft")
        self.assertEqual(by_id["i3"]["conversionRate"], 100.0)

    def test_conversion_rate_rounding(self):
        self.assertEqual(analytics.conversion_rate(1, 3), 33.33)
        self.assertEqual(analytics.conversion_rate(0, 0), 0.0)

    def test_recruiter_without_internships(self):
        main_testing_utils.add_recruiter(self.db, "r3")

        result = analytics.get_recruiter_analytics(self.db, "r3")

        self.assertEqual(result["totalInternships"], 0)
        self.assertEqual(result["totalApplications"], 0)
        self.assertEqual(result["conversionRate"], 0)
        self.assertEqual(result["statusBreakdown"], {})
        self.assertEqual(result["internships"], [])

    def test_requires_recruiter(self):
        with self.assertRaises(PermissionDeniedError):
            analytics.get_recruiter_analytics(self.db, "s1")


if __name__ == "__main__":
    unittest.main()

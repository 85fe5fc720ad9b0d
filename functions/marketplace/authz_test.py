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
from marketplace import authz
from marketplace.errors import PermissionDeniedError


class AuthzTest(unittest.TestCase):

    def setUp(self):
        self.db = main_testing_utils.create_db()
        main_testing_utils.seed_marketplace(self.db)

    def test_is_active_recruiter(self):
        self.assertTrue(authz.is_active_recruiter({"isVerified": True, "status": "active"}))
        self.assertTrue(authz.is_active_recruiter({"isVerified": True, "status": "Active"}))
        self.assertFalse(authz.is_active_recruiter({"isVerified": False, "status": "active"}))
        self.assertFalse(authz.is_active_recruiter({"isVerified": True, "status": "pending"}))
        self.assertFalse(authz.is_active_recruiter({"status": "active"}))
        self.assertFalse(authz.is_active_recruiter(None))

    def test_owns_internship(self):
        self.assertTrue(authz.owns_internship({"recruiterId": "r1"}, "r1"))
        self.assertFalse(authz.owns_internship({"recruiterId": "r1"}, "r2"))
        self.assertFalse(authz.owns_internship({}, "r1"))
        self.assertFalse(authz.owns_internship(None, "r1"))

    def test_verify_recruiter_role(self):
        main_testing_utils.add_recruiter(self.db, "r3", status="deactivated")

        self.assertTrue(authz.verify_recruiter_role(self.db, "r1"))
        self.assertFalse(authz.verify_recruiter_role(self.db, "r3"))
        self.assertFalse(authz.verify_recruiter_role(self.db, "s1"))

    def test_verify_internship_ownership(self):
        self.assertTrue(authz.verify_internship_ownership(self.db, "i1", "r1"))
        self.assertFalse(authz.verify_internship_ownership(self.db, "i1", "r2"))
        self.assertFalse(authz.verify_internship_ownership(self.db, "missing", "r1"))

    def test_require_recruiter(self):
        self.assertEqual(authz.require_recruiter(self.db, "r1")["companyName"], "Acme Labs")
        with self.assertRaises(PermissionDeniedError):
            authz.require_recruiter(self.db, "s1")

    def test_require_internship_owner_hides_missing_internships(self):
        with self.assertRaises(PermissionDeniedError) as missing:
            authz.require_internship_owner(self.db, "missing", "r1")
        with self.assertRaises(PermissionDeniedError) as foreign:
            authz.require_internship_owner(self.db, "i2", "r1")

        self.assertEqual(missing.exception.message, foreign.exception.message)
        self.assertEqual(
            authz.require_internship_owner(self.db, "i1", "r1")["recruiterId"], "r1"
        )


if __name__ == "__main__":
    unittest.main()

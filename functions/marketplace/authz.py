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

# Recruiter authorization gate shared by every entry point. Each check reads
# the current document; nothing is cached between calls.

from typing import Optional

from backend.db import DbClient
from marketplace.errors import PermissionDeniedError
from shared.firebase_constants import INTERNSHIPS_COLLECTION, RECRUITERS_COLLECTION
from shared.types import RecruiterStatus


def is_active_recruiter(recruiter: Optional[dict]) -> bool:
    if not recruiter:
        return False
    return (
        recruiter.get("isVerified") is True
        and RecruiterStatus.parse(recruiter.get("status")) == RecruiterStatus.ACTIVE
    )


def owns_internship(internship: Optional[dict], uid: str) -> bool:
    if not internship or not uid:
        return False
    return internship.get("recruiterId") == uid


def verify_recruiter_role(db: DbClient, uid: str) -> bool:
    return is_active_recruiter(db.get(RECRUITERS_COLLECTION, uid))


def verify_internship_ownership(db: DbClient, internship_id: str, uid: str) -> bool:
    return owns_internship(db.get(INTERNSHIPS_COLLECTION, internship_id), uid)


def require_recruiter(db: DbClient, uid: str) -> dict:
    """Returns the caller's recruiter document, or raises if not verified/active."""
    recruiter = db.get(RECRUITERS_COLLECTION, uid)
    if not is_active_recruiter(recruiter):
        raise PermissionDeniedError("User is not a verified recruiter")
    return recruiter


def require_internship_owner(db: DbClient, internship_id: str, uid: str) -> dict:
    """
    Returns the internship document, or raises permission-denied.

    A missing internship is reported the same way as one owned by someone
    else, so callers cannot probe for ids.
    """
    internship = db.get(INTERNSHIPS_COLLECTION, internship_id)
    if not owns_internship(internship, uid):
        raise PermissionDeniedError("You do not own this internship")
    return internship

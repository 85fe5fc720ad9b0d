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

import logging
from typing import Optional

from google.cloud.firestore_v1 import SERVER_TIMESTAMP, Increment

from backend.db import DbClient, Write, delete_doc, set_doc, update_doc
from marketplace.authz import require_internship_owner, require_recruiter
from marketplace.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    require_string,
    require_uid,
)
from shared.api import AnalyticsEvent
from shared.constants import MAX_BATCH_WRITES
from shared.firebase_constants import (
    ANALYTICS_COLLECTION,
    APPLICATIONS_COLLECTION,
    INTERNSHIPS_COLLECTION,
    RECRUITERS_COLLECTION,
)
from shared.types import InternshipStatus, to_document

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("title", "description", "location", "sector")

OPTIONAL_FIELDS = (
    "stipend",
    "duration",
    "workMode",
    "applicationDeadline",
    "companyLogoUrl",
    "maxApplications",
)

# Owned by the backend; clients cannot overwrite them through updates.
PROTECTED_FIELDS = frozenset(
    {
        "id",
        "recruiterId",
        "createdAt",
        "applications",
        "views",
        "status",
        "publishedAt",
        "closedAt",
    }
)


def _validate_skills(skills) -> list:
    if skills is None:
        return []
    if not isinstance(skills, list) or not all(isinstance(s, str) for s in skills):
        raise InvalidArgumentError("skills must be a list of strings")
    return [s.strip() for s in skills if s.strip()]


def create_internship(db: DbClient, uid: Optional[str], fields: dict) -> dict:
    """
    Creates a draft internship owned by the caller.

    The internship document and the recruiter's `internshipsCreated` counter
    are written in the same batch.
    """
    uid = require_uid(uid)
    recruiter = require_recruiter(db, uid)
    if not isinstance(fields, dict):
        raise InvalidArgumentError("Internship fields must be an object")
    if any(
        not isinstance(fields.get(name), str) or not fields[name].strip()
        for name in REQUIRED_FIELDS
    ):
        raise InvalidArgumentError(
            "Missing required fields: title, description, location, sector"
        )

    internship_id = db.new_id(INTERNSHIPS_COLLECTION)
    internship = {
        "id": internship_id,
        "recruiterId": uid,
        **{name: fields[name].strip() for name in REQUIRED_FIELDS},
        **{name: fields.get(name) for name in OPTIONAL_FIELDS},
        "skills": _validate_skills(fields.get("skills")),
        "companyName": recruiter.get("companyName"),
        "status": InternshipStatus.DRAFT.value,
        "views": 0,
        "applications": 0,
        "createdAt": SERVER_TIMESTAMP,
        "updatedAt": SERVER_TIMESTAMP,
        "publishedAt": None,
    }
    db.commit(
        [
            set_doc(INTERNSHIPS_COLLECTION, internship_id, internship),
            update_doc(
                RECRUITERS_COLLECTION, uid, {"internshipsCreated": Increment(1)}
            ),
        ]
    )
    logger.info("Internship %s created by %s", internship_id, uid)

    return {
        "success": True,
        "internshipId": internship_id,
        "message": "Internship created successfully",
    }


def update_internship(
    db: DbClient, uid: Optional[str], internship_id, updates
) -> dict:
    uid = require_uid(uid)
    require_recruiter(db, uid)
    internship_id = require_string(internship_id, "internshipId")
    require_internship_owner(db, internship_id, uid)

    if not isinstance(updates, dict):
        raise InvalidArgumentError("updates must be an object")
    safe_updates = {k: v for k, v in updates.items() if k not in PROTECTED_FIELDS}
    for name in REQUIRED_FIELDS:
        if name in safe_updates:
            safe_updates[name] = require_string(safe_updates[name], name)
    if "skills" in safe_updates:
        safe_updates["skills"] = _validate_skills(safe_updates["skills"])
    safe_updates["updatedAt"] = SERVER_TIMESTAMP

    db.commit([update_doc(INTERNSHIPS_COLLECTION, internship_id, safe_updates)])
    return {"success": True, "message": "Internship updated successfully"}


def delete_internship(db: DbClient, uid: Optional[str], internship_id) -> dict:
    """
    Deletes an internship together with every application submitted to it and
    decrements the owner's `internshipsCreated` by one.
    """
    uid = require_uid(uid)
    require_recruiter(db, uid)
    internship_id = require_string(internship_id, "internshipId")
    require_internship_owner(db, internship_id, uid)

    application_deletes = [
        delete_doc(APPLICATIONS_COLLECTION, app_id)
        for app_id, _ in db.query(
            APPLICATIONS_COLLECTION, [("internshipId", internship_id)]
        )
    ]
    final_batch: list[Write] = [
        delete_doc(INTERNSHIPS_COLLECTION, internship_id),
        update_doc(RECRUITERS_COLLECTION, uid, {"internshipsCreated": Increment(-1)}),
    ]

    # Applications beyond what fits next to the internship delete go first, so
    # the internship only disappears once nothing else is left to remove.
    overflow = len(application_deletes) - (MAX_BATCH_WRITES - len(final_batch))
    if overflow > 0:
        for start in range(0, overflow, MAX_BATCH_WRITES):
            end = min(start + MAX_BATCH_WRITES, overflow)
            db.commit(application_deletes[start:end])
        application_deletes = application_deletes[overflow:]
    db.commit(final_batch + application_deletes)

    deleted = len(application_deletes) + max(overflow, 0)
    logger.info(
        "Internship %s deleted by %s with %d applications", internship_id, uid, deleted
    )
    return {
        "success": True,
        "deletedApplications": deleted,
        "message": "Internship deleted successfully",
    }


def publish_internship(db: DbClient, uid: Optional[str], internship_id) -> dict:
    uid = require_uid(uid)
    require_recruiter(db, uid)
    internship_id = require_string(internship_id, "internshipId")
    internship = require_internship_owner(db, internship_id, uid)

    status = InternshipStatus.parse(internship.get("status")) or InternshipStatus.DRAFT
    if status == InternshipStatus.PUBLISHED:
        return {"success": True, "message": "Internship is already published"}
    if status == InternshipStatus.CLOSED:
        raise FailedPreconditionError("A closed internship cannot be published")

    db.commit(
        [
            update_doc(
                INTERNSHIPS_COLLECTION,
                internship_id,
                {
                    "status": InternshipStatus.PUBLISHED.value,
                    "publishedAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        ]
    )
    return {"success": True, "message": "Internship published successfully"}


def close_internship(db: DbClient, uid: Optional[str], internship_id) -> dict:
    uid = require_uid(uid)
    require_recruiter(db, uid)
    internship_id = require_string(internship_id, "internshipId")
    internship = require_internship_owner(db, internship_id, uid)

    if InternshipStatus.parse(internship.get("status")) == InternshipStatus.CLOSED:
        return {"success": True, "message": "Internship is already closed"}

    db.commit(
        [
            update_doc(
                INTERNSHIPS_COLLECTION,
                internship_id,
                {
                    "status": InternshipStatus.CLOSED.value,
                    "closedAt": SERVER_TIMESTAMP,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        ]
    )
    return {"success": True, "message": "Internship closed successfully"}


def track_internship_view(
    db: DbClient, internship_id, viewer_id: Optional[str] = None
) -> dict:
    """Counts a view of an internship. Anonymous viewers are allowed."""
    internship_id = require_string(internship_id, "internshipId")
    if db.get(INTERNSHIPS_COLLECTION, internship_id) is None:
        raise NotFoundError("Internship not found")

    event = AnalyticsEvent(
        internship_id=internship_id,
        user_id=viewer_id or "anonymous",
        event_type="view",
        timestamp=SERVER_TIMESTAMP,
    )
    db.commit(
        [
            update_doc(INTERNSHIPS_COLLECTION, internship_id, {"views": Increment(1)}),
            set_doc(
                ANALYTICS_COLLECTION,
                db.new_id(ANALYTICS_COLLECTION),
                to_document(event),
            ),
        ]
    )
    return {"success": True}

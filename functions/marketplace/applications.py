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
from dataclasses import asdict
from typing import List, Optional

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from backend.db import DbClient, Write, set_doc, update_doc
from marketplace.authz import require_internship_owner, require_recruiter
from marketplace.errors import (
    FailedPreconditionError,
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    require_string,
    require_uid,
)
from marketplace.scoring import score_match
from shared.api import BulkItemOutcome, BulkUpdateItemResult, Notification
from shared.constants import (
    DEFAULT_APPLICATIONS_LIMIT,
    MAX_APPLICATIONS_LIMIT,
    MAX_BULK_APPLICATION_IDS,
    MAX_NOTES_LENGTH,
)
from shared.firebase_constants import (
    APPLICATIONS_COLLECTION,
    INTERNSHIPS_COLLECTION,
    NOTIFICATIONS_COLLECTION,
    PROFILES_COLLECTION,
)
from shared.json_utils import convert_keys
from shared.types import (
    ApplicationStatus,
    Internship,
    InternshipStatus,
    Profile,
    application_status_spellings,
    parse_document,
    to_document,
)

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = frozenset(
    {
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
        ApplicationStatus.WITHDRAWN,
    }
)

# Pending/applied are set on submission and withdrawn only by the student.
RECRUITER_SETTABLE_STATUSES = frozenset(
    {
        ApplicationStatus.IN_REVIEW,
        ApplicationStatus.SHORTLISTED,
        ApplicationStatus.INTERVIEW,
        ApplicationStatus.ACCEPTED,
        ApplicationStatus.REJECTED,
    }
)

STATUS_NOTIFICATION_TYPE = "application_status_updated"


def is_allowed_transition(
    current: Optional[ApplicationStatus], target: ApplicationStatus
) -> bool:
    """Whether a recruiter may move an application from `current` to `target`."""
    if target not in RECRUITER_SETTABLE_STATUSES:
        return False
    current = current or ApplicationStatus.PENDING
    if current in TERMINAL_STATUSES:
        return False
    return current != target


def _parse_target_status(status) -> ApplicationStatus:
    target = ApplicationStatus.parse(status)
    if target is None:
        raise InvalidArgumentError(f"Unknown application status: {status}")
    return target


def _validate_notes(notes) -> Optional[str]:
    if notes is None or notes == "":
        return None
    if not isinstance(notes, str):
        raise InvalidArgumentError("notes must be a string")
    if len(notes) > MAX_NOTES_LENGTH:
        raise InvalidArgumentError("notes exceeds max length")
    return notes


def _status_change_writes(
    db: DbClient,
    application_id: str,
    application: dict,
    status: ApplicationStatus,
    notes: Optional[str] = None,
) -> List[Write]:
    """
    The status update and its notification, always committed together.

    Applications without a `userId` have nobody to notify and get the update
    alone.
    """
    update = {"status": status.value, "updatedAt": SERVER_TIMESTAMP}
    if notes:
        update["notes"] = notes
    writes = [update_doc(APPLICATIONS_COLLECTION, application_id, update)]
    if not application.get("userId"):
        logger.warning("Application %s has no applicant to notify", application_id)
        return writes
    notification = Notification(
        user_id=application.get("userId"),
        type=STATUS_NOTIFICATION_TYPE,
        title="Application Status Updated",
        message=f"Your application status has been updated to: {status.value}",
        application_id=application_id,
        internship_id=application.get("internshipId"),
        created_at=SERVER_TIMESTAMP,
    )
    writes.append(
        set_doc(
            NOTIFICATIONS_COLLECTION,
            db.new_id(NOTIFICATIONS_COLLECTION),
            to_document(notification),
        )
    )
    return writes


def _is_pending(doc: dict) -> bool:
    return doc.get("status") is None or (
        ApplicationStatus.parse(doc["status"]) == ApplicationStatus.PENDING
    )


def _with_canonical_status(app_id: str, doc: dict) -> dict:
    status = ApplicationStatus.parse(doc.get("status"))
    return {"id": app_id, **doc, "status": status.value if status else doc.get("status")}


def get_applications(
    db: DbClient,
    uid: Optional[str],
    internship_id: Optional[str] = None,
    status: Optional[str] = None,
    limit=DEFAULT_APPLICATIONS_LIMIT,
    offset=0,
) -> dict:
    """
    Lists applications received by the calling recruiter, newest first.

    `hasMore` is computed by fetching one row past `limit`.
    """
    uid = require_uid(uid)
    require_recruiter(db, uid)

    if limit is None:
        limit = DEFAULT_APPLICATIONS_LIMIT
    if (
        isinstance(limit, bool)
        or not isinstance(limit, int)
        or not 1 <= limit <= MAX_APPLICATIONS_LIMIT
    ):
        raise InvalidArgumentError(
            f"limit must be an integer between 1 and {MAX_APPLICATIONS_LIMIT}"
        )
    offset = offset or 0
    if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
        raise InvalidArgumentError("offset must be a non-negative integer")

    filters = [("recruiterId", uid)]
    if internship_id:
        filters.append(("internshipId", internship_id))
    target = _parse_target_status(status) if status else None

    if target == ApplicationStatus.PENDING:
        # Firestore cannot match a missing field, and a missing status reads
        # as pending, so this filter is applied after the query.
        rows = [
            (app_id, doc)
            for app_id, doc in db.query(
                APPLICATIONS_COLLECTION,
                filters,
                order_by="appliedAt",
                descending=True,
            )
            if _is_pending(doc)
        ][offset : offset + limit + 1]
    else:
        if target:
            filters.append(("status", "in", application_status_spellings(target)))
        rows = db.query(
            APPLICATIONS_COLLECTION,
            filters,
            order_by="appliedAt",
            descending=True,
            limit=limit + 1,
            offset=offset,
        )
    applications = [_with_canonical_status(app_id, doc) for app_id, doc in rows[:limit]]
    return {
        "applications": applications,
        "hasMore": len(rows) > limit,
        "total": len(applications),
    }


def update_application_status(
    db: DbClient,
    uid: Optional[str],
    application_id,
    status,
    notes=None,
) -> dict:
    """
    Moves one application to a new status and notifies the applicant.

    The update and the notification are a single batch, so a notification
    exists if and only if the status change was stored.
    """
    uid = require_uid(uid)
    require_recruiter(db, uid)
    if not application_id or not status:
        raise InvalidArgumentError("applicationId and status are required")
    application_id = require_string(application_id, "applicationId")
    target = _parse_target_status(status)
    notes = _validate_notes(notes)

    application = db.get(APPLICATIONS_COLLECTION, application_id)
    if application is None:
        raise NotFoundError("Application not found")
    if application.get("recruiterId") != uid:
        raise PermissionDeniedError(
            "You do not have permission to update this application"
        )
    current = ApplicationStatus.parse(application.get("status"))
    if not is_allowed_transition(current, target):
        raise FailedPreconditionError(
            f"Cannot change application status from "
            f"{current.value if current else application.get('status')} to {target.value}"
        )

    db.commit(_status_change_writes(db, application_id, application, target, notes))
    logger.info("Application %s moved to %s by %s", application_id, target, uid)

    return {
        "success": True,
        "status": target.value,
        "message": "Application status updated and notification sent",
    }


def bulk_update_application_status(
    db: DbClient,
    uid: Optional[str],
    application_ids,
    status,
    notes=None,
) -> dict:
    """
    Applies one status to many applications.

    Every id is checked on its own and reported in `results`. Eligible
    applications are updated, with their notifications, in one batch; the rest
    are left untouched.
    """
    uid = require_uid(uid)
    require_recruiter(db, uid)
    if (
        not isinstance(application_ids, list)
        or not application_ids
        or not status
        or not all(isinstance(i, str) and i for i in application_ids)
    ):
        raise InvalidArgumentError("applicationIds array and status are required")
    application_ids = list(dict.fromkeys(application_ids))
    if len(application_ids) > MAX_BULK_APPLICATION_IDS:
        raise InvalidArgumentError(
            f"At most {MAX_BULK_APPLICATION_IDS} applications can be updated at once"
        )
    target = _parse_target_status(status)
    notes = _validate_notes(notes)

    results: List[BulkUpdateItemResult] = []
    writes: List[Write] = []
    for application_id in application_ids:
        application = db.get(APPLICATIONS_COLLECTION, application_id)
        if application is None:
            outcome = BulkItemOutcome.NOT_FOUND
        elif application.get("recruiterId") != uid:
            outcome = BulkItemOutcome.PERMISSION_DENIED
        elif not is_allowed_transition(
            ApplicationStatus.parse(application.get("status")), target
        ):
            outcome = BulkItemOutcome.INVALID_TRANSITION
        else:
            outcome = BulkItemOutcome.UPDATED
            writes.extend(
                _status_change_writes(db, application_id, application, target, notes)
            )
        results.append(BulkUpdateItemResult(application_id, outcome))

    if writes:
        db.commit(writes)
    updated_count = sum(1 for r in results if r.outcome == BulkItemOutcome.UPDATED)
    logger.info(
        "Bulk status update by %s: %d of %d applications moved to %s",
        uid,
        updated_count,
        len(application_ids),
        target,
    )

    return {
        "success": True,
        "updatedCount": updated_count,
        "results": [convert_keys(asdict(r), "snake_to_camel") for r in results],
        "message": f"{updated_count} of {len(application_ids)} applications updated",
    }


def rank_applicants(db: DbClient, uid: Optional[str], internship_id) -> dict:
    """Scores every applicant to an internship the caller owns, best first."""
    uid = require_uid(uid)
    require_recruiter(db, uid)
    internship_id = require_string(internship_id, "internshipId")
    internship = parse_document(
        Internship, require_internship_owner(db, internship_id, uid)
    )

    ranked = []
    for app_id, application in db.query(
        APPLICATIONS_COLLECTION,
        [("internshipId", internship_id), ("recruiterId", uid)],
    ):
        user_id = application.get("userId")
        profile_doc = db.get(PROFILES_COLLECTION, user_id) if user_id else None
        match = score_match(parse_document(Profile, profile_doc or {}), internship)
        status = ApplicationStatus.parse(application.get("status"))
        ranked.append(
            {
                "applicationId": app_id,
                "userId": user_id,
                "status": status.value if status else application.get("status"),
                "score": match.score,
                "explanation": match.explanation,
                "matchedSkills": match.matched_skills,
            }
        )
    ranked.sort(key=lambda entry: entry["score"], reverse=True)

    return {"internshipId": internship_id, "applicants": ranked, "total": len(ranked)}


def get_match_score(db: DbClient, uid: Optional[str], internship_id) -> dict:
    """Scores the caller's own profile against an internship."""
    uid = require_uid(uid)
    internship_id = require_string(internship_id, "internshipId")
    internship_doc = db.get(INTERNSHIPS_COLLECTION, internship_id)
    if (
        internship_doc is None
        or InternshipStatus.parse(internship_doc.get("status"))
        == InternshipStatus.DRAFT
    ):
        raise NotFoundError("Internship not found")
    profile_doc = db.get(PROFILES_COLLECTION, uid)
    if profile_doc is None:
        raise NotFoundError("User profile not found")

    match = score_match(
        parse_document(Profile, profile_doc),
        parse_document(Internship, internship_doc),
    )
    return {
        "internshipId": internship_id,
        **convert_keys(asdict(match), "snake_to_camel"),
    }

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

# Personal data export and the account lifecycle: deactivation, reactivation
# within a fixed window, and permanent deletion.

import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from google.cloud.firestore_v1 import DELETE_FIELD, SERVER_TIMESTAMP

from backend.auth import AuthClient
from backend.db import DbClient, Write, delete_doc, update_doc
from marketplace.errors import (
    InvalidArgumentError,
    NotFoundError,
    PermissionDeniedError,
    require_uid,
)
from shared.constants import (
    DELETE_ACCOUNT_CONFIRMATION,
    MAX_BATCH_WRITES,
    MAX_DEACTIVATION_REASON_LENGTH,
    REACTIVATION_WINDOW_DAYS,
)
from shared.firebase_constants import (
    APPLICATIONS_COLLECTION,
    INTERNSHIPS_COLLECTION,
    NOTIFICATIONS_COLLECTION,
    PROFILES_COLLECTION,
    RECRUITERS_COLLECTION,
    VERIFICATION_REQUESTS_COLLECTION,
)
from shared.json_utils import to_json_safe
from shared.types import RecruiterStatus

logger = logging.getLogger(__name__)

REACTIVATION_WINDOW = timedelta(days=REACTIVATION_WINDOW_DAYS)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _as_aware(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


def _with_ids(rows) -> List[dict]:
    return [{"id": doc_id, **doc} for doc_id, doc in rows]


def export_user_data(db: DbClient, uid: Optional[str], now: Optional[datetime] = None) -> dict:
    """
    Collects every document that belongs to the caller into one JSON-safe blob.

    Applications are the ones the caller submitted; applications received on
    the caller's internships belong to their applicants and are not included.
    """
    uid = require_uid(uid)
    now = now or _utcnow()

    profile = db.get(PROFILES_COLLECTION, uid)
    recruiter = db.get(RECRUITERS_COLLECTION, uid)
    data = {
        "profile": {"id": uid, **profile} if profile is not None else None,
        "recruiter": {"id": uid, **recruiter} if recruiter is not None else None,
        "applications": _with_ids(
            db.query(APPLICATIONS_COLLECTION, [("userId", uid)])
        ),
        "internships": _with_ids(
            db.query(INTERNSHIPS_COLLECTION, [("recruiterId", uid)])
        ),
        "notifications": _with_ids(
            db.query(NOTIFICATIONS_COLLECTION, [("userId", uid)])
        ),
    }
    logger.info("Exported data for %s", uid)

    return {
        "success": True,
        "data": to_json_safe(data),
        "exportedAt": now.isoformat(),
    }


def deactivate_account(db: DbClient, uid: Optional[str], reason=None) -> dict:
    uid = require_uid(uid)
    if reason is not None and not isinstance(reason, str):
        raise InvalidArgumentError("reason must be a string")
    if reason and len(reason) > MAX_DEACTIVATION_REASON_LENGTH:
        raise InvalidArgumentError("reason exceeds max length")

    profile = db.get(PROFILES_COLLECTION, uid)
    recruiter = db.get(RECRUITERS_COLLECTION, uid)
    if profile is None and recruiter is None:
        raise NotFoundError("Account not found")

    writes: List[Write] = []
    if profile is not None:
        writes.append(
            update_doc(
                PROFILES_COLLECTION,
                uid,
                {
                    "isActive": False,
                    "deactivatedAt": SERVER_TIMESTAMP,
                    "deactivationReason": reason or None,
                },
            )
        )
    if recruiter is not None:
        recruiter_update = {
            "status": RecruiterStatus.DEACTIVATED.value,
            "deactivatedAt": SERVER_TIMESTAMP,
        }
        current = RecruiterStatus.parse(recruiter.get("status"))
        # Repeated deactivation keeps the status recorded the first time.
        if current != RecruiterStatus.DEACTIVATED:
            recruiter_update["statusBeforeDeactivation"] = (
                current or RecruiterStatus.PENDING
            ).value
        writes.append(update_doc(RECRUITERS_COLLECTION, uid, recruiter_update))

    db.commit(writes)
    logger.info("Account %s deactivated", uid)

    return {
        "success": True,
        "message": (
            "Account deactivated successfully. "
            f"You can reactivate it within {REACTIVATION_WINDOW_DAYS} days."
        ),
    }


def _deactivated_at(*docs: Optional[dict]) -> Optional[datetime]:
    for doc in docs:
        value = (doc or {}).get("deactivatedAt")
        if isinstance(value, datetime):
            return _as_aware(value)
    return None


def reactivate_account(db: DbClient, uid: Optional[str], now: Optional[datetime] = None) -> dict:
    """
    Reverses a deactivation made at most REACTIVATION_WINDOW_DAYS ago.

    The window is inclusive: exactly thirty days after deactivation the
    account can still be reactivated. A recruiter gets back the status they
    had before deactivating.
    """
    uid = require_uid(uid)
    now = _as_aware(now or _utcnow())

    profile = db.get(PROFILES_COLLECTION, uid)
    recruiter = db.get(RECRUITERS_COLLECTION, uid)
    if profile is None and recruiter is None:
        raise NotFoundError("Account not found")

    deactivated_at = _deactivated_at(profile, recruiter)
    if deactivated_at is None:
        raise InvalidArgumentError("Account is not deactivated")
    if now - deactivated_at > REACTIVATION_WINDOW:
        raise PermissionDeniedError("Account reactivation window has expired")

    writes: List[Write] = []
    if profile is not None:
        writes.append(
            update_doc(
                PROFILES_COLLECTION,
                uid,
                {"isActive": True, "deactivatedAt": None, "deactivationReason": None},
            )
        )
    if (
        recruiter is not None
        and RecruiterStatus.parse(recruiter.get("status")) == RecruiterStatus.DEACTIVATED
    ):
        previous = RecruiterStatus.parse(recruiter.get("statusBeforeDeactivation"))
        if previous is None or previous == RecruiterStatus.DEACTIVATED:
            previous = RecruiterStatus.PENDING
        writes.append(
            update_doc(
                RECRUITERS_COLLECTION,
                uid,
                {
                    "status": previous.value,
                    "deactivatedAt": None,
                    "statusBeforeDeactivation": DELETE_FIELD,
                    "updatedAt": SERVER_TIMESTAMP,
                },
            )
        )

    db.commit(writes)
    logger.info("Account %s reactivated", uid)
    return {"success": True, "message": "Account reactivated successfully"}


def delete_account(
    db: DbClient,
    uid: Optional[str],
    confirm,
    auth_client: Optional[AuthClient] = None,
) -> dict:
    """
    Permanently removes the caller's data and, when an auth client is given,
    their sign-in account.

    Deletes run in batches of at most MAX_BATCH_WRITES. Dependent documents go
    first and the profile last, so an interrupted run can be retried.
    """
    uid = require_uid(uid)
    if confirm != DELETE_ACCOUNT_CONFIRMATION:
        raise InvalidArgumentError(
            f'Type "{DELETE_ACCOUNT_CONFIRMATION}" to confirm permanent account deletion'
        )

    internship_ids = [
        doc_id for doc_id, _ in db.query(INTERNSHIPS_COLLECTION, [("recruiterId", uid)])
    ]
    application_ids = dict.fromkeys(
        doc_id for doc_id, _ in db.query(APPLICATIONS_COLLECTION, [("userId", uid)])
    )
    for internship_id in internship_ids:
        application_ids.update(
            dict.fromkeys(
                doc_id
                for doc_id, _ in db.query(
                    APPLICATIONS_COLLECTION, [("internshipId", internship_id)]
                )
            )
        )
    notification_ids = [
        doc_id for doc_id, _ in db.query(NOTIFICATIONS_COLLECTION, [("userId", uid)])
    ]
    verification_ids = [
        doc_id
        for doc_id, _ in db.query(
            VERIFICATION_REQUESTS_COLLECTION, [("recruiterId", uid)]
        )
    ]
    has_recruiter = db.get(RECRUITERS_COLLECTION, uid) is not None
    has_profile = db.get(PROFILES_COLLECTION, uid) is not None

    writes: List[Write] = (
        [delete_doc(APPLICATIONS_COLLECTION, i) for i in application_ids]
        + [delete_doc(NOTIFICATIONS_COLLECTION, i) for i in notification_ids]
        + [delete_doc(VERIFICATION_REQUESTS_COLLECTION, i) for i in verification_ids]
        + [delete_doc(INTERNSHIPS_COLLECTION, i) for i in internship_ids]
    )
    if has_recruiter:
        writes.append(delete_doc(RECRUITERS_COLLECTION, uid))
    if has_profile:
        writes.append(delete_doc(PROFILES_COLLECTION, uid))
    for start in range(0, len(writes), MAX_BATCH_WRITES):
        db.commit(writes[start : start + MAX_BATCH_WRITES])

    if auth_client is not None:
        auth_client.delete_user(uid)

    deleted: Dict[str, int] = {
        "profile": int(has_profile),
        "recruiter": int(has_recruiter),
        "applications": len(application_ids),
        "notifications": len(notification_ids),
        "verificationRequests": len(verification_ids),
        "internships": len(internship_ids),
    }
    logger.info("Account %s permanently deleted: %s", uid, deleted)

    return {
        "success": True,
        "deleted": deleted,
        "message": "Account permanently deleted",
    }

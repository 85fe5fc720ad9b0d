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

from google.cloud.firestore_v1 import SERVER_TIMESTAMP

from backend.db import DbClient, set_doc
from marketplace.errors import InvalidArgumentError, require_string, require_uid
from shared.api import RecruiterRecord, VerificationRequest
from shared.constants import (
    MAX_COMPANY_NAME_LENGTH,
    MAX_EMAIL_LENGTH,
    MAX_GST_NUMBER_LENGTH,
)
from shared.firebase_constants import (
    RECRUITERS_COLLECTION,
    VERIFICATION_REQUESTS_COLLECTION,
)
from shared.types import RecruiterStatus, to_document

logger = logging.getLogger(__name__)


def initialize_recruiter_profile(
    db: DbClient,
    uid: Optional[str],
    company_name,
    company_email,
    gst_number,
    incorporation_certificate: Optional[str] = None,
) -> dict:
    """
    Creates the caller's recruiter document in the pending state and queues a
    verification request for admins.

    Both documents are written in one batch.
    """
    uid = require_uid(uid)
    if not company_name or not company_email or not gst_number:
        raise InvalidArgumentError(
            "Missing required fields: companyName, companyEmail, gstNumber"
        )
    company_name = require_string(
        company_name, "companyName", MAX_COMPANY_NAME_LENGTH
    )
    company_email = require_string(company_email, "companyEmail", MAX_EMAIL_LENGTH)
    gst_number = require_string(gst_number, "gstNumber", MAX_GST_NUMBER_LENGTH)

    local_part, _, email_domain = company_email.partition("@")
    if not local_part or not email_domain:
        raise InvalidArgumentError("companyEmail must be a valid email address")

    recruiter = RecruiterRecord(
        user_id=uid,
        company_name=company_name,
        company_email=company_email,
        email_domain=email_domain.lower(),
        gst_number=gst_number,
        incorporation_certificate_url=incorporation_certificate or None,
        status=RecruiterStatus.PENDING.value,
        submitted_at=SERVER_TIMESTAMP,
        updated_at=SERVER_TIMESTAMP,
    )
    verification = VerificationRequest(
        recruiter_id=uid,
        company_name=company_name,
        company_email=company_email,
        gst_number=gst_number,
        status=RecruiterStatus.PENDING.value,
        created_at=SERVER_TIMESTAMP,
        updated_at=SERVER_TIMESTAMP,
    )
    db.commit(
        [
            set_doc(RECRUITERS_COLLECTION, uid, to_document(recruiter)),
            set_doc(
                VERIFICATION_REQUESTS_COLLECTION,
                db.new_id(VERIFICATION_REQUESTS_COLLECTION),
                to_document(verification),
            ),
        ]
    )
    logger.info("Recruiter profile initialized for %s", uid)

    return {
        "success": True,
        "message": "Recruiter profile initialized. Awaiting verification.",
        "recruiterId": uid,
    }


def get_recruiter_status(db: DbClient, uid: Optional[str]) -> dict:
    uid = require_uid(uid)
    recruiter = db.get(RECRUITERS_COLLECTION, uid)
    if recruiter is None:
        return {"isRecruiter": False, "status": "not_started"}

    status = RecruiterStatus.parse(recruiter.get("status")) or RecruiterStatus.PENDING
    return {
        "isRecruiter": True,
        "status": status.value,
        "isVerified": bool(recruiter.get("isVerified", False)),
        "companyName": recruiter.get("companyName"),
        "internshipsCreated": recruiter.get("internshipsCreated") or 0,
    }

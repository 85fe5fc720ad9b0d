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

from collections import Counter
from typing import Optional

from backend.db import DbClient
from marketplace.authz import require_recruiter
from marketplace.errors import require_uid
from shared.firebase_constants import APPLICATIONS_COLLECTION, INTERNSHIPS_COLLECTION
from shared.types import ApplicationStatus, InternshipStatus

UNKNOWN_STATUS = "unknown"


def _canonical(status_cls, value) -> str:
    status = status_cls.parse(value)
    return status.value if status else UNKNOWN_STATUS


def conversion_rate(applications: int, views: int) -> float:
    """Applications per hundred views, rounded to two decimals."""
    return round(applications / max(views, 1) * 100, 2)


def get_recruiter_analytics(db: DbClient, uid: Optional[str]) -> dict:
    """
    Aggregates views and applications across the caller's internships.

    Application totals count application documents rather than the
    denormalized `applications` counter on each internship.
    """
    uid = require_uid(uid)
    require_recruiter(db, uid)

    internships = db.query(INTERNSHIPS_COLLECTION, [("recruiterId", uid)])
    applications = db.query(APPLICATIONS_COLLECTION, [("recruiterId", uid)])

    per_internship_apps = Counter(doc.get("internshipId") for _, doc in applications)
    status_breakdown = Counter(
        _canonical(ApplicationStatus, doc.get("status")) for _, doc in applications
    )

    summaries = []
    total_views = 0
    for internship_id, doc in internships:
        views = doc.get("views")
        views = views if isinstance(views, int) and not isinstance(views, bool) else 0
        total_views += views
        app_count = per_internship_apps.get(internship_id, 0)
        summaries.append(
            {
                "internshipId": internship_id,
                "title": doc.get("title"),
                "status": _canonical(InternshipStatus, doc.get("status")),
                "views": views,
                "applications": app_count,
                "conversionRate": conversion_rate(app_count, views),
            }
        )

    total_applications = len(applications)
    return {
        "totalInternships": len(internships),
        "totalViews": total_views,
        "totalApplications": total_applications,
        "statusBreakdown": dict(status_breakdown),
        "conversionRate": (
            conversion_rate(total_applications, total_views) if internships else 0
        ),
        "internships": summaries,
    }

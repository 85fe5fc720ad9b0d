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

# Seed helpers that populate an InMemoryDbClient with marketplace documents.

from datetime import datetime, timedelta, timezone
from typing import Optional

from backend.db import InMemoryDbClient
from shared.firebase_constants import (
    APPLICATIONS_COLLECTION,
    INTERNSHIPS_COLLECTION,
    NOTIFICATIONS_COLLECTION,
    PROFILES_COLLECTION,
    RECRUITERS_COLLECTION,
)

FIXED_NOW = datetime(2025, 6, 1, 12, 0, tzinfo=timezone.utc)


def create_db(now: datetime = FIXED_NOW) -> InMemoryDbClient:
    """An empty in-memory database whose server timestamps resolve to `now`."""
    return InMemoryDbClient(clock=lambda: now)


def add_recruiter(
    db: InMemoryDbClient,
    uid: str,
    status: str = "active",
    is_verified: bool = True,
    company_name: str = "Acme Labs",
    **extra,
) -> dict:
    doc = {
        "userId": uid,
        "companyName": company_name,
        "companyEmail": f"hr@{company_name.lower().replace(' ', '')}.com",
        "gstNumber": "22AAAAA0000A1Z5",
        "status": status,
        "isVerified": is_verified,
        "internshipsCreated": 0,
        "applicationsReceived": 0,
        **extra,
    }
    db.collections.setdefault(RECRUITERS_COLLECTION, {})[uid] = doc
    return doc


def add_profile(db: InMemoryDbClient, uid: str, **fields) -> dict:
    doc = {
        "displayName": uid.title(),
        "skills": ["Python", "SQL"],
        "interests": ["Technology"],
        "location": "Bengaluru",
        "isActive": True,
        **fields,
    }
    db.collections.setdefault(PROFILES_COLLECTION, {})[uid] = doc
    return doc


def add_internship(
    db: InMemoryDbClient,
    internship_id: str,
    recruiter_id: str,
    status: str = "published",
    **fields,
) -> dict:
    doc = {
        "id": internship_id,
        "recruiterId": recruiter_id,
        "title": "Backend Intern",
        "description": "Build APIs",
        "location": "Bengaluru",
        "sector": "Technology",
        "stipend": "15000",
        "skills": ["Python", "Django"],
        "companyName": "Acme Labs",
        "status": status,
        "views": 0,
        "applications": 0,
        **fields,
    }
    db.collections.setdefault(INTERNSHIPS_COLLECTION, {})[internship_id] = doc
    return doc


def add_application(
    db: InMemoryDbClient,
    application_id: str,
    internship_id: str,
    recruiter_id: str,
    user_id: str,
    status: str = "pending",
    applied_at: Optional[datetime] = None,
    **fields,
) -> dict:
    doc = {
        "userId": user_id,
        "internshipId": internship_id,
        "recruiterId": recruiter_id,
        "status": status,
        "appliedAt": applied_at or FIXED_NOW,
        **fields,
    }
    db.collections.setdefault(APPLICATIONS_COLLECTION, {})[application_id] = doc
    return doc


def add_notification(db: InMemoryDbClient, notification_id: str, user_id: str) -> dict:
    doc = {"userId": user_id, "type": "welcome", "read": False}
    db.collections.setdefault(NOTIFICATIONS_COLLECTION, {})[notification_id] = doc
    return doc


def docs(db: InMemoryDbClient, collection: str) -> dict:
    return db.collections.get(collection, {})


def seed_marketplace(db: InMemoryDbClient) -> None:
    """
    Two active recruiters, R1 owning I1 with application A1 from student S1
    and R2 owning I2 with application A2 from student S2.
    """
    add_recruiter(db, "r1")
    add_recruiter(db, "r2", company_name="Globex")
    add_profile(db, "s1")
    add_profile(db, "s2", skills=["Java"], location="Pune")
    add_internship(db, "i1", "r1")
    add_internship(db, "i2", "r2", companyName="Globex")
    add_application(
        db, "a1", "i1", "r1", "s1", applied_at=FIXED_NOW - timedelta(days=2)
    )
    add_application(
        db, "a2", "i2", "r2", "s2", applied_at=FIXED_NOW - timedelta(days=1)
    )

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

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, List, Optional


@dataclass
class RecruiterRecord:
    """Schema for a recruiter document written during onboarding."""

    user_id: str
    company_name: str
    company_email: str
    email_domain: str
    gst_number: str
    incorporation_certificate_url: Optional[str]
    status: str
    submitted_at: Any  # Firestore timestamp (SERVER_TIMESTAMP)
    updated_at: Any
    is_verified: bool = False
    internships_created: int = 0
    applications_received: int = 0


@dataclass
class VerificationRequest:
    """Schema for the admin review queue entry created for a new recruiter."""

    recruiter_id: str
    company_name: str
    company_email: str
    gst_number: str
    status: str
    created_at: Any
    updated_at: Any


@dataclass
class Notification:
    """Schema for a notification fanned out to a student."""

    user_id: Optional[str]
    type: str
    title: str
    message: str
    application_id: str
    internship_id: Optional[str]
    created_at: Any
    read: bool = False


@dataclass
class AnalyticsEvent:
    internship_id: str
    user_id: str
    event_type: str
    timestamp: Any


@dataclass
class MatchScore:
    """Result of scoring a candidate profile against an internship."""

    score: int
    explanation: str
    matched_skills: List[str] = field(default_factory=list)


class BulkItemOutcome(StrEnum):
    UPDATED = "updated"
    NOT_FOUND = "not_found"
    PERMISSION_DENIED = "permission_denied"
    INVALID_TRANSITION = "invalid_transition"


@dataclass
class BulkUpdateItemResult:
    application_id: str
    outcome: BulkItemOutcome


@dataclass
class OgMetadata:
    """Open-Graph fields for a shared internship link."""

    id: str
    title: str
    company: str
    description: str
    location: str
    stipend: Any
    sector: str
    logo: Optional[str]
    work_mode: str

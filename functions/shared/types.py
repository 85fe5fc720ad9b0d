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

from dataclasses import dataclass, field, fields
from enum import StrEnum
from typing import Any, List, Optional, Type, TypeVar

from dacite import Config, from_dict

from shared.json_utils import convert_keys, snake_to_camel

T = TypeVar("T")


class RecruiterStatus(StrEnum):
    PENDING = "pending"
    ACTIVE = "active"
    REJECTED = "rejected"
    DEACTIVATED = "deactivated"

    @classmethod
    def parse(cls, value: Any) -> Optional["RecruiterStatus"]:
        return _parse_status(cls, value, {})


class InternshipStatus(StrEnum):
    DRAFT = "draft"
    PUBLISHED = "published"
    CLOSED = "closed"

    @classmethod
    def parse(cls, value: Any) -> Optional["InternshipStatus"]:
        return _parse_status(cls, value, _INTERNSHIP_STATUS_ALIASES)


class ApplicationStatus(StrEnum):
    PENDING = "pending"
    APPLIED = "applied"
    IN_REVIEW = "in-review"
    SHORTLISTED = "shortlisted"
    INTERVIEW = "interview"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    WITHDRAWN = "withdrawn"

    @classmethod
    def parse(cls, value: Any) -> Optional["ApplicationStatus"]:
        return _parse_status(cls, value, _APPLICATION_STATUS_ALIASES)


# Spellings written by older clients and the legacy internship service.
_INTERNSHIP_STATUS_ALIASES = {
    "active": InternshipStatus.PUBLISHED,
    "inactive": InternshipStatus.CLOSED,
    "expired": InternshipStatus.CLOSED,
}

_APPLICATION_STATUS_ALIASES = {
    "in_review": ApplicationStatus.IN_REVIEW,
    "under_review": ApplicationStatus.IN_REVIEW,
    "under-review": ApplicationStatus.IN_REVIEW,
    "reviewed": ApplicationStatus.IN_REVIEW,
    "interview_scheduled": ApplicationStatus.INTERVIEW,
    "interview-scheduled": ApplicationStatus.INTERVIEW,
}


def _parse_status(enum_cls, value, aliases):
    if not isinstance(value, str):
        return None
    key = value.strip().lower()
    try:
        return enum_cls(key)
    except ValueError:
        return aliases.get(key)


def application_status_spellings(status: ApplicationStatus) -> List[str]:
    """The canonical value followed by every legacy alias stored for it."""
    return [status.value] + [
        alias
        for alias, canonical in _APPLICATION_STATUS_ALIASES.items()
        if canonical == status
    ]


@dataclass
class Profile:
    """A student profile, as stored in the `profiles` collection."""

    display_name: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    interests: List[str] = field(default_factory=list)
    sectors: List[str] = field(default_factory=list)
    # Either a city string or a {"city": ..., "state": ...} map.
    location: Any = None
    desired_location: Any = None
    stipend_preference: Any = None
    is_active: bool = True
    deactivated_at: Any = None
    deactivation_reason: Optional[str] = None


@dataclass
class Internship:
    """
    An internship posting.

    Recruiter-created postings use `company_name`/`skills`/`sector`; scraped
    postings carry `company`/`required_skills`/`sector_tags` instead.
    """

    id: Optional[str] = None
    recruiter_id: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    stipend: Any = None
    duration: Any = None
    sector: Optional[str] = None
    skills: List[str] = field(default_factory=list)
    work_mode: Optional[str] = None
    company_name: Optional[str] = None
    company_logo_url: Optional[str] = None
    application_deadline: Any = None
    max_applications: Any = None
    status: Optional[str] = None
    views: int = 0
    applications: int = 0
    company: Optional[str] = None
    required_skills: List[str] = field(default_factory=list)
    sector_tags: List[str] = field(default_factory=list)


@dataclass
class Application:
    user_id: Optional[str] = None
    internship_id: Optional[str] = None
    recruiter_id: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    applied_at: Any = None
    updated_at: Any = None


def _as_str_list(value: Any) -> List[str]:
    # Some legacy documents store tag lists as a comma separated string.
    if value is None:
        return []
    if isinstance(value, str):
        return [item.strip() for item in value.split(",") if item.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(item) for item in value if item is not None]
    return []


def to_document(record: Any) -> dict:
    """
    Converts a flat dataclass into a camelCase Firestore document.

    Unlike `dataclasses.asdict`, values are not deep-copied, so Firestore
    sentinels such as SERVER_TIMESTAMP keep their identity.
    """
    return {
        snake_to_camel(f.name): getattr(record, f.name) for f in fields(record)
    }


def parse_document(data_class: Type[T], doc: dict) -> T:
    """Parses a camelCase Firestore document into a snake_case dataclass."""
    return from_dict(
        data_class=data_class,
        data=convert_keys(doc, "camel_to_snake"),
        config=Config(check_types=False, type_hooks={List[str]: _as_str_list}),
    )

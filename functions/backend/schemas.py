"""
Pydantic request schemas for the marketplace REST API.

Clients send camelCase keys; fields are snake_case with camelCase aliases.
Business validation (required fields, limits, transitions) happens in the
marketplace services so both API surfaces report the same errors.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InitializeRecruiterRequest(CamelModel):
    company_name: Optional[str] = None
    company_email: Optional[str] = None
    gst_number: Optional[str] = None
    incorporation_certificate: Optional[str] = None


class CreateInternshipRequest(CamelModel):
    title: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    sector: Optional[str] = None
    stipend: Any = None
    duration: Any = None
    work_mode: Optional[str] = None
    application_deadline: Any = None
    company_logo_url: Optional[str] = None
    max_applications: Optional[int] = None
    skills: Optional[list[str]] = None

    def to_fields(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class InternshipIdRequest(CamelModel):
    internship_id: Optional[str] = None


class UpdateInternshipRequest(InternshipIdRequest):
    updates: Optional[dict] = None


class UpdateApplicationStatusRequest(CamelModel):
    application_id: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class BulkUpdateApplicationsRequest(CamelModel):
    application_ids: Optional[list[str]] = None
    status: Optional[str] = None
    notes: Optional[str] = None


class DeactivateAccountRequest(CamelModel):
    reason: Optional[str] = None


class DeleteAccountRequest(CamelModel):
    confirm: Optional[str] = None


class OgMetadataResponse(BaseModel):
    id: str
    title: str
    company: str
    description: str
    location: str
    stipend: Any
    sector: str
    logo: Optional[str] = None
    work_mode: str


class OgBatchResponse(BaseModel):
    count: int
    internships: list[OgMetadataResponse]

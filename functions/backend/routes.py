"""
HTTP routes for the marketplace REST API.

Each route resolves the caller from a verified ID token and delegates to the
marketplace services, which are shared with the callable functions.
"""

from __future__ import annotations

import json

from fastapi import APIRouter, Depends, Query, Response

from backend.auth import AuthClient
from backend.db import DbClient
from backend.dependencies import get_auth_client, get_current_user_id, get_db_client
from backend.schemas import (
    BulkUpdateApplicationsRequest,
    CreateInternshipRequest,
    DeactivateAccountRequest,
    DeleteAccountRequest,
    InitializeRecruiterRequest,
    InternshipIdRequest,
    OgBatchResponse,
    OgMetadataResponse,
    UpdateApplicationStatusRequest,
    UpdateInternshipRequest,
)
from marketplace import (
    accounts,
    analytics,
    applications,
    internships,
    og_tags,
    recruiters,
)
from shared.constants import DEFAULT_APPLICATIONS_LIMIT
from shared.json_utils import to_json_safe

router = APIRouter()


@router.post("/initialize-recruiter")
def initialize_recruiter(
    payload: InitializeRecruiterRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return recruiters.initialize_recruiter_profile(
        db,
        uid,
        payload.company_name,
        payload.company_email,
        payload.gst_number,
        payload.incorporation_certificate,
    )


@router.get("/recruiter-status")
def recruiter_status(
    uid: str = Depends(get_current_user_id), db: DbClient = Depends(get_db_client)
):
    return recruiters.get_recruiter_status(db, uid)


@router.post("/create-internship", status_code=201)
def create_internship(
    payload: CreateInternshipRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return internships.create_internship(db, uid, payload.to_fields())


@router.put("/update-internship")
def update_internship(
    payload: UpdateInternshipRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return internships.update_internship(
        db, uid, payload.internship_id, payload.updates
    )


@router.delete("/delete-internship")
def delete_internship(
    payload: InternshipIdRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return internships.delete_internship(db, uid, payload.internship_id)


@router.post("/publish-internship")
def publish_internship(
    payload: InternshipIdRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return internships.publish_internship(db, uid, payload.internship_id)


@router.post("/close-internship")
def close_internship(
    payload: InternshipIdRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return internships.close_internship(db, uid, payload.internship_id)


@router.get("/get-applications")
def get_applications(
    internship_id: str | None = Query(None, alias="internshipId"),
    status: str | None = Query(None),
    limit: int = Query(DEFAULT_APPLICATIONS_LIMIT),
    offset: int = Query(0),
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return to_json_safe(
        applications.get_applications(
            db,
            uid,
            internship_id=internship_id,
            status=status,
            limit=limit,
            offset=offset,
        )
    )


@router.put("/update-application-status")
def update_application_status(
    payload: UpdateApplicationStatusRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return applications.update_application_status(
        db, uid, payload.application_id, payload.status, payload.notes
    )


@router.put("/bulk-update-applications")
def bulk_update_applications(
    payload: BulkUpdateApplicationsRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return applications.bulk_update_application_status(
        db, uid, payload.application_ids, payload.status, payload.notes
    )


@router.get("/rank-applicants")
def rank_applicants(
    internship_id: str | None = Query(None, alias="internshipId"),
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return applications.rank_applicants(db, uid, internship_id)


@router.get("/match-score")
def match_score(
    internship_id: str | None = Query(None, alias="internshipId"),
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return applications.get_match_score(db, uid, internship_id)


@router.post("/track-view")
def track_view(
    payload: InternshipIdRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return internships.track_internship_view(db, payload.internship_id, uid)


@router.get("/get-analytics")
def get_analytics(
    uid: str = Depends(get_current_user_id), db: DbClient = Depends(get_db_client)
):
    return analytics.get_recruiter_analytics(db, uid)


@router.post("/export-data")
def export_data(
    uid: str = Depends(get_current_user_id), db: DbClient = Depends(get_db_client)
):
    export = accounts.export_user_data(db, uid)
    return Response(
        content=json.dumps(export, indent=2),
        media_type="application/json",
        headers={
            "Content-Disposition": f'attachment; filename="user-data-{uid}.json"'
        },
    )


@router.post("/deactivate-account")
def deactivate_account(
    payload: DeactivateAccountRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
):
    return accounts.deactivate_account(db, uid, payload.reason)


@router.post("/reactivate-account")
def reactivate_account(
    uid: str = Depends(get_current_user_id), db: DbClient = Depends(get_db_client)
):
    return accounts.reactivate_account(db, uid)


@router.post("/delete-account")
def delete_account(
    payload: DeleteAccountRequest,
    uid: str = Depends(get_current_user_id),
    db: DbClient = Depends(get_db_client),
    auth_client: AuthClient = Depends(get_auth_client),
):
    return accounts.delete_account(db, uid, payload.confirm, auth_client)


@router.get("/og/internship/{internship_id}", response_model=OgMetadataResponse)
def og_internship(internship_id: str, db: DbClient = Depends(get_db_client)):
    return og_tags.get_internship_for_og(db, internship_id)


@router.get("/og/internships", response_model=OgBatchResponse)
def og_internships(
    ids: str | None = Query(None), db: DbClient = Depends(get_db_client)
):
    return og_tags.get_internships_for_og(db, ids or "")

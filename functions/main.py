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

# Cloud functions for the internship marketplace - recruiter onboarding,
# internship and application management, analytics and account lifecycle.
#
# This file containing Python cloud functions must be named main.py.
# See https://cloud.google.com/run/docs/write-functions#python for more info.

# Standard library imports
import json
import traceback
import uuid
from typing import Any, Callable, Optional

# Third-party library imports
from firebase_functions import https_fn, logger, options

# Local application imports
from backend import dependencies
from backend.auth import AuthClient
from backend.db import DbClient
from marketplace import (
    accounts,
    analytics,
    applications,
    internships,
    og_tags,
    recruiters,
)
from marketplace.errors import ErrorCode, ServiceError
from shared.json_utils import to_json_safe

FUNCTIONS_ERROR_CODES = {
    ErrorCode.UNAUTHENTICATED: https_fn.FunctionsErrorCode.UNAUTHENTICATED,
    ErrorCode.INVALID_ARGUMENT: https_fn.FunctionsErrorCode.INVALID_ARGUMENT,
    ErrorCode.PERMISSION_DENIED: https_fn.FunctionsErrorCode.PERMISSION_DENIED,
    ErrorCode.NOT_FOUND: https_fn.FunctionsErrorCode.NOT_FOUND,
    ErrorCode.FAILED_PRECONDITION: https_fn.FunctionsErrorCode.FAILED_PRECONDITION,
}

OG_CORS = options.CorsOptions(cors_origins="*", cors_methods=["get", "options"])


def _get_db_client() -> DbClient:
    return dependencies.get_db_client()


def _get_auth_client() -> AuthClient:
    return dependencies.get_auth_client()


def _request_data(req: https_fn.CallableRequest) -> dict:
    return req.data if isinstance(req.data, dict) else {}


def _caller_uid(req: https_fn.CallableRequest) -> Optional[str]:
    """The Firebase runtime verifies the ID token before populating auth."""
    return req.auth.uid if req.auth else None


def _internal_error(name: str, e: Exception) -> https_fn.HttpsError:
    correlation_id = uuid.uuid4().hex
    logger.error(
        f"{name} failed [correlationId={correlation_id}]: {e!r}\n"
        f"{traceback.format_exc()}"
    )
    return https_fn.HttpsError(
        https_fn.FunctionsErrorCode.INTERNAL,
        f"Internal error (correlationId: {correlation_id})",
    )


def _call(operation: Callable[..., Any], *args) -> Any:
    """
    Runs a marketplace operation and converts its outcome for the client.

    Expected failures become HttpsErrors with the matching code. Anything else
    is logged with a correlation id and reported as INTERNAL without the
    original message.
    """
    try:
        return to_json_safe(operation(_get_db_client(), *args))
    except ServiceError as e:
        raise https_fn.HttpsError(FUNCTIONS_ERROR_CODES[e.code], e.message)
    except Exception as e:
        raise _internal_error(operation.__name__, e) from e


def _run(
    operation: Callable[..., Any], req: https_fn.CallableRequest, *args
) -> Any:
    """Runs an operation on behalf of the authenticated caller."""
    return _call(operation, _caller_uid(req), *args)


@https_fn.on_call()
def initialize_recruiter_profile(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(
        recruiters.initialize_recruiter_profile,
        req,
        data.get("companyName"),
        data.get("companyEmail"),
        data.get("gstNumber"),
        data.get("incorporationCertificate"),
    )


@https_fn.on_call()
def get_recruiter_status(req: https_fn.CallableRequest) -> dict:
    return _run(recruiters.get_recruiter_status, req)


@https_fn.on_call()
def create_internship(req: https_fn.CallableRequest) -> dict:
    return _run(internships.create_internship, req, _request_data(req))


@https_fn.on_call()
def update_internship(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(
        internships.update_internship,
        req,
        data.get("internshipId"),
        data.get("updates"),
    )


@https_fn.on_call()
def delete_internship(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(internships.delete_internship, req, data.get("internshipId"))


@https_fn.on_call()
def publish_internship(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(internships.publish_internship, req, data.get("internshipId"))


@https_fn.on_call()
def close_internship(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(internships.close_internship, req, data.get("internshipId"))


@https_fn.on_call()
def get_applications(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(
        applications.get_applications,
        req,
        data.get("internshipId"),
        data.get("status"),
        data.get("limit"),
        data.get("offset"),
    )


@https_fn.on_call()
def update_application_status(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(
        applications.update_application_status,
        req,
        data.get("applicationId"),
        data.get("status"),
        data.get("notes"),
    )


@https_fn.on_call()
def bulk_update_application_status(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(
        applications.bulk_update_application_status,
        req,
        data.get("applicationIds"),
        data.get("status"),
        data.get("notes"),
    )


@https_fn.on_call()
def rank_applicants(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(applications.rank_applicants, req, data.get("internshipId"))


@https_fn.on_call()
def get_match_score(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(applications.get_match_score, req, data.get("internshipId"))


@https_fn.on_call()
def track_internship_view(req: https_fn.CallableRequest) -> dict:
    """Anonymous callers are counted too; no sign-in is required."""
    data = _request_data(req)
    return _call(
        internships.track_internship_view,
        data.get("internshipId"),
        _caller_uid(req),
    )


@https_fn.on_call()
def get_recruiter_analytics(req: https_fn.CallableRequest) -> dict:
    return _run(analytics.get_recruiter_analytics, req)


@https_fn.on_call()
def export_user_data(req: https_fn.CallableRequest) -> dict:
    return _run(accounts.export_user_data, req)


@https_fn.on_call()
def deactivate_account(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(accounts.deactivate_account, req, data.get("reason"))


@https_fn.on_call()
def reactivate_account(req: https_fn.CallableRequest) -> dict:
    return _run(accounts.reactivate_account, req)


@https_fn.on_call()
def delete_account(req: https_fn.CallableRequest) -> dict:
    data = _request_data(req)
    return _run(
        accounts.delete_account, req, data.get("confirm"), _get_auth_client()
    )


def _json_response(body: dict, status: int = 200) -> https_fn.Response:
    return https_fn.Response(
        json.dumps(body), status=status, mimetype="application/json"
    )


def _og_response(operation: Callable[..., Any], *args) -> https_fn.Response:
    try:
        return _json_response(operation(_get_db_client(), *args))
    except ServiceError as e:
        return _json_response({"error": e.message}, status=e.http_status)
    except Exception as e:
        correlation_id = uuid.uuid4().hex
        logger.error(
            f"{operation.__name__} failed [correlationId={correlation_id}]: {e!r}"
        )
        return _json_response(
            {"error": "Failed to fetch internship data", "correlationId": correlation_id},
            status=500,
        )


@https_fn.on_request(cors=OG_CORS)
def get_internship_for_og(req: https_fn.Request) -> https_fn.Response:
    """
    Open-Graph preview data for one internship.

    The id comes from `?id=` or, failing that, the last path segment.
    """
    internship_id = req.args.get("id") or req.path.rstrip("/").split("/")[-1]
    if not internship_id:
        return _json_response({"error": "Internship ID required"}, status=400)
    return _og_response(og_tags.get_internship_for_og, internship_id)


@https_fn.on_request(cors=OG_CORS)
def get_internships_for_og(req: https_fn.Request) -> https_fn.Response:
    return _og_response(og_tags.get_internships_for_og, req.args.get("ids", ""))

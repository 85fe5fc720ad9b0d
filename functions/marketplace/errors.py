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

from enum import StrEnum


class ErrorCode(StrEnum):
    UNAUTHENTICATED = "unauthenticated"
    INVALID_ARGUMENT = "invalid-argument"
    PERMISSION_DENIED = "permission-denied"
    NOT_FOUND = "not-found"
    FAILED_PRECONDITION = "failed-precondition"


class ServiceError(Exception):
    """
    An expected failure of a marketplace operation.

    The message is safe to show to the caller. Entry points translate the
    code into an HttpsError (callable functions) or an HTTP status (REST).
    """

    code: ErrorCode
    http_status: int

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UnauthenticatedError(ServiceError):
    code = ErrorCode.UNAUTHENTICATED
    http_status = 401


class InvalidArgumentError(ServiceError):
    code = ErrorCode.INVALID_ARGUMENT
    http_status = 400


class PermissionDeniedError(ServiceError):
    code = ErrorCode.PERMISSION_DENIED
    http_status = 403


class NotFoundError(ServiceError):
    code = ErrorCode.NOT_FOUND
    http_status = 404


class FailedPreconditionError(ServiceError):
    code = ErrorCode.FAILED_PRECONDITION
    http_status = 409


def require_uid(uid: str | None) -> str:
    if not uid:
        raise UnauthenticatedError("User not authenticated")
    return uid


def require_string(value, name: str, max_length: int | None = None) -> str:
    """Returns a stripped, non-empty string argument or raises."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgumentError(f"{name} is required")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise InvalidArgumentError(f"{name} exceeds max length")
    return value

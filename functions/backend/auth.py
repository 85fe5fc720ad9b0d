"""
Identity verification for the REST API.

Every request is authenticated by verifying its Firebase ID token. Identity
headers supplied by the client (such as `x-user-id`) are never consulted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Optional, Protocol

from firebase_admin import auth

logger = logging.getLogger(__name__)


class InvalidTokenError(Exception):
    """Raised when an ID token cannot be verified."""


class AuthClient(Protocol):
    def verify_id_token(self, token: str) -> str:
        """Returns the uid the token was issued to."""
        ...

    def delete_user(self, uid: str) -> None:
        ...


class FirebaseAuthClient:
    """Verifies tokens and manages users through the Firebase Admin SDK."""

    def __init__(self, app=None, check_revoked: bool = True):
        self._app = app
        self._check_revoked = check_revoked

    def verify_id_token(self, token: str) -> str:
        try:
            decoded = auth.verify_id_token(
                token, app=self._app, check_revoked=self._check_revoked
            )
        except (
            auth.InvalidIdTokenError,
            auth.ExpiredIdTokenError,
            auth.RevokedIdTokenError,
            auth.UserDisabledError,
            auth.CertificateFetchError,
        ) as e:
            logger.info("ID token rejected: %s", type(e).__name__)
            raise InvalidTokenError(str(e)) from e
        except ValueError as e:
            raise InvalidTokenError(str(e)) from e
        return decoded["uid"]

    def delete_user(self, uid: str) -> None:
        try:
            auth.delete_user(uid, app=self._app)
        except auth.UserNotFoundError:
            logger.warning("Auth user %s already deleted", uid)


@dataclass
class InMemoryAuthClient:
    """Test double mapping opaque tokens to uids."""

    tokens: dict = field(default_factory=dict)
    deleted_users: list = field(default_factory=list)

    def verify_id_token(self, token: str) -> str:
        uid: Optional[str] = self.tokens.get(token)
        if not uid:
            raise InvalidTokenError("Unknown token")
        return uid

    def delete_user(self, uid: str) -> None:
        self.deleted_users.append(uid)

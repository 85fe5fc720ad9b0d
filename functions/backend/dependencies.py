"""
Dependency wiring shared by the FastAPI app and the callable functions.
"""

from __future__ import annotations

import logging
from typing import Optional

import firebase_admin
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from firebase_admin import firestore

from backend.auth import AuthClient, FirebaseAuthClient, InMemoryAuthClient, InvalidTokenError
from backend.config import get_settings
from backend.db import DbClient, FirestoreDbClient, InMemoryDbClient
from marketplace.errors import UnauthenticatedError

logger = logging.getLogger(__name__)

_firebase_app: firebase_admin.App | None = None
_db_client: DbClient | None = None
_auth_client: AuthClient | None = None

bearer_scheme = HTTPBearer(auto_error=False)


def get_firebase_app() -> firebase_admin.App:
    """
    Return the default Firebase app, initializing it on first use.
    """
    global _firebase_app
    if _firebase_app:
        return _firebase_app

    settings = get_settings()
    options = {}
    if settings.firebase_project_id:
        options["projectId"] = settings.firebase_project_id
    if settings.firebase_storage_bucket:
        options["storageBucket"] = settings.firebase_storage_bucket
    try:
        _firebase_app = firebase_admin.get_app()
    except ValueError:
        _firebase_app = firebase_admin.initialize_app(options=options or None)
    return _firebase_app


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so in-memory state persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    if get_settings().use_in_memory_backends:
        _db_client = InMemoryDbClient()
    else:
        _db_client = FirestoreDbClient(firestore.client(app=get_firebase_app()))
    return _db_client


def get_auth_client() -> AuthClient:
    global _auth_client
    if _auth_client:
        return _auth_client

    if get_settings().use_in_memory_backends:
        _auth_client = InMemoryAuthClient()
    else:
        _auth_client = FirebaseAuthClient(get_firebase_app())
    return _auth_client


def get_current_user_id(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth_client: AuthClient = Depends(get_auth_client),
) -> str:
    """
    Resolves the caller from a verified `Authorization: Bearer` ID token.
    """
    if credentials is None or not credentials.credentials:
        raise UnauthenticatedError("Missing or invalid Authorization header")
    try:
        uid = auth_client.verify_id_token(credentials.credentials)
    except InvalidTokenError as e:
        raise UnauthenticatedError("Invalid or expired token") from e

    logger.info("%s %s uid=%s", request.method, request.url.path, uid)
    return uid

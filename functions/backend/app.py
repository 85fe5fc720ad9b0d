"""
FastAPI application entry point for the marketplace REST API.
"""

from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backend.config import get_settings
from backend.routes import router
from marketplace.errors import ServiceError

logger = logging.getLogger(__name__)


async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.message},
    )


async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    return JSONResponse(
        status_code=400,
        content={"error": f"{location}: {message}" if location else message},
    )


async def internal_error_middleware(request: Request, call_next):
    """Turns unexpected exceptions into a 500 that carries only a correlation id."""
    try:
        return await call_next(request)
    except Exception:
        correlation_id = uuid.uuid4().hex
        logger.exception(
            "Unhandled error on %s %s [correlationId=%s]",
            request.method,
            request.url.path,
            correlation_id,
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "correlationId": correlation_id},
        )


def create_app() -> FastAPI:
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    app = FastAPI(title="Internship Marketplace API", version="0.1.0")
    app.include_router(router, prefix=settings.api_prefix)
    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.middleware("http")(internal_error_middleware)
    # Added last so it wraps error responses too.
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return app


app = create_app()

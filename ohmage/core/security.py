# SPDX-License-Identifier: Apache-2.0
"""Requester identity, error-to-status mapping, security middleware."""
from __future__ import annotations

import logging
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ohmage.config import settings
from ohmage.core.exceptions import (
    AuthenticationError,
    DataAccessError,
    InsufficientPermissionsError,
    InvalidArgumentError,
    OhmageError,
    UnknownEntityError,
)
from ohmage.services.response_writer import write_error, write_general_error

_logger = logging.getLogger("ohmage")

STATUS_BY_ERROR: dict[type[OhmageError], int] = {
    InvalidArgumentError: 400,
    AuthenticationError: 401,
    InsufficientPermissionsError: 403,
    UnknownEntityError: 404,
}


def status_for(exc: OhmageError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 500


def get_requester(request: Request) -> str:
    """Username asserted by the authenticating proxy. Session handling lives in front of this service."""
    username = request.headers.get(settings.requester_header, "").strip()
    if not username:
        raise AuthenticationError("The request is not authenticated.")
    return username


def add_security_middleware(app: FastAPI) -> None:
    """Register exception handlers, security headers, and CORS. No business logic."""

    @app.exception_handler(OhmageError)
    async def ohmage_exception_handler(request: Request, exc: OhmageError):
        status = status_for(exc)
        if status >= 500:
            error_id = str(uuid.uuid4())
            _logger.error("Request failed %s: %s", error_id, exc, exc_info=exc if isinstance(exc, DataAccessError) else None)
            return JSONResponse(status_code=status, content=write_general_error(error_id))
        _logger.info("Request to %s rejected: %s", request.url.path, exc)
        return JSONResponse(status_code=status, content=write_error(exc))

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        error_id = str(uuid.uuid4())
        _logger.error("Unhandled exception %s: %s", error_id, exc, exc_info=True)
        return JSONResponse(status_code=500, content=write_general_error(error_id))

    @app.middleware("http")
    async def security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Cache-Control"] = "no-store"
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

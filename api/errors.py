"""
Exception → response mapping.

Every error body has the shape ``{"error": "<message>"}``; no internal
detail crosses this boundary.  Server faults are logged with traceback.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from auth.errors import AuthError, HashFailure, UserExistsError

logger = logging.getLogger(__name__)


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the global exception handlers."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        if exc.is_server_fault:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.kind.value)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.debug("Rejected request body on %s: %s", request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            content={"error": "Invalid request"},
        )

    @app.exception_handler(UserExistsError)
    async def user_exists_handler(request: Request, exc: UserExistsError):
        return JSONResponse(
            status_code=status.HTTP_409_CONFLICT,
            content={"error": "User already exists"},
        )

    @app.exception_handler(HashFailure)
    async def hash_failure_handler(request: Request, exc: HashFailure):
        logger.error("Password hashing failed on %s: %s", request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Password hashing error"},
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.error("Database error on %s: %s", request.url.path, exc, exc_info=exc)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Internal server error"},
        )

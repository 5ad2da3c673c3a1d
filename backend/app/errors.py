"""API error taxonomy and the handlers that render it as failure envelopes.

Every failure leaves the service as::

    {"success": false, "error": "<code>", "message": "<generic text>"}

Backend error text (SQL, provider responses, stack traces) is logged and
never returned to the client.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("gymportal.errors")


class ApiError(Exception):
    code = "internal_error"
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


# ── Authentication / authorization ──────────────────────────────


class MissingCredential(ApiError):
    code = "missing_credential"
    status_code = 401
    message = "Authentication required"


class InvalidToken(ApiError):
    code = "invalid_token"
    status_code = 401
    message = "Invalid token"


class ExpiredToken(ApiError):
    code = "expired_token"
    status_code = 401
    message = "Token has expired"


class UnknownPrincipal(ApiError):
    code = "unknown_principal"
    status_code = 401
    message = "User not found"


class InvalidCredentials(ApiError):
    code = "invalid_credentials"
    status_code = 401
    message = "Invalid email or password"


class InsufficientRole(ApiError):
    code = "insufficient_role"
    status_code = 403
    message = "Access denied"


# ── Request / resource ──────────────────────────────────────────


class ValidationFailed(ApiError):
    code = "validation_error"
    status_code = 400
    message = "Invalid request"


class NotFound(ApiError):
    code = "not_found"
    status_code = 404
    message = "Not found"


class Conflict(ApiError):
    code = "conflict"
    status_code = 409
    message = "Resource already exists"


# ── Backend ─────────────────────────────────────────────────────


class StorageError(ApiError):
    code = "storage_error"
    status_code = 500
    message = "Storage error"


class UpstreamError(ApiError):
    code = "upstream_error"
    status_code = 500
    message = "Upstream service error"


_STATUS_CODES = {
    400: ValidationFailed,
    401: MissingCredential,
    403: InsufficientRole,
    404: NotFound,
    409: Conflict,
}


def error_response(code: str, message: str, status_code: int) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": code, "message": message},
    )


def install_error_handlers(app: FastAPI) -> None:
    """Register the envelope-rendering exception handlers on *app*."""

    @app.exception_handler(ApiError)
    async def _api_error(request: Request, exc: ApiError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error("%s %s -> %s", request.method, request.url.path, exc.code)
        return error_response(exc.code, exc.message, exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        logger.debug("Validation failed on %s: %s", request.url.path, exc.errors())
        return error_response(ValidationFailed.code, ValidationFailed.message, 400)

    @app.exception_handler(StarletteHTTPException)
    async def _http_error(request: Request, exc: HTTPException) -> JSONResponse:
        err = _STATUS_CODES.get(exc.status_code)
        if err is None:
            if exc.status_code == 405:
                return error_response("method_not_allowed", "Method not allowed", 405)
            err = ApiError
        status_code = exc.status_code if exc.status_code < 600 else 500
        return error_response(err.code, err.message, status_code)

    @app.exception_handler(SQLAlchemyError)
    async def _storage_error(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.exception("Storage failure on %s %s", request.method, request.url.path)
        return error_response(StorageError.code, StorageError.message, 500)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(ApiError.code, ApiError.message, 500)

"""
Exception handlers - Translate errors into {message, errors} JSON bodies.

Domain exceptions map onto HTTP statuses here; routes never build
error responses themselves.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from useraccounts.domain.exceptions import (
    AccessForbidden,
    AccountError,
    NotAuthenticated,
    ResourceNotFound,
)

logger = logging.getLogger(__name__)


def error_body(message: str, errors: list[str] | None = None) -> dict:
    return {"message": message, "errors": errors or []}


def status_for(exc: AccountError) -> int:
    """HTTP status for a domain error; anything unlisted is a client error."""
    if isinstance(exc, NotAuthenticated):
        return status.HTTP_401_UNAUTHORIZED
    if isinstance(exc, AccessForbidden):
        return status.HTTP_403_FORBIDDEN
    if isinstance(exc, ResourceNotFound):
        return status.HTTP_404_NOT_FOUND
    return status.HTTP_400_BAD_REQUEST


async def account_error_handler(request: Request, exc: AccountError) -> JSONResponse:
    code = status_for(exc)
    logger.info("%s %s -> %d %s", request.method, request.url.path, code, exc.message)
    return JSONResponse(status_code=code, content=error_body(exc.message, exc.errors))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error["loc"] if part not in ("body", "path", "query"))
        errors.append(f"{location}: {error['msg']}" if location else error["msg"])
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Validation error", errors),
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("Unexpected error"),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install every handler on an application."""
    app.add_exception_handler(AccountError, account_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

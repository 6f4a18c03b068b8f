"""
Error Responses

Every error goes out in the same envelope:

    {"error": {"code": 404, "reason": "Not Found", "description": "..."}}

Service exceptions are mapped to status codes here, so services never need
to know about HTTP.
"""

from http import HTTPStatus

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from mobile_api.common.exceptions import (
    CommandBusyError,
    ConfigNotFoundError,
    ExecutionError,
    MobileApiError,
    PersistError,
    StatusTimeoutError,
    StatusUnavailableError,
    UnauthorizedError,
)
from mobile_api.common.logging_setup import get_service_logger

logger = get_service_logger("api")


# ============================================
# SCHEMAS
# ============================================

class ErrorResponseContent(BaseModel):
    """Server error response content"""
    code: int
    reason: str
    description: str


class ErrorResponse(BaseModel):
    """Server error response message"""
    error: ErrorResponseContent


class OkResponse(BaseModel):
    """Operation complete message"""
    code: int = 200
    message: str


# ============================================
# HELPERS
# ============================================

STATUS_BY_ERROR: dict[type[MobileApiError], int] = {
    UnauthorizedError: 401,
    ConfigNotFoundError: 404,
    CommandBusyError: 409,
    PersistError: 500,
    ExecutionError: 500,
    StatusUnavailableError: 500,
    StatusTimeoutError: 503,
}


def error_response(status_code: int, description: str | None = None, headers: dict | None = None) -> JSONResponse:
    """Build a JSON error response in the standard envelope"""
    status = HTTPStatus(status_code)
    body = ErrorResponse(
        error=ErrorResponseContent(
            code=status_code,
            reason=status.phrase,
            description=description or status.description,
        )
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)


def unauthorized_response() -> JSONResponse:
    """The one and only 401 body; it never says what was wrong"""
    return error_response(
        401,
        UnauthorizedError().message,
        headers={"WWW-Authenticate": "Bearer"},
    )


def status_for(exc: MobileApiError) -> int:
    for error_type in type(exc).__mro__:
        if error_type in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[error_type]
    return 500


# ============================================
# HANDLERS
# ============================================

async def mobile_api_error_handler(request: Request, exc: MobileApiError) -> JSONResponse:
    status_code = status_for(exc)

    if status_code == 401:
        return unauthorized_response()

    if status_code >= 500:
        logger.error(
            f"{request.method} {request.url.path} failed: {exc.message}",
            extra={"status_code": status_code},
        )
    elif status_code == 404:
        # Unprovisioned is the normal factory state
        logger.debug(f"{request.method} {request.url.path}: {exc.message}")
    else:
        logger.warning(f"{request.method} {request.url.path}: {exc.message}")

    return error_response(status_code, exc.message)


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    description = exc.detail if isinstance(exc.detail, str) else None
    return error_response(exc.status_code, description, headers=getattr(exc, "headers", None))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return error_response(422, "; ".join(problems) or None)


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"{request.method} {request.url.path} raised {type(exc).__name__}")
    return error_response(500)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MobileApiError, mobile_api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

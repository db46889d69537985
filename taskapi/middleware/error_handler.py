import logging
import traceback
from datetime import datetime, timezone
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError

from taskapi.config import Settings, settings as default_settings
from taskapi.utils.exceptions import AppException, ErrorCode

logger = logging.getLogger(__name__)

# PostgreSQL SQLSTATE for foreign_key_violation
PG_FOREIGN_KEY_VIOLATION = "23503"


def _settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", default_settings)


def _error_body(request: Request, message: str, code: str,
                details: list | None = None, field: str | None = None) -> dict:
    body = {"success": False, "error": message, "code": code}
    if details is not None:
        body["details"] = details
    if field is not None:
        body["field"] = field
    if _settings(request).is_development:
        body["timestamp"] = datetime.now(timezone.utc).isoformat()
    return body


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """Handle all AppException subclasses (our custom exceptions)."""
    detail = exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            request,
            detail.get("message", "An error occurred"),
            detail.get("code", ErrorCode.INTERNAL_SERVER_ERROR),
            detail.get("details"),
            detail.get("field"),
        ),
        headers=exc.headers,
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle Pydantic validation errors.
    Malformed input is a client error (400) with one entry per offending field.
    """
    details = []
    for error in exc.errors():
        # loc is a tuple like ("body", "email") or ("query", "page")
        loc = error.get("loc", [])
        field = ".".join(str(l) for l in loc if l not in ("body", "query", "path")) if loc else "unknown"
        details.append({
            "field": field,
            "message": error.get("msg", "Invalid value"),
        })

    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=_error_body(request, "Validation failed", ErrorCode.VALIDATION_ERROR, details),
    )


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    if getattr(orig, "pgcode", None) == PG_FOREIGN_KEY_VIOLATION:
        return True
    # SQLite only reports the message: "FOREIGN KEY constraint failed"
    return "foreign key" in str(orig).lower()


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """
    Handle SQLAlchemy IntegrityError.
    A dangling reference is a bad request; anything else (unique violations) is a conflict.
    Raw DB errors never reach the client.
    """
    logger.warning(f"IntegrityError on {request.method} {request.url}: {exc.orig}")
    if is_foreign_key_violation(exc):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_error_body(request, "Related record not found", ErrorCode.BAD_REQUEST),
        )
    return JSONResponse(
        status_code=status.HTTP_409_CONFLICT,
        content=_error_body(request, "Duplicate entry", ErrorCode.CONFLICT),
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Catch-all handler for unexpected exceptions.
    Logs the full traceback; the traceback reaches the client only outside production.
    """
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    logger.error(f"Unhandled exception on {request.method} {request.url}\n{trace}")

    body = _error_body(request, "Internal server error", ErrorCode.INTERNAL_SERVER_ERROR)
    if not _settings(request).is_production:
        body["stack"] = trace
    return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content=body)

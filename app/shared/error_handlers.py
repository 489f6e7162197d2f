# app/shared/error_handlers.py
import logging
from typing import Any, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.shared.exceptions import AuthenticationError, ClinicError, InternalError

logger = logging.getLogger(__name__)


class ErrorResponse(BaseModel):
    error: str
    code: str
    detail: Optional[Any] = None


def _error_json(status_code: int, error: str, code: str, detail=None, headers=None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(error=error, code=code, detail=detail).model_dump(exclude_none=True),
        headers=headers,
    )


async def clinic_error_handler(request: Request, exc: ClinicError) -> JSONResponse:
    """Render domain errors; internal ones get a generic message."""
    if isinstance(exc, InternalError):
        logger.error(f"Internal error on {request.method} {request.url.path}: {exc.message}")
        return _error_json(
            exc.status_code,
            "Internal server error. Please try again later.",
            exc.code,
        )

    headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, AuthenticationError) else None
    return _error_json(exc.status_code, exc.message, exc.code, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Pydantic body/query errors are reported as 400 validation errors."""
    logger.warning(f"Validation error on {request.url.path}: {exc.errors()}")
    detail = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return _error_json(
        status.HTTP_400_BAD_REQUEST,
        "Required fields are missing or malformed",
        "VALIDATION_ERROR",
        detail=detail,
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected exceptions."""
    logger.error(f"Unexpected error on {request.method} {request.url.path}: {exc}", exc_info=True)
    return _error_json(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "Internal server error. Please try again later.",
        "INTERNAL_ERROR",
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ClinicError, clinic_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

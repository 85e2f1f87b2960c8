# app/core/errors.py
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

VALIDATION_ERROR = "VALIDATION_ERROR"
NOT_FOUND = "NOT_FOUND"
DUPLICATE_ITEM = "DUPLICATE_ITEM"
INTERNAL_ERROR = "INTERNAL_ERROR"

STATUS_CODES = {
    status.HTTP_400_BAD_REQUEST: "BAD_REQUEST",
    status.HTTP_404_NOT_FOUND: NOT_FOUND,
    status.HTTP_405_METHOD_NOT_ALLOWED: "METHOD_NOT_ALLOWED",
    status.HTTP_409_CONFLICT: DUPLICATE_ITEM,
}


class APIError(HTTPException):
    """HTTPException that carries an error code for the response envelope."""

    def __init__(
            self,
            status_code: int,
            code: str,
            message: str,
            details: Optional[str] = None
    ):
        super().__init__(status_code=status_code, detail=message)
        self.code = code
        self.message = message
        self.details = details


def error_body(code: str, message: str, details: Optional[str] = None) -> Dict[str, Any]:
    """Build the error envelope."""
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details,
            "timestamp": datetime.now(timezone.utc).isoformat()
        }
    }


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(
            str(part) for part in error.get("loc", ())
            if part not in ("body", "query", "path")
        ) or "body"
        if error.get("type") == "value_error" and "error" in error.get("ctx", {}):
            message = str(error["ctx"]["error"])
        else:
            message = error.get("msg", "Invalid value")
        parts.append(f"{field}: {message}")
    return "; ".join(parts)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("API error %s on %s: %s", exc.code, request.url.path, exc.message)
    else:
        logger.warning("API error %s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.code, exc.message, exc.details)
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    code = STATUS_CODES.get(exc.status_code, "HTTP_ERROR")
    logger.warning("HTTP %s on %s: %s", exc.status_code, request.url.path, exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(code, str(exc.detail)),
        headers=getattr(exc, "headers", None)
    )


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = _format_validation_errors(exc)
    logger.warning("Request validation failed on %s: %s", request.url.path, details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body(VALIDATION_ERROR, "One or more validation errors occurred", details)
    )


def internal_error_response() -> JSONResponse:
    """Generic 500 envelope; never leaks exception text to the client."""
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body(
            INTERNAL_ERROR,
            "An internal server error occurred",
            "Please contact support if the problem persists"
        )
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    # Fallback for errors raised outside the request context middleware
    logger.exception("Unhandled exception on %s", request.url.path)
    return internal_error_response()


def register_exception_handlers(app: FastAPI) -> None:
    """
    Render every error raised by the app as the error envelope.

    Args:
        app: FastAPI application
    """
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

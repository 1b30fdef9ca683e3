"""Global error handlers for the FastAPI application."""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import BaseAppException, NotFoundError

logger = logging.getLogger(__name__)


def error_body(code: str, message: str, details: dict[str, Any] | None = None) -> dict[str, Any]:
    """Standard error payload shared by the API and the serverless handlers."""
    return {
        "error": {
            "code": code,
            "message": message,
            "details": details or {}
        }
    }


def exception_body(exc: BaseAppException) -> dict[str, Any]:
    body = error_body(exc.code, exc.message, exc.details)
    if isinstance(exc, NotFoundError):
        # The dashboard keys its empty-chart state off this flag
        body["noData"] = True
    return body


def log_app_exception(exc: BaseAppException) -> None:
    """Client errors at WARNING, upstream and server failures at ERROR."""
    level = logging.WARNING if exc.status_code < 500 else logging.ERROR
    logger.log(level, "Application error: %s [%s] - %s", exc.message, exc.code, exc.details)


def setup_error_handlers(app: FastAPI) -> None:
    """Setup global error handlers for the FastAPI application."""

    @app.exception_handler(BaseAppException)
    async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
        """Handle custom application exceptions."""
        log_app_exception(exc)

        return JSONResponse(
            status_code=exc.status_code,
            content=exception_body(exc)
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request,
        exc: RequestValidationError
    ) -> JSONResponse:
        """Handle Pydantic validation errors."""
        logger.warning("Validation error: %s", exc.errors())

        return JSONResponse(
            status_code=422,
            content=error_body(
                "VALIDATION_ERROR",
                "Request validation failed",
                {"validation_errors": exc.errors()}
            )
        )

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request,
        exc: StarletteHTTPException
    ) -> JSONResponse:
        """Handle HTTP exceptions."""
        return JSONResponse(
            status_code=exc.status_code,
            content=error_body(f"HTTP_{exc.status_code}", str(exc.detail))
        )

    @app.exception_handler(500)
    async def internal_server_error_handler(
        request: Request,
        exc: Exception
    ) -> JSONResponse:
        """Handle unexpected server errors."""
        logger.exception("Unexpected server error: %s", exc)

        return JSONResponse(
            status_code=500,
            content=error_body("INTERNAL_SERVER_ERROR", "An unexpected error occurred")
        )


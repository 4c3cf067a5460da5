"""
Exception handlers.

Every AdminboardError is rendered into the rejection envelope with the
status code declared on its class. Anything else becomes a generic 500.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shared.exceptions import AdminboardError, ConfigurationError, RateLimitError

from .dependencies import get_container
from .models.errors import ErrorResponse

logger = logging.getLogger(__name__)


async def handle_adminboard_error(request: Request, exc: AdminboardError) -> JSONResponse:
    headers = {}
    if exc.status_code == 401:
        headers["WWW-Authenticate"] = "Bearer"
    if isinstance(exc, RateLimitError):
        headers["Retry-After"] = str(exc.retry_after)
    if isinstance(exc, ConfigurationError):
        logger.error(f"Configuration error on {request.url.path}: {exc.message}")

    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=headers or None,
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    message = errors[0].get("msg", "Validation failed") if errors else "Validation failed"
    body = ErrorResponse(
        message=message,
        code="VALIDATION_ERROR",
        details={"errors": [{"loc": list(e.get("loc", ())), "msg": e.get("msg")} for e in errors]},
    )
    return JSONResponse(status_code=400, content=body.model_dump(exclude_none=True, by_alias=True))


async def handle_http_exception(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    body = ErrorResponse(message=str(exc.detail), code=f"HTTP_{exc.status_code}")
    return JSONResponse(
        status_code=exc.status_code,
        content=body.model_dump(exclude_none=True, by_alias=True),
        headers=getattr(exc, "headers", None),
    )


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    body = ErrorResponse(message="Server error", code="SERVER_ERROR")
    if not get_container().settings.is_production:
        body.error = f"{type(exc).__name__}: {exc}"
    return JSONResponse(status_code=500, content=body.model_dump(exclude_none=True, by_alias=True))


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the envelope-producing handlers to an application."""
    app.add_exception_handler(AdminboardError, handle_adminboard_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_exception)
    app.add_exception_handler(Exception, handle_unexpected_error)

"""Error Handlers — map catalog failures onto HTTP responses.

Invariants:
    - Every error body is the CatalogError envelope ({"error": {...}})
    - Malformed request bodies are INVALID_INPUT (400), with the offending
      body fields in context.invalid_args
    - ValidationFailedError logs its entity, field and violation kind
    - Unhandled exceptions answer 500 without internal details
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from catalog.core.errors import (
    CatalogError, ErrorCategory, ErrorContext, ErrorSeverity,
    InvalidInputError, ValidationFailedError,
)

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(CatalogError, catalog_error_handler)
    app.add_exception_handler(RequestValidationError, request_shape_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)


async def catalog_error_handler(request: Request, exc: CatalogError):
    extra = {"error_code": exc.code, "path": request.url.path}
    if isinstance(exc, ValidationFailedError):
        extra.update(entity=exc.entity, field=exc.field, kind=exc.kind)
        message = f"{exc.entity}.{exc.field} rejected ({exc.kind}): {exc.message}"
    else:
        message = f"{exc.code}: {exc.message}"

    if exc.http_status >= 500:
        logger.error(message, extra=extra)
    else:
        logger.warning(message, extra=extra)
    return JSONResponse(status_code=exc.http_status, content=exc.to_response())


async def request_shape_handler(request: Request, exc: RequestValidationError):
    """Reject bodies whose fields have the wrong type."""
    invalid = {
        ".".join(str(part) for part in e["loc"] if part != "body"): e["msg"]
        for e in exc.errors()
    }
    return await catalog_error_handler(request, InvalidInputError(
        "Invalid request data",
        invalid_args=invalid,
        context=ErrorContext(operation=f"{request.method} {request.url.path}"),
    ))


async def unhandled_error_handler(request: Request, exc: Exception):
    logger.error(
        f"Unhandled {type(exc).__name__} on {request.url.path}: {exc}",
        extra={"path": request.url.path}, exc_info=True,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
                "category": ErrorCategory.INTERNAL.value,
                "severity": ErrorSeverity.CRITICAL.value,
            },
        },
    )

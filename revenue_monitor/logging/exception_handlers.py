# revenue_monitor/logging/exception_handlers.py
"""Exception handlers mapping failures onto the API error envelope.

Missing entities and unknown routes are expected outcomes and are logged at
INFO. Store faults and anything uncaught are logged at ERROR with the
traceback, while the response body stays generic.
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError, ResponseValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from revenue_monitor.core.schemas import error_envelope
from revenue_monitor.monitoring.filters import InvalidFilterValue

logger = logging.getLogger(__name__)

ROUTE_NOT_FOUND = "Endpoint not found"


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Domain-absent lookups and unknown routes."""
    detail = exc.detail
    if exc.status_code == 404 and detail == "Not Found":
        # Raised by the router itself, not by an endpoint
        detail = ROUTE_NOT_FOUND

    if exc.status_code >= 500:
        logger.error("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, detail)
    else:
        logger.info("%s %s -> %d: %s", request.method, request.url.path, exc.status_code, detail)

    return JSONResponse(
        status_code=exc.status_code,
        content=error_envelope(str(detail)),
        headers=getattr(exc, "headers", None),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed query or path parameters."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("query", "path"))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))

    logger.info("%s %s -> 422: %s", request.method, request.url.path, "; ".join(messages))

    return JSONResponse(status_code=422, content=error_envelope("; ".join(messages) or "Invalid request"))


async def invalid_filter_exception_handler(request: Request, exc: InvalidFilterValue):
    """Query parameters that were supplied but cannot be parsed."""
    logger.info("%s %s -> 422: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=422, content=error_envelope(str(exc)))


async def store_exception_handler(request: Request, exc: SQLAlchemyError):
    """Store unreachable, malformed query or timeout. SQL text never reaches the client."""
    logger.error(
        "Database error on %s %s: %s", request.method, request.url.path, type(exc).__name__, exc_info=exc
    )
    return JSONResponse(status_code=500, content=error_envelope("Database error"))


async def response_validation_exception_handler(request: Request, exc: ResponseValidationError):
    logger.error("Response validation failed on %s %s: %s", request.method, request.url.path, exc.errors())
    return JSONResponse(status_code=500, content=error_envelope("Internal server error"))


async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content=error_envelope("Internal server error"))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(InvalidFilterValue, invalid_filter_exception_handler)
    app.add_exception_handler(ResponseValidationError, response_validation_exception_handler)
    app.add_exception_handler(SQLAlchemyError, store_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

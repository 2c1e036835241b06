from __future__ import annotations

"""
JSON exception handlers.

Wired by `app.main.create_app`. Every HTTP error is rendered with the same
envelope the admin routes use for success (`success: false` + `message`), so
clients branch on a single field.
"""

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.exceptions import AppException

logger = logging.getLogger("errors")


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", None) or "N/A"


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:  # type: ignore
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_problem(fallback_request_id=_request_id(request))),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:  # type: ignore
    detail = exc.detail if isinstance(exc.detail, str) else str(exc.detail)
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "message": detail,
            "code": exc.status_code,
            "request_id": _request_id(request),
        },
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:  # type: ignore
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "message": "Validation error",
            "code": status.HTTP_422_UNPROCESSABLE_ENTITY,
            "request_id": _request_id(request),
            "errors": jsonable_encoder(exc.errors()),
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:  # type: ignore
    # Hide internals from the client; keep the stack trace in the logs.
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "message": "An unexpected error occurred.",
            "code": status.HTTP_500_INTERNAL_SERVER_ERROR,
            "request_id": _request_id(request),
        },
    )


__all__ = [
    "app_exception_handler",
    "http_exception_handler",
    "validation_exception_handler",
    "global_exception_handler",
]

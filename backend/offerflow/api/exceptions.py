"""
Global exception handlers
"""

import logging
from decimal import Decimal
from typing import Any, Dict
from uuid import UUID
from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from offerflow.services.lifecycle.errors import (
    LifecycleError,
    ConflictError,
    AuthorizationError,
    NotFoundError,
    InconsistentStateError,
    ValidationError,
)
from offerflow.utils.trace_id import get_trace_id

logger = logging.getLogger(__name__)

LIFECYCLE_STATUS_CODES = {
    ConflictError: status.HTTP_409_CONFLICT,
    AuthorizationError: status.HTTP_403_FORBIDDEN,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    InconsistentStateError: status.HTTP_409_CONFLICT,
    ValidationError: status.HTTP_400_BAD_REQUEST,
}


def _json_safe(obj):
    """Recursively convert non-JSON-serializable objects to strings"""
    if isinstance(obj, (Decimal, UUID, Exception)):
        return str(obj)
    if isinstance(obj, dict):
        return {key: _json_safe(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [_json_safe(item) for item in obj]
    if isinstance(obj, type):
        return str(obj)
    return obj


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions"""
    trace_id = get_trace_id(request)

    # If detail is already a dict with "error" key, use it directly (preserving custom codes)
    if isinstance(exc.detail, dict) and "error" in exc.detail:
        error_response: Dict[str, Any] = exc.detail.copy()
        if isinstance(error_response["error"], dict) and "trace_id" not in error_response["error"]:
            error_response["error"]["trace_id"] = trace_id
    else:
        error_response = {
            "error": {
                "code": f"HTTP_{exc.status_code}",
                "message": exc.detail if isinstance(exc.detail, str) else str(exc.detail),
                "trace_id": trace_id,
            }
        }

    return JSONResponse(
        status_code=exc.status_code,
        content=error_response,
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Handle validation exceptions"""
    trace_id = get_trace_id(request)

    error_response: Dict[str, Any] = {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Request validation failed",
            "details": _json_safe(exc.errors()),
            "trace_id": trace_id,
        }
    }

    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=error_response,
    )


async def lifecycle_exception_handler(request: Request, exc: LifecycleError) -> JSONResponse:
    """Map lifecycle errors onto 409 / 403 / 404 / 400 with the standard envelope"""
    trace_id = get_trace_id(request)
    status_code = status.HTTP_400_BAD_REQUEST
    for exc_type, code in LIFECYCLE_STATUS_CODES.items():
        if isinstance(exc, exc_type):
            status_code = code
            break

    error: Dict[str, Any] = {
        "code": exc.code,
        "message": exc.message,
        "trace_id": trace_id,
    }
    if exc.details:
        error["details"] = _json_safe(exc.details)
    if isinstance(exc, ConflictError) and exc.conflicting_item_id is not None:
        error["conflicting_item_id"] = str(exc.conflicting_item_id)

    return JSONResponse(status_code=status_code, content={"error": error})


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle general exceptions"""
    trace_id = get_trace_id(request)

    error_response: Dict[str, Any] = {
        "error": {
            "code": "INTERNAL_ERROR",
            "message": "An internal error occurred",
            "trace_id": trace_id,
        }
    }

    logger.exception("Unhandled exception", exc_info=exc, extra={"trace_id": trace_id})

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_response,
    )

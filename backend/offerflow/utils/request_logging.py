"""
Request logging middleware - one structured line per HTTP request
"""

import time
import logging
from typing import Callable
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from offerflow.infrastructure.logging_config import trace_id_context
from offerflow.utils.metrics import record_http_request

logger = logging.getLogger(__name__)

# Logged at DEBUG
QUIET_PATHS = frozenset({"/health", "/ready", "/metrics"})


def _request_fields(request: Request, status_code: int, duration_ms: float) -> dict:
    fields = {
        "trace_id": trace_id_context.get(),
        "path": request.url.path,
        "method": request.method,
        "status_code": status_code,
        "duration_ms": round(duration_ms, 2),
    }
    # Set by the auth dependency once the bearer token is verified
    principal = getattr(request.state, "principal", None)
    if principal is not None:
        fields["actor_id"] = principal.subject
        fields["actor_roles"] = ",".join(principal.roles)
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs path, method, status, duration and the acting party of every request,
    and feeds the HTTP request metrics.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        status_code = 500
        error = None

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            error = str(e)
            raise
        finally:
            duration_ms = (time.perf_counter() - start_time) * 1000
            fields = _request_fields(request, status_code, duration_ms)

            if error:
                fields["error"] = error
                logger.error("Request failed", extra=fields)
            elif status_code >= 500:
                logger.error("Request failed", extra=fields)
            elif status_code >= 400:
                logger.warning("Request client error", extra=fields)
            elif request.url.path in QUIET_PATHS:
                logger.debug("Probe request", extra=fields)
            else:
                logger.info("Request completed", extra=fields)

            record_http_request(
                path=request.url.path,
                method=request.method,
                status_code=status_code,
                duration_seconds=duration_ms / 1000,
            )

        return response

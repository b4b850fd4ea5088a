"""
Trace ID middleware

Every request carries one trace id: the caller's X-Trace-ID (or X-Request-Id)
when it is a safe token, otherwise a fresh UUID. The id is stored on
request.state, bound to the logging ContextVar for the duration of the request
and echoed back in the X-Trace-ID response header.
"""

import re
import uuid
from typing import Optional
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from offerflow.infrastructure.logging_config import trace_id_context

TRACE_ID_HEADER = "X-Trace-ID"
_INCOMING_HEADERS = (TRACE_ID_HEADER, "X-Request-Id")
_SAFE_TRACE_ID = re.compile(r"^[A-Za-z0-9._:-]{1,128}$")


def generate_trace_id() -> str:
    return str(uuid.uuid4())


def incoming_trace_id(request: Request) -> Optional[str]:
    """First well-formed trace id supplied by the caller, or None"""
    for header in _INCOMING_HEADERS:
        value = request.headers.get(header)
        if value and _SAFE_TRACE_ID.match(value):
            return value
    return None


class TraceIDMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        trace_id = incoming_trace_id(request) or generate_trace_id()
        request.state.trace_id = trace_id
        token = trace_id_context.set(trace_id)
        try:
            response = await call_next(request)
        finally:
            trace_id_context.reset(token)

        response.headers[TRACE_ID_HEADER] = trace_id
        return response


def get_trace_id(request: Request) -> Optional[str]:
    """trace_id of the current request, falling back to the logging context"""
    return getattr(request.state, "trace_id", None) or trace_id_context.get()

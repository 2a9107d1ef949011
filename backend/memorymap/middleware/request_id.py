"""
Memory Map Backend — Request ID Middleware
============================================

What:  Tags every request with a correlation ID and echoes it in X-Request-ID.
How:   Accepts the caller's X-Request-ID when it looks like an identifier,
       otherwise mints a short one. The ID lives in a ContextVar so access
       logs, the rate limiter and the exception handlers can all read it.

Accepted caller IDs: 1-64 characters of letters, digits, '-', '_' or '.'.
Anything else (spaces, newlines, very long values) is replaced, since the
value is written verbatim into log lines and response bodies.
"""

import re
import uuid
from contextvars import ContextVar
from typing import Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"

_ACCEPTED_ID = re.compile(r"[A-Za-z0-9._-]{1,64}")

# Coroutine-local: concurrent requests on one event loop each see their own ID
request_id_var: ContextVar[str] = ContextVar("request_id", default="")


def new_request_id() -> str:
    return uuid.uuid4().hex[:8]


def resolve_request_id(supplied: Optional[str]) -> str:
    """The caller's ID when acceptable, else a freshly generated one."""
    if supplied and _ACCEPTED_ID.fullmatch(supplied):
        return supplied
    return new_request_id()


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Outermost middleware: every later layer and every response sees the ID."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        rid = resolve_request_id(request.headers.get(HEADER))
        request_id_var.set(rid)

        response = await call_next(request)

        response.headers[HEADER] = rid
        return response

"""
Memory Map Backend — Request Logging Middleware
=================================================

What:  One access log line per HTTP request on the "memorymap.access" logger.
How:   Times the rest of the stack and logs method, path, status, duration,
       request ID and client IP. A handler that raises is logged as a 500
       before the exception continues to the server error handler.

Line format:
    POST /api/v1/messages 200 4.2ms [a1b2c3d4] from 127.0.0.1

The same fields go into the record's `extra` for structured handlers.
Request bodies are never logged: they hold visitors' names and positions.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from memorymap.middleware.request_id import request_id_var

logger = logging.getLogger("memorymap.access")

# Polled by load balancers every few seconds
QUIET_PATHS = frozenset({"/health"})


def level_for_status(status: int) -> int:
    """5xx → ERROR, 4xx → WARNING, anything else → INFO."""
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Access logging with request-ID correlation."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in QUIET_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            self._log(request, 500, started)
            raise

        self._log(request, response.status_code, started)
        return response

    @staticmethod
    def _log(request: Request, status: int, started: float) -> None:
        duration_ms = (time.perf_counter() - started) * 1000
        client_ip = request.client.host if request.client else "unknown"
        rid = request_id_var.get("")

        logger.log(
            level_for_status(status),
            "%s %s %d %.1fms [%s] from %s",
            request.method,
            request.url.path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": request.method,
                "path": request.url.path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

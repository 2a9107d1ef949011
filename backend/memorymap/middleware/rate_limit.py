"""
Memory Map Backend — Message Creation Rate Limit
==================================================

What:  Per-IP sliding window limit on POST /api/v1/messages.
How:   Keeps the timestamps of each IP's recent submissions in memory;
       a submission is rejected with 429 once the window already holds
       `rate_limit_requests` of them. Reads are never limited.

Algorithm: Sliding Window Log
    1. Drop timestamps older than the window
    2. If remaining count >= limit, reject with 429 and Retry-After
    3. Otherwise record now and let the request through

State lives in the process, so each uvicorn worker enforces its own limit.
"""

import logging
import time
from collections import defaultdict
from typing import Dict, List, Optional

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from memorymap.config import settings
from memorymap.exceptions import RateLimitExceededError
from memorymap.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

LIMITED_PATH = "/api/v1/messages"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    In-memory sliding window limiter for message creation.

    Configuration (from settings unless given explicitly):
        rate_limit_requests: Max submissions per window
        rate_limit_window:   Window duration in seconds
    """

    def __init__(
        self,
        app,
        max_requests: Optional[int] = None,
        window_seconds: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(app, **kwargs)
        self.max_requests = max_requests or settings.rate_limit_requests
        self.window_seconds = window_seconds or settings.rate_limit_window
        self._requests: Dict[str, List[float]] = defaultdict(list)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method != "POST" or request.url.path.rstrip("/") != LIMITED_PATH:
            return await call_next(request)

        client_ip = (
            getattr(request.client, "host", "unknown")
            if request.client
            else "unknown"
        )

        now = time.time()
        window_start = now - self.window_seconds

        self._requests[client_ip] = [
            ts for ts in self._requests[client_ip] if ts > window_start
        ]

        if len(self._requests[client_ip]) >= self.max_requests:
            oldest = self._requests[client_ip][0]
            exc = RateLimitExceededError(
                retry_after=int(oldest + self.window_seconds - now) + 1,
            )

            logger.warning(
                "Rate limit exceeded for IP %s: %d messages in %ds window",
                client_ip,
                len(self._requests[client_ip]),
                self.window_seconds,
            )

            # Exceptions raised here bypass FastAPI's handlers, so the
            # response is built in place with the same error shape.
            return JSONResponse(
                status_code=429,
                content={
                    "error": "rate_limit_exceeded",
                    "message": exc.message,
                    "details": exc.context,
                    "request_id": request_id_var.get(""),
                },
                headers={"Retry-After": str(exc.retry_after)},
            )

        self._requests[client_ip].append(now)

        # Drop idle IPs every 1000 recorded submissions
        if sum(len(v) for v in self._requests.values()) % 1000 == 0:
            self._cleanup_inactive_ips(window_start)

        return await call_next(request)

    def _cleanup_inactive_ips(self, window_start: float) -> None:
        inactive_ips = [
            ip for ip, timestamps in self._requests.items()
            if not timestamps or max(timestamps) < window_start
        ]
        for ip in inactive_ips:
            del self._requests[ip]

        if inactive_ips:
            logger.debug("Cleaned up %d inactive IP entries", len(inactive_ips))

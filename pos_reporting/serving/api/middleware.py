"""
API Middleware

- Request context: request id and report name bound into every log line,
  timing and security headers on every response
- Per-client rate limiting over a sliding window
"""

import time
from collections import deque
from typing import Callable, Deque, Dict, Optional

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
import structlog

from pos_reporting.reporting.normalizers import error_envelope

logger = structlog.get_logger(__name__)

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
    # Report data is time-sensitive; the summary cache lives server-side
    "Cache-Control": "no-store",
}


def report_name_for_path(path: str) -> Optional[str]:
    """Report name from a `.../reports/<name>` path, None for other routes"""
    _, marker, name = path.rstrip("/").rpartition("/reports/")
    return name if marker and name else None


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Bind request context for logging and decorate the response.

    The bound `request_id` and `report` appear on the completion line and on
    everything logged while the request is handled.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.perf_counter()
        request_id = request.headers.get("X-Request-ID") or str(time.time_ns())

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        report = report_name_for_path(request.url.path)
        if report:
            structlog.contextvars.bind_contextvars(report=report)

        try:
            response = await call_next(request)
            duration_ms = round((time.perf_counter() - start_time) * 1000, 2)
            log = logger.warning if response.status_code >= 500 else logger.info
            log(
                "Request completed",
                method=request.method,
                path=request.url.path,
                query=str(request.query_params) or None,
                status_code=response.status_code,
                duration_ms=duration_ms,
            )

            response.headers.update(SECURITY_HEADERS)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms:.2f}ms"
            return response
        finally:
            structlog.contextvars.clear_contextvars()


class RateLimitMiddleware(BaseHTTPMiddleware):
    """
    Sliding-window rate limiter per client address.

    State is per process; each worker counts independently. Clients with no
    request inside the window are forgotten.
    """

    def __init__(
        self,
        app,
        max_requests: int = 100,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = {}
        self._last_sweep = clock()

    @property
    def tracked_clients(self) -> int:
        return len(self._hits)

    def _sweep(self, now: float) -> None:
        cutoff = now - self.window_seconds
        quiet = [client_id for client_id, hits in self._hits.items() if not hits or hits[-1] <= cutoff]
        for client_id in quiet:
            del self._hits[client_id]
        self._last_sweep = now

    def admit(self, client_id: str) -> Optional[int]:
        """
        Record a request from `client_id`.

        Returns:
            Requests left in the window, or None when the client is over the limit
        """
        now = self._clock()
        if now - self._last_sweep >= self.window_seconds:
            self._sweep(now)

        hits = self._hits.setdefault(client_id, deque())
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()

        if len(hits) >= self.max_requests:
            return None
        hits.append(now)
        return self.max_requests - len(hits)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_id = request.client.host if request.client else "unknown"
        remaining = self.admit(client_id)

        if remaining is None:
            logger.warning("Rate limit exceeded", client=client_id, limit=self.max_requests)
            return JSONResponse(
                status_code=429,
                content=error_envelope("Too many requests, retry shortly", "RateLimitExceeded"),
                headers={
                    "Retry-After": str(self.window_seconds),
                    "X-RateLimit-Limit": str(self.max_requests),
                    "X-RateLimit-Remaining": "0",
                },
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

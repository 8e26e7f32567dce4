"""Simple in-memory sliding-window rate limiter.

Sufficient for single-instance deployments and local development; the
``/health`` probe is never limited.  Clients are keyed on the first
``X-Forwarded-For`` hop, which is only trustworthy behind a proxy that sets
it.  Multi-instance deployments need a shared store such as Redis.
"""

from __future__ import annotations

import time
from collections import defaultdict
from typing import Any

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from cyclecast.config import Settings, get_settings

EXEMPT_PATHS = frozenset({"/health"})


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Per-IP sliding window rate limiter.

    IPs with no request inside the window are swept out at most once per
    window, so clients that never return do not accumulate.
    """

    def __init__(
        self,
        app: Any,
        settings: Settings | None = None,
        window_seconds: float = 60.0,
    ) -> None:
        super().__init__(app)
        s = settings or get_settings()
        self._max_requests = s.rate_limit_per_minute
        self._window_seconds = window_seconds
        # ip -> request timestamps inside the current window
        self._requests: dict[str, list[float]] = defaultdict(list)
        self._last_sweep = time.monotonic()

    def _client_ip(self, request: Request) -> str:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
        return request.client.host if request.client else "unknown"

    def _prune(self, ip: str, now: float) -> list[float]:
        cutoff = now - self._window_seconds
        recent = [t for t in self._requests[ip] if t > cutoff]
        if recent:
            self._requests[ip] = recent
        else:
            self._requests.pop(ip, None)
        return recent

    def _sweep(self, now: float) -> None:
        """Drop every IP whose newest request has left the window."""
        cutoff = now - self._window_seconds
        stale = [
            ip for ip, stamps in self._requests.items() if not stamps or stamps[-1] <= cutoff
        ]
        for ip in stale:
            del self._requests[ip]
        self._last_sweep = now

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        now = time.monotonic()
        if now - self._last_sweep >= self._window_seconds:
            self._sweep(now)

        ip = self._client_ip(request)
        recent = self._prune(ip, now)

        if len(recent) >= self._max_requests:
            retry_after = int(self._window_seconds - (now - recent[0]))
            return Response(
                content='{"detail":"Rate limit exceeded"}',
                status_code=429,
                media_type="application/json",
                headers={"Retry-After": str(max(retry_after, 1))},
            )

        self._requests[ip].append(now)
        response = await call_next(request)

        remaining = self._max_requests - len(self._requests[ip])
        response.headers["X-RateLimit-Limit"] = str(self._max_requests)
        response.headers["X-RateLimit-Remaining"] = str(max(remaining, 0))
        return response

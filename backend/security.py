"""HTTP hardening for the simulation API.

Everything here is driven by one ``SecuritySettings`` value, normally read
from the environment when the application context is built:

- per-client request quotas on ``/api`` routes
- a cap on declared request body size
- response headers, including ``no-store`` caching for API results
- a per-client cap on concurrent live WebSocket connections
"""

import logging
import math
import os
import time
from collections import Counter, defaultdict, deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, FrozenSet

from fastapi import Request, status
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from ecosim.config.server import (
    DEFAULT_RATE_LIMIT_REQUESTS,
    DEFAULT_RATE_LIMIT_WINDOW_SECONDS,
    MAX_LIVE_CONNECTIONS_PER_CLIENT,
    MAX_REQUEST_BODY_BYTES,
)

logger = logging.getLogger(__name__)

# Liveness probes and the long-lived live channel are never throttled
UNLIMITED_PATHS = frozenset({"/api/health", "/api/live"})

RATE_LIMIT_MESSAGE = "Too many requests, please try again later."


def _trusted_from_env() -> FrozenSet[str]:
    return frozenset(filter(None, os.getenv("IP_WHITELIST", "127.0.0.1,::1").split(",")))


@dataclass(frozen=True)
class SecuritySettings:
    """Limits applied by the security middleware and the live channel.

    Attributes:
        rate_limit_enabled: Master switch for request quotas.
        rate_limit_requests: Requests allowed per client per window.
        rate_limit_window: Quota window in seconds.
        trusted_ips: Client addresses exempt from quotas and connection caps.
        max_body_bytes: Largest accepted ``Content-Length``.
        max_live_connections: Concurrent live sockets per client address.
    """

    rate_limit_enabled: bool = True
    rate_limit_requests: int = DEFAULT_RATE_LIMIT_REQUESTS
    rate_limit_window: int = DEFAULT_RATE_LIMIT_WINDOW_SECONDS
    trusted_ips: FrozenSet[str] = frozenset({"127.0.0.1", "::1"})
    max_body_bytes: int = MAX_REQUEST_BODY_BYTES
    max_live_connections: int = MAX_LIVE_CONNECTIONS_PER_CLIENT

    @classmethod
    def from_env(cls) -> "SecuritySettings":
        """Read RATE_LIMIT_ENABLED, RATE_LIMIT_REQUESTS, RATE_LIMIT_WINDOW and IP_WHITELIST."""
        return cls(
            rate_limit_enabled=os.getenv("RATE_LIMIT_ENABLED", "true").lower() == "true",
            rate_limit_requests=int(
                os.getenv("RATE_LIMIT_REQUESTS", str(DEFAULT_RATE_LIMIT_REQUESTS))
            ),
            rate_limit_window=int(
                os.getenv("RATE_LIMIT_WINDOW", str(DEFAULT_RATE_LIMIT_WINDOW_SECONDS))
            ),
            trusted_ips=_trusted_from_env(),
        )


def get_client_ip(headers, client) -> str:
    """Best-effort client address: proxy headers first, then the socket peer."""
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        # Leftmost entry is the originating client
        return forwarded_for.split(",")[0].strip()
    return headers.get("x-real-ip") or (client.host if client else "unknown")


class RequestQuota:
    """Sliding-window request counter keyed by client address.

    State is per process; with several workers each enforces its own window.
    """

    def __init__(
        self,
        limit: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.limit = limit
        self.window_seconds = window_seconds
        self._clock = clock
        self._hits: Dict[str, Deque[float]] = defaultdict(deque)

    def _expire(self, client_ip: str, now: float) -> Deque[float]:
        hits = self._hits[client_ip]
        while hits and hits[0] <= now - self.window_seconds:
            hits.popleft()
        return hits

    def allow(self, client_ip: str) -> bool:
        """Count one request; False if the client has used up its window."""
        now = self._clock()
        hits = self._expire(client_ip, now)
        if len(hits) >= self.limit:
            return False
        hits.append(now)
        return True

    def retry_after(self, client_ip: str) -> int:
        """Whole seconds until the oldest counted request leaves the window."""
        hits = self._hits.get(client_ip)
        if not hits:
            return 0
        return max(1, math.ceil(hits[0] + self.window_seconds - self._clock()))


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Apply a ``RequestQuota`` to ``/api`` routes."""

    def __init__(self, app, settings: SecuritySettings):
        super().__init__(app)
        self.trusted_ips = settings.trusted_ips
        self.quota = RequestQuota(settings.rate_limit_requests, settings.rate_limit_window)

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if not path.startswith("/api") or path in UNLIMITED_PATHS:
            return await call_next(request)

        client_ip = get_client_ip(request.headers, request.client)
        if client_ip in self.trusted_ips or self.quota.allow(client_ip):
            return await call_next(request)

        retry_after = self.quota.retry_after(client_ip)
        logger.warning("Rate limit hit by %s on %s (retry in %ds)", client_ip, path, retry_after)
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"error": RATE_LIMIT_MESSAGE, "retryAfter": retry_after},
            headers={"Retry-After": str(retry_after)},
        )


class BodySizeLimitMiddleware(BaseHTTPMiddleware):
    """Reject requests whose declared body exceeds ``max_bytes``."""

    def __init__(self, app, max_bytes: int):
        super().__init__(app)
        self.max_bytes = max_bytes

    async def dispatch(self, request: Request, call_next):
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_bytes:
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"error": f"Request body exceeds {self.max_bytes} bytes"},
            )
        return await call_next(request)


class ResponseHeadersMiddleware(BaseHTTPMiddleware):
    """Set hardening headers and make API responses uncacheable."""

    HEADERS = {
        "X-Content-Type-Options": "nosniff",
        "X-Frame-Options": "SAMEORIGIN",
        "Referrer-Policy": "strict-origin-when-cross-origin",
    }

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.update(self.HEADERS)
        # The event stream declares its own caching policy
        if request.url.path.startswith("/api/"):
            response.headers.setdefault("Cache-Control", "no-store")
        return response


def setup_security_middleware(
    app, settings: SecuritySettings, enable_rate_limiting: bool = True
) -> None:
    """Install the security middleware stack.

    Args:
        app: FastAPI application instance
        settings: Limits to enforce
        enable_rate_limiting: Whether quotas apply (production only by default)
    """
    # Starlette runs the most recently added middleware first
    app.add_middleware(ResponseHeadersMiddleware)
    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.max_body_bytes)

    if enable_rate_limiting and settings.rate_limit_enabled:
        app.add_middleware(RateLimitMiddleware, settings=settings)


class LiveConnectionLimiter:
    """Caps concurrent live WebSocket connections per client address."""

    def __init__(
        self,
        max_per_client: int = MAX_LIVE_CONNECTIONS_PER_CLIENT,
        trusted_ips: FrozenSet[str] = frozenset(),
    ):
        self.max_per_client = max_per_client
        self.trusted_ips = trusted_ips
        self.active: Counter = Counter()

    @classmethod
    def from_settings(cls, settings: SecuritySettings) -> "LiveConnectionLimiter":
        return cls(settings.max_live_connections, settings.trusted_ips)

    def acquire(self, client_ip: str) -> bool:
        """Claim a connection slot. Returns False if the client is at its cap."""
        if client_ip not in self.trusted_ips and self.active[client_ip] >= self.max_per_client:
            return False
        self.active[client_ip] += 1
        return True

    def release(self, client_ip: str) -> None:
        if self.active[client_ip] > 1:
            self.active[client_ip] -= 1
        else:
            self.active.pop(client_ip, None)

"""Per-client moving window rate limiting.

Built on `limits`, the storage and strategy layer that Flask-Limiter uses,
with in-memory storage.
"""

import logging
import math
import time
from typing import Optional, Sequence

from limits import parse
from limits.storage import MemoryStorage, Storage
from limits.strategies import MovingWindowRateLimiter
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from app.errors import error_body

logger = logging.getLogger(__name__)

AUTH_LIMITED_PREFIXES = ("/api/auth/sign-in", "/api/auth/sign-up")
EXEMPT_PREFIXES = ("/health",)


def client_address(request: Request) -> str:
    # The socket peer. Behind a proxy, run uvicorn with --proxy-headers and
    # --forwarded-allow-ips so the peer is rewritten from X-Forwarded-For
    return request.client.host if request.client else "unknown"


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        default_limit: str = "100/minute",
        auth_limit: Optional[str] = "20/minute",
        exempt_prefixes: Sequence[str] = EXEMPT_PREFIXES,
        storage: Optional[Storage] = None,
    ):
        super().__init__(app)
        self.default_limit = parse(default_limit)
        self.auth_limit = parse(auth_limit) if auth_limit else None
        self.exempt_prefixes = tuple(exempt_prefixes)
        self.limiter = MovingWindowRateLimiter(storage or MemoryStorage())

    def _limit_for(self, path: str):
        if self.auth_limit is not None and path.startswith(AUTH_LIMITED_PREFIXES):
            return self.auth_limit, "auth"
        return self.default_limit, "default"

    async def dispatch(self, request: Request, call_next):
        path = request.url.path
        if request.method == "OPTIONS" or path.startswith(self.exempt_prefixes):
            return await call_next(request)

        item, scope = self._limit_for(path)
        key = client_address(request)

        if not self.limiter.hit(item, scope, key):
            reset_time, _ = self.limiter.get_window_stats(item, scope, key)
            retry_after = max(1, math.ceil(reset_time - time.time()))
            logger.warning(
                "Rate limit exceeded",
                extra={"client": key, "path": path, "limit": str(item)},
            )
            return JSONResponse(
                status_code=429,
                content=error_body("Rate limit exceeded", "RATE_LIMIT_EXCEEDED"),
                headers={
                    "Retry-After": str(retry_after),
                    "X-RateLimit-Limit": str(item.amount),
                    "X-RateLimit-Remaining": "0",
                },
            )

        _, remaining = self.limiter.get_window_stats(item, scope, key)
        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(item.amount)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

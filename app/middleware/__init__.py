"""HTTP middleware: request timing and rate limiting."""

from app.middleware.rate_limit import RateLimitMiddleware
from app.middleware.timing import timing_middleware

__all__ = ["RateLimitMiddleware", "timing_middleware"]

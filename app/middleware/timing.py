import logging
import time

from fastapi import Request

logger = logging.getLogger(__name__)


async def timing_middleware(request: Request, call_next):
    """Log every request with its status and how long it took."""
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = (time.perf_counter() - start) * 1000

    response.headers["X-Process-Time"] = f"{duration_ms:.2f}ms"
    logger.info(
        f"{request.method} {request.url.path} -> {response.status_code} ({duration_ms:.2f}ms)",
        extra={
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "duration_ms": round(duration_ms, 2),
        },
    )
    return response

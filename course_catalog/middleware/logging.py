# course_catalog/middleware/logging.py
"""
Request logging: one line when a request arrives, one when it is answered.
"""

import time
from fastapi import Request
from course_catalog.core.logging import get_logger

logger = get_logger(__name__)


async def logging_middleware(request: Request, call_next):
    """Log every request with its client, status and duration."""
    log = logger.bind(
        method=request.method,
        path=request.url.path,
        client=request.client.host if request.client else None,
    )
    start_time = time.perf_counter()
    log.debug("request started")

    response = await call_next(request)

    log.info(
        "request completed",
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
    )
    return response

"""
FastAPI middleware for request context tracking.

RequestContextMiddleware:
1. Reads or generates the X-Correlation-ID header
2. Binds the correlation id and the caller's X-User-Id to the logging context
3. Returns the correlation id in the response headers
4. Logs method, path, status and duration of every request at DEBUG
"""
import time
import uuid
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from teamroll.core.auth import USER_ID_HEADER
from teamroll.core.logging import (
    clear_correlation_id,
    clear_user_id,
    get_logger,
    set_correlation_id,
    set_user_id,
)

logger = get_logger(__name__)

CORRELATION_ID_HEADER = "X-Correlation-ID"


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Attach correlation and caller ids to every request.

    Usage:
        app.add_middleware(RequestContextMiddleware)

    Access in endpoints:
        correlation_id = request.state.correlation_id
    """

    async def dispatch(
        self, request: Request, call_next: Callable[[Request], Response]
    ) -> Response:
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        correlation_token = set_correlation_id(correlation_id)
        user_token = set_user_id(request.headers.get(USER_ID_HEADER, ""))
        started = time.perf_counter()

        try:
            response = await call_next(request)
            response.headers[CORRELATION_ID_HEADER] = correlation_id

            logger.debug(
                f"Request completed: {request.method} {request.url.path}",
                extra={
                    "method": request.method,
                    "path": request.url.path,
                    "status": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )
            return response
        finally:
            clear_user_id(user_token)
            clear_correlation_id(correlation_token)

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from exam_seating.logging_config import generate_request_id, set_request_id, set_user_id

logger = logging.getLogger(__name__)

SKIP_PATHS = {"/", "/health"}


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Tags every request with an id and logs method, path, status and duration"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        set_request_id(request_id)
        set_user_id("")

        start = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start) * 1000

        response.headers["X-Request-ID"] = request_id
        if request.url.path not in SKIP_PATHS:
            logger.info(
                "HTTP %s %s - %s (%.2fms)",
                request.method, request.url.path, response.status_code, duration_ms,
                extra={"http_status": response.status_code, "duration_ms": round(duration_ms, 2)}
            )
        return response

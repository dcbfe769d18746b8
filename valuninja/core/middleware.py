from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from valuninja.core.context import get_request_id, reset_request_id, set_request_id

REQUEST_ID_HEADER = "X-Request-ID"

logger = logging.getLogger("valuninja.request")


def _end_level(status_code: int) -> int:
    return logging.WARNING if status_code >= 500 else logging.INFO


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Binds a request id to the logging context for the lifetime of each request."""

    async def dispatch(self, request: Request, call_next: Callable[[Request], Response]) -> Response:
        token = set_request_id(request.headers.get(REQUEST_ID_HEADER.lower()))
        request_id = get_request_id() or ""

        started = time.perf_counter()
        extra: dict[str, object] = {
            "path": request.url.path,
            "method": request.method,
            "client": request.client.host if request.client else None,
        }
        logger.info("request.start", extra=extra)

        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
        finally:
            extra["status_code"] = status_code
            extra["duration_ms"] = round((time.perf_counter() - started) * 1000, 2)
            logger.log(_end_level(status_code), "request.end", extra=extra)
            reset_request_id(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response

"""Request tracing for the cutting-list API: request ids, timing header, access log."""
import logging
import time
import uuid

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

logger = logging.getLogger("cutlist-api.middleware")

REQUEST_ID_HEADER = "X-Request-ID"
PROCESS_TIME_HEADER = "X-Process-Time"

# Probes hit these every few seconds
QUIET_PATHS = {"/health", "/metrics"}


class RequestTimingMiddleware(BaseHTTPMiddleware):
    """
    Reuses the caller's X-Request-ID when one is sent, otherwise issues a
    uuid4. Every response carries the id and X-Process-Time (ms). Requests
    outside QUIET_PATHS get one access-log line, at WARNING for 4xx/5xx.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id
        started = time.perf_counter()

        response: Response = await call_next(request)

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[REQUEST_ID_HEADER] = request_id
        response.headers[PROCESS_TIME_HEADER] = str(duration_ms)

        if request.url.path in QUIET_PATHS:
            return response

        logger.log(
            logging.WARNING if response.status_code >= 400 else logging.INFO,
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "http_method": request.method,
                "http_path": request.url.path,
                "http_status": response.status_code,
                "request_id": request_id,
                "duration_ms": duration_ms,
            },
        )
        return response

import time
import logging
import uuid
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from backoffice.core.config import settings

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an id and logs the slow ones.

    An incoming X-Request-ID (e.g. from the admin console's proxy) is reused,
    otherwise a fresh uuid4 is issued. Requests over
    LOG_SLOW_REQUEST_THRESHOLD_MS are logged with method, path, status and
    duration.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        started = time.perf_counter()
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        status_code = 500
        try:
            response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - started) * 1000
            if duration_ms > settings.log_slow_request_threshold_ms:
                logger.warning(
                    f"Slow request: {request.method} {request.url.path} -> {status_code} "
                    f"in {duration_ms:.2f}ms",
                    extra={
                        "method": request.method,
                        "path": request.url.path,
                        "status_code": status_code,
                        "duration_ms": round(duration_ms, 2),
                        "request_id": request_id,
                    },
                )

import logging
import time
import uuid

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from resort.core.config import settings

logger = logging.getLogger(__name__)

# Polled by load balancers; never interesting in the logs
QUIET_PATHS = {"/api/health"}


class RequestLoggerMiddleware(BaseHTTPMiddleware):
    """
    Tags every request with an X-Request-ID (the caller's, if it sent one)
    and logs server errors and requests slower than
    LOG_SLOW_REQUEST_THRESHOLD_MS.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        request.state.request_id = request_id
        started = time.perf_counter()

        response = None
        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id
            return response
        finally:
            self._log(request, response, request_id, started)

    def _log(self, request: Request, response, request_id: str, started: float):
        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        status_code = response.status_code if response is not None else 500
        extra = {
            "method": request.method,
            "path": request.url.path,
            "status_code": status_code,
            "duration_ms": duration_ms,
            "request_id": request_id,
        }

        if status_code >= 500:
            logger.warning(
                f"{request.method} {request.url.path} -> {status_code} "
                f"[{request_id}]",
                extra=extra,
            )
        elif (
            duration_ms > settings.log_slow_request_threshold_ms
            and request.url.path not in QUIET_PATHS
        ):
            logger.info(
                f"Slow request: {request.method} {request.url.path} "
                f"took {duration_ms}ms [{request_id}]",
                extra=extra,
            )

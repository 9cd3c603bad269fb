"""
Request Context Middleware
==========================

Starlette middleware for request processing.

Features:
- Request ID generation for tracing (honours an incoming X-Request-ID)
- Request timing
- Access logging by status class
"""

import time
import uuid
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from incident_tracker.core.logging import get_logger, request_id_context

# Initialize logger
logger = get_logger(__name__)

QUIET_PATHS = frozenset({"/", "/health"})


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Attach a request id to the logging context and response headers,
    and log every completed request with its timing.
    """

    def __init__(self, app: ASGIApp):
        super().__init__(app)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        token = request_id_context.set(request_id)
        request.state.request_id = request_id

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            process_time = time.perf_counter() - start_time

            response.headers["X-Request-ID"] = request_id
            response.headers["X-Process-Time"] = f"{process_time:.4f}"
            self._log_request(request, response, process_time)
            return response
        except Exception as e:
            logger.error(
                "request_failed",
                error=str(e),
                path=request.url.path,
                method=request.method,
            )
            raise
        finally:
            request_id_context.reset(token)

    def _log_request(
        self,
        request: Request,
        response: Response,
        process_time: float,
    ) -> None:
        # Don't log health checks
        if request.url.path in QUIET_PATHS:
            return

        log_data = {
            "method": request.method,
            "path": request.url.path,
            "status_code": response.status_code,
            "process_time_ms": round(process_time * 1000, 2),
            "ip_address": request.client.host if request.client else None,
        }

        if response.status_code >= 500:
            logger.error("request_completed", **log_data)
        elif response.status_code >= 400:
            logger.warning("request_completed", **log_data)
        else:
            logger.info("request_completed", **log_data)

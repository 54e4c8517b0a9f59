"""
TravelTales Backend: Request Logging Middleware
================================================

What:  One access log line for every HTTP request.
How:   Measures the time spent in the rest of the stack and logs method, path,
       status, duration, request id and client IP on the `traveltales.access`
       logger. The same values are attached as `extra` for structured handlers.
When:  After RequestIDMiddleware (uses request ID for correlation).

Not logged: request bodies, uploaded file contents, Authorization headers
and cookies.
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from traveltales.middleware.request_id import request_id_var

logger = logging.getLogger("traveltales.access")

# Health probes and static files would drown out API traffic
QUIET_PATHS = {"/health"}
QUIET_PREFIXES = ("/uploads/", "/assets/")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs method, path, status code and duration for each request.

    Log level follows the status: 5xx → ERROR, 4xx → WARNING, else INFO.
    """

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in QUIET_PATHS or path.startswith(QUIET_PREFIXES):
            return await call_next(request)

        start_time = time.perf_counter()
        client_ip = request.client.host if request.client else "unknown"
        method = request.method
        rid = request_id_var.get("")

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            extra={
                "request_id": rid,
                "method": method,
                "path": path,
                "status": status,
                "duration_ms": round(duration_ms, 2),
                "client_ip": client_ip,
            },
        )

        return response

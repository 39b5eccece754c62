"""
TripFolders Backend — Request Logging Middleware
=================================================

What:  One access log line per request: method, path, status, duration.
Why:   Most failures in this app end as a 303 redirect, which looks like a
       success to uvicorn's access log. Logging redirects that carry an
       errorMessage at WARNING makes rejected operations visible.
How:   Measures from middleware entry to response return and picks the log
       level from the status code and the redirect target.

What we log vs what we DON'T log (privacy):
    ✅ Log: method, path, status, duration, IP, request ID
    ❌ Don't log: form bodies, cookies (identity token), image payloads
"""

import logging
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from tripfolders.middleware.request_id import request_id_var

logger = logging.getLogger("tripfolders.access")


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs structured information about each HTTP request and response."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        start_time = time.perf_counter()

        client_ip = getattr(request.client, "host", "unknown") if request.client else "unknown"
        method = request.method
        path = request.url.path
        rid = request_id_var.get("")

        # Health probes run every few seconds
        if path == "/health":
            return await call_next(request)

        response = await call_next(request)

        duration_ms = (time.perf_counter() - start_time) * 1000

        status = response.status_code
        location = response.headers.get("location", "")
        if status >= 500:
            log_level = logging.ERROR
        elif status >= 400 or "errorMessage=" in location:
            log_level = logging.WARNING
        else:
            log_level = logging.INFO

        logger.log(
            log_level,
            "%s %s %d %.1fms [%s] from %s%s",
            method,
            path,
            status,
            duration_ms,
            rid,
            client_ip,
            f" -> {location.split('?', 1)[0]}" if location else "",
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

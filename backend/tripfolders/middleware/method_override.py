"""
TripFolders Backend — HTTP Method Override Middleware
======================================================

What:  Lets an HTML form POST act as PUT or DELETE.
Why:   Browsers only submit forms with GET and POST, but the folder routes
       use PUT for edits and DELETE for removal.
How:   A POST with `?_method=PUT` (or DELETE/PATCH) has its scope method
       rewritten before routing. The override is read from the query string,
       so the request body is left for the route to parse.

Example:
    <form method="POST" action="/tripFolders/{{ folder.id }}?_method=DELETE">
"""

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

OVERRIDE_PARAM = "_method"
ALLOWED_OVERRIDES = {"PUT", "PATCH", "DELETE"}


class MethodOverrideMiddleware(BaseHTTPMiddleware):
    """Rewrites POST requests carrying `?_method=` to the requested method."""

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "POST":
            override = request.query_params.get(OVERRIDE_PARAM, "").upper()
            if override in ALLOWED_OVERRIDES:
                request.scope["method"] = override
        return await call_next(request)

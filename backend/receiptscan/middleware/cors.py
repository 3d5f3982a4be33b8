"""
ReceiptScan Backend: CORS Preamble Middleware
=============================================

What:  Permissive CORS for the browser-based scanner UI.
How:   OPTIONS requests on any path are answered here with 200 and an empty
       body; every other response gets the same three CORS headers stamped
       on its way out, whatever its status code.
When:  Innermost middleware, directly in front of routing.

Headers:
    Access-Control-Allow-Origin:  settings.cors_allow_origin (default "*")
    Access-Control-Allow-Methods: "POST, OPTIONS" or "POST, GET, OPTIONS"
    Access-Control-Allow-Headers: "Content-Type"

Starlette's CORSMiddleware only answers preflights that carry Origin and
Access-Control-Request-Method, and only decorates responses to requests
with an Origin header; here every request is treated the same way.
"""

from typing import Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp


def cors_headers(
    allow_origin: str, allow_methods: str, allow_headers: str = "Content-Type"
) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": allow_origin,
        "Access-Control-Allow-Methods": allow_methods,
        "Access-Control-Allow-Headers": allow_headers,
    }


class CORSPreambleMiddleware(BaseHTTPMiddleware):
    """Short-circuits OPTIONS and adds CORS headers to all responses."""

    def __init__(
        self,
        app: ASGIApp,
        allow_origin: str = "*",
        allow_methods: str = "POST, GET, OPTIONS",
        allow_headers: str = "Content-Type",
    ):
        super().__init__(app)
        self.cors_headers = cors_headers(allow_origin, allow_methods, allow_headers)

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=self.cors_headers)

        response = await call_next(request)
        response.headers.update(self.cors_headers)
        return response

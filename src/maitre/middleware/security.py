"""Response hardening for an API that hands out bearer tokens.

Learn: every response gets the fixed BASE_HEADERS. Responses to requests
that carried an Authorization header also get Cache-Control: no-store,
since their bodies (the /auth/me user, a restaurant record) belong to
one caller. HSTS is only meaningful over HTTPS, so plain-HTTP responses
skip it.
"""

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

BASE_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}
HSTS = "max-age=31536000; includeSubDomains"


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        response: Response = await call_next(request)
        response.headers.update(BASE_HEADERS)
        if request.headers.get("authorization"):
            response.headers["Cache-Control"] = "no-store"
        if request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = HSTS
        return response

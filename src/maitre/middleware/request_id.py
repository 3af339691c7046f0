"""Per-request correlation id for the auth audit log.

Learn: the id comes from the caller's X-Request-ID when present, else a
fresh UUID. It is bound into structlog's contextvars together with the
method and path, so every auth.* line logged while handling the request
(login_failed, access_denied, upstream_failure) carries it, and it is
echoed back so a client can quote it.
"""

import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

HEADER = "X-Request-ID"


class RequestIdMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get(HEADER) or str(uuid.uuid4())
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        response: Response = await call_next(request)
        response.headers[HEADER] = request_id
        return response

"""FastAPI application factory.

Learn: App factory pattern — create_app() returns a configured FastAPI
instance. Lifespan manages startup/shutdown (database engine).
Middleware, CORS, error mapping and routers are all registered here.

The signing secret is frozen into app.state.token_config here, once.
Route dependencies read it from there, never from the settings module.
"""

from contextlib import asynccontextmanager
from typing import Optional

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from maitre import __version__
from maitre.api import api_router
from maitre.api.auth import LOGIN_FIELDS_REQUIRED
from maitre.auth.errors import AuthError, InvalidCredentials
from maitre.config import Settings, settings

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle.

    Learn: FastAPI lifespan replaces on_event("startup") / on_event("shutdown").
    Anything before `yield` runs at startup, after `yield` runs at shutdown.
    """
    logger.info(
        "maitre.starting",
        version=__version__,
        environment=settings.environment,
        port=settings.port,
    )

    yield

    logger.info("maitre.shutdown")

    from maitre.db.engine import engine
    await engine.dispose()


async def handle_auth_error(request: Request, exc: AuthError) -> JSONResponse:
    """Map an internal failure kind to its public response, and audit it.

    The kind and detail go to the log only; the body carries the shared
    public message for that class of failure.
    """
    log = logger.bind(kind=exc.kind.value, path=request.url.path)
    if exc.status_code >= 500:
        log.error("auth.upstream_failure", detail=exc.detail)
    elif isinstance(exc, InvalidCredentials):
        log.info("auth.login_failed", detail=exc.detail)
    else:
        log.warning("auth.access_denied", detail=exc.detail)

    headers = {"WWW-Authenticate": "Bearer"} if exc.status_code == 401 else None
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.public_message},
        headers=headers,
    )


async def handle_http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Unparseable input answers in the same {"error": ...} envelope.

    A login body that is not an object at all counts as missing fields.
    """
    logger.info("maitre.invalid_request", path=request.url.path, errors=len(exc.errors()))
    if request.url.path.endswith("/auth/login"):
        return JSONResponse(status_code=400, content={"error": LOGIN_FIELDS_REQUIRED})
    return JSONResponse(status_code=422, content={"error": "Invalid request"})


async def handle_unexpected_error(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("maitre.unhandled_error", path=request.url.path)
    return JSONResponse(status_code=500, content={"error": "Server error"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    """Build and return the FastAPI application."""
    app_settings = app_settings or settings

    app = FastAPI(
        title="Maitre",
        description="Authentication and role-gated access for restaurant management",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.token_config = app_settings.token_config()

    # ── Middleware stack ──────────────────────────────────────
    # Note: Starlette middleware executes in reverse order of registration.
    # Request flow: CORS → Security → RequestId → handler

    from maitre.middleware.request_id import RequestIdMiddleware
    from maitre.middleware.security import SecurityHeadersMiddleware

    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(AuthError, handle_auth_error)
    app.add_exception_handler(StarletteHTTPException, handle_http_error)
    app.add_exception_handler(RequestValidationError, handle_validation_error)
    app.add_exception_handler(Exception, handle_unexpected_error)

    app.include_router(api_router)

    return app


# Default app instance (used by uvicorn: maitre.main:app)
app = create_app()

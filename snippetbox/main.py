"""
Snippetbox — FastAPI Application Factory
==========================================

What:  Creates and configures the FastAPI application instance.
How:   `create_app(settings)` compiles the template cache, builds the database
       engine, registers middleware, exception handlers and the route table,
       and mounts the static file tree. Everything a request needs is kept on
       `app.state`; there are no module-level singletons.
Who:   Called by `python -m snippetbox` (see __main__.py), by
       `uvicorn snippetbox.main:create_app --factory`, and by the tests.

Route table:
    GET   /                  latest snippets          (routes/snippets.py)
    GET   /snippet/view?id=N one snippet              (routes/snippets.py)
    POST  /snippet/create    create + 303 redirect    (routes/snippets.py)
    GET   /static/*          files from static_dir    (StaticFiles mount)
    GET   /health            database probe          (routes/health.py)

Lifecycle:
    create_app():  template parse errors and a missing static directory
                   raise immediately.
    Startup:       the database is pinged; failure aborts startup.
    Shutdown:      the engine is disposed (pooled connections closed).
"""

import logging
import sys
import time
from contextlib import asynccontextmanager
from http import HTTPStatus
from typing import AsyncGenerator, Iterable, Mapping, Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import PlainTextResponse
from fastapi.routing import APIRoute
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from snippetbox import __version__
from snippetbox.config import Settings
from snippetbox.database import create_engine, create_session_factory, ping
from snippetbox.exceptions import (
    MethodNotAllowedError,
    NotFoundError,
    StorageError,
    TemplateRenderError,
)
from snippetbox.middleware.logging import RequestLoggingMiddleware
from snippetbox.middleware.request_id import RequestIDMiddleware, request_id_var
from snippetbox.routes import health, snippets
from snippetbox.services.snippet_store import SnippetStore
from snippetbox.templates import TemplateCache

logger = logging.getLogger(__name__)

REQUIRED_ROUTES = frozenset({
    ("/", "GET"),
    ("/snippet/view", "GET"),
    ("/snippet/create", "POST"),
})


# ══════════════════════════════════════════════════════════════════════════
# Logging Configuration
# ══════════════════════════════════════════════════════════════════════════

class _MaxLevelFilter(logging.Filter):
    def __init__(self, max_level: int):
        super().__init__()
        self.max_level = max_level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno <= self.max_level


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger once for the whole process.

    INFO and DEBUG records go to stdout, WARNING and above to stderr, all with
    UTC timestamps:
        2026-10-18T09:15:02 [INFO] snippetbox.main: Server ready at ...
    """
    formatter = logging.Formatter(
        "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S",
    )
    formatter.converter = time.gmtime

    info_handler = logging.StreamHandler(sys.stdout)
    info_handler.setFormatter(formatter)
    info_handler.addFilter(_MaxLevelFilter(logging.INFO))

    error_handler = logging.StreamHandler(sys.stderr)
    error_handler.setFormatter(formatter)
    error_handler.setLevel(logging.WARNING)

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        handlers=[info_handler, error_handler],
        force=True,
    )

    # Per-request noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


# ══════════════════════════════════════════════════════════════════════════
# Application Lifespan (Startup & Shutdown)
# ══════════════════════════════════════════════════════════════════════════

@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup: ping the database; any error propagates and uvicorn aborts.
    Shutdown: dispose the engine.
    """
    settings: Settings = app.state.settings

    try:
        await ping(app.state.engine)
    except Exception:
        logger.error("Cannot connect to the database", exc_info=True)
        await app.state.engine.dispose()
        raise

    logger.info("Starting server on %s", settings.addr)

    yield

    logger.info("Snippetbox shutting down...")
    await app.state.engine.dispose()
    logger.info("Shutdown complete.")


# ══════════════════════════════════════════════════════════════════════════
# Exception Handlers
# ══════════════════════════════════════════════════════════════════════════

def _status_text(status_code: int, headers: Optional[Mapping[str, str]] = None) -> PlainTextResponse:
    """Plain-text body holding only the status phrase, e.g. "Not Found"."""
    return PlainTextResponse(
        HTTPStatus(status_code).phrase,
        status_code=status_code,
        headers=dict(headers) if headers else None,
    )


def _parse_allow(value: str) -> Iterable[str]:
    return [method.strip() for method in value.split(",") if method.strip()]


def register_exception_handlers(app: FastAPI) -> None:
    """
    Map exception types to HTTP responses.

    Handler hierarchy:
        NotFoundError            → 404 "Not Found"
        MethodNotAllowedError    → 405 "Method Not Allowed" + Allow header
        StorageError             → 500 "Internal Server Error"
        TemplateRenderError      → 500 "Internal Server Error"
        Starlette HTTPException  → translated into the classes above
        Exception (fallback)     → 500 "Internal Server Error"

    Server errors log message, context and traceback; the client only ever
    sees the status phrase.
    """

    @app.exception_handler(NotFoundError)
    async def handle_not_found(request: Request, exc: NotFoundError):
        rid = request_id_var.get("")
        logger.debug("[%s] Not found: %s", rid, exc.message)
        return _status_text(404)

    @app.exception_handler(MethodNotAllowedError)
    async def handle_method_not_allowed(request: Request, exc: MethodNotAllowedError):
        return _status_text(405, {"Allow": ", ".join(exc.allowed)})

    @app.exception_handler(StorageError)
    async def handle_storage_error(request: Request, exc: StorageError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Storage error on %s %s: %s | Context: %s",
            rid, request.method, request.url.path, exc.message, exc.context,
            exc_info=exc,
        )
        return _status_text(500)

    @app.exception_handler(TemplateRenderError)
    async def handle_template_error(request: Request, exc: TemplateRenderError):
        rid = request_id_var.get("")
        logger.error(
            "[%s] Template error on %s %s: %s | Context: %s",
            rid, request.method, request.url.path, exc.message, exc.context,
            exc_info=exc,
        )
        return _status_text(500)

    @app.exception_handler(StarletteHTTPException)
    async def handle_http_exception(request: Request, exc: StarletteHTTPException):
        """Router-level 404/405 go through the application handlers above."""
        if exc.status_code == 404:
            return await handle_not_found(
                request, NotFoundError(resource="page", resource_id=request.url.path)
            )
        if exc.status_code == 405:
            allow = (exc.headers or {}).get("Allow", "")
            return await handle_method_not_allowed(
                request, MethodNotAllowedError(allowed=_parse_allow(allow))
            )
        return _status_text(exc.status_code, exc.headers)

    @app.exception_handler(Exception)
    async def handle_unexpected_error(request: Request, exc: Exception):
        rid = request_id_var.get("")
        logger.error("[%s] Unexpected error: %s", rid, exc, exc_info=exc)
        return _status_text(500)


# ══════════════════════════════════════════════════════════════════════════
# Application Factory
# ══════════════════════════════════════════════════════════════════════════

def check_routes(routers: Iterable[APIRouter]) -> None:
    """
    Verify every required (path, method) pair is declared by `routers`.

    Reads each router's own route list, before it is included, so the check
    does not depend on how FastAPI stores included routers in `app.routes`.

    Raises:
        RuntimeError: A required route is missing.
    """
    registered = {
        (route.path, method)
        for router in routers
        for route in router.routes
        if isinstance(route, APIRoute)
        for method in route.methods
    }
    missing = REQUIRED_ROUTES - registered
    if missing:
        raise RuntimeError(f"Route table is missing: {sorted(missing)}")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        settings: Configuration; read from the environment when omitted.

    Raises:
        jinja2.TemplateError: A template failed to parse.
        RuntimeError: The static directory does not exist, or a required
            route is missing.
    """
    settings = settings or Settings()

    template_cache = TemplateCache.from_directory(settings.template_dir)
    engine = create_engine(settings)

    app = FastAPI(
        title="Snippetbox",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan,
        redirect_slashes=False,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.session_factory = create_session_factory(engine)
    app.state.template_cache = template_cache
    app.state.snippets = SnippetStore()
    app.state.started_at = time.monotonic()

    # ── Middleware (last added runs first) ────────────────────────────────
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    register_exception_handlers(app)

    # ── Routes ────────────────────────────────────────────────────────────
    routers = (snippets.router, health.router)
    check_routes(routers)
    for router in routers:
        app.include_router(router)
    app.mount("/static", StaticFiles(directory=settings.static_dir), name="static")

    return app

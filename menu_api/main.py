"""
Menu API application factory.
FastAPI async backend over the menu_items table; JSON in, JSON out.
"""
from __future__ import annotations

import time
import uuid as uuid_lib
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import Counter, Histogram, generate_latest
from sqlalchemy.ext.asyncio import AsyncEngine
from starlette.responses import Response

from menu_api import __version__
from menu_api.api import menu
from menu_api.config import Settings, get_settings
from menu_api.core.logging import get_logger, request_id_ctx
from menu_api.db import create_engine, create_sessionmaker, probe
from menu_api.exceptions import ItemNotFoundError, StorageError

logger = get_logger(__name__)

# Prometheus metrics (process-wide registry, so defined once per import)
REQUEST_COUNT = Counter("http_requests_total", "Total requests", ["method", "path", "status"])
REQUEST_LATENCY = Histogram("http_request_duration_seconds", "Request latency", ["method", "path"])
# Label for requests no route matched, so unknown URLs share one series
UNMATCHED_ROUTE = "unmatched"

BANNER = {
    "message": "Welcome to the Menu API!",
    "status": "Operational",
    "endpoints": {
        "getAll": "/api/menu (GET)",
        "getOne": "/api/menu/:id (GET)",
        "create": "/api/menu (POST)",
        "update": "/api/menu/:id (PUT)",
        "delete": "/api/menu/:id (DELETE)",
    },
    "next_step": "Use the /api/menu endpoints or connect your client app.",
}


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def _init_sentry(settings: Settings) -> None:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.app_env,
        traces_sample_rate=0.1,
        integrations=[FastApiIntegration()],
    )


def create_app(settings: Optional[Settings] = None, engine: Optional[AsyncEngine] = None) -> FastAPI:
    """
    Build the application. The engine (and with it the connection pool) lives on
    app.state for the lifetime of the app; pass one in to share or substitute it.
    """
    settings = settings or get_settings()
    engine = engine or create_engine(settings)

    if settings.sentry_dsn:
        _init_sentry(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        await probe(app.state.engine)
        logger.info(f"Server running on http://localhost:{settings.port}")
        logger.info(f"API endpoints available at http://localhost:{settings.port}{settings.api_prefix}/menu")
        yield
        await app.state.engine.dispose()

    app = FastAPI(
        title="Menu API",
        description="CRUD over menu items backed by a relational database.",
        version=__version__,
        lifespan=lifespan,
        openapi_tags=[{"name": "menu", "description": "Menu items"}],
    )
    app.state.settings = settings
    app.state.engine = engine
    app.state.sessionmaker = create_sessionmaker(engine)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def request_id_and_metrics(request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or str(uuid_lib.uuid4())
        token = request_id_ctx.set(request_id)
        start = time.perf_counter()
        method = request.scope.get("method", "")
        try:
            response = await call_next(request)
        finally:
            request_id_ctx.reset(token)
        duration = time.perf_counter() - start
        route = request.scope.get("route")
        path = getattr(route, "path", UNMATCHED_ROUTE)
        REQUEST_COUNT.labels(method=method, path=path, status=response.status_code).inc()
        REQUEST_LATENCY.labels(method=method, path=path).observe(duration)
        response.headers["X-Request-ID"] = request_id
        return response

    @app.exception_handler(StorageError)
    async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
        message = exc.message if settings.expose_storage_errors else "Internal storage error"
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": message})

    @app.exception_handler(ItemNotFoundError)
    async def not_found_handler(request: Request, exc: ItemNotFoundError) -> JSONResponse:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"message": exc.message})

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        message = _validation_message(exc)
        logger.info("request_rejected", extra={"error": message, "path": request.url.path})
        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("unexpected_error", extra={"error": str(exc), "path": request.url.path}, exc_info=exc)
        message = str(exc) if settings.expose_storage_errors else "Internal server error"
        return JSONResponse(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, content={"error": message})

    app.include_router(menu.router, prefix=settings.api_prefix)

    @app.get("/", tags=["meta"])
    async def root():
        return BANNER

    @app.get("/health", tags=["meta"])
    async def health():
        return {"status": "ok"}

    @app.get("/metrics", tags=["meta"])
    async def metrics():
        return Response(generate_latest(), media_type="text/plain")

    return app

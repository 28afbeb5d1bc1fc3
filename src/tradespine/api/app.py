"""
FastAPI application factory.

``create_app()`` wires middleware, routers, error handlers and lifespan
events into a single ``FastAPI`` instance.

Manifesto:
    The app factory is the single composition root. The ledger adapter,
    the analytics adapter and the extraction-run store are built here (or
    injected by tests) and parked on ``app.state``; routers only ever see
    an :class:`OperationContext`.

Tags:
    trade-spine, api, app-factory, composition-root, FastAPI
"""

from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from tradespine.analytics.schema import create_schema
from tradespine.api.middleware.errors import unhandled_exception_handler
from tradespine.api.middleware.request_id import RequestIDMiddleware
from tradespine.core.adapters import DatabaseAdapter, adapter_from_url
from tradespine.core.logging import configure_logging, get_logger
from tradespine.core.protocols import RowSource
from tradespine.core.settings import TradeSpineSettings, get_settings
from tradespine.core.watermarks import ExtractionRunStore

logger = get_logger("tradespine.api")


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan: ensure the analytics schema, close stores on exit."""
    settings = app.state.settings
    configure_logging(
        level=settings.log_level, json_format=settings.json_logs, service="tradespine-api"
    )
    logger.info("tradespine_api_starting", version=app.version)
    analytics = app.state.analytics
    if analytics is not None:
        try:
            create_schema(analytics)
        except Exception as e:
            logger.warning("analytics_schema_init_failed", error=str(e))

    yield

    for store in (app.state.ledger, analytics):
        if isinstance(store, DatabaseAdapter) and store.is_connected:
            store.disconnect()
    logger.info("tradespine_api_stopped")


def create_app(
    *,
    settings: TradeSpineSettings | None = None,
    ledger: RowSource | None = None,
    analytics: DatabaseAdapter | None = None,
) -> FastAPI:
    """Build and return a fully-configured FastAPI application.

    Parameters
    ----------
    settings : TradeSpineSettings | None
        Override settings (useful for testing). When ``None`` the cached
        singleton from :func:`get_settings` is used.
    ledger, analytics
        Pre-built stores. When omitted they are built from
        ``settings.ledger_url`` and ``settings.resolved_analytics_url()``.
    """
    settings = settings or get_settings()

    if ledger is None:
        ledger = adapter_from_url(settings.ledger_url)
    if analytics is None:
        url = settings.resolved_analytics_url()
        if not settings.analytics_url:
            settings.data_dir.mkdir(parents=True, exist_ok=True)
        analytics = adapter_from_url(url)

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        lifespan=lifespan,
        docs_url=f"{settings.api_prefix}/docs",
        redoc_url=f"{settings.api_prefix}/redoc",
        openapi_url=f"{settings.api_prefix}/openapi.json",
    )

    app.state.settings = settings
    app.state.ledger = ledger
    app.state.analytics = analytics
    app.state.runs = ExtractionRunStore(analytics)

    # ── Middleware ───────────────────────────────────────────────────
    app.add_middleware(RequestIDMiddleware)

    # ── Exception handlers ───────────────────────────────────────────
    app.add_exception_handler(Exception, unhandled_exception_handler)

    # ── Routers ──────────────────────────────────────────────────────
    from tradespine.api.routers import trades

    app.include_router(trades.router, prefix=settings.api_prefix, tags=["trades"])

    @app.get("/health", tags=["health"])
    def health() -> dict[str, str]:
        return {"status": "ok", "version": settings.api_version}

    return app

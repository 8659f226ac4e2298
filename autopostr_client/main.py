"""AutoPostr Client Bridge — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map ClientError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - ClientContext started on startup and closed on shutdown via lifespan

Design Decisions:
    - create_app(context=...) accepts a prebuilt context: tests inject fakes,
      production builds one from settings inside the lifespan
    - Lifespan over @app.on_event: session timers start and stop with the app
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from autopostr_client.api.error_handlers import register_error_handlers
from autopostr_client.api.routes import health, operations, session_routes
from autopostr_client.bootstrap import ClientContext, build_context
from autopostr_client.config import Settings, get_settings
from autopostr_client.infrastructure.observability import setup_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None, context: ClientContext | None = None,
) -> FastAPI:
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Startup/shutdown lifecycle."""
        setup_logging(settings.log_level, settings.log_format)
        owned = app.state.context is None
        if owned:
            app.state.context = build_context(settings)
            await app.state.context.start()
        logger.info("AutoPostr client bridge started")
        yield
        logger.info("AutoPostr client bridge shutting down")
        if owned:
            await app.state.context.aclose()
            app.state.context = None

    app = FastAPI(
        title="AutoPostr Client Bridge", version="1.0.0", lifespan=lifespan,
    )
    app.state.context = context

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(session_routes.router)
    app.include_router(operations.router)

    register_error_handlers(app)
    return app


app = create_app()

"""FastAPI application factory for the token analysis API."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from loguru import logger
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.middleware.cors import CORSMiddleware

from config.settings import settings
from scam_detector.api.middleware import SecurityHeadersMiddleware
from scam_detector.parsers.analyzer import TokenAnalyzer

API_VERSION = "0.1.0"

# Rate limiter (shared instance); its 429 body is {"error": ...}
limiter = Limiter(key_func=get_remote_address)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Open upstream clients at startup unless an analyzer was injected; close them at shutdown."""
    owned = app.state.analyzer is None
    if owned:
        app.state.analyzer = TokenAnalyzer.from_settings(settings)
    try:
        yield
    finally:
        if owned:
            await app.state.analyzer.close()
            logger.info(f"[API] Shutdown: {app.state.analyzer.metrics.format_stats_line()}")
            app.state.analyzer = None


def create_app(analyzer: TokenAnalyzer | None = None) -> FastAPI:
    """Build and configure the FastAPI application."""
    app = FastAPI(
        title="Crypto Scam Detector API",
        version=API_VERSION,
        docs_url="/api/docs" if settings.api_debug else None,
        redoc_url=None,
        openapi_url="/api/openapi.json" if settings.api_debug else None,
        lifespan=lifespan,
    )
    app.state.analyzer = analyzer

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # Security headers
    app.add_middleware(SecurityHeadersMiddleware)

    # CORS for the dashboard front end
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.api_cors_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    # Import and include routers
    from scam_detector.api.routers.analyze import router as analyze_router
    from scam_detector.api.routers.health import router as health_router

    app.include_router(analyze_router)
    app.include_router(health_router)

    return app

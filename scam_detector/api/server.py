"""API server: runs uvicorn inside the existing asyncio event loop."""

from __future__ import annotations

import uvicorn
from loguru import logger

from config.settings import settings


async def run_api_server() -> None:
    """Start uvicorn serving the FastAPI app.

    Uses ``uvicorn.Server.serve()`` which is fully async; returns once the
    server has shut down.
    """
    from scam_detector.api.app import create_app

    app = create_app()
    config = uvicorn.Config(
        app=app,
        host=settings.api_host,
        port=settings.api_port,
        log_level="warning",
        loop="none",  # use the existing event loop
    )
    server = uvicorn.Server(config)
    logger.info(f"[API] Starting on http://{settings.api_host}:{settings.api_port}")
    await server.serve()

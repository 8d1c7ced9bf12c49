"""Health check with upstream configuration and pipeline metrics."""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from scam_detector.api.dependencies import get_analyzer
from scam_detector.parsers.analyzer import TokenAnalyzer

router = APIRouter(prefix="/api/v1", tags=["health"])


class HealthResponse(BaseModel):
    status: str
    version: str
    uptime_sec: int
    sources: dict[str, bool]
    remote_backend: bool
    metrics: dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check(analyzer: TokenAnalyzer = Depends(get_analyzer)) -> HealthResponse:
    """Report which providers are configured and how they have been doing."""
    from scam_detector.api.app import API_VERSION

    summary = analyzer.metrics.get_summary()
    sources = analyzer.configured_sources
    return HealthResponse(
        # Fallback data keeps the endpoint answering even with nothing configured
        status="ok" if any(sources.values()) or analyzer.remote_enabled else "degraded",
        version=API_VERSION,
        uptime_sec=summary.get("uptime_sec", 0),
        sources=sources,
        remote_backend=analyzer.remote_enabled,
        metrics=summary,
    )

"""FastAPI dependency injection: analyzer from app state."""

from __future__ import annotations

from fastapi import HTTPException, Request, status

from scam_detector.parsers.analyzer import TokenAnalyzer


def get_analyzer(request: Request) -> TokenAnalyzer:
    """Return the analyzer opened by the app lifespan (or injected in create_app)."""
    analyzer = getattr(request.app.state, "analyzer", None)
    if analyzer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Analyzer not initialised",
        )
    return analyzer

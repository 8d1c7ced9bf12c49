"""Token analysis endpoint."""

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse
from loguru import logger

from config.settings import settings
from scam_detector.api.app import limiter
from scam_detector.api.dependencies import get_analyzer
from scam_detector.parsers.analyzer import TokenAnalyzer
from scam_detector.parsers.exceptions import (
    InvalidTokenError,
    RateLimitedError,
    TokenNotFoundError,
    UpstreamTimeoutError,
)

router = APIRouter(prefix="/api", tags=["analysis"])

TOKEN_REQUIRED = "Token address or name is required"
TOKEN_NOT_FOUND = "Token not found. Please check the contract address or token symbol and try again."
REQUEST_TIMEOUT = "Request timeout. The blockchain APIs are currently slow. Please try again."
RATE_LIMITED = "API rate limit exceeded. Please wait a moment and try again."


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse({"error": message}, status_code=status_code)


@router.post("/analyze-token")
@limiter.limit(settings.analyze_rate_limit)
async def analyze_token(
    request: Request,
    analyzer: TokenAnalyzer = Depends(get_analyzer),
) -> JSONResponse:
    """Analyze a token by contract address or symbol. Body: ``{"token": "..."}``."""
    try:
        body = await request.json()
    except ValueError:
        body = None

    token = body.get("token") if isinstance(body, dict) else None
    if not isinstance(token, str) or not token.strip():
        return _error(status.HTTP_400_BAD_REQUEST, TOKEN_REQUIRED)

    try:
        result = await analyzer.analyze(token)
    except InvalidTokenError:
        return _error(status.HTTP_400_BAD_REQUEST, TOKEN_REQUIRED)
    except TokenNotFoundError:
        return _error(status.HTTP_404_NOT_FOUND, TOKEN_NOT_FOUND)
    except UpstreamTimeoutError:
        return _error(status.HTTP_408_REQUEST_TIMEOUT, REQUEST_TIMEOUT)
    except RateLimitedError:
        return _error(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMITED)
    except Exception as e:
        logger.exception(f"[API] Analysis failed for {token[:12]}")
        return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, str(e) or "Analysis failed")

    return JSONResponse(result.model_dump(mode="json", by_alias=True))

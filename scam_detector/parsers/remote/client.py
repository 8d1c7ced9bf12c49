"""Remote analysis backend: proxies a whole analysis to an external function.

The function answers with the same JSON contract as the local pipeline.
Status codes map to typed errors; anything unexpected raises
``RemoteBackendError`` so the caller can fall back to the local pipeline.
"""

import httpx
from loguru import logger
from pydantic import ValidationError

from scam_detector.models.analysis import TokenAnalysisResult
from scam_detector.parsers.exceptions import (
    RateLimitedError,
    RemoteBackendError,
    TokenNotFoundError,
    UpstreamTimeoutError,
)
from scam_detector.parsers.identifiers import short


class RemoteAnalysisClient:
    def __init__(self, url: str, api_key: str = "", timeout: float = 15.0) -> None:
        self._url = url
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers)

    async def close(self) -> None:
        await self._client.aclose()

    async def analyze(self, identifier: str) -> TokenAnalysisResult:
        try:
            resp = await self._client.post(self._url, json={"token": identifier})
        except httpx.HTTPError as e:
            # Transport timeouts included: only a remote that answers 408 maps to a timeout
            raise RemoteBackendError(f"Remote backend unreachable: {e}") from e

        if resp.status_code == 404:
            raise TokenNotFoundError(f"Token not found: {identifier}")
        if resp.status_code == 408:
            raise UpstreamTimeoutError("Remote backend reported a timeout")
        if resp.status_code == 429:
            raise RateLimitedError("Remote backend rate limit exceeded")
        if resp.status_code != 200:
            logger.warning(f"[REMOTE] HTTP {resp.status_code} for {short(identifier)}: {resp.text[:200]}")
            raise RemoteBackendError(f"Remote backend failed with status {resp.status_code}")

        try:
            result = TokenAnalysisResult.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            raise RemoteBackendError(f"Remote backend returned an invalid payload: {e}") from e

        logger.info(f"[REMOTE] {short(identifier)} risk={result.risk_score}")
        return result

"""TokenMetrics API client: token info and risk analytics.

Requires an API key. Contract addresses try the direct info lookup (plus
analytics); otherwise, or if that misses, a symbol search picks the first
hit and its detail and analytics are fetched concurrently.
"""

import asyncio
from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from scam_detector.parsers.identifiers import is_contract_address, short
from scam_detector.parsers.tokenmetrics.models import TokenMetricsReport

BASE_URL = "https://api.tokenmetrics.com/v1"
USER_AGENT = "Crypto-Scam-Detector/1.0"


class TokenMetricsClient:
    """Async client for TokenMetrics (Bearer auth)."""

    def __init__(self, api_key: str = "", timeout: float = 10.0) -> None:
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            base_url=BASE_URL,
            timeout=timeout,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def _get_data(self, path: str, params: dict[str, str]) -> Any:
        """Return the ``data`` member of a ``{success: true}`` envelope, else None."""
        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.debug(f"[TOKENMETRICS] {path} {type(e).__name__}: {e}")
            return None

        if resp.status_code != 200:
            logger.debug(f"[TOKENMETRICS] {path} HTTP {resp.status_code}")
            return None

        try:
            body = resp.json()
        except ValueError:
            logger.debug(f"[TOKENMETRICS] {path} invalid JSON")
            return None

        if not isinstance(body, dict) or not body.get("success"):
            return None
        return body.get("data") or None

    async def get_token(self, identifier: str) -> TokenMetricsReport | None:
        if not self._api_key:
            logger.debug("[TOKENMETRICS] No API key, skipping")
            return None

        merged: dict[str, Any] | None = None
        if is_contract_address(identifier):
            merged = await self._by_contract(identifier)
        if merged is None:
            merged = await self._by_search(identifier)
        if merged is None:
            logger.debug(f"[TOKENMETRICS] No data for {short(identifier)}")
            return None

        try:
            report = TokenMetricsReport.model_validate(merged)
        except ValidationError as e:
            logger.debug(f"[TOKENMETRICS] Unexpected payload shape: {e.error_count()} errors")
            return None
        report.raw = merged
        return report

    async def _by_contract(self, address: str) -> dict[str, Any] | None:
        params = {"contract_address": address, "chain": "ethereum"}
        info = await self._get_data("/tokens/info", params)
        if not isinstance(info, dict):
            return None

        logger.debug(f"[TOKENMETRICS] Contract data for {short(address)}")
        analytics = await self._get_data("/analytics/token", params)
        if isinstance(analytics, dict):
            return {**info, "analytics": analytics}
        return info

    async def _by_search(self, identifier: str) -> dict[str, Any] | None:
        hits = await self._get_data("/search", {"query": identifier.upper(), "type": "token"})
        if not isinstance(hits, list) or not hits or not isinstance(hits[0], dict):
            return None

        hit = hits[0]
        token_id = hit.get("id")
        if token_id is None:
            return hit

        logger.debug(f"[TOKENMETRICS] Search hit {hit.get('name')} ({hit.get('symbol')})")
        detail, analytics = await asyncio.gather(
            self._get_data("/tokens/info", {"token_id": str(token_id)}),
            self._get_data("/analytics/token", {"token_id": str(token_id)}),
            return_exceptions=True,
        )

        merged = dict(hit)
        if isinstance(detail, dict):
            merged.update(detail)
        if isinstance(analytics, dict):
            merged["analytics"] = analytics
        return merged

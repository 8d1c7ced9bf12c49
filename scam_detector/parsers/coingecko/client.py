"""CoinGecko API client: market data and contract-address resolution.

Public API works without a key (~30 calls/min); a demo key raises limits.
Contract addresses use the direct contract lookup; anything else goes
through /search, then the detail endpoint for the top hit.
"""

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from scam_detector.parsers.coingecko.models import CoinGeckoCoin
from scam_detector.parsers.identifiers import is_contract_address, short
from scam_detector.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.coingecko.com/api/v3"
USER_AGENT = "Crypto-Scam-Detector/1.0"

DETAIL_PARAMS = {
    "localization": "false",
    "tickers": "false",
    "market_data": "true",
    "community_data": "false",
    "developer_data": "false",
}


class CoinGeckoClient:
    """Async client for the CoinGecko v3 public API."""

    def __init__(
        self,
        api_key: str = "",
        max_rps: float = 0.5,
        timeout: float = 10.0,
    ) -> None:
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if api_key:
            headers["x-cg-demo-api-key"] = api_key
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(base_url=BASE_URL, timeout=timeout, headers=headers)

    async def close(self) -> None:
        await self._client.aclose()

    async def throttle(self) -> None:
        """Wait for this client's next rate-limit slot. One slot covers one lookup."""
        await self._rate_limiter.acquire()

    async def _get_json(self, path: str, params: dict[str, str] | None = None) -> dict[str, Any] | None:
        """GET a JSON object. Returns None on any non-200 or unparsable body."""
        try:
            resp = await self._client.get(path, params=params)
        except httpx.HTTPError as e:
            logger.debug(f"[COINGECKO] {type(e).__name__} on {path}: {e}")
            return None

        if resp.status_code == 404:
            logger.debug(f"[COINGECKO] Not found: {path}")
            return None
        if resp.status_code != 200:
            logger.debug(f"[COINGECKO] HTTP {resp.status_code} on {path}")
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.debug(f"[COINGECKO] Invalid JSON on {path}")
            return None
        return data if isinstance(data, dict) else None

    async def get_token(self, identifier: str) -> CoinGeckoCoin | None:
        """Resolve a contract address or free-text symbol/name to coin data."""
        await self.throttle()
        return await self.lookup(identifier)

    async def lookup(self, identifier: str) -> CoinGeckoCoin | None:
        """Like ``get_token`` but unthrottled; the caller holds the slot.

        A symbol lookup makes two requests (search, then detail) under one slot.
        """
        if is_contract_address(identifier):
            data = await self._get_json(f"/coins/ethereum/contract/{identifier}")
            if data is None:
                return None
            logger.debug(f"[COINGECKO] Contract data found for {short(identifier)}")
            return _parse_coin(data)

        search = await self._get_json("/search", params={"query": identifier})
        coins = (search or {}).get("coins")
        if not isinstance(coins, list) or not coins or not isinstance(coins[0], dict):
            logger.debug(f"[COINGECKO] No search results for {short(identifier)}")
            return None

        hit = coins[0]
        coin_id = hit.get("id")
        if not isinstance(coin_id, str) or not coin_id:
            return None

        detail = await self._get_json(f"/coins/{coin_id}", params=DETAIL_PARAMS)
        if detail is None:
            logger.debug(f"[COINGECKO] Detail unavailable for {coin_id}, using search hit")
            return _parse_coin(hit)

        # Detail fields win over search fields
        return _parse_coin({**hit, **detail})


def _parse_coin(data: dict[str, Any]) -> CoinGeckoCoin | None:
    try:
        coin = CoinGeckoCoin.model_validate(data)
    except ValidationError as e:
        logger.debug(f"[COINGECKO] Unexpected payload shape: {e.error_count()} errors")
        return None
    coin.raw = data
    return coin

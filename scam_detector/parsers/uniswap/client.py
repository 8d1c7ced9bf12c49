"""Uniswap V3 subgraph client: token stats and top pools by TVL.

Known endpoints are tried in order until one answers with ``data`` and no
GraphQL ``errors``. The Graph gateway needs a key (Bearer header); the
hosted endpoint does not.
"""

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from scam_detector.parsers.identifiers import is_contract_address, short
from scam_detector.parsers.uniswap.models import UniswapReport

ENDPOINTS = [
    "https://api.thegraph.com/subgraphs/name/uniswap/uniswap-v3",
    "https://gateway.thegraph.com/api/subgraphs/id/5zvR82QoaXYFyDEKLZ9t6v9adgnptxYpKpSbxtgVENFV",
]

TOKEN_QUERY = """
query GetTokenData($tokenAddress: String!) {
  token(id: $tokenAddress) {
    id
    symbol
    name
    decimals
    totalSupply
    volumeUSD
    txCount
    totalValueLocked
    totalValueLockedUSD
    derivedETH
  }
  pools(
    where: {or: [{token0: $tokenAddress}, {token1: $tokenAddress}]}
    first: 10
    orderBy: totalValueLockedUSD
    orderDirection: desc
  ) {
    id
    token0 { symbol }
    token1 { symbol }
    feeTier
    liquidity
    totalValueLockedUSD
    volumeUSD
  }
}
"""


class UniswapClient:
    """Async GraphQL client for the Uniswap V3 subgraph."""

    def __init__(self, api_key: str = "", timeout: float = 10.0) -> None:
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["Authorization"] = f"Bearer {api_key}"
        self._client = httpx.AsyncClient(timeout=timeout, headers=headers)

    async def close(self) -> None:
        await self._client.aclose()

    async def get_token(self, address: str) -> UniswapReport | None:
        """Fetch token stats and up to 10 pools, highest TVL first."""
        if not is_contract_address(address):
            logger.debug(f"[UNISWAP] Skipping non-address {short(address)}")
            return None

        body = {"query": TOKEN_QUERY, "variables": {"tokenAddress": address.lower()}}
        for i, url in enumerate(ENDPOINTS, start=1):
            data = await self._post(i, url, body)
            if data is None:
                continue
            report = _parse_report(data)
            if report is not None:
                logger.debug(
                    f"[UNISWAP] Endpoint {i}: {short(address)} pools={len(report.pools)} "
                    f"token={'yes' if report.token else 'no'}"
                )
                return report

        logger.debug(f"[UNISWAP] All endpoints failed for {short(address)}")
        return None

    async def _post(self, index: int, url: str, body: dict[str, Any]) -> dict[str, Any] | None:
        try:
            resp = await self._client.post(url, json=body)
        except httpx.HTTPError as e:
            logger.debug(f"[UNISWAP] Endpoint {index} {type(e).__name__}: {e}")
            return None

        if resp.status_code != 200:
            logger.debug(f"[UNISWAP] Endpoint {index} HTTP {resp.status_code}")
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.debug(f"[UNISWAP] Endpoint {index} invalid JSON")
            return None

        if not isinstance(data, dict) or data.get("errors") or not isinstance(data.get("data"), dict):
            logger.debug(f"[UNISWAP] Endpoint {index} returned errors or no data")
            return None
        return data


def _parse_report(data: dict[str, Any]) -> UniswapReport | None:
    try:
        report = UniswapReport.model_validate(data["data"])
    except ValidationError as e:
        logger.debug(f"[UNISWAP] Unexpected payload shape: {e.error_count()} errors")
        return None
    report.raw = data
    return report

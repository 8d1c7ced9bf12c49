"""Etherscan API client: contract source / token info for Ethereum addresses.

Endpoints are tried in order (source code, token info); the first
``status == "1"`` payload wins. If both fail the transaction count is
fetched and wrapped in an "Unknown" stub, and if that fails too a bare
stub is returned. Non-address identifiers are skipped (None).
"""

from typing import Any

import httpx
from loguru import logger
from pydantic import ValidationError

from scam_detector.parsers.etherscan.models import EtherscanReport
from scam_detector.parsers.identifiers import is_contract_address, short
from scam_detector.parsers.rate_limiter import RateLimiter

BASE_URL = "https://api.etherscan.io/v2/api"
CHAIN_ID = "1"
PLACEHOLDER_KEY = "YourApiKeyToken"  # accepted by Etherscan at the anonymous rate
USER_AGENT = "Crypto-Scam-Detector/1.0"


class EtherscanClient:
    """Async client for Etherscan (free key: 5 RPS)."""

    def __init__(
        self,
        api_key: str = "",
        max_rps: float = 5.0,
        timeout: float = 10.0,
    ) -> None:
        self._api_key = api_key or PLACEHOLDER_KEY
        self._rate_limiter = RateLimiter(max_rps)
        self._client = httpx.AsyncClient(timeout=timeout, headers={"User-Agent": USER_AGENT})

    async def close(self) -> None:
        await self._client.aclose()

    async def _call(self, name: str, params: dict[str, str]) -> dict[str, Any] | None:
        await self._rate_limiter.acquire()
        query = {"chainid": CHAIN_ID, **params, "apikey": self._api_key}
        try:
            resp = await self._client.get(BASE_URL, params=query)
        except httpx.HTTPError as e:
            logger.debug(f"[ETHERSCAN] {name} {type(e).__name__}: {e}")
            return None

        if resp.status_code != 200:
            logger.debug(f"[ETHERSCAN] {name} HTTP {resp.status_code}")
            return None

        try:
            data = resp.json()
        except ValueError:
            logger.debug(f"[ETHERSCAN] {name} invalid JSON")
            return None
        return data if isinstance(data, dict) else None

    async def get_contract(self, address: str) -> EtherscanReport | None:
        """Fetch contract facts for an Ethereum address."""
        if not is_contract_address(address):
            logger.debug(f"[ETHERSCAN] Skipping non-address {short(address)}")
            return None

        endpoints = [
            ("getsourcecode", {"module": "contract", "action": "getsourcecode", "address": address}),
            ("tokeninfo", {"module": "token", "action": "tokeninfo", "contractaddress": address}),
        ]
        for name, params in endpoints:
            data = await self._call(name, params)
            if data and data.get("status") == "1" and data.get("result"):
                report = _parse_report(data)
                if report is not None and report.result:
                    logger.debug(f"[ETHERSCAN] {name} data for {short(address)}")
                    return report
            logger.debug(f"[ETHERSCAN] {name} gave no usable data for {short(address)}")

        tx_count = "0"
        data = await self._call(
            "eth_getTransactionCount",
            {"module": "proxy", "action": "eth_getTransactionCount", "address": address, "tag": "latest"},
        )
        if data is not None:
            tx_count = _hex_to_decimal(data.get("result"))

        logger.debug(f"[ETHERSCAN] Returning stub for {short(address)} (tx count {tx_count})")
        return _stub(tx_count)


def _hex_to_decimal(val: Any) -> str:
    """eth_getTransactionCount answers with a hex quantity like ``0x1b``."""
    if isinstance(val, str):
        try:
            return str(int(val, 16)) if val.startswith("0x") else str(int(val))
        except ValueError:
            return "0"
    return "0"


def _stub(tx_count: str) -> EtherscanReport:
    raw = {
        "status": "1",
        "result": [{"SourceCode": "", "ContractName": "Unknown", "TransactionCount": tx_count}],
    }
    report = EtherscanReport.model_validate(raw)
    report.stub = True
    report.raw = raw
    return report


def _parse_report(data: dict[str, Any]) -> EtherscanReport | None:
    try:
        report = EtherscanReport.model_validate(data)
    except ValidationError as e:
        logger.debug(f"[ETHERSCAN] Unexpected payload shape: {e.error_count()} errors")
        return None
    report.raw = data
    return report

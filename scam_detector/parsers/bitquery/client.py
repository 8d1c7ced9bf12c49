"""BitQuery GraphQL client: contract type and 7-day transfer activity.

Requires an API key; without one the client is never asked (returns None
and makes no request). Errors after asking degrade to a zero-valued stub.
"""

from datetime import UTC, datetime, timedelta
from typing import Any

import httpx
from loguru import logger

from scam_detector.parsers.bitquery.models import BitqueryReport, BitqueryTransfer
from scam_detector.parsers.identifiers import is_contract_address, short
from scam_detector.parsers.payload_types import dig

GRAPHQL_URL = "https://graphql.bitquery.io/"
TRANSFER_WINDOW_DAYS = 7

TOKEN_QUERY = """
query TokenBasicInfo($address: String!, $since: ISO8601DateTime, $till: ISO8601DateTime) {
  ethereum(network: ethereum) {
    address(address: {is: $address}) {
      smartContract {
        contractType
        currency {
          symbol
          name
          decimals
        }
      }
    }
    transfers(
      currency: {is: $address}
      date: {since: $since, till: $till}
      options: {limit: 10}
    ) {
      count
      amount(calculate: sum)
    }
  }
}
"""

STUB_PAYLOAD: dict[str, Any] = {
    "data": {
        "ethereum": {
            "address": [{"smartContract": None}],
            "transfers": [{"count": 0, "amount": 0}],
        }
    }
}


class BitqueryClient:
    """Async client for the BitQuery v1 GraphQL endpoint."""

    def __init__(self, api_key: str = "", timeout: float = 10.0) -> None:
        self._api_key = api_key
        self._client = httpx.AsyncClient(
            timeout=timeout,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {api_key}",
            },
        )

    async def close(self) -> None:
        await self._client.aclose()

    async def get_token(self, address: str) -> BitqueryReport | None:
        """Fetch contract metadata and transfer count over the last week."""
        if not self._api_key:
            logger.debug("[BITQUERY] No API key, skipping")
            return None
        if not is_contract_address(address):
            logger.debug(f"[BITQUERY] Skipping non-address {short(address)}")
            return None

        till = datetime.now(UTC).date()
        since = till - timedelta(days=TRANSFER_WINDOW_DAYS)
        body = {
            "query": TOKEN_QUERY,
            "variables": {
                "address": address.lower(),
                "since": since.isoformat(),
                "till": till.isoformat(),
            },
        }

        try:
            resp = await self._client.post(GRAPHQL_URL, json=body)
        except httpx.HTTPError as e:
            logger.debug(f"[BITQUERY] {type(e).__name__} for {short(address)}: {e}")
            return _stub()

        if resp.status_code != 200:
            logger.debug(f"[BITQUERY] HTTP {resp.status_code} for {short(address)}")
            return _stub()

        try:
            data = resp.json()
        except ValueError:
            logger.debug(f"[BITQUERY] Invalid JSON for {short(address)}")
            return _stub()

        errors = data.get("errors") if isinstance(data, dict) else None
        if errors:
            message = dig(errors, 0, "message") or "unknown error"
            logger.debug(f"[BITQUERY] GraphQL error for {short(address)}: {message}")
            return _stub()

        ethereum = dig(data, "data", "ethereum")
        if not isinstance(ethereum, dict) or not ethereum:
            logger.debug(f"[BITQUERY] Empty ethereum block for {short(address)}")
            return _stub()

        report = _parse_report(ethereum)
        report.raw = data
        logger.debug(f"[BITQUERY] {short(address)}: {report.total_transfers} transfers in {TRANSFER_WINDOW_DAYS}d")
        return report


def _parse_report(ethereum: dict[str, Any]) -> BitqueryReport:
    contract = dig(ethereum, "address", 0, "smartContract") or {}
    currency = dig(contract, "currency") or {}
    transfers = ethereum.get("transfers")
    if not isinstance(transfers, list):
        transfers = []

    return BitqueryReport(
        contract_type=dig(contract, "contractType"),
        currency_symbol=dig(currency, "symbol"),
        currency_name=dig(currency, "name"),
        currency_decimals=dig(currency, "decimals"),
        transfers=[BitqueryTransfer.model_validate(t) for t in transfers if isinstance(t, dict)],
    )


def _stub() -> BitqueryReport:
    report = _parse_report(STUB_PAYLOAD["data"]["ethereum"])
    report.stub = True
    report.raw = STUB_PAYLOAD
    return report

"""Pydantic models for CoinGecko API responses."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from scam_detector.parsers.payload_types import LenientDict, LenientFloat, LenientInt, LenientStr, UsdAmount


class CoinGeckoMarketData(BaseModel):
    """``market_data`` block of /coins/{id} and /coins/{platform}/contract/{address}.

    Amounts are nested per fiat currency upstream; only USD is kept.
    """

    current_price: UsdAmount = None
    market_cap: UsdAmount = None
    total_volume: UsdAmount = None
    total_supply: LenientFloat = None
    max_supply: LenientFloat = None
    circulating_supply: LenientFloat = None
    market_cap_rank: LenientInt = None

    model_config = {"extra": "ignore"}


class CoinGeckoCoin(BaseModel):
    """Coin detail, optionally merged over a /search hit."""

    id: LenientStr = None
    symbol: LenientStr = None
    name: LenientStr = None
    contract_address: LenientStr = None
    platforms: LenientDict = {}
    market_cap_rank: LenientInt = None
    market_data: CoinGeckoMarketData | None = None

    # Verbatim upstream payload, echoed back in apiData
    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = {"extra": "ignore"}

    @field_validator("market_data", mode="before")
    @classmethod
    def _object_or_none(cls, val: Any) -> Any:
        return val if isinstance(val, (dict, CoinGeckoMarketData)) else None

    @property
    def resolved_address(self) -> str | None:
        """Ethereum contract for this coin, if CoinGecko knows one."""
        if self.contract_address:
            return self.contract_address
        eth = self.platforms.get("ethereum")
        return eth if isinstance(eth, str) and eth else None

    @property
    def rank(self) -> int | None:
        if self.market_data and self.market_data.market_cap_rank:
            return self.market_data.market_cap_rank
        return self.market_cap_rank

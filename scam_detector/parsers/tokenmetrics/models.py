"""Pydantic models for TokenMetrics API responses."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from scam_detector.parsers.payload_types import LenientFloat, LenientInt, LenientStr


class TokenMetricsAnalytics(BaseModel):
    risk_score: LenientFloat = None
    liquidity_score: LenientFloat = None
    volatility_score: LenientFloat = None
    market_cap_rank: LenientInt = None

    model_config = {"extra": "ignore"}


class TokenMetricsReport(BaseModel):
    """Token info merged with search hit and analytics (later sources win)."""

    id: LenientStr = None
    name: LenientStr = None
    symbol: LenientStr = None
    contract_address: LenientStr = None
    market_cap: LenientFloat = None
    volume_24h: LenientFloat = None
    price: LenientFloat = None
    total_supply: LenientFloat = None
    max_supply: LenientFloat = None
    circulating_supply: LenientFloat = None
    analytics: TokenMetricsAnalytics | None = None
    exchanges: list[str] = []

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = {"extra": "ignore"}

    @field_validator("analytics", mode="before")
    @classmethod
    def _object_or_none(cls, val: Any) -> Any:
        return val if isinstance(val, (dict, TokenMetricsAnalytics)) else None

    @field_validator("exchanges", mode="before")
    @classmethod
    def _strings_only(cls, val: Any) -> Any:
        if not isinstance(val, list):
            return []
        return [item for item in val if isinstance(item, str)]

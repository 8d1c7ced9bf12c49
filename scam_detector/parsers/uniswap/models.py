"""Pydantic models for the Uniswap V3 subgraph."""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from scam_detector.parsers.payload_types import LenientDict, LenientFloat, LenientInt, LenientStr


class UniswapToken(BaseModel):
    id: LenientStr = None
    symbol: LenientStr = None
    name: LenientStr = None
    decimals: LenientInt = None
    totalSupply: LenientFloat = None
    volumeUSD: LenientFloat = None
    txCount: LenientInt = None
    totalValueLocked: LenientFloat = None  # token units
    totalValueLockedUSD: LenientFloat = None
    derivedETH: LenientFloat = None

    model_config = {"extra": "ignore"}


class UniswapPool(BaseModel):
    id: LenientStr = None
    token0: LenientDict = {}
    token1: LenientDict = {}
    feeTier: LenientInt = None
    liquidity: LenientFloat = None
    totalValueLockedUSD: LenientFloat = None
    volumeUSD: LenientFloat = None

    model_config = {"extra": "ignore"}

    @property
    def pair(self) -> str:
        return f"{self.token0.get('symbol', '?')}/{self.token1.get('symbol', '?')}"


class UniswapReport(BaseModel):
    """``data`` block of the token + top-pools query."""

    token: UniswapToken | None = None
    pools: list[UniswapPool] = []

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = {"extra": "ignore"}

    @field_validator("token", mode="before")
    @classmethod
    def _object_or_none(cls, val: Any) -> Any:
        return val if isinstance(val, (dict, UniswapToken)) else None

    @field_validator("pools", mode="before")
    @classmethod
    def _objects_only(cls, val: Any) -> Any:
        if not isinstance(val, list):
            return []
        return [item for item in val if isinstance(item, (dict, UniswapPool))]

    @property
    def has_data(self) -> bool:
        return self.token is not None or len(self.pools) > 0

    @property
    def total_pool_tvl_usd(self) -> float:
        return sum(pool.totalValueLockedUSD or 0.0 for pool in self.pools)

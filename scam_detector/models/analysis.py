"""Response contract of POST /api/analyze-token.

Field names are snake_case in Python and camelCase on the wire; dump with
``by_alias=True``. The same models validate a remote backend's response.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class WalletDistributionEntry(_CamelModel):
    label: str
    value: float
    percentage: float
    address: str | None = None  # "Various" for aggregate buckets


class WalletConcentration(_CamelModel):
    score: int = Field(ge=0, le=100)
    top_wallets_percentage: float
    details: str


class LiquidityAnalysis(_CamelModel):
    score: int = Field(ge=0, le=100)
    liquidity_ratio: float
    dex_liquidity_ratio: float | None = None
    details: str


class SupplyDynamics(_CamelModel):
    score: int = Field(ge=0, le=100)
    reserve_percentage: float
    minting_risk: bool
    details: str


class TradingVolume(_CamelModel):
    score: int = Field(ge=0, le=100)
    volume_to_holders_ratio: float
    wash_trading_detected: bool
    details: str


class RiskBreakdown(_CamelModel):
    wallet_concentration: WalletConcentration
    liquidity_analysis: LiquidityAnalysis
    supply_dynamics: SupplyDynamics
    trading_volume: TradingVolume


class TokenInfo(_CamelModel):
    name: str
    symbol: str
    address: str
    market_cap: float
    # to_camel would produce "volume24H"
    volume_24h: float = Field(alias="volume24h")
    price: float


class SourceAvailability(_CamelModel):
    coin_gecko: bool = False
    etherscan: bool = False
    uniswap: bool = False
    bitquery: bool = False
    token_metrics: bool = False

    @property
    def available_count(self) -> int:
        return sum(self.model_dump().values())

    def available_names(self) -> list[str]:
        return [name for name, ok in self.model_dump(by_alias=True).items() if ok]


class DataQuality(_CamelModel):
    score: int = Field(ge=0, le=100)
    details: str
    sources: SourceAvailability


class ApiData(_CamelModel):
    """Raw upstream payloads, verbatim, for display and audit."""

    coin_gecko: dict[str, Any] | None = None
    etherscan: dict[str, Any] | None = None
    uniswap: dict[str, Any] | None = None
    bitquery: dict[str, Any] | None = None
    token_metrics: dict[str, Any] | None = None


def _unreported_quality() -> DataQuality:
    return DataQuality(score=0, details="Data quality not reported", sources=SourceAvailability())


class TokenAnalysisResult(_CamelModel):
    risk_score: int = Field(ge=0, le=100)
    breakdown: RiskBreakdown
    red_flags: list[str] = []
    wallet_distribution: list[WalletDistributionEntry] = []
    token_info: TokenInfo
    api_data: ApiData = Field(default_factory=ApiData)
    data_quality: DataQuality = Field(default_factory=_unreported_quality)

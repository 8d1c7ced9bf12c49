"""Internal per-request token facts, built by the aggregator."""

from dataclasses import dataclass, field

from scam_detector.parsers.bitquery.models import BitqueryReport
from scam_detector.parsers.coingecko.models import CoinGeckoCoin
from scam_detector.parsers.etherscan.models import EtherscanReport
from scam_detector.parsers.tokenmetrics.models import TokenMetricsReport
from scam_detector.parsers.uniswap.models import UniswapReport


@dataclass
class SourcePayloads:
    """Whatever each upstream returned; None means not asked, failed or timed out."""

    coingecko: CoinGeckoCoin | None = None
    etherscan: EtherscanReport | None = None
    uniswap: UniswapReport | None = None
    bitquery: BitqueryReport | None = None
    tokenmetrics: TokenMetricsReport | None = None

    @property
    def live_etherscan(self) -> EtherscanReport | None:
        return self.etherscan if self.etherscan and not self.etherscan.stub else None

    @property
    def live_uniswap(self) -> UniswapReport | None:
        return self.uniswap if self.uniswap and self.uniswap.has_data else None

    @property
    def live_bitquery(self) -> BitqueryReport | None:
        return self.bitquery if self.bitquery and not self.bitquery.stub else None

    @property
    def has_market_data(self) -> bool:
        cg = self.coingecko
        tm = self.tokenmetrics
        return bool(
            (cg and cg.market_data and cg.market_data.market_cap)
            or (tm and tm.market_cap)
        )


@dataclass
class TokenSnapshot:
    """Normalized facts for one analysis; never persisted."""

    identifier: str
    name: str
    symbol: str  # upper-cased
    address: str
    market_cap_usd: float
    volume_24h_usd: float
    price_usd: float
    total_supply: float | None = None
    max_supply: float | None = None  # None = uncapped
    scenario: str = "unknown"
    market_cap_rank: int | None = None
    used_fallback: bool = False
    sources: SourcePayloads = field(default_factory=SourcePayloads)
    source_status: dict[str, str] = field(default_factory=dict)

    @property
    def supply(self) -> float:
        """Total supply, derived from market cap / price when unknown."""
        if self.total_supply:
            return self.total_supply
        if self.price_usd > 0:
            return self.market_cap_usd / self.price_usd
        return 0.0

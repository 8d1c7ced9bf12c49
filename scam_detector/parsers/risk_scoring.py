"""Four risk sub-scores and the weighted composite.

Each sub-scorer maps a ratio onto a 0-100 band, then applies adjustments
from live (non-stub) upstream data when present. Every adjustment appends
``(Enhanced: ...)`` to ``details``; the UI and PDF export show it verbatim.
Missing upstream data never adds a penalty.
"""

import math
from dataclasses import dataclass

from scam_detector.models.analysis import (
    LiquidityAnalysis,
    RiskBreakdown,
    SupplyDynamics,
    TradingVolume,
    WalletConcentration,
    WalletDistributionEntry,
)
from scam_detector.models.snapshot import TokenSnapshot

TOP_WALLETS = 5
MIN_ESTIMATED_HOLDERS = 100.0


@dataclass(frozen=True)
class ScoringConfig:
    weight_wallet_concentration: float = 0.40
    weight_liquidity: float = 0.25
    weight_supply_dynamics: float = 0.20
    weight_trading_volume: float = 0.15

    # A non-zero penalty makes the score depend on more than the top-5 sum,
    # so it is no longer non-decreasing in concentration
    single_wallet_penalty_pct: float = 30.0
    single_wallet_penalty: int = 0
    minting_risk_score: int = 85
    wash_trading_score: int = 90
    wash_trading_volume_ratio: float = 5.0

    flag_wallet_score: int = 75
    flag_liquidity_score: int = 75
    flag_top_wallets_pct: float = 70.0
    flag_data_quality: int = 50

    @classmethod
    def from_settings(cls, settings) -> "ScoringConfig":
        return cls(**{name: getattr(settings, name) for name in cls.__dataclass_fields__})


def clamp_score(value: float) -> int:
    """Round half up and clamp to [0, 100]."""
    return int(min(100, max(0, math.floor(value + 0.5))))


def _enhance(details: str, note: str) -> str:
    return f"{details} (Enhanced: {note})"


def score_wallet_concentration(
    snapshot: TokenSnapshot,
    distribution: list[WalletDistributionEntry],
    config: ScoringConfig,
) -> WalletConcentration:
    top_pct = sum(entry.percentage for entry in distribution[:TOP_WALLETS])

    if top_pct > 80:
        score = 100
    elif top_pct > 60:
        score = 75
    elif top_pct > 40:
        score = 50
    elif top_pct > 20:
        score = 25
    else:
        score = 0

    largest = distribution[0].percentage if distribution else 0.0
    if largest > config.single_wallet_penalty_pct:
        score = min(100, score + config.single_wallet_penalty)

    details = f"Top {TOP_WALLETS} wallets hold {top_pct:.1f}% of total supply"

    bitquery = snapshot.sources.live_bitquery
    if bitquery is not None:
        if not bitquery.transfers:
            score += 25
            details = _enhance(details, "No recent on-chain activity")
        else:
            transfers = bitquery.total_transfers
            if transfers < 50:
                score += 20
                details = _enhance(details, f"Low on-chain activity: {transfers} transfers")
            elif transfers > 1000:
                score -= 10
                details = _enhance(details, f"Active on-chain usage: {transfers} transfers")

    return WalletConcentration(
        score=clamp_score(score),
        top_wallets_percentage=round(top_pct, 2),
        details=details,
    )


def score_liquidity(snapshot: TokenSnapshot) -> LiquidityAnalysis:
    mcap = snapshot.market_cap_usd
    ratio = snapshot.volume_24h_usd / mcap * 100 if mcap > 0 else 0.0

    if ratio < 2:
        score = 100
    elif ratio < 5:
        score = 75
    elif ratio < 10:
        score = 50
    elif ratio < 20:
        score = 25
    else:
        score = 0

    details = f"Liquidity ratio: {ratio:.2f}% (Volume/Market Cap)"
    dex_ratio: float | None = None

    uniswap = snapshot.sources.live_uniswap
    if uniswap is not None and mcap > 0:
        pool_tvl = uniswap.total_pool_tvl_usd
        token_tvl = uniswap.token.totalValueLockedUSD if uniswap.token else None
        if pool_tvl > 0:
            dex_ratio = pool_tvl / mcap * 100
            if dex_ratio < 1:
                score += 30
                details = _enhance(details, f"Low DEX liquidity {dex_ratio:.2f}%")
            elif dex_ratio > 10:
                score -= 20
                details = _enhance(details, f"Strong DEX liquidity {dex_ratio:.2f}%")
        elif token_tvl:
            dex_ratio = token_tvl / mcap * 100
            if dex_ratio < 0.5:
                score += 25
                details = _enhance(details, f"Very low DEX liquidity {dex_ratio:.2f}%")

    return LiquidityAnalysis(
        score=clamp_score(score),
        liquidity_ratio=ratio,
        dex_liquidity_ratio=dex_ratio,
        details=details,
    )


def score_supply_dynamics(snapshot: TokenSnapshot, config: ScoringConfig) -> SupplyDynamics:
    total = snapshot.total_supply or 0.0
    max_supply = snapshot.max_supply

    minting_risk = not max_supply
    if minting_risk:
        reserve_pct = 0.0
        score: float = config.minting_risk_score
        details = "Unlimited minting detected - high risk"
    else:
        reserve_pct = max(0.0, (max_supply - total) / max_supply * 100)
        score = reserve_pct * 0.6
        details = f"{reserve_pct:.1f}% of max supply in reserve"

    etherscan = snapshot.sources.live_etherscan
    if etherscan is not None and etherscan.is_verified is False:
        score += 15
        details = _enhance(details, "Unverified contract")

    return SupplyDynamics(
        score=clamp_score(score),
        reserve_percentage=round(reserve_pct, 2),
        minting_risk=minting_risk,
        details=details,
    )


def score_trading_volume(snapshot: TokenSnapshot, config: ScoringConfig) -> TradingVolume:
    mcap = snapshot.market_cap_usd
    volume = snapshot.volume_24h_usd

    estimated_holders = max(MIN_ESTIMATED_HOLDERS, math.sqrt(max(mcap, 0.0) / 1000))
    per_holder = volume / estimated_holders
    wash = mcap > 0 and volume / mcap > config.wash_trading_volume_ratio

    if wash:
        score: float = config.wash_trading_score
        details = "Potential wash trading detected"
    else:
        score = min(100.0, per_holder / 10)
        details = f"Volume per holder: ${per_holder:.2f}"

    uniswap = snapshot.sources.live_uniswap
    if uniswap is not None and uniswap.token is not None:
        tx_count = uniswap.token.txCount
        if tx_count is not None and tx_count < 100:
            score += 25
            details = _enhance(details, "Low transaction activity")

    return TradingVolume(
        score=clamp_score(score),
        volume_to_holders_ratio=per_holder,
        wash_trading_detected=wash,
        details=details,
    )


def score_breakdown(
    snapshot: TokenSnapshot,
    distribution: list[WalletDistributionEntry],
    config: ScoringConfig,
) -> RiskBreakdown:
    return RiskBreakdown(
        wallet_concentration=score_wallet_concentration(snapshot, distribution, config),
        liquidity_analysis=score_liquidity(snapshot),
        supply_dynamics=score_supply_dynamics(snapshot, config),
        trading_volume=score_trading_volume(snapshot, config),
    )


def composite_score(breakdown: RiskBreakdown, config: ScoringConfig) -> int:
    weighted = (
        breakdown.wallet_concentration.score * config.weight_wallet_concentration
        + breakdown.liquidity_analysis.score * config.weight_liquidity
        + breakdown.supply_dynamics.score * config.weight_supply_dynamics
        + breakdown.trading_volume.score * config.weight_trading_volume
    )
    return clamp_score(min(100.0, weighted))

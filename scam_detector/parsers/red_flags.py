"""Red flag warnings derived from sub-scores, scenario and live upstream data.

Each flag fires independently. Order is insertion order; duplicates keep
their first position.

There is no "Recently created contract" flag: none of the configured sources
reports a contract's creation time without an extra paid call, and a flag
raised from the token name alone would state something nobody checked.
"""

from scam_detector.models.analysis import DataQuality, RiskBreakdown
from scam_detector.models.snapshot import TokenSnapshot
from scam_detector.parsers.fallback import SCAM, SUSPICIOUS
from scam_detector.parsers.risk_scoring import ScoringConfig

LOW_RANK_THRESHOLD = 2000
LOW_VOLUME_PCT = 0.1
LOW_TRANSFER_COUNT = 10


def base_flags(
    breakdown: RiskBreakdown,
    snapshot: TokenSnapshot,
    config: ScoringConfig,
) -> list[str]:
    flags: list[str] = []

    if breakdown.wallet_concentration.score >= config.flag_wallet_score:
        flags.append("High wallet concentration - few wallets control majority of tokens")
    if breakdown.liquidity_analysis.score >= config.flag_liquidity_score:
        flags.append("Low liquidity relative to market cap - potential exit scam risk")
    if breakdown.supply_dynamics.minting_risk:
        flags.append("Unlimited token minting capability detected")
    if breakdown.trading_volume.wash_trading_detected:
        flags.append("Suspicious trading patterns suggest wash trading")

    top_pct = config.flag_top_wallets_pct
    if breakdown.wallet_concentration.top_wallets_percentage > top_pct:
        flags.append(f"Extreme centralization - top wallets control over {top_pct:g}% of supply")

    if snapshot.scenario == SCAM:
        flags.append("Extreme centralization detected")
        flags.append("Unverified smart contract")
        flags.append("Suspicious tokenomics structure")

    if snapshot.scenario == SUSPICIOUS or "safe" in snapshot.identifier.lower():
        flags.append("Token name contains high-risk keywords")

    return flags


def data_flags(
    snapshot: TokenSnapshot,
    quality: DataQuality,
    config: ScoringConfig,
) -> list[str]:
    """Flags from data coverage and live upstream payloads (stubs ignored)."""
    flags: list[str] = []
    sources = snapshot.sources

    if quality.score < config.flag_data_quality:
        available = quality.sources.available_names()
        if available:
            flags.append(
                f"Limited API data available ({quality.score}%) - only {', '.join(available)} responding"
            )
        else:
            flags.append("No API data available - analysis based on fallback data only")

    uniswap = sources.live_uniswap
    if uniswap is not None:
        if len(uniswap.pools) == 0:
            flags.append("No DEX liquidity pools found - token may not be actively traded")
        elif len(uniswap.pools) == 1:
            flags.append("Only one DEX liquidity pool found - limited trading options")

    coingecko = sources.coingecko
    if coingecko is not None and coingecko.market_data is not None:
        rank = coingecko.rank
        if rank and rank > LOW_RANK_THRESHOLD:
            flags.append(f"Very low market cap ranking (#{rank}) - extremely high risk")

        volume = coingecko.market_data.total_volume or 0.0
        mcap = coingecko.market_data.market_cap or 0.0
        if mcap > 0:
            volume_pct = volume / mcap * 100
            if volume_pct < LOW_VOLUME_PCT:
                flags.append(f"Extremely low trading volume ({volume_pct:.3f}% of market cap)")

    bitquery = sources.live_bitquery
    if bitquery is not None:
        transfers = bitquery.total_transfers
        if transfers == 0:
            flags.append("No recent on-chain transfers detected in the last week")
        elif transfers < LOW_TRANSFER_COUNT:
            flags.append(f"Very low on-chain activity ({transfers} transfers in last week)")

    etherscan = sources.live_etherscan
    if etherscan is not None and etherscan.is_verified is False:
        flags.append("Smart contract source code not verified - transparency concerns")

    return flags


def generate_red_flags(
    breakdown: RiskBreakdown,
    snapshot: TokenSnapshot,
    quality: DataQuality,
    config: ScoringConfig,
) -> list[str]:
    flags = base_flags(breakdown, snapshot, config) + data_flags(snapshot, quality, config)
    return list(dict.fromkeys(flags))

"""Report assembly: data quality summary and the final analysis result."""

from scam_detector.models.analysis import (
    ApiData,
    DataQuality,
    RiskBreakdown,
    SourceAvailability,
    TokenAnalysisResult,
    TokenInfo,
    WalletDistributionEntry,
)
from scam_detector.models.snapshot import SourcePayloads, TokenSnapshot

SOURCE_COUNT = 5
MODELLED_DISTRIBUTION_NOTE = "Holder distribution is modelled, not read from chain"


def source_availability(payloads: SourcePayloads) -> SourceAvailability:
    """Which sources returned usable data. Stubs do not count."""
    etherscan = payloads.live_etherscan
    return SourceAvailability(
        coin_gecko=payloads.coingecko is not None,
        etherscan=etherscan is not None and bool(etherscan.result),
        uniswap=payloads.live_uniswap is not None,
        bitquery=payloads.live_bitquery is not None,
        token_metrics=payloads.tokenmetrics is not None,
    )


def assess_data_quality(payloads: SourcePayloads) -> DataQuality:
    sources = source_availability(payloads)
    score = round(100 * sources.available_count / SOURCE_COUNT)

    cg = payloads.coingecko
    if cg is not None and cg.market_data is not None:
        coingecko = "CoinGecko: ✓ Market data"
    elif cg is not None:
        coingecko = "CoinGecko: ⚠ Basic data only"
    else:
        coingecko = "CoinGecko: ✗ No data"

    tm = payloads.tokenmetrics
    if tm is not None and tm.analytics is not None:
        tokenmetrics = "TokenMetrics: ✓ Contract and analytics data"
    elif tm is not None:
        tokenmetrics = "TokenMetrics: ✓ Token data"
    else:
        tokenmetrics = "TokenMetrics: ✗ No data"

    parts = [
        coingecko,
        "Etherscan: ✓ Contract data" if sources.etherscan else "Etherscan: ✗ No data",
        "Uniswap: ✓ DEX data" if sources.uniswap else "Uniswap: ✗ No data",
        "BitQuery: ✓ On-chain data" if sources.bitquery else "BitQuery: ✗ No data",
        tokenmetrics,
    ]
    details = f"{' | '.join(parts)} ({score}% data quality). {MODELLED_DISTRIBUTION_NOTE}"
    return DataQuality(score=score, details=details, sources=sources)


def offline_data_quality() -> DataQuality:
    """Quality block for a result built without any upstream call."""
    return DataQuality(
        score=0,
        details=f"0/{SOURCE_COUNT} APIs provided data - using fallback analysis. {MODELLED_DISTRIBUTION_NOTE}",
        sources=SourceAvailability(),
    )


def api_data(payloads: SourcePayloads) -> ApiData:
    """Verbatim upstream payloads, stubs included."""

    def raw(payload) -> dict | None:
        return payload.raw if payload is not None else None

    return ApiData(
        coin_gecko=raw(payloads.coingecko),
        etherscan=raw(payloads.etherscan),
        uniswap=raw(payloads.uniswap),
        bitquery=raw(payloads.bitquery),
        token_metrics=raw(payloads.tokenmetrics),
    )


def assemble_report(
    snapshot: TokenSnapshot,
    *,
    risk_score: int,
    breakdown: RiskBreakdown,
    red_flags: list[str],
    distribution: list[WalletDistributionEntry],
    quality: DataQuality,
) -> TokenAnalysisResult:
    return TokenAnalysisResult(
        risk_score=risk_score,
        breakdown=breakdown,
        red_flags=red_flags,
        wallet_distribution=distribution,
        token_info=TokenInfo(
            name=snapshot.name,
            symbol=snapshot.symbol,
            address=snapshot.address,
            market_cap=snapshot.market_cap_usd,
            volume_24h=snapshot.volume_24h_usd,
            price=snapshot.price_usd,
        ),
        api_data=api_data(snapshot.sources),
        data_quality=quality,
    )

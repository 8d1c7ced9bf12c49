from scam_detector.models.analysis import (
    ApiData,
    DataQuality,
    LiquidityAnalysis,
    RiskBreakdown,
    SourceAvailability,
    SupplyDynamics,
    TokenAnalysisResult,
    TokenInfo,
    TradingVolume,
    WalletConcentration,
    WalletDistributionEntry,
)
from scam_detector.models.snapshot import SourcePayloads, TokenSnapshot

__all__ = [
    "ApiData",
    "DataQuality",
    "LiquidityAnalysis",
    "RiskBreakdown",
    "SourceAvailability",
    "SupplyDynamics",
    "TokenAnalysisResult",
    "TokenInfo",
    "TradingVolume",
    "WalletConcentration",
    "WalletDistributionEntry",
    "SourcePayloads",
    "TokenSnapshot",
]

"""Token risk analysis pipeline: fetch, score, flag, assemble.

``TokenAnalyzer`` owns the upstream clients for the process lifetime. With
a remote backend configured, analyses are proxied there first and the
local pipeline runs only when the remote call fails generically.
"""

import time

from loguru import logger

from scam_detector.models.analysis import DataQuality, TokenAnalysisResult
from scam_detector.models.snapshot import SourcePayloads, TokenSnapshot
from scam_detector.parsers.aggregator import TokenAggregator, build_snapshot
from scam_detector.parsers.bitquery.client import BitqueryClient
from scam_detector.parsers.coingecko.client import CoinGeckoClient
from scam_detector.parsers.etherscan.client import EtherscanClient
from scam_detector.parsers.exceptions import InvalidTokenError, RemoteBackendError
from scam_detector.parsers.fallback import lookup_known, rng_for
from scam_detector.parsers.identifiers import short
from scam_detector.parsers.metrics import AnalysisMetrics
from scam_detector.parsers.red_flags import generate_red_flags
from scam_detector.parsers.remote.client import RemoteAnalysisClient
from scam_detector.parsers.report import assemble_report, assess_data_quality, offline_data_quality
from scam_detector.parsers.risk_scoring import ScoringConfig, composite_score, score_breakdown
from scam_detector.parsers.tokenmetrics.client import TokenMetricsClient
from scam_detector.parsers.uniswap.client import UniswapClient
from scam_detector.parsers.wallet_distribution import build_distribution


class TokenAnalyzer:
    def __init__(
        self,
        aggregator: TokenAggregator,
        *,
        scoring: ScoringConfig | None = None,
        remote: RemoteAnalysisClient | None = None,
        metrics: AnalysisMetrics | None = None,
        fallback_seeded: bool = True,
    ) -> None:
        self._aggregator = aggregator
        self._scoring = scoring or ScoringConfig()
        self._remote = remote
        # Same counters the aggregator records source outcomes into
        self._metrics = metrics or aggregator.metrics
        self._fallback_seeded = fallback_seeded

    @classmethod
    def from_settings(cls, settings) -> "TokenAnalyzer":
        """Build clients for every enabled provider. Keyless providers that require a key are left out."""
        metrics = AnalysisMetrics()
        http_timeout = settings.http_timeout_sec

        coingecko = None
        if settings.enable_coingecko:
            coingecko = CoinGeckoClient(
                settings.coingecko_api_key, max_rps=settings.coingecko_max_rps, timeout=http_timeout
            )
        etherscan = None
        if settings.enable_etherscan:
            etherscan = EtherscanClient(
                settings.etherscan_api_key, max_rps=settings.etherscan_max_rps, timeout=http_timeout
            )
        uniswap = None
        if settings.enable_uniswap:
            uniswap = UniswapClient(settings.uniswap_api_key, timeout=http_timeout)
        bitquery = None
        if settings.enable_bitquery and settings.bitquery_api_key:
            bitquery = BitqueryClient(settings.bitquery_api_key, timeout=http_timeout)
        tokenmetrics = None
        if settings.enable_tokenmetrics and settings.tokenmetrics_api_key:
            tokenmetrics = TokenMetricsClient(settings.tokenmetrics_api_key, timeout=http_timeout)

        remote = None
        if settings.remote_backend_url:
            remote = RemoteAnalysisClient(
                settings.remote_backend_url,
                settings.remote_backend_key,
                timeout=settings.remote_backend_timeout_sec,
            )

        aggregator = TokenAggregator(
            coingecko=coingecko,
            etherscan=etherscan,
            uniswap=uniswap,
            bitquery=bitquery,
            tokenmetrics=tokenmetrics,
            market_data_timeout=settings.market_data_timeout_sec,
            source_timeout=settings.source_timeout_sec,
            fallback_seeded=settings.fallback_seeded,
            metrics=metrics,
        )
        configured = [name for name, ok in aggregator.configured_sources.items() if ok]
        logger.info(
            f"[ANALYZE] Sources: {', '.join(configured) or 'none'}"
            + (" | remote backend enabled" if remote else "")
        )
        return cls(
            aggregator,
            scoring=ScoringConfig.from_settings(settings),
            remote=remote,
            metrics=metrics,
            fallback_seeded=settings.fallback_seeded,
        )

    @property
    def metrics(self) -> AnalysisMetrics:
        return self._metrics

    @property
    def configured_sources(self) -> dict[str, bool]:
        return self._aggregator.configured_sources

    @property
    def remote_enabled(self) -> bool:
        return self._remote is not None

    async def close(self) -> None:
        await self._aggregator.close()
        if self._remote is not None:
            await self._remote.close()

    async def analyze(self, identifier: str) -> TokenAnalysisResult:
        """Full analysis for a contract address or symbol.

        Raises InvalidTokenError on empty input. With a remote backend, its
        not-found / timeout / rate-limit errors propagate unchanged.
        """
        ident = identifier.strip() if isinstance(identifier, str) else ""
        if not ident:
            raise InvalidTokenError("Token address or name is required")

        start = time.monotonic()

        if self._remote is not None:
            try:
                result = await self._remote.analyze(ident)
            except RemoteBackendError as e:
                logger.warning(f"[ANALYZE] Remote backend failed for {short(ident)}, running locally: {e}")
            else:
                self._metrics.record_analysis((time.monotonic() - start) * 1000, remote=True)
                return result

        failed = False
        used_fallback = True
        try:
            snapshot = await self._aggregator.aggregate(ident)
            used_fallback = snapshot.used_fallback
            result = self.evaluate(snapshot)
        except Exception:
            logger.exception(f"[ANALYZE] Pipeline failed for {short(ident)}, returning fallback result")
            failed = True
            result = self.offline_result(ident)

        latency_ms = (time.monotonic() - start) * 1000
        self._metrics.record_analysis(latency_ms, used_fallback=used_fallback, failed=failed)
        logger.info(
            f"[ANALYZE] {short(ident)} risk={result.risk_score} "
            f"quality={result.data_quality.score}% flags={len(result.red_flags)} ({latency_ms:.0f}ms)"
        )
        return result

    def evaluate(self, snapshot: TokenSnapshot, quality: DataQuality | None = None) -> TokenAnalysisResult:
        """Score a snapshot. Pure apart from the distribution's address generator."""
        quality = quality or assess_data_quality(snapshot.sources)

        seeded = self._fallback_seeded or lookup_known(snapshot.identifier) is not None
        rng = rng_for(snapshot.identifier, seeded)

        dex_tvl = 0.0
        uniswap = snapshot.sources.live_uniswap
        if uniswap is not None:
            dex_tvl = uniswap.total_pool_tvl_usd or (
                uniswap.token.totalValueLockedUSD if uniswap.token else None
            ) or 0.0

        distribution = build_distribution(snapshot.scenario, snapshot.supply, dex_tvl_usd=dex_tvl, rng=rng)
        breakdown = score_breakdown(snapshot, distribution, self._scoring)
        risk_score = composite_score(breakdown, self._scoring)
        red_flags = generate_red_flags(breakdown, snapshot, quality, self._scoring)

        return assemble_report(
            snapshot,
            risk_score=risk_score,
            breakdown=breakdown,
            red_flags=red_flags,
            distribution=distribution,
            quality=quality,
        )

    def offline_result(self, identifier: str) -> TokenAnalysisResult:
        """Fallback-only result with zero data quality; no upstream calls."""
        snapshot = build_snapshot(identifier, SourcePayloads(), seeded=self._fallback_seeded)
        return self.evaluate(snapshot, quality=offline_data_quality())

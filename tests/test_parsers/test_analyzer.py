"""Tests for the end-to-end analysis pipeline."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from config.settings import Settings
from scam_detector.parsers.aggregator import TokenAggregator
from scam_detector.parsers.analyzer import TokenAnalyzer
from scam_detector.parsers.coingecko.client import CoinGeckoClient
from scam_detector.parsers.exceptions import (
    InvalidTokenError,
    RemoteBackendError,
    TokenNotFoundError,
)
from scam_detector.parsers.metrics import AnalysisMetrics
from scam_detector.parsers.remote.client import RemoteAnalysisClient
from tests.conftest import FakeSource, make_response

SCAM_ADDRESS = "0x1234567890123456789012345678901234567890"

USDC_DETAIL = {
    "id": "usd-coin",
    "symbol": "usdc",
    "name": "USDC",
    "contract_address": "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    "market_cap_rank": 6,
    "market_data": {
        "current_price": {"usd": 1.0},
        "market_cap": {"usd": 25_000_000_000},
        "total_volume": {"usd": 5_000_000_000},
        "total_supply": 25_000_000_000,
        "max_supply": None,
    },
}


def _offline_analyzer(**kwargs) -> TokenAnalyzer:
    """Every source configured, none returning anything."""
    aggregator = TokenAggregator(
        coingecko=FakeSource(),
        etherscan=FakeSource(),
        uniswap=FakeSource(),
        bitquery=FakeSource(),
        tokenmetrics=FakeSource(),
    )
    return TokenAnalyzer(aggregator, **kwargs)


class TestLocalPipeline:
    @pytest.mark.asyncio
    async def test_usdc_low_risk(self):
        result = await _offline_analyzer().analyze("USDC")

        assert result.risk_score == 17
        assert result.risk_score < 25
        assert result.breakdown.supply_dynamics.minting_risk is False
        assert result.breakdown.wallet_concentration.score == 0
        assert result.breakdown.liquidity_analysis.score == 0
        assert result.breakdown.supply_dynamics.score == 10
        assert result.breakdown.trading_volume.score == 100
        assert result.token_info.symbol == "USDC"

    @pytest.mark.asyncio
    async def test_scam_high_risk(self):
        result = await _offline_analyzer().analyze("SCAM")

        assert result.risk_score == 85
        assert len(result.red_flags) >= 3
        assert "Unlimited token minting capability detected" in result.red_flags
        assert result.wallet_distribution[0].percentage >= 40
        assert result.breakdown.supply_dynamics.minting_risk is True

    @pytest.mark.asyncio
    async def test_scam_by_address(self):
        by_symbol = await _offline_analyzer().analyze("SCAM")
        by_address = await _offline_analyzer().analyze(SCAM_ADDRESS)
        assert by_address.risk_score == by_symbol.risk_score

    @pytest.mark.asyncio
    async def test_eth_moderate(self):
        result = await _offline_analyzer().analyze("eth")
        assert result.risk_score == 33

    @pytest.mark.asyncio
    async def test_unknown_address_all_sources_failing(self):
        aggregator = TokenAggregator(
            coingecko=FakeSource(exc=RuntimeError("down")),
            etherscan=FakeSource(exc=RuntimeError("down")),
            uniswap=FakeSource(exc=RuntimeError("down")),
            bitquery=FakeSource(exc=RuntimeError("down")),
            tokenmetrics=FakeSource(exc=RuntimeError("down")),
        )
        address = "0x" + "9f" * 20

        result = await TokenAnalyzer(aggregator).analyze(address)

        assert result.data_quality.score == 0
        assert 0 <= result.risk_score <= 100
        assert result.token_info.address == address
        assert "No API data available - analysis based on fallback data only" in result.red_flags

    @pytest.mark.asyncio
    async def test_seeded_results_repeat(self):
        analyzer = _offline_analyzer()
        first = await analyzer.analyze("mystery")
        second = await analyzer.analyze("mystery")
        assert first.model_dump() == second.model_dump()

    @pytest.mark.asyncio
    async def test_empty_identifier_rejected(self):
        analyzer = _offline_analyzer()
        with pytest.raises(InvalidTokenError):
            await analyzer.analyze("   ")

    @pytest.mark.asyncio
    async def test_pipeline_failure_returns_offline_result(self):
        aggregator = MagicMock()
        aggregator.aggregate = AsyncMock(side_effect=RuntimeError("merge exploded"))
        analyzer = TokenAnalyzer(aggregator, metrics=AnalysisMetrics())

        result = await analyzer.analyze("USDC")

        assert result.risk_score == 17
        assert result.data_quality.score == 0
        assert result.data_quality.details.startswith("0/5 APIs provided data")
        assert analyzer.metrics.get_summary()["failed_analyses"] == 1

    @pytest.mark.asyncio
    async def test_metrics(self):
        analyzer = _offline_analyzer()
        await analyzer.analyze("USDC")

        summary = analyzer.metrics.get_summary()
        assert summary["total_analyses"] == 1
        assert summary["fallback_analyses"] == 1

    @pytest.mark.asyncio
    async def test_source_outcomes_share_analysis_counters(self):
        aggregator = TokenAggregator(coingecko=FakeSource(), uniswap=FakeSource(exc=RuntimeError("x")))
        analyzer = TokenAnalyzer(aggregator)

        await analyzer.analyze("USDC")

        assert analyzer.metrics is aggregator.metrics
        summary = analyzer.metrics.get_summary()
        assert summary["total_analyses"] == 1
        assert summary["sources"]["coingecko"]["empty"] == 1
        assert summary["sources"]["uniswap"]["error"] == 1


class TestLiveMarketData:
    @pytest.mark.asyncio
    async def test_usdc_without_live_max_supply(self):
        """CoinGecko reports no max supply for USDC; the known cap ratio still applies."""
        coingecko = CoinGeckoClient(max_rps=0)
        coingecko._client = AsyncMock()
        coingecko._client.get = AsyncMock(
            side_effect=[
                make_response(200, {"coins": [{"id": "usd-coin", "symbol": "USDC", "name": "USDC"}]}),
                make_response(200, USDC_DETAIL),
            ]
        )
        analyzer = TokenAnalyzer(TokenAggregator(coingecko=coingecko))

        result = await analyzer.analyze("USDC")

        assert result.data_quality.score > 0
        assert result.breakdown.supply_dynamics.minting_risk is False
        assert "Unlimited token minting capability detected" not in result.red_flags
        assert result.risk_score == 17

    @pytest.mark.asyncio
    async def test_uncapped_known_token_keeps_minting_risk(self):
        detail = {
            **USDC_DETAIL,
            "id": "scamcoin",
            "symbol": "scam",
            "name": "ScamCoin",
            "contract_address": SCAM_ADDRESS,
        }
        coingecko = CoinGeckoClient(max_rps=0)
        coingecko._client = AsyncMock()
        coingecko._client.get = AsyncMock(return_value=make_response(200, detail))
        analyzer = TokenAnalyzer(TokenAggregator(coingecko=coingecko))

        result = await analyzer.analyze(SCAM_ADDRESS)

        assert result.breakdown.supply_dynamics.minting_risk is True


class TestRemoteBackend:
    @pytest.mark.asyncio
    async def test_remote_result_used(self):
        local = await _offline_analyzer().analyze("UNI")
        remote = AsyncMock()
        remote.analyze = AsyncMock(return_value=local)
        aggregator = MagicMock()
        aggregator.aggregate = AsyncMock()

        analyzer = TokenAnalyzer(aggregator, remote=remote, metrics=AnalysisMetrics())
        result = await analyzer.analyze("UNI")

        assert result is local
        aggregator.aggregate.assert_not_called()
        assert analyzer.metrics.get_summary()["remote_analyses"] == 1
        assert analyzer.remote_enabled

    @pytest.mark.asyncio
    async def test_generic_remote_failure_runs_locally(self):
        remote = AsyncMock()
        remote.analyze = AsyncMock(side_effect=RemoteBackendError("502"))

        result = await _offline_analyzer(remote=remote).analyze("USDC")

        assert result.risk_score == 17

    @pytest.mark.asyncio
    async def test_remote_transport_timeout_runs_locally(self):
        remote = RemoteAnalysisClient("https://example.invalid/analyze")
        remote._client = AsyncMock()
        remote._client.post = AsyncMock(side_effect=httpx.ReadTimeout("slow"))

        result = await _offline_analyzer(remote=remote).analyze("USDC")

        assert result.risk_score == 17

    @pytest.mark.asyncio
    async def test_not_found_propagates(self):
        remote = AsyncMock()
        remote.analyze = AsyncMock(side_effect=TokenNotFoundError("nope"))

        with pytest.raises(TokenNotFoundError):
            await _offline_analyzer(remote=remote).analyze("USDC")


class TestFromSettings:
    @pytest.mark.asyncio
    async def test_key_required_sources_left_out(self):
        analyzer = TokenAnalyzer.from_settings(Settings(_env_file=None))
        try:
            assert analyzer.configured_sources == {
                "coingecko": True,
                "etherscan": True,
                "uniswap": True,
                "bitquery": False,
                "tokenmetrics": False,
            }
            assert analyzer.remote_enabled is False
        finally:
            await analyzer.close()

    @pytest.mark.asyncio
    async def test_keys_and_remote(self):
        settings = Settings(
            _env_file=None,
            bitquery_api_key="bq",
            tokenmetrics_api_key="tm",
            enable_uniswap=False,
            remote_backend_url="https://example.invalid/analyze",
        )
        analyzer = TokenAnalyzer.from_settings(settings)
        try:
            assert analyzer.configured_sources["bitquery"] is True
            assert analyzer.configured_sources["tokenmetrics"] is True
            assert analyzer.configured_sources["uniswap"] is False
            assert analyzer.remote_enabled is True
        finally:
            await analyzer.close()

    def test_weights_must_sum_to_one(self):
        with pytest.raises(ValueError):
            Settings(_env_file=None, weight_liquidity=0.5)

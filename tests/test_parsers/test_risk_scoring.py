"""Tests for risk sub-scores and the weighted composite."""

import pytest

from scam_detector.models.analysis import WalletDistributionEntry
from scam_detector.models.snapshot import SourcePayloads
from scam_detector.parsers.bitquery.models import BitqueryReport, BitqueryTransfer
from scam_detector.parsers.etherscan.models import EtherscanReport
from scam_detector.parsers.risk_scoring import (
    ScoringConfig,
    clamp_score,
    composite_score,
    score_breakdown,
    score_liquidity,
    score_supply_dynamics,
    score_trading_volume,
    score_wallet_concentration,
)
from scam_detector.parsers.uniswap.models import UniswapPool, UniswapReport, UniswapToken
from tests.conftest import make_snapshot

CONFIG = ScoringConfig()


def _dist(*pcts: float) -> list[WalletDistributionEntry]:
    return [
        WalletDistributionEntry(label=f"W{i}", value=pct * 1000, percentage=pct, address="0x")
        for i, pct in enumerate(pcts)
    ]


def test_clamp_score_rounds_half_up():
    assert clamp_score(84.5) == 85
    assert clamp_score(84.49) == 84
    assert clamp_score(-3) == 0
    assert clamp_score(120) == 100


class TestWalletConcentration:
    def test_bands(self):
        snap = make_snapshot()
        assert score_wallet_concentration(snap, _dist(10, 5, 3, 1, 0.5), CONFIG).score == 0
        assert score_wallet_concentration(snap, _dist(10, 5, 3, 1, 1), CONFIG).score == 0  # exactly 20
        assert score_wallet_concentration(snap, _dist(10, 10, 5, 5, 1), CONFIG).score == 25
        assert score_wallet_concentration(snap, _dist(25, 17.8, 11.7, 8.1, 6.3), CONFIG).score == 75

    def test_only_top_five_counted(self):
        wc = score_wallet_concentration(make_snapshot(), _dist(10, 5, 3, 1, 0.5, 60, 20), CONFIG)
        assert wc.top_wallets_percentage == 19.5
        assert wc.details == "Top 5 wallets hold 19.5% of total supply"

    def test_single_wallet_penalty_off_by_default(self):
        wc = score_wallet_concentration(make_snapshot(), _dist(31, 5, 5, 5, 5), CONFIG)
        assert wc.score == 50

    def test_single_wallet_penalty(self):
        config = ScoringConfig(single_wallet_penalty=10)
        wc = score_wallet_concentration(make_snapshot(), _dist(31, 5, 5, 5, 5), config)
        assert wc.score == 60

    def test_penalty_capped(self):
        config = ScoringConfig(single_wallet_penalty=10)
        wc = score_wallet_concentration(make_snapshot(), _dist(45, 25, 15, 8, 5), config)
        assert wc.score == 100
        assert wc.top_wallets_percentage == 98.0

    def test_monotonic_in_concentration(self):
        snap = make_snapshot()
        scores = [
            score_wallet_concentration(snap, _dist(top, 5, 5, 5, 5), CONFIG).score
            for top in (1, 10, 20, 29, 35, 50, 70)
        ]
        assert scores == sorted(scores)

    def test_monotonic_across_distribution_shapes(self):
        snap = make_snapshot()
        # Ordered by top-5 share; shapes vary between peaked and flat
        dists = [
            _dist(4, 4, 4, 4, 4),
            _dist(19, 1, 1, 1, 1),
            _dist(31, 3, 3, 3, 1),
            _dist(9, 9, 9, 9, 9),
            _dist(31, 10, 10, 10, 4),
            _dist(14, 14, 14, 14, 14),
            _dist(50, 20, 5, 5, 1),
            _dist(18, 18, 18, 18, 18),
        ]
        tops = [sum(e.percentage for e in d[:5]) for d in dists]
        assert tops == sorted(tops)

        scores = [score_wallet_concentration(snap, d, CONFIG).score for d in dists]
        assert scores == sorted(scores)

    def test_low_transfer_activity_raises(self):
        payloads = SourcePayloads(bitquery=BitqueryReport(transfers=[BitqueryTransfer(count=10)]))
        wc = score_wallet_concentration(make_snapshot(sources=payloads), _dist(10, 10, 5, 5, 1), CONFIG)
        assert wc.score == 45
        assert "(Enhanced: Low on-chain activity: 10 transfers)" in wc.details

    def test_busy_token_lowers(self):
        payloads = SourcePayloads(bitquery=BitqueryReport(transfers=[BitqueryTransfer(count=5000)]))
        wc = score_wallet_concentration(make_snapshot(sources=payloads), _dist(10, 10, 5, 5, 1), CONFIG)
        assert wc.score == 15

    def test_stub_bitquery_ignored(self):
        stub = BitqueryReport(transfers=[BitqueryTransfer(count=0)], stub=True)
        wc = score_wallet_concentration(
            make_snapshot(sources=SourcePayloads(bitquery=stub)), _dist(10, 10, 5, 5, 1), CONFIG
        )
        assert wc.score == 25
        assert "Enhanced" not in wc.details


class TestLiquidity:
    def test_bands(self):
        def score(volume: float) -> int:
            return score_liquidity(make_snapshot(market_cap_usd=1_000_000, volume_24h_usd=volume)).score

        assert score(19_900) == 100
        assert score(20_000) == 75
        assert score(50_000) == 50
        assert score(100_000) == 25
        assert score(200_000) == 0

    def test_monotonic_in_volume(self):
        scores = [
            score_liquidity(make_snapshot(market_cap_usd=1_000_000, volume_24h_usd=v)).score
            for v in (500_000, 150_000, 70_000, 30_000, 1_000)
        ]
        assert scores == sorted(scores)

    def test_zero_market_cap(self):
        la = score_liquidity(make_snapshot(market_cap_usd=0))
        assert la.liquidity_ratio == 0.0
        assert la.score == 100

    def test_details(self):
        la = score_liquidity(make_snapshot(market_cap_usd=25_000_000_000, volume_24h_usd=5_600_000_000))
        assert la.details == "Liquidity ratio: 22.40% (Volume/Market Cap)"
        assert la.dex_liquidity_ratio is None

    def test_thin_dex_pools_raise(self):
        payloads = SourcePayloads(uniswap=UniswapReport(pools=[UniswapPool(totalValueLockedUSD=50_000)]))
        la = score_liquidity(make_snapshot(sources=payloads))
        assert la.score == 55  # 25 + 30
        assert la.dex_liquidity_ratio == pytest.approx(0.5)
        assert "Low DEX liquidity" in la.details

    def test_deep_dex_pools_lower(self):
        payloads = SourcePayloads(uniswap=UniswapReport(pools=[UniswapPool(totalValueLockedUSD=2_000_000)]))
        assert score_liquidity(make_snapshot(sources=payloads)).score == 5

    def test_token_tvl_when_no_pools(self):
        token = UniswapToken(symbol="TEST", totalValueLockedUSD=20_000)
        payloads = SourcePayloads(uniswap=UniswapReport(token=token))
        la = score_liquidity(make_snapshot(sources=payloads))
        assert la.score == 50
        assert "Very low DEX liquidity" in la.details


class TestSupplyDynamics:
    def test_reserve(self):
        sd = score_supply_dynamics(make_snapshot(total_supply=10_000_000, max_supply=20_000_000), CONFIG)
        assert sd.reserve_percentage == 50.0
        assert sd.score == 30
        assert sd.minting_risk is False
        assert sd.details == "50.0% of max supply in reserve"

    def test_unlimited_minting(self):
        sd = score_supply_dynamics(make_snapshot(max_supply=None), CONFIG)
        assert sd.minting_risk is True
        assert sd.score == 85
        assert sd.reserve_percentage == 0.0
        assert sd.details == "Unlimited minting detected - high risk"

    def test_fully_minted(self):
        sd = score_supply_dynamics(make_snapshot(total_supply=21_000_000, max_supply=21_000_000), CONFIG)
        assert sd.score == 0

    def test_over_minted_reserve_floor(self):
        sd = score_supply_dynamics(make_snapshot(total_supply=30_000_000, max_supply=20_000_000), CONFIG)
        assert sd.reserve_percentage == 0.0

    def test_unverified_contract_raises(self):
        report = EtherscanReport.model_validate({"status": "1", "result": [{"SourceCode": ""}]})
        sd = score_supply_dynamics(make_snapshot(sources=SourcePayloads(etherscan=report)), CONFIG)
        assert sd.score == 45
        assert "(Enhanced: Unverified contract)" in sd.details

    def test_stub_etherscan_ignored(self):
        report = EtherscanReport.model_validate({"status": "1", "result": [{"SourceCode": ""}]})
        report.stub = True
        sd = score_supply_dynamics(make_snapshot(sources=SourcePayloads(etherscan=report)), CONFIG)
        assert sd.score == 30


class TestTradingVolume:
    def test_wash_trading(self):
        tv = score_trading_volume(make_snapshot(market_cap_usd=1_000_000, volume_24h_usd=6_000_000), CONFIG)
        assert tv.wash_trading_detected is True
        assert tv.score == 90
        assert tv.details == "Potential wash trading detected"

    def test_ratio_at_threshold_not_wash(self):
        tv = score_trading_volume(make_snapshot(market_cap_usd=1_000_000, volume_24h_usd=5_000_000), CONFIG)
        assert tv.wash_trading_detected is False

    def test_volume_per_holder(self):
        tv = score_trading_volume(
            make_snapshot(market_cap_usd=10_000_000_000, volume_24h_usd=1_000_000), CONFIG
        )
        assert round(tv.volume_to_holders_ratio, 1) == 316.2
        assert tv.score == 32
        assert tv.details == "Volume per holder: $316.23"

    def test_min_holder_estimate(self):
        tv = score_trading_volume(make_snapshot(market_cap_usd=1_200_000, volume_24h_usd=18_000), CONFIG)
        assert tv.volume_to_holders_ratio == 180.0
        assert tv.score == 18

    def test_low_tx_count_raises(self):
        payloads = SourcePayloads(uniswap=UniswapReport(token=UniswapToken(txCount=12)))
        tv = score_trading_volume(
            make_snapshot(market_cap_usd=1_200_000, volume_24h_usd=18_000, sources=payloads), CONFIG
        )
        assert tv.score == 43
        assert "Low transaction activity" in tv.details


class TestComposite:
    def test_weighted_sum(self):
        snap = make_snapshot(
            market_cap_usd=1_200_000,
            volume_24h_usd=18_000,
            total_supply=100_000_000_000,
            max_supply=None,
        )
        breakdown = score_breakdown(snap, _dist(45, 25, 15, 8, 5, 2), CONFIG)
        # 0.40*100 + 0.25*100 + 0.20*85 + 0.15*18 = 84.7
        assert composite_score(breakdown, CONFIG) == 85

    def test_custom_weights(self):
        snap = make_snapshot(market_cap_usd=1_200_000, volume_24h_usd=18_000, max_supply=None)
        breakdown = score_breakdown(snap, _dist(45, 25, 15, 8, 5, 2), CONFIG)
        only_supply = ScoringConfig(
            weight_wallet_concentration=0.0,
            weight_liquidity=0.0,
            weight_supply_dynamics=1.0,
            weight_trading_volume=0.0,
        )
        assert composite_score(breakdown, only_supply) == 85

    def test_config_from_settings(self):
        from config.settings import Settings

        cfg = ScoringConfig.from_settings(Settings(_env_file=None, minting_risk_score=70))
        assert cfg.minting_risk_score == 70
        assert cfg.weight_wallet_concentration == 0.40

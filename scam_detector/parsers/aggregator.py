"""Concurrent upstream fetch and merge into a TokenSnapshot.

Market data runs first (its own timeout) so the canonical contract address
can be resolved; the four address-dependent sources then run concurrently,
each raced against the source timeout. A failed, empty or timed-out source
is recorded and treated as missing; nothing a source does aborts the
others or escapes ``aggregate``.
"""

import asyncio
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from scam_detector.models.snapshot import SourcePayloads, TokenSnapshot
from scam_detector.parsers.bitquery.client import BitqueryClient
from scam_detector.parsers.coingecko.client import CoinGeckoClient
from scam_detector.parsers.coingecko.models import CoinGeckoCoin
from scam_detector.parsers.etherscan.client import EtherscanClient
from scam_detector.parsers.fallback import classify_market_scenario, generate_fallback, lookup_known
from scam_detector.parsers.identifiers import is_contract_address, short
from scam_detector.parsers.metrics import AnalysisMetrics
from scam_detector.parsers.tokenmetrics.client import TokenMetricsClient
from scam_detector.parsers.uniswap.client import UniswapClient

SKIPPED = "skipped"


@dataclass
class SourceResult:
    """Outcome of one guarded upstream call."""

    source: str
    value: Any = None
    status: str = SKIPPED  # ok / empty / timeout / error / skipped
    error: str | None = None
    latency_ms: float = 0.0


def _usable(value: Any) -> bool:
    if value is None or getattr(value, "stub", False):
        return False
    has_data = getattr(value, "has_data", True)
    return bool(has_data)


def resolve_address(identifier: str, coin: CoinGeckoCoin | None) -> str:
    """Contract address from market data, else the raw identifier."""
    if coin is not None:
        address = coin.resolved_address
        if address and is_contract_address(address):
            return address
    return identifier


def _first_positive(*values: float | None) -> float | None:
    for val in values:
        if val is not None and val > 0:
            return val
    return None


def build_snapshot(identifier: str, payloads: SourcePayloads, *, seeded: bool = True) -> TokenSnapshot:
    """Merge upstream payloads over fallback facts.

    TokenMetrics market fields win over CoinGecko; fallback fills the rest.
    """
    ident = identifier.strip()
    fb = generate_fallback(ident, seeded=seeded)

    cg = payloads.coingecko
    md = cg.market_data if cg else None
    tm = payloads.tokenmetrics

    name = (cg.name if cg else None) or (tm.name if tm else None) or fb.name
    symbol = (cg.symbol if cg else None) or (tm.symbol if tm else None) or fb.symbol
    address = (
        (cg.resolved_address if cg else None)
        or (tm.contract_address if tm else None)
        or fb.address
    )

    market_cap = _first_positive(tm.market_cap if tm else None, md.market_cap if md else None)
    volume = _first_positive(tm.volume_24h if tm else None, md.total_volume if md else None)
    price = _first_positive(tm.price if tm else None, md.current_price if md else None)

    live = payloads.has_market_data
    market_cap = market_cap or fb.market_cap
    volume = volume or fb.volume_24h
    price = price or fb.price

    if live:
        total_supply = _first_positive(
            tm.total_supply if tm else None,
            md.total_supply if md else None,
        ) or (market_cap / price if price else None)
        max_supply = _first_positive(tm.max_supply if tm else None, md.max_supply if md else None)
        known = lookup_known(ident)
        if max_supply is None and known is not None and known.max_supply_ratio is not None:
            # Live answers omit the cap for some known tokens (USDC); keep the table's cap ratio
            max_supply = (total_supply or fb.total_supply) * known.max_supply_ratio
    else:
        total_supply = fb.total_supply
        max_supply = fb.max_supply

    if fb.known or not live:
        scenario = fb.scenario
    else:
        scenario = classify_market_scenario(name, market_cap, volume)

    rank = cg.rank if cg else None
    if rank is None and tm is not None and tm.analytics is not None:
        rank = tm.analytics.market_cap_rank

    return TokenSnapshot(
        identifier=ident,
        name=name,
        symbol=symbol.upper(),
        address=address,
        market_cap_usd=market_cap,
        volume_24h_usd=volume,
        price_usd=price,
        total_supply=total_supply,
        max_supply=max_supply,
        scenario=scenario,
        market_cap_rank=rank,
        used_fallback=not live,
        sources=payloads,
    )


class TokenAggregator:
    def __init__(
        self,
        *,
        coingecko: CoinGeckoClient | None = None,
        etherscan: EtherscanClient | None = None,
        uniswap: UniswapClient | None = None,
        bitquery: BitqueryClient | None = None,
        tokenmetrics: TokenMetricsClient | None = None,
        market_data_timeout: float = 5.0,
        source_timeout: float = 3.0,
        fallback_seeded: bool = True,
        metrics: AnalysisMetrics | None = None,
    ) -> None:
        self._coingecko = coingecko
        self._etherscan = etherscan
        self._uniswap = uniswap
        self._bitquery = bitquery
        self._tokenmetrics = tokenmetrics
        self._market_data_timeout = market_data_timeout
        self._source_timeout = source_timeout
        self._fallback_seeded = fallback_seeded
        self._metrics = metrics or AnalysisMetrics()

    @property
    def metrics(self) -> AnalysisMetrics:
        return self._metrics

    @property
    def configured_sources(self) -> dict[str, bool]:
        return {
            "coingecko": self._coingecko is not None,
            "etherscan": self._etherscan is not None,
            "uniswap": self._uniswap is not None,
            "bitquery": self._bitquery is not None,
            "tokenmetrics": self._tokenmetrics is not None,
        }

    async def close(self) -> None:
        for client in (self._coingecko, self._etherscan, self._uniswap, self._bitquery, self._tokenmetrics):
            if client is not None:
                await client.close()

    async def _guarded(self, source: str, call: Awaitable | None, timeout: float) -> SourceResult:
        """Await ``call`` under ``timeout``; never raises (except cancellation)."""
        if call is None:
            return SourceResult(source)

        start = time.monotonic()
        result = SourceResult(source)
        try:
            result.value = await asyncio.wait_for(call, timeout=timeout)
            result.status = "ok" if _usable(result.value) else "empty"
        except TimeoutError:
            result.status = "timeout"
            result.error = f"timed out after {timeout}s"
            logger.warning(f"[AGGREGATE] {source} timed out after {timeout}s")
        except Exception as e:
            result.status = "error"
            result.error = f"{type(e).__name__}: {e}"
            logger.warning(f"[AGGREGATE] {source} failed: {result.error}")

        result.latency_ms = (time.monotonic() - start) * 1000
        self._metrics.record_source(source, result.status, result.latency_ms)
        return result

    async def aggregate(self, identifier: str) -> TokenSnapshot:
        ident = identifier.strip()

        market_call = None
        if self._coingecko is not None:
            # The rate-limit queue is shared across requests; only the lookup itself is raced
            await self._coingecko.throttle()
            market_call = self._coingecko.lookup(ident)
        cg = await self._guarded("coingecko", market_call, self._market_data_timeout)
        coin = cg.value if cg.status == "ok" else None
        address = resolve_address(ident, coin)
        if address != ident:
            logger.debug(f"[AGGREGATE] Resolved {short(ident)} -> {short(address)}")

        timeout = self._source_timeout
        results = await asyncio.gather(
            self._guarded("etherscan", self._etherscan.get_contract(address) if self._etherscan else None, timeout),
            self._guarded("uniswap", self._uniswap.get_token(address) if self._uniswap else None, timeout),
            self._guarded("bitquery", self._bitquery.get_token(address) if self._bitquery else None, timeout),
            self._guarded(
                "tokenmetrics",
                self._tokenmetrics.get_token(address) if self._tokenmetrics else None,
                timeout,
            ),
            return_exceptions=True,
        )

        by_source: dict[str, SourceResult] = {"coingecko": cg}
        for name, res in zip(("etherscan", "uniswap", "bitquery", "tokenmetrics"), results):
            if isinstance(res, BaseException):
                logger.warning(f"[AGGREGATE] {name} leaked exception: {res}")
                res = SourceResult(name, status="error", error=str(res))
            by_source[name] = res

        def kept(name: str) -> Any:
            # Stubs and empty answers are kept for apiData; failures are not
            res = by_source[name]
            return res.value if res.status in ("ok", "empty") else None

        payloads = SourcePayloads(
            coingecko=kept("coingecko"),
            etherscan=kept("etherscan"),
            uniswap=kept("uniswap"),
            bitquery=kept("bitquery"),
            tokenmetrics=kept("tokenmetrics"),
        )
        snapshot = build_snapshot(ident, payloads, seeded=self._fallback_seeded)
        snapshot.source_status = {name: res.status for name, res in by_source.items()}

        logger.info(
            f"[AGGREGATE] {short(ident)} "
            + " ".join(f"{name}={res.status}" for name, res in by_source.items())
            + (" (fallback market data)" if snapshot.used_fallback else "")
        )
        return snapshot

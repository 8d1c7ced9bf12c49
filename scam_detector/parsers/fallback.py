"""Fallback token facts when upstream sources are missing or incomplete.

Pure functions, no I/O. Well-known tokens come from a fixed table; anything
else gets a lexical scenario and market figures drawn from that scenario's
ranges. Randomness is seeded by the normalized identifier unless the caller
asks for an unseeded generator, so by default the same unknown token yields
the same figures on every analysis.
"""

import hashlib
import random
from dataclasses import dataclass

from loguru import logger

from scam_detector.parsers.identifiers import is_contract_address, random_address, short

# Scenario labels
ESTABLISHED = "established"
STABLECOIN = "stablecoin"
MEME = "meme"
SCAM = "scam"
SUSPICIOUS = "suspicious"
GENERIC = "generic"
CONTRACT = "contract"
UNKNOWN = "unknown"

SUSPICIOUS_KEYWORDS = ("safe", "moon", "rocket")
GENERIC_KEYWORDS = ("coin", "token")


@dataclass(frozen=True)
class KnownToken:
    name: str
    symbol: str
    address: str
    market_cap: float
    volume_24h: float
    price: float
    scenario: str
    max_supply_ratio: float | None  # max / total; None = uncapped


KNOWN_TOKENS: dict[str, KnownToken] = {
    t.symbol: t
    for t in (
        KnownToken("Ethereum", "ETH", "0xEeeeeEeeeEeEeeEeEeEeeEEEeeeeEeeeeeeeEEeE",
                   276_000_000_000, 28_000_000_000, 2300.0, ESTABLISHED, 1.2),
        KnownToken("USD Coin", "USDC", "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
                   25_000_000_000, 5_600_000_000, 1.0, STABLECOIN, 1.2),
        KnownToken("Uniswap", "UNI", "0x1f9840a85d5aF5bf1D1762F925BDADdC4201F984",
                   4_500_000_000, 120_000_000, 7.5, ESTABLISHED, 1.2),
        KnownToken("Shiba Inu", "SHIB", "0x95aD61b0a150d79219dCF64E1E6Cc01f0B64C4cE",
                   5_800_000_000, 280_000_000, 0.0000098, MEME, 1.2),
        KnownToken("Wrapped Bitcoin", "WBTC", "0x2260FAC5E5542a773Aa44fBCfeDf7C193bc2C599",
                   8_000_000_000, 500_000_000, 42000.0, ESTABLISHED, 1.0),
        KnownToken("ScamCoin", "SCAM", "0x1234567890123456789012345678901234567890",
                   1_200_000, 18_000, 0.000012, SCAM, None),
    )
}

_KNOWN_BY_ADDRESS = {t.address.lower(): t for t in KNOWN_TOKENS.values()}

# (market cap, 24h volume, price) ranges per lexical scenario
_SCENARIO_RANGES: dict[str, tuple[tuple[int, int], tuple[int, int], tuple[float, float]]] = {
    SUSPICIOUS: ((100_000, 5_000_000), (5_000, 250_000), (0.000001, 0.01)),
    GENERIC: ((1_000_000, 50_000_000), (100_000, 5_000_000), (0.01, 10.0)),
    CONTRACT: ((500_000, 25_000_000), (50_000, 2_500_000), (0.001, 5.0)),
    UNKNOWN: ((1_000_000, 50_000_000), (100_000, 5_000_000), (0.01, 10.0)),
}


@dataclass
class FallbackFacts:
    name: str
    symbol: str
    address: str
    market_cap: float
    volume_24h: float
    price: float
    total_supply: float
    max_supply: float | None
    scenario: str
    known: bool = False


def lookup_known(identifier: str) -> KnownToken | None:
    """Match by symbol (case-insensitive) or canonical contract address."""
    ident = identifier.strip()
    return KNOWN_TOKENS.get(ident.upper()) or _KNOWN_BY_ADDRESS.get(ident.lower())


def classify_identifier(identifier: str) -> str:
    """Scenario from lexical cues in the raw identifier."""
    lowered = identifier.lower()
    if any(word in lowered for word in SUSPICIOUS_KEYWORDS):
        return SUSPICIOUS
    if any(word in lowered for word in GENERIC_KEYWORDS):
        return GENERIC
    if identifier.startswith("0x"):
        return CONTRACT
    return UNKNOWN


def classify_market_scenario(name: str, market_cap: float, volume_24h: float) -> str:
    """Scenario from live market figures for tokens outside the known table."""
    risk = 35
    ratio = volume_24h / market_cap * 100 if market_cap > 0 else 0.0
    if ratio < 0.5:
        risk += 20
    if ratio > 20:
        risk += 15
    if market_cap < 1_000_000:
        risk += 25
    if market_cap > 1_000_000_000:
        risk -= 15
    if any(word in name.lower() for word in SUSPICIOUS_KEYWORDS):
        risk += 30

    if risk > 70:
        return SUSPICIOUS
    if risk > 40:
        return GENERIC
    return ESTABLISHED


def rng_for(identifier: str, seeded: bool = True) -> random.Random:
    if not seeded:
        return random.Random()
    digest = hashlib.sha256(identifier.strip().lower().encode()).digest()
    return random.Random(int.from_bytes(digest[:8], "big"))


def generate_fallback(identifier: str, *, seeded: bool = True) -> FallbackFacts:
    """Synthesize name, symbol, address and market figures for ``identifier``."""
    ident = identifier.strip()

    known = lookup_known(ident)
    if known is not None:
        total = known.market_cap / known.price
        max_supply = total * known.max_supply_ratio if known.max_supply_ratio else None
        logger.debug(f"[FALLBACK] Known token {known.symbol}")
        return FallbackFacts(
            name=known.name,
            symbol=known.symbol,
            address=known.address,
            market_cap=float(known.market_cap),
            volume_24h=float(known.volume_24h),
            price=known.price,
            total_supply=total,
            max_supply=max_supply,
            scenario=known.scenario,
            known=True,
        )

    rng = rng_for(ident, seeded)
    scenario = classify_identifier(ident)
    (mc_lo, mc_hi), (vol_lo, vol_hi), (px_lo, px_hi) = _SCENARIO_RANGES[scenario]
    market_cap = float(rng.randint(mc_lo, mc_hi))
    volume = float(rng.randint(vol_lo, vol_hi))
    price = rng.uniform(px_lo, px_hi)
    total = market_cap / price

    max_supply: float | None = None
    if scenario != SUSPICIOUS and rng.random() < 0.5:
        max_supply = total * rng.uniform(1.0, 2.0)

    if is_contract_address(ident):
        name = f"Token {ident[:6]}...{ident[-4:]}"
        symbol = ident[2:6].upper()
        address = ident
    else:
        name = f"{ident} Token"
        symbol = ident.upper()[:6]
        address = random_address(rng)

    logger.debug(f"[FALLBACK] {short(ident)} scenario={scenario} mc={market_cap:.0f}")
    return FallbackFacts(
        name=name,
        symbol=symbol,
        address=address,
        market_cap=market_cap,
        volume_24h=volume,
        price=price,
        total_supply=total,
        max_supply=max_supply,
        scenario=scenario,
    )

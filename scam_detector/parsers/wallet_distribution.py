"""Modelled holder distribution per token scenario.

The table is synthetic: it is picked from a scenario template and is never
read from chain, even when a real contract address is known. Individual
holders come first in descending share, then aggregate buckets whose
address is "Various".
"""

import random

from scam_detector.models.analysis import WalletDistributionEntry
from scam_detector.parsers.fallback import ESTABLISHED, MEME, SCAM, STABLECOIN, SUSPICIOUS
from scam_detector.parsers.identifiers import random_address

AGGREGATE_ADDRESS = "Various"
TVL_TOP_HOLDER_FACTOR = 0.8
TVL_TOP_HOLDER_FLOOR = 15.0

# scenario -> (individual holders, aggregate buckets), shares in percent
_TEMPLATES: dict[str, tuple[list[tuple[str, float]], list[tuple[str, float]]]] = {
    ESTABLISHED: (
        [
            ("Exchange Cold Storage", 9.0),
            ("DEX Liquidity", 6.0),
            ("Staking Contract", 4.0),
            ("Whale #1", 3.0),
            ("Whale #2", 2.5),
        ],
        [("Community Pool", 10.0), ("Retail Holders", 65.5)],
    ),
    STABLECOIN: (
        [
            ("Exchange Hot Wallet", 4.8),
            ("Issuer Treasury", 4.2),
            ("DEX Liquidity", 3.6),
            ("Lending Protocol", 3.1),
            ("Bridge Contract", 2.7),
        ],
        [("Wallets 6-20", 12.4), ("Other Holders", 69.2)],
    ),
    MEME: (
        [
            ("Original Deployer", 20.0),
            ("Uniswap V2", 18.0),
            ("Community Whale", 12.0),
            ("Diamond Hands #1", 8.0),
            ("Diamond Hands #2", 7.0),
        ],
        [("Meme Army", 25.0), ("Paper Hands", 10.0)],
    ),
    SCAM: (
        [
            ("Creator Wallet", 45.0),
            ("Team Wallet", 25.0),
            ("Marketing Wallet", 15.0),
            ("Fake Liquidity", 8.0),
        ],
        [("Early Buyers", 5.0), ("Trapped Holders", 2.0)],
    ),
    SUSPICIOUS: (
        [
            ("Top Wallet", 45.5),
            ("Wallet 2", 18.8),
            ("Wallet 3", 9.7),
            ("Wallet 4", 7.1),
            ("Wallet 5", 5.3),
        ],
        [("Wallets 6-10", 7.1), ("Other Holders", 6.5)],
    ),
}

_DEFAULT_TEMPLATE = (
    [
        ("Top Wallet", 25.5),
        ("Wallet 2", 17.8),
        ("Wallet 3", 11.7),
        ("Wallet 4", 8.1),
        ("Wallet 5", 6.3),
    ],
    [("Wallets 6-10", 12.1), ("Other Holders", 18.5)],
)


def build_distribution(
    scenario: str,
    supply: float,
    *,
    dex_tvl_usd: float = 0.0,
    rng: random.Random | None = None,
) -> list[WalletDistributionEntry]:
    """Distribution table for ``scenario`` scaled to ``supply`` tokens.

    Live DEX liquidity (``dex_tvl_usd > 0``) lowers the top holder's share.
    """
    rng = rng or random.Random()
    holders, buckets = _TEMPLATES.get(scenario, _DEFAULT_TEMPLATE)

    shares = list(holders)
    if dex_tvl_usd > 0 and shares:
        label, pct = shares[0]
        shares[0] = (label, max(TVL_TOP_HOLDER_FLOOR, pct * TVL_TOP_HOLDER_FACTOR))
        shares.sort(key=lambda item: item[1], reverse=True)

    entries = [
        WalletDistributionEntry(
            label=label,
            value=supply * pct / 100,
            percentage=round(pct, 2),
            address=random_address(rng),
        )
        for label, pct in shares
    ]
    entries.extend(
        WalletDistributionEntry(
            label=label,
            value=supply * pct / 100,
            percentage=pct,
            address=AGGREGATE_ADDRESS,
        )
        for label, pct in buckets
    )
    return entries

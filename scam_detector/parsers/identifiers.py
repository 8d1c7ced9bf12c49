"""Token identifier helpers: contract-address sniffing and placeholder addresses."""

import random

ADDRESS_LENGTH = 42


def is_contract_address(identifier: str) -> bool:
    """Shape check only: ``0x`` prefix and 42 chars. Checksum is not validated."""
    return identifier.startswith("0x") and len(identifier) == ADDRESS_LENGTH


def random_address(rng: random.Random | None = None) -> str:
    """Placeholder address for tokens whose contract is unknown."""
    rng = rng or random.Random()
    return "0x" + "".join(rng.choice("0123456789abcdef") for _ in range(40))


def short(identifier: str) -> str:
    """Truncate for log lines."""
    return identifier[:12]

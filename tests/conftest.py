"""Shared test fixtures."""

import asyncio
from typing import Any
from unittest.mock import MagicMock

import pytest

from scam_detector.api.app import limiter
from scam_detector.models.snapshot import TokenSnapshot


@pytest.fixture(autouse=True)
def _reset_rate_limiter() -> None:
    """slowapi keeps hits in process memory; start every test with a clean window."""
    limiter.reset()


def make_response(status_code: int = 200, payload: Any = None, text: str = "") -> MagicMock:
    """httpx.Response stand-in with ``status_code``, ``json()`` and ``text``."""
    resp = MagicMock()
    resp.status_code = status_code
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    resp.text = text
    return resp


def make_snapshot(**kwargs) -> TokenSnapshot:
    defaults = {
        "identifier": "TEST",
        "name": "Test Token",
        "symbol": "TEST",
        "address": "0x" + "ab" * 20,
        "market_cap_usd": 10_000_000.0,
        "volume_24h_usd": 1_000_000.0,
        "price_usd": 1.0,
        "total_supply": 10_000_000.0,
        "max_supply": 20_000_000.0,
        "scenario": "generic",
    }
    defaults.update(kwargs)
    return TokenSnapshot(**defaults)


class FakeSource:
    """Upstream client double: returns a canned value, raises, or stalls."""

    def __init__(self, result: Any = None, *, delay: float = 0.0, exc: Exception | None = None) -> None:
        self.result = result
        self.delay = delay
        self.exc = exc
        self.calls: list[str] = []
        self.throttled = 0
        self.closed = False

    async def _respond(self, identifier: str) -> Any:
        self.calls.append(identifier)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.exc is not None:
            raise self.exc
        return self.result

    get_token = _respond
    get_contract = _respond
    lookup = _respond

    async def throttle(self) -> None:
        self.throttled += 1

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_source() -> type[FakeSource]:
    return FakeSource

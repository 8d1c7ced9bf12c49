"""Data models for BitQuery (Ethereum GraphQL v1) responses."""

from typing import Any

from pydantic import BaseModel, Field

from scam_detector.parsers.payload_types import LenientFloat, LenientInt, LenientStr


class BitqueryTransfer(BaseModel):
    count: LenientInt = None
    amount: LenientFloat = None

    model_config = {"extra": "ignore"}


class BitqueryReport(BaseModel):
    """Smart-contract facts plus the 7-day transfer aggregate.

    ``stub`` is set when BitQuery was asked but answered with an error; the
    zero-valued shape is kept so "asked but empty" is distinguishable from
    "did not ask" (None).
    """

    contract_type: LenientStr = None
    currency_symbol: LenientStr = None
    currency_name: LenientStr = None
    currency_decimals: LenientInt = None
    transfers: list[BitqueryTransfer] = []
    stub: bool = False

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    @property
    def total_transfers(self) -> int:
        return sum(t.count or 0 for t in self.transfers)

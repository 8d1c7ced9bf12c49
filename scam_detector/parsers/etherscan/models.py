"""Data models for Etherscan API responses."""

from typing import Any

from pydantic import BaseModel, Field

from scam_detector.parsers.payload_types import LenientInt, LenientList, LenientStr


class EtherscanContract(BaseModel):
    """First ``result`` entry of getsourcecode (or tokeninfo, which shares the envelope).

    ``SourceCode`` is absent for tokeninfo; verification status is then unknown.
    """

    SourceCode: LenientStr = None
    ContractName: LenientStr = None
    CompilerVersion: LenientStr = None
    Proxy: LenientStr = None
    TransactionCount: LenientInt = None

    # tokeninfo fields
    tokenName: LenientStr = None
    symbol: LenientStr = None
    totalSupply: LenientStr = None

    model_config = {"extra": "ignore"}


class EtherscanReport(BaseModel):
    """Envelope ``{status, message, result}``.

    ``stub`` marks the placeholder returned when every endpoint failed; it
    keeps the payload shape for display but carries no real contract facts.
    """

    status: LenientStr = None
    message: LenientStr = None
    result: LenientList = []
    stub: bool = False

    raw: dict[str, Any] = Field(default_factory=dict, exclude=True)

    model_config = {"extra": "ignore"}

    @property
    def contract(self) -> EtherscanContract | None:
        if not self.result:
            return None
        return EtherscanContract.model_validate(self.result[0])

    @property
    def is_verified(self) -> bool | None:
        """False when the explorer returned an empty source; None when unknown."""
        contract = self.contract
        if contract is None or contract.SourceCode is None:
            return None
        return contract.SourceCode != ""

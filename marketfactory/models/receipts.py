"""Transaction receipts returned by every mutating contract call."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict


class TxStatus(str, Enum):
    """Outcome of a finalized transaction."""

    SUCCESS = "success"
    REVERTED = "reverted"


class TransactionReceipt(BaseModel):
    """Record of one finalized call.

    ``gas_used`` is always positive; reverted calls still pay the base and
    calldata charges.  ``contract_address`` is set when the call deployed a
    contract (top-level ``deploy`` or a factory registration).
    """

    model_config = ConfigDict(frozen=True)

    tx_hash: str
    block_number: int
    sender: str
    to: str
    method: str
    status: TxStatus = TxStatus.SUCCESS
    gas_used: int
    contract_address: str = ""
    revert_reason: str = ""

    @property
    def succeeded(self) -> bool:
        return self.status == TxStatus.SUCCESS

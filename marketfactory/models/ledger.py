"""Transaction ledger entry model (append-only, hash-chained).

The transaction ledger is the durable record of the chain:
- Append-only (no UPDATE, no DELETE)
- Hash-chained (each entry links to the previous via SHA-256)
- One entry per finalized call, successful or reverted
- Replayable: every entry carries its call arguments
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from marketfactory.models.receipts import TransactionReceipt, TxStatus


class TransactionRecord(BaseModel):
    """A single entry in the transaction ledger."""

    model_config = ConfigDict(frozen=True)

    entry_id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    tx_hash: str
    block_number: int
    sender: str
    to: str
    method: str
    args: list[Any] = []
    contract_type: str = ""  # set for top-level deployments
    status: TxStatus = TxStatus.SUCCESS
    gas_used: int
    contract_address: str = ""
    revert_reason: str = ""
    timestamp_utc: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc)
    )
    previous_entry_hash: str = ""
    entry_hash: str = ""  # computed by the ledger, seals this entry

    @classmethod
    def from_receipt(
        cls,
        receipt: TransactionReceipt,
        args: list[Any],
        contract_type: str = "",
    ) -> TransactionRecord:
        return cls(
            tx_hash=receipt.tx_hash,
            block_number=receipt.block_number,
            sender=receipt.sender,
            to=receipt.to,
            method=receipt.method,
            args=args,
            contract_type=contract_type,
            status=receipt.status,
            gas_used=receipt.gas_used,
            contract_address=receipt.contract_address,
            revert_reason=receipt.revert_reason,
        )

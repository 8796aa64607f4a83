"""marketfactory data models — all Pydantic v2, all frozen (immutable)."""

from marketfactory.models.accounts import Signer
from marketfactory.models.items import Item
from marketfactory.models.ledger import TransactionRecord
from marketfactory.models.receipts import TransactionReceipt, TxStatus

__all__ = [
    "Item",
    "Signer",
    "TransactionReceipt",
    "TransactionRecord",
    "TxStatus",
]

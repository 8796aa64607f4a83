"""Revert taxonomy for contract calls.

Every rejected call surfaces as a ``RevertError`` carrying a ``RevertKind``
tag and the exact reason string callers assert on.  A revert aborts the
whole call: the chain restores every contract's storage before the error
reaches the caller.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from marketfactory.models.receipts import TransactionReceipt


class RevertKind(str, Enum):
    """Tag for each way a contract call can be rejected."""

    ALREADY_REGISTERED = "already_registered"
    NOT_REGISTERED = "not_registered"
    UNAUTHORIZED = "unauthorized"
    INVALID_NAME = "invalid_name"
    INVALID_PRICE = "invalid_price"
    ITEM_NOT_FOUND = "item_not_found"


REVERT_REASONS: dict[RevertKind, str] = {
    RevertKind.ALREADY_REGISTERED: "User already registered",
    RevertKind.NOT_REGISTERED: "User not registered",
    RevertKind.UNAUTHORIZED: "Only owner can call this function",
    RevertKind.INVALID_NAME: "Name cannot be empty",
    RevertKind.INVALID_PRICE: "Price must be greater than 0",
    RevertKind.ITEM_NOT_FOUND: "Item does not exist",
}


class RevertError(RuntimeError):
    """Raised when a contract rejects a call.

    Subclasses set ``kind``; ``reason`` is looked up from
    ``REVERT_REASONS`` so the literal text lives in one place.
    """

    kind: RevertKind

    def __init__(self) -> None:
        self.reason = REVERT_REASONS[self.kind]
        # Set by the chain once the reverted call is finalized.
        self.receipt: TransactionReceipt | None = None
        super().__init__(self.reason)


class AlreadyRegisteredError(RevertError):
    kind = RevertKind.ALREADY_REGISTERED


class NotRegisteredError(RevertError):
    kind = RevertKind.NOT_REGISTERED


class UnauthorizedError(RevertError):
    kind = RevertKind.UNAUTHORIZED


class InvalidNameError(RevertError):
    kind = RevertKind.INVALID_NAME


class InvalidPriceError(RevertError):
    kind = RevertKind.INVALID_PRICE


class ItemNotFoundError(RevertError):
    kind = RevertKind.ITEM_NOT_FOUND


_BY_KIND: dict[RevertKind, type[RevertError]] = {
    cls.kind: cls
    for cls in (
        AlreadyRegisteredError,
        NotRegisteredError,
        UnauthorizedError,
        InvalidNameError,
        InvalidPriceError,
        ItemNotFoundError,
    )
}


def revert_for(kind: RevertKind) -> RevertError:
    """Build the ``RevertError`` subclass instance for *kind*."""
    return _BY_KIND[kind]()


class ContractNotFoundError(RuntimeError):
    """Raised when attaching to an address that holds no matching contract."""


class ReplayError(RuntimeError):
    """Raised when replaying the ledger diverges from the recorded outcome."""

"""Per-user listing contract.

Each Listing belongs to exactly one owner, fixed at construction.  Only the
owner can add items; anyone can read them.  Items are append-only and
their index in the sequence is their permanent identifier.
"""

from __future__ import annotations

import logging

from marketfactory.contracts.base import Contract, mutating, view
from marketfactory.core.errors import (
    InvalidNameError,
    InvalidPriceError,
    ItemNotFoundError,
    UnauthorizedError,
)
from marketfactory.core.hasher import normalize_address
from marketfactory.models.items import Item

logger = logging.getLogger(__name__)


class Listing(Contract):
    """Item storage for a single user."""

    storage_fields = ("_owner", "_items")

    def constructor(self, owner: str) -> None:
        self._owner = normalize_address(owner)
        self._items: list[Item] = []
        self._charge_storage_writes(1)

    @mutating
    def list_item(self, name: str, price: int) -> int:
        """Append an item and return its index.

        Checks run in order: caller is the owner, name is non-empty, price
        is positive.  The first failing check decides the revert reason.
        """
        if self.msg_sender != self._owner:
            raise UnauthorizedError()
        if not isinstance(name, str):
            raise TypeError(f"name must be str, got {type(name).__name__}")
        if not name:
            raise InvalidNameError()
        if isinstance(price, bool) or not isinstance(price, int):
            raise TypeError(f"price must be int, got {type(price).__name__}")
        if price <= 0:
            raise InvalidPriceError()

        index = len(self._items)
        self._items.append(Item(name=name, price=price))
        # name, price and sold each occupy a slot
        self._charge_storage_writes(3)
        logger.info("Listing %s: item %d %r at %d.", self.address, index, name, price)
        return index

    @view
    def get_item(self, index: int) -> tuple[str, int, bool]:
        if isinstance(index, bool) or not isinstance(index, int):
            raise TypeError(f"index must be int, got {type(index).__name__}")
        if not 0 <= index < len(self._items):
            raise ItemNotFoundError()
        return self._items[index].as_tuple()

    @view
    def get_item_count(self) -> int:
        return len(self._items)

    @view
    def owner(self) -> str:
        return self._owner

"""Marketplace factory contract.

Registers users and deploys one ``Listing`` per registered user.  After
deployment the factory and the listing never call each other; users talk
to their listing directly.
"""

from __future__ import annotations

import logging

from marketfactory.contracts.base import Contract, mutating, view
from marketfactory.contracts.listing import Listing
from marketfactory.core.errors import AlreadyRegisteredError, NotRegisteredError
from marketfactory.core.hasher import normalize_address

logger = logging.getLogger(__name__)


class MarketplaceFactory(Contract):
    """Registry of users and their listing contracts.

    ``_count`` always equals ``len(_registered)``; registration is
    write-once per identity.
    """

    storage_fields = ("_registered", "_listing_of", "_count")

    def constructor(self) -> None:
        self._registered: set[str] = set()
        self._listing_of: dict[str, str] = {}
        self._count = 0

    @mutating
    def register_user(self) -> str:
        """Deploy a Listing owned by the caller and record it."""
        sender = self.msg_sender
        if sender in self._registered:
            raise AlreadyRegisteredError()

        listing = self._create(Listing, sender)
        self._listing_of[sender] = listing
        self._registered.add(sender)
        self._count += 1
        self._charge_storage_writes(3)
        logger.info("Registered %s with listing %s.", sender, listing)
        return listing

    @view
    def is_user_registered(self, identity: str) -> bool:
        return normalize_address(identity) in self._registered

    @view
    def get_user_listing(self, identity: str) -> str:
        identity = normalize_address(identity)
        if identity not in self._registered:
            raise NotRegisteredError()
        return self._listing_of[identity]

    @view
    def get_registered_users_count(self) -> int:
        return self._count

    @view
    def get_registered_users(self) -> list[str]:
        """Registered identities in registration order."""
        return list(self._listing_of)

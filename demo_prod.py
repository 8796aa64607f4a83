"""Smoke test — drives the marketplace against the configured ledger.

Usage:
    python demo_prod.py
"""

from __future__ import annotations

from marketfactory.config import config
from marketfactory.contracts.factory import MarketplaceFactory
from marketfactory.contracts.listing import Listing
from marketfactory.core.chain import Chain
from marketfactory.core.errors import RevertError
from marketfactory.core.tx_ledger import TransactionLedger
from marketfactory.units import parse_ether


def main() -> None:
    """Deploy (once), register an account, list an item, verify the ledger."""
    print(f"marketfactory {config.environment.upper()} MODE")
    print(f"Ledger: {config.state_path}")
    print()

    ledger = TransactionLedger(config.state_path)
    chain = Chain.from_ledger(ledger, config)
    deployer, user = chain.get_signers(2)

    existing = chain.find_contracts(MarketplaceFactory)
    if existing:
        factory = chain.attach(MarketplaceFactory, existing[0])
    else:
        factory = chain.deploy(MarketplaceFactory, sender=deployer)
    print(f"Factory: {factory.address}")

    try:
        receipt = factory.connect(user).register_user()
        print(f"Registered {user.address} (gas {receipt.gas_used})")
    except RevertError as exc:
        print(f"register_user: {exc.reason}")

    listing = chain.attach(Listing, factory.get_user_listing(user)).connect(user)
    receipt = listing.list_item("Smoke test item", parse_ether("1"))
    print(f"Listed item {listing.get_item_count() - 1} (gas {receipt.gas_used})")

    print(f"Ledger chain valid: {ledger.verify_chain()}")
    print(f"Registered users: {factory.get_registered_users_count()}")


if __name__ == "__main__":
    main()

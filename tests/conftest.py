"""Shared test fixtures for marketfactory."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from marketfactory.config import MarketConfig
from marketfactory.contracts.factory import MarketplaceFactory
from marketfactory.contracts.listing import Listing
from marketfactory.core.chain import Chain, ContractHandle
from marketfactory.core.tx_ledger import TransactionLedger
from marketfactory.models.accounts import Signer
from marketfactory.units import parse_ether

ONE_ETHER = parse_ether("1")


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Provide a temporary directory for test artifacts."""
    return tmp_path


@pytest.fixture
def market_config() -> MarketConfig:
    """Config with the default gas schedule and a fixed signer seed."""
    return MarketConfig(signer_seed="marketfactory-tests", signer_count=5)


@pytest.fixture
def chain(market_config: MarketConfig) -> Chain:
    """Provide a fresh in-memory Chain."""
    return Chain(config=market_config)


@pytest.fixture
def tx_ledger(tmp_dir: Path) -> TransactionLedger:
    """Provide a fresh TransactionLedger backed by a temp SQLite database."""
    return TransactionLedger(tmp_dir / "test_chain.db")


@pytest.fixture
def ledgered_chain(market_config: MarketConfig, tx_ledger: TransactionLedger) -> Chain:
    """Provide a Chain that records every call in ``tx_ledger``."""
    return Chain(config=market_config, ledger=tx_ledger)


@pytest.fixture
def accounts(chain: Chain) -> tuple[Signer, Signer, Signer]:
    """The ``(owner, user1, user2)`` signers."""
    owner, user1, user2 = chain.get_signers(3)
    return owner, user1, user2


@pytest.fixture
def owner(accounts) -> Signer:
    return accounts[0]


@pytest.fixture
def user1(accounts) -> Signer:
    return accounts[1]


@pytest.fixture
def user2(accounts) -> Signer:
    return accounts[2]


@pytest.fixture
def marketplace(chain: Chain, owner: Signer) -> ContractHandle:
    """A freshly deployed MarketplaceFactory."""
    return chain.deploy(MarketplaceFactory, sender=owner)


@pytest.fixture
def register(chain: Chain, marketplace: ContractHandle) -> Callable[[Signer], ContractHandle]:
    """Factory fixture: register a signer and return a handle to its Listing
    connected as that signer."""

    def _register(signer: Signer) -> ContractHandle:
        marketplace.connect(signer).register_user()
        address = marketplace.get_user_listing(signer)
        return chain.attach(Listing, address).connect(signer)

    return _register


@pytest.fixture
def user1_listing(register, user1: Signer) -> ContractHandle:
    """user1's listing, connected as user1."""
    return register(user1)

"""End-to-end tests for the marketplace system — factory registration,
per-user listing contracts, rejected calls, and gas reporting.
"""

from __future__ import annotations

import pytest

from marketfactory.contracts.listing import Listing
from marketfactory.core.errors import RevertError
from marketfactory.core.hasher import ZERO_ADDRESS
from marketfactory.units import parse_ether


class TestUserRegistration:
    def test_user_can_register(self, marketplace, user1):
        marketplace.connect(user1).register_user()
        assert marketplace.is_user_registered(user1.address) is True

    def test_registration_creates_listing_contract(self, marketplace, user1):
        marketplace.connect(user1).register_user()
        listing_address = marketplace.get_user_listing(user1.address)
        assert listing_address != ZERO_ADDRESS

    def test_registration_increments_count(self, marketplace, user1):
        initial = marketplace.get_registered_users_count()
        marketplace.connect(user1).register_user()
        assert marketplace.get_registered_users_count() == initial + 1

    def test_double_registration_rejected(self, marketplace, user1):
        marketplace.connect(user1).register_user()
        with pytest.raises(RevertError, match="User already registered"):
            marketplace.connect(user1).register_user()


class TestListingContractIntegration:
    def test_listing_owner_is_registered_user(self, user1_listing, user1):
        assert user1_listing.owner() == user1.address

    def test_owner_can_list_items(self, user1_listing):
        user1_listing.list_item("Test Item", parse_ether("1"))

        name, price, sold = user1_listing.get_item(0)
        assert name == "Test Item"
        assert price == parse_ether("1")
        assert sold is False

    def test_non_owner_cannot_list_items(self, user1_listing, user2):
        with pytest.raises(RevertError, match="Only owner can call this function"):
            user1_listing.connect(user2).list_item("Test Item", parse_ether("1"))
        assert user1_listing.get_item_count() == 0


class TestMarketplaceSystemIntegration:
    def test_multiple_registrations(self, marketplace, user1, user2):
        marketplace.connect(user1).register_user()
        marketplace.connect(user2).register_user()

        user1_listing = marketplace.get_user_listing(user1.address)
        user2_listing = marketplace.get_user_listing(user2.address)

        assert user1_listing != user2_listing
        assert user1_listing != ZERO_ADDRESS
        assert user2_listing != ZERO_ADDRESS

    def test_separate_listings_per_user(self, chain, marketplace, user1, user2):
        marketplace.connect(user1).register_user()
        marketplace.connect(user2).register_user()

        user1_listing = chain.attach(Listing, marketplace.get_user_listing(user1))
        user2_listing = chain.attach(Listing, marketplace.get_user_listing(user2))

        user1_listing.connect(user1).list_item("User1 Item", parse_ether("1"))
        user2_listing.connect(user2).list_item("User2 Item", parse_ether("2"))

        item1_name, item1_price, _ = user1_listing.get_item(0)
        item2_name, item2_price, _ = user2_listing.get_item(0)

        assert item1_name == "User1 Item"
        assert item2_name == "User2 Item"
        assert item1_price == parse_ether("1")
        assert item2_price == parse_ether("2")
        assert user1_listing.get_item_count() == 1
        assert user2_listing.get_item_count() == 1

    def test_listing_query_for_unregistered_user(self, marketplace, user1):
        with pytest.raises(RevertError, match="User not registered"):
            marketplace.get_user_listing(user1.address)


class TestEdgeCases:
    def test_empty_item_name(self, user1_listing):
        with pytest.raises(RevertError, match="Name cannot be empty"):
            user1_listing.list_item("", parse_ether("1"))

    def test_zero_price(self, user1_listing):
        with pytest.raises(RevertError, match="Price must be greater than 0"):
            user1_listing.list_item("Test Item", 0)

    def test_invalid_item_query(self, user1_listing):
        with pytest.raises(RevertError, match="Item does not exist"):
            user1_listing.get_item(0)


class TestGasUsage:
    def test_registration_reports_gas(self, marketplace, user1):
        receipt = marketplace.connect(user1).register_user()
        assert receipt.gas_used > 0

    def test_listing_item_reports_gas(self, user1_listing):
        receipt = user1_listing.list_item("Test Item", parse_ether("1"))
        assert receipt.gas_used > 0

    def test_registration_costs_more_than_listing(self, marketplace, chain, user1):
        register_receipt = marketplace.connect(user1).register_user()
        listing = chain.attach(Listing, register_receipt.contract_address).connect(user1)
        list_receipt = listing.list_item("Test Item", parse_ether("1"))
        assert register_receipt.gas_used > list_receipt.gas_used

"""Marketplace contracts: the factory and the per-user listing."""

from marketfactory.contracts.base import Contract, mutating, view
from marketfactory.contracts.factory import MarketplaceFactory
from marketfactory.contracts.listing import Listing

__all__ = ["Contract", "Listing", "MarketplaceFactory", "mutating", "view"]

"""marketfactory: a marketplace factory that deploys one listing contract
per registered user.

  - MarketplaceFactory registers users and deploys their Listing
  - Listing holds one owner's append-only items, owner-only writes
  - Chain: serialized, atomic execution with reverts, receipts, and gas
  - Hash-chained SQLite transaction ledger, replayable into a Chain
  - Env-driven config (MARKETFACTORY_*) and a Typer/Rich CLI
"""

__version__ = "0.1.0"
__description__ = (
    "Per-user listing contracts deployed by a marketplace factory"
)

from marketfactory.contracts.factory import MarketplaceFactory
from marketfactory.contracts.listing import Listing
from marketfactory.core.chain import Chain
from marketfactory.cli.app import app as cli

__all__ = ["Chain", "Listing", "MarketplaceFactory", "cli", "__version__"]

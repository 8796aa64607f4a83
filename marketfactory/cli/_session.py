"""Shared helpers for commands that operate on the persisted chain."""

from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console

from marketfactory.config import config
from marketfactory.contracts.factory import MarketplaceFactory
from marketfactory.core.chain import Chain, ContractHandle
from marketfactory.core.errors import ReplayError
from marketfactory.core.tx_ledger import LedgerIntegrityError, TransactionLedger
from marketfactory.models.accounts import Signer

console = Console()


def state_path(state: str | None) -> Path:
    return Path(state) if state else config.state_path


def open_chain(state: str | None) -> Chain:
    """Rebuild the chain from the ledger at *state* (or the configured path)."""
    ledger = TransactionLedger(state_path(state))
    try:
        return Chain.from_ledger(ledger, config)
    except (LedgerIntegrityError, ReplayError) as exc:
        console.print(f"[bold red]Cannot load chain state:[/bold red] {exc}")
        raise typer.Exit(code=1) from exc


def require_factory(chain: Chain) -> ContractHandle:
    """Return the first deployed factory, or exit with a hint."""
    addresses = chain.find_contracts(MarketplaceFactory)
    if not addresses:
        console.print("[bold red]No marketplace factory deployed.[/bold red]")
        console.print("[dim]Deploy one first with: marketfactory deploy[/dim]")
        raise typer.Exit(code=1)
    return chain.attach(MarketplaceFactory, addresses[0])


def signer_at(chain: Chain, index: int) -> Signer:
    signers = chain.signers
    if not 0 <= index < len(signers):
        console.print(
            f"[bold red]No account {index}.[/bold red] "
            f"Accounts 0-{len(signers) - 1} are available."
        )
        raise typer.Exit(code=1)
    return signers[index]

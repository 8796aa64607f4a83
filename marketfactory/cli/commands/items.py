"""``marketfactory list-item`` and ``marketfactory items`` — write and read
an account's listing.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from marketfactory.cli._session import open_chain, require_factory, signer_at
from marketfactory.contracts.listing import Listing
from marketfactory.core.errors import RevertError
from marketfactory.units import format_ether, parse_ether

console = Console()


def _parse_price(price: str, ether: bool) -> int:
    try:
        return parse_ether(price) if ether else int(price)
    except ValueError as exc:
        console.print(f"[bold red]Invalid price:[/bold red] {price!r}")
        raise typer.Exit(code=1) from exc


def list_item_cmd(
    name: str = typer.Argument(..., help="Item name."),
    price: str = typer.Argument(..., help="Item price (wei, or ether with --ether)."),
    account: int = typer.Option(
        1,
        "--account",
        "-a",
        help="Index of the signer account that owns the listing.",
    ),
    ether: bool = typer.Option(
        False,
        "--ether",
        "-e",
        help="Interpret PRICE as a decimal amount of ether.",
    ),
    state: str = typer.Option(
        None,
        "--state",
        "-s",
        help="Path to the transaction ledger database.",
    ),
) -> None:
    """List an item on the account's own listing contract."""
    price_wei = _parse_price(price, ether)
    chain = open_chain(state)
    factory = require_factory(chain)
    signer = signer_at(chain, account)

    try:
        listing_address = factory.get_user_listing(signer)
        listing = chain.attach(Listing, listing_address).connect(signer)
        receipt = listing.list_item(name, price_wei)
    except RevertError as exc:
        console.print(f"[bold red]Reverted:[/bold red] {exc.reason}")
        raise typer.Exit(code=1) from exc

    index = listing.get_item_count() - 1
    console.print(
        f"[bold green]Listed[/bold green] item {index} {name!r} "
        f"for {format_ether(price_wei)} ETH"
    )
    console.print(f"[dim]Gas used: {receipt.gas_used:,}[/dim]")


def items_cmd(
    account: int = typer.Option(
        1,
        "--account",
        "-a",
        help="Index of the signer account whose items to show.",
    ),
    state: str = typer.Option(
        None,
        "--state",
        "-s",
        help="Path to the transaction ledger database.",
    ),
) -> None:
    """Show the items on an account's listing."""
    chain = open_chain(state)
    factory = require_factory(chain)
    signer = signer_at(chain, account)

    try:
        listing = chain.attach(Listing, factory.get_user_listing(signer))
    except RevertError as exc:
        console.print(f"[bold red]Reverted:[/bold red] {exc.reason}")
        raise typer.Exit(code=1) from exc

    count = listing.get_item_count()
    if not count:
        console.print("[dim]No items listed.[/dim]")
        return

    table = Table(title=f"Items of account {signer.index}")
    table.add_column("#", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Price (ETH)", justify="right", style="green")
    table.add_column("Sold", justify="center")

    for index in range(count):
        name, price, sold = listing.get_item(index)
        table.add_row(
            str(index),
            name,
            format_ether(price),
            "[yellow]Yes[/yellow]" if sold else "No",
        )

    console.print(table)

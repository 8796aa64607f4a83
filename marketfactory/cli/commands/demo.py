"""``marketfactory demo`` — run the marketplace end to end in memory.

Deploys a factory, registers two users, lists an item for each, shows a
few rejected calls, and reports the gas used along the way.  Nothing is
persisted.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from marketfactory.config import config
from marketfactory.contracts.factory import MarketplaceFactory
from marketfactory.contracts.listing import Listing
from marketfactory.core.chain import Chain
from marketfactory.core.errors import RevertError
from marketfactory.units import format_ether, parse_ether

console = Console()


def demo_cmd(
    users: int = typer.Option(
        2,
        "--users",
        "-u",
        help="Number of users to register.",
        min=1,
    ),
) -> None:
    """Run the marketplace end to end on an in-memory chain."""
    chain = Chain(config=config)
    deployer, *accounts = chain.signers
    accounts = accounts[:users]

    console.print()
    console.print(
        Panel(
            "[bold]marketfactory demo[/bold]\n\n"
            "Deploys a factory, registers users, and lists one item each.",
            border_style="cyan",
            padding=(1, 2),
        )
    )

    factory = chain.deploy(MarketplaceFactory, sender=deployer)
    console.print(f"[bold green]Factory deployed:[/bold green] {factory.address}")

    gas = Table(title="Gas used")
    gas.add_column("Call", style="cyan")
    gas.add_column("Account", justify="right")
    gas.add_column("Gas", justify="right")

    for n, signer in enumerate(accounts, start=1):
        receipt = factory.connect(signer).register_user()
        gas.add_row("register_user", str(signer.index), f"{receipt.gas_used:,}")

        listing = chain.attach(Listing, factory.get_user_listing(signer)).connect(signer)
        receipt = listing.list_item(f"User{n} Item", parse_ether(str(n)))
        gas.add_row("list_item", str(signer.index), f"{receipt.gas_used:,}")

    console.print(gas)

    console.print("\n[bold cyan]Rejected calls[/bold cyan]")
    owner = accounts[0]
    intruder = accounts[1] if len(accounts) > 1 else deployer
    listing = chain.attach(Listing, factory.get_user_listing(owner))
    attempts = [
        ("register twice", lambda: factory.connect(owner).register_user()),
        ("non-owner list_item", lambda: listing.connect(intruder).list_item("X", 1)),
        ("empty name", lambda: listing.connect(owner).list_item("", 1)),
        ("zero price", lambda: listing.connect(owner).list_item("X", 0)),
        ("missing item", lambda: listing.get_item(99)),
    ]
    for label, attempt in attempts:
        try:
            attempt()
        except RevertError as exc:
            console.print(f"  {label}: [red]{exc.reason}[/red]")

    summary = [
        f"[bold]Registered users:[/bold] {factory.get_registered_users_count()}",
        f"[bold]Blocks:[/bold]           {chain.block_number}",
    ]
    for signer in accounts:
        name, price, _ = chain.attach(
            Listing, factory.get_user_listing(signer)
        ).get_item(0)
        summary.append(f"  account {signer.index}: {name} @ {format_ether(price)} ETH")

    console.print()
    console.print(
        Panel(
            "\n".join(["[bold green]Demo Complete![/bold green]", "", *summary]),
            title="[bold]Demo Summary[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )

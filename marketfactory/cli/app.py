"""Main Typer application — imports and registers all CLI commands.

Entry point: ``marketfactory`` (configured via pyproject.toml scripts).
"""

from __future__ import annotations

import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from marketfactory.cli._session import open_chain, require_factory, signer_at
from marketfactory.cli.commands.demo import demo_cmd
from marketfactory.cli.commands.items import items_cmd, list_item_cmd
from marketfactory.cli.commands.ledger_cmd import ledger_cmd
from marketfactory.cli.commands.register import register_cmd
from marketfactory.config import config
from marketfactory.contracts.factory import MarketplaceFactory
from marketfactory.contracts.listing import Listing

console = Console()

app = typer.Typer(
    name="marketfactory",
    help="marketfactory: per-user listing contracts deployed by a marketplace factory.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    add_completion=False,
)


@app.callback()
def main_callback(
    log_level: str = typer.Option(
        None,
        "--log-level",
        help="Logging level (defaults to MARKETFACTORY_LOG_LEVEL).",
    ),
) -> None:
    """marketfactory: per-user listing contracts deployed by a marketplace factory."""
    logging.basicConfig(
        level=(log_level or config.log_level).upper(),
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


# Register subcommands
app.command(name="register", help="Register an account and deploy its listing.")(register_cmd)
app.command(name="list-item", help="List an item on an account's listing.")(list_item_cmd)
app.command(name="items", help="Show the items on an account's listing.")(items_cmd)
app.command(name="ledger", help="Show the transaction ledger.")(ledger_cmd)
app.command(name="demo", help="Run the marketplace end to end in memory.")(demo_cmd)


@app.command(name="accounts", help="List the deterministic signer accounts.")
def accounts_cmd(
    state: str = typer.Option(None, "--state", "-s", help="Path to the transaction ledger database."),
) -> None:
    """List signer accounts with their nonce and registration status."""
    chain = open_chain(state)
    factories = chain.find_contracts(MarketplaceFactory)
    factory = chain.attach(MarketplaceFactory, factories[0]) if factories else None

    table = Table(title="Accounts")
    table.add_column("#", justify="right")
    table.add_column("Address", style="cyan")
    table.add_column("Nonce", justify="right")
    table.add_column("Registered", justify="center")

    for signer in chain.signers:
        registered = factory is not None and factory.is_user_registered(signer)
        table.add_row(
            str(signer.index),
            signer.address,
            str(chain.get_nonce(signer.address)),
            "[green]Yes[/green]" if registered else "[dim]No[/dim]",
        )
    console.print(table)


@app.command(name="deploy", help="Deploy the marketplace factory.")
def deploy_cmd(
    account: int = typer.Option(0, "--account", "-a", help="Index of the deploying account."),
    state: str = typer.Option(None, "--state", "-s", help="Path to the transaction ledger database."),
) -> None:
    """Deploy the marketplace factory, unless one is already deployed."""
    chain = open_chain(state)
    existing = chain.find_contracts(MarketplaceFactory)
    if existing:
        console.print(f"[yellow]Factory already deployed at[/yellow] {existing[0]}")
        return

    factory = chain.deploy(MarketplaceFactory, sender=signer_at(chain, account))
    console.print(f"[bold green]Factory deployed at[/bold green] {factory.address}")
    console.print(f"[dim]Gas used: {factory.deploy_receipt.gas_used:,}[/dim]")


@app.command(name="users", help="Show registered users and their listings.")
def users_cmd(
    state: str = typer.Option(None, "--state", "-s", help="Path to the transaction ledger database."),
) -> None:
    """Show every registered user, their listing address, and item count."""
    chain = open_chain(state)
    factory = require_factory(chain)

    count = factory.get_registered_users_count()
    console.print(f"[bold]Registered users:[/bold] {count}")
    if not count:
        return

    table = Table()
    table.add_column("User", style="cyan")
    table.add_column("Listing")
    table.add_column("Items", justify="right")
    for user in factory.get_registered_users():
        listing_address = factory.get_user_listing(user)
        items = chain.attach(Listing, listing_address).get_item_count()
        table.add_row(user, listing_address, str(items))
    console.print(table)


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()

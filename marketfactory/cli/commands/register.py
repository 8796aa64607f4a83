"""``marketfactory register`` — register an account with the factory.

Deploys the account's listing contract and prints its address and the gas
used by the registration.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.panel import Panel

from marketfactory.cli._session import open_chain, require_factory, signer_at
from marketfactory.core.errors import RevertError

console = Console()


def register_cmd(
    account: int = typer.Option(
        1,
        "--account",
        "-a",
        help="Index of the signer account to register.",
    ),
    state: str = typer.Option(
        None,
        "--state",
        "-s",
        help="Path to the transaction ledger database.",
    ),
) -> None:
    """Register an account and deploy its listing contract."""
    chain = open_chain(state)
    factory = require_factory(chain)
    signer = signer_at(chain, account)

    try:
        receipt = factory.connect(signer).register_user()
    except RevertError as exc:
        console.print(f"[bold red]Reverted:[/bold red] {exc.reason}")
        raise typer.Exit(code=1) from exc

    console.print()
    console.print(
        Panel(
            "\n".join([
                "[bold green]User registered![/bold green]",
                "",
                f"[bold]Account:[/bold]   {signer.index}",
                f"[bold]Address:[/bold]   {signer.address}",
                f"[bold]Listing:[/bold]   {receipt.contract_address}",
                f"[bold]Gas used:[/bold]  {receipt.gas_used:,}",
            ]),
            title="[bold]marketfactory[/bold]",
            border_style="green",
            padding=(1, 2),
        )
    )

"""``marketfactory ledger`` — show the transaction history.

Lists every finalized call recorded in the transaction ledger, successful
or reverted, with the gas it used.  Optionally verifies the hash chain
first.
"""

from __future__ import annotations

import typer
from rich.console import Console
from rich.table import Table

from marketfactory.cli._session import state_path
from marketfactory.core.tx_ledger import LedgerIntegrityError, TransactionLedger
from marketfactory.models.receipts import TxStatus

console = Console()


def _short(address: str) -> str:
    return f"{address[:6]}…{address[-4:]}" if address else "-"


def ledger_cmd(
    verify_chain: bool = typer.Option(
        False,
        "--verify-chain",
        "-V",
        help="Verify the hash chain integrity before displaying.",
    ),
    limit: int = typer.Option(
        50,
        "--limit",
        "-n",
        help="Show at most this many of the most recent transactions.",
        min=1,
    ),
    state: str = typer.Option(
        None,
        "--state",
        "-s",
        help="Path to the transaction ledger database.",
    ),
) -> None:
    """Show the transaction ledger."""
    path = state_path(state)
    if not path.exists():
        console.print(f"[bold red]Ledger not found:[/bold red] {path}")
        console.print("[dim]Deploy a factory first with: marketfactory deploy[/dim]")
        raise typer.Exit(code=1)

    ledger = TransactionLedger(path)

    if verify_chain:
        try:
            ledger.verify_chain()
        except LedgerIntegrityError as exc:
            console.print(f"[bold red]Hash chain BROKEN:[/bold red] {exc}")
            raise typer.Exit(code=1) from exc
        console.print("[bold green]Hash chain valid.[/bold green]")

    records = ledger.get_all()
    if not records:
        console.print("[dim]No transactions recorded.[/dim]")
        return

    table = Table(title=f"Transactions ({len(records)} total)")
    table.add_column("Block", justify="right")
    table.add_column("From")
    table.add_column("To")
    table.add_column("Method", style="cyan", no_wrap=True)
    table.add_column("Status", justify="center")
    table.add_column("Gas", justify="right")

    shown = records[-limit:]
    for record in shown:
        if record.status == TxStatus.SUCCESS:
            status = "[green]ok[/green]"
        else:
            status = "[red]reverted[/red]"
        table.add_row(
            str(record.block_number),
            _short(record.sender),
            _short(record.to) if record.to else "[dim]create[/dim]",
            record.method,
            status,
            f"{record.gas_used:,}",
        )

    console.print(table)

    for record in shown:
        if record.status == TxStatus.REVERTED:
            console.print(
                f"[dim]Block {record.block_number} reverted:[/dim] {record.revert_reason}"
            )

"""marketfactory CLI — Typer-based command-line interface.

Provides the ``marketfactory`` command with subcommands for deploying the
factory, registering users, listing and reading items, and inspecting the
transaction ledger.  State persists in the transaction ledger; every
invocation rebuilds the chain by replaying it.

All output uses Rich for formatted terminal display.
"""

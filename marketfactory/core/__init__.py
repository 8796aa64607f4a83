"""Execution environment: chain, gas, ledger, errors, hashing."""

"""Canonical hashing helpers for transaction hashes, ledger seals, and
contract address derivation.

Addresses are ``0x`` followed by 40 lowercase hex characters.  Contract
addresses are derived from the deployer's address and nonce, so replaying
the same transactions in the same order reproduces the same addresses.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

ZERO_ADDRESS = "0x" + "0" * 40


def canonical_json_bytes(obj: Any) -> bytes:
    """Produce canonical JSON bytes — deterministic, sorted, compact.

    - sorted keys
    - no whitespace separators (",", ":")
    - ensure_ascii=True
    - UTF-8 encoding
    """
    return json.dumps(
        obj, sort_keys=True, separators=(",", ":"), ensure_ascii=True
    ).encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Return the SHA-256 hex digest of raw bytes."""
    return hashlib.sha256(data).hexdigest()


def to_address(digest_hex: str) -> str:
    """Take the trailing 20 bytes of a hex digest as an address."""
    return "0x" + digest_hex[-40:]


def derive_signer_address(seed: str, index: int) -> str:
    """Deterministic signer address for account *index* under *seed*."""
    return to_address(sha256_hex(canonical_json_bytes({"seed": seed, "index": index})))


def derive_contract_address(deployer: str, nonce: int) -> str:
    """Address of the contract created by *deployer* at *nonce*."""
    return to_address(
        sha256_hex(canonical_json_bytes({"deployer": deployer.lower(), "nonce": nonce}))
    )


def is_address(value: str) -> bool:
    """Whether *value* looks like a well-formed address."""
    if not isinstance(value, str) or len(value) != 42 or not value.startswith("0x"):
        return False
    try:
        int(value[2:], 16)
    except ValueError:
        return False
    return True


def normalize_address(value: str) -> str:
    """Lowercase *value* if it is an address; return anything else unchanged."""
    return value.lower() if is_address(value) else value


def compute_tx_hash(payload: dict[str, Any]) -> str:
    """``0x``-prefixed SHA-256 of a transaction's canonical payload."""
    return "0x" + sha256_hex(canonical_json_bytes(payload))


def compute_entry_hash(entry_dict: dict[str, Any]) -> str:
    """SHA-256 of a ledger entry (excluding the entry_hash field itself).

    This is the seal that makes each entry tamper-evident.
    """
    d = {k: v for k, v in entry_dict.items() if k != "entry_hash"}
    return sha256_hex(canonical_json_bytes(d))

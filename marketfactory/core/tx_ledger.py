"""Append-only, hash-chained transaction ledger backed by SQLite.

The ledger is the durable record of a chain. In-memory contract state is a
projection of it: ``Chain.from_ledger`` rebuilds every contract by
replaying every entry in order, reverted ones included.

Design:
- Append-only: only `append()` method; no update, no delete.
- Hash-chained: each entry includes SHA-256 of the previous entry.
- WAL journal mode for concurrent readers.
- entry_hash UNIQUE constraint for tamper detection.
"""

from __future__ import annotations

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from marketfactory.core.hasher import canonical_json_bytes, compute_entry_hash, sha256_hex
from marketfactory.models.ledger import TransactionRecord
from marketfactory.models.receipts import TxStatus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# DDL
# ---------------------------------------------------------------------------

_CREATE_LEDGER = """
CREATE TABLE IF NOT EXISTS tx_ledger (
    id                    INTEGER PRIMARY KEY AUTOINCREMENT,
    entry_id              TEXT NOT NULL UNIQUE,
    tx_hash               TEXT NOT NULL,
    block_number          INTEGER NOT NULL,
    sender                TEXT NOT NULL,
    to_address            TEXT NOT NULL,
    method                TEXT NOT NULL,
    args_json             TEXT NOT NULL DEFAULT '[]',
    contract_type         TEXT NOT NULL DEFAULT '',
    status                TEXT NOT NULL,
    gas_used              INTEGER NOT NULL,
    contract_address      TEXT NOT NULL DEFAULT '',
    revert_reason         TEXT NOT NULL DEFAULT '',
    timestamp_utc         TEXT NOT NULL,
    previous_entry_hash   TEXT NOT NULL DEFAULT '',
    entry_hash            TEXT NOT NULL UNIQUE
);
"""

_CREATE_IDX_SENDER = """
CREATE INDEX IF NOT EXISTS idx_sender ON tx_ledger(sender, id);
"""


class LedgerIntegrityError(RuntimeError):
    """Raised when the hash chain is broken."""


class TransactionLedger:
    """Append-only, hash-chained transaction ledger.

    Parameters
    ----------
    db_path:
        Path to the SQLite database file. Created if it does not exist.
    """

    def __init__(self, db_path: Path) -> None:
        self._db_path = Path(db_path)
        self._db_path.parent.mkdir(parents=True, exist_ok=True)
        self._init_schema()

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(str(self._db_path), check_same_thread=False)
        conn.execute("PRAGMA journal_mode=WAL")
        return conn

    def _init_schema(self) -> None:
        with self._connect() as conn:
            conn.execute(_CREATE_LEDGER)
            conn.execute(_CREATE_IDX_SENDER)
            conn.commit()

    # ------------------------------------------------------------------
    # Core: append-only write
    # ------------------------------------------------------------------

    def append(self, record: TransactionRecord) -> TransactionRecord:
        """Append a record, computing hash chain links.

        Returns the record with `previous_entry_hash` and `entry_hash` set.
        This is the ONLY write method. There is no update or delete.
        Reading the parent hash and inserting happen in one write
        transaction, so concurrent writers cannot fork the chain.
        """
        conn = self._connect()
        try:
            conn.execute("BEGIN IMMEDIATE")
            previous_hash = self._get_latest_hash(conn)

            record_dict = record.model_dump(mode="json")
            record_dict["previous_entry_hash"] = previous_hash
            record_dict["entry_hash"] = ""

            entry_hash = compute_entry_hash(record_dict)
            sealed = record.model_copy(
                update={
                    "previous_entry_hash": previous_hash,
                    "entry_hash": entry_hash,
                }
            )

            self._insert(conn, sealed)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

        logger.debug(
            "Ledger append: block %d %s.%s (%s).",
            sealed.block_number,
            sealed.to,
            sealed.method,
            sealed.status.value,
        )
        return sealed

    @staticmethod
    def _insert(conn: sqlite3.Connection, record: TransactionRecord) -> None:
        conn.execute(
            """
            INSERT INTO tx_ledger
                (entry_id, tx_hash, block_number, sender, to_address, method,
                 args_json, contract_type, status, gas_used, contract_address,
                 revert_reason, timestamp_utc, previous_entry_hash, entry_hash)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                record.entry_id,
                record.tx_hash,
                record.block_number,
                record.sender,
                record.to,
                record.method,
                json.dumps(record.args),
                record.contract_type,
                record.status.value,
                record.gas_used,
                record.contract_address,
                record.revert_reason,
                record.timestamp_utc.isoformat()
                if isinstance(record.timestamp_utc, datetime)
                else record.timestamp_utc,
                record.previous_entry_hash,
                record.entry_hash,
            ),
        )

    @staticmethod
    def _get_latest_hash(conn: sqlite3.Connection) -> str:
        row = conn.execute(
            "SELECT entry_hash FROM tx_ledger ORDER BY id DESC LIMIT 1"
        ).fetchone()
        return row[0] if row else ""

    # ------------------------------------------------------------------
    # Query methods (read-only)
    # ------------------------------------------------------------------

    def get_all(self) -> list[TransactionRecord]:
        """Return every record, ordered chronologically."""
        with self._connect() as conn:
            rows = conn.execute("SELECT * FROM tx_ledger ORDER BY id ASC").fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_by_sender(self, sender: str) -> list[TransactionRecord]:
        """Return all records sent by *sender*, ordered chronologically."""
        with self._connect() as conn:
            rows = conn.execute(
                "SELECT * FROM tx_ledger WHERE sender = ? ORDER BY id ASC",
                (sender,),
            ).fetchall()
        return [self._row_to_record(row) for row in rows]

    def get_latest(self) -> TransactionRecord | None:
        """Return the most recent record, or None."""
        with self._connect() as conn:
            row = conn.execute(
                "SELECT * FROM tx_ledger ORDER BY id DESC LIMIT 1"
            ).fetchone()
        return self._row_to_record(row) if row else None

    def count(self) -> int:
        with self._connect() as conn:
            (n,) = conn.execute("SELECT COUNT(*) FROM tx_ledger").fetchone()
        return n

    # ------------------------------------------------------------------
    # Chain verification
    # ------------------------------------------------------------------

    def verify_chain(self) -> bool:
        """Verify the hash chain integrity of the whole ledger.

        Walks all entries in order, recomputes each entry_hash, and
        verifies that previous_entry_hash links match.

        Returns True if the chain is valid, raises LedgerIntegrityError otherwise.
        """
        prev_hash = ""
        for record in self.get_all():
            if record.previous_entry_hash != prev_hash:
                raise LedgerIntegrityError(
                    f"Chain broken at entry {record.entry_id}: "
                    f"expected previous_hash={prev_hash!r}, "
                    f"got {record.previous_entry_hash!r}"
                )

            expected_hash = compute_entry_hash(record.model_dump(mode="json"))
            if record.entry_hash != expected_hash:
                raise LedgerIntegrityError(
                    f"Tampered entry {record.entry_id}: "
                    f"expected hash={expected_hash!r}, "
                    f"got {record.entry_hash!r}"
                )

            prev_hash = record.entry_hash

        return True

    # ------------------------------------------------------------------
    # External anchoring
    # ------------------------------------------------------------------

    def export_anchor(self) -> dict[str, Any]:
        """Export a tamper-evident anchor for external witnessing.

        Comparing a previously-exported anchor against the current chain
        detects retroactive rewrites.

        Returns
        -------
        dict[str, Any]
            Keys: ``entry_count``, ``root_hash`` (hash of the last entry),
            ``first_entry_hash``, ``timestamp_utc``, ``anchor_hash``.
        """
        records = self.get_all()
        if not records:
            return {
                "entry_count": 0,
                "root_hash": "",
                "first_entry_hash": "",
                "timestamp_utc": datetime.now(timezone.utc).isoformat(),
                "anchor_hash": "",
            }

        anchor_payload: dict[str, Any] = {
            "entry_count": len(records),
            "root_hash": records[-1].entry_hash,
            "first_entry_hash": records[0].entry_hash,
            "timestamp_utc": datetime.now(timezone.utc).isoformat(),
        }
        anchor_payload["anchor_hash"] = sha256_hex(canonical_json_bytes(anchor_payload))
        return anchor_payload

    def verify_against_anchor(self, anchor: dict[str, Any]) -> bool:
        """Verify the current chain against a previously exported anchor.

        Returns ``True`` if the chain matches the anchor.  Raises
        ``LedgerIntegrityError`` if the chain has diverged.
        """
        records = self.get_all()

        expected_count = anchor.get("entry_count", 0)
        if len(records) < expected_count:
            raise LedgerIntegrityError(
                f"Ledger has {len(records)} entries but "
                f"anchor expects at least {expected_count}."
            )

        if expected_count == 0:
            return True

        anchor_first = anchor.get("first_entry_hash", "")
        if records[0].entry_hash != anchor_first:
            raise LedgerIntegrityError(
                f"First entry hash mismatch: chain has "
                f"{records[0].entry_hash!r}, anchor has {anchor_first!r}."
            )

        anchor_root = anchor.get("root_hash", "")
        if records[expected_count - 1].entry_hash != anchor_root:
            raise LedgerIntegrityError(
                f"Root hash mismatch at entry {expected_count}: chain has "
                f"{records[expected_count - 1].entry_hash!r}, anchor has "
                f"{anchor_root!r}. Ledger may have been retroactively modified."
            )

        self.verify_chain()
        return True

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _row_to_record(row: tuple) -> TransactionRecord:
        (
            _id,
            entry_id,
            tx_hash,
            block_number,
            sender,
            to_address,
            method,
            args_json,
            contract_type,
            status,
            gas_used,
            contract_address,
            revert_reason,
            timestamp_utc,
            previous_entry_hash,
            entry_hash,
        ) = row
        return TransactionRecord(
            entry_id=entry_id,
            tx_hash=tx_hash,
            block_number=block_number,
            sender=sender,
            to=to_address,
            method=method,
            args=json.loads(args_json),
            contract_type=contract_type,
            status=TxStatus(status),
            gas_used=gas_used,
            contract_address=contract_address,
            revert_reason=revert_reason,
            timestamp_utc=timestamp_utc,
            previous_entry_hash=previous_entry_hash,
            entry_hash=entry_hash,
        )

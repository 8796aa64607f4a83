"""Tests for the TransactionLedger — append-only, hash-chained, tamper-evident."""

from __future__ import annotations

import threading

import pytest

from marketfactory.core.tx_ledger import LedgerIntegrityError, TransactionLedger
from marketfactory.models.ledger import TransactionRecord
from marketfactory.models.receipts import TxStatus


def _record(block: int, sender: str = "0x" + "11" * 20, **overrides) -> TransactionRecord:
    defaults = {
        "tx_hash": f"0x{block:064x}",
        "block_number": block,
        "sender": sender,
        "to": "0x" + "22" * 20,
        "method": "list_item",
        "args": ["Lamp", 5],
        "gas_used": 81000,
    }
    defaults.update(overrides)
    return TransactionRecord(**defaults)


class TestTransactionLedger:
    def test_append_sets_entry_hash(self, tx_ledger: TransactionLedger):
        sealed = tx_ledger.append(_record(1))
        assert sealed.entry_hash != ""
        assert sealed.previous_entry_hash == ""  # first entry

    def test_hash_chain_links(self, tx_ledger: TransactionLedger):
        e1 = tx_ledger.append(_record(1))
        e2 = tx_ledger.append(_record(2))
        assert e2.previous_entry_hash == e1.entry_hash

    def test_round_trip_preserves_fields(self, tx_ledger: TransactionLedger):
        sealed = tx_ledger.append(_record(
            1, status=TxStatus.REVERTED, revert_reason="Name cannot be empty",
            args=["", 2**100],
        ))
        (loaded,) = tx_ledger.get_all()
        assert loaded.entry_hash == sealed.entry_hash
        assert loaded.status == TxStatus.REVERTED
        assert loaded.revert_reason == "Name cannot be empty"
        assert loaded.args == ["", 2**100]

    def test_verify_chain_valid(self, tx_ledger: TransactionLedger):
        for block in range(1, 4):
            tx_ledger.append(_record(block))
        assert tx_ledger.verify_chain() is True

    def test_verify_chain_empty(self, tx_ledger: TransactionLedger):
        assert tx_ledger.verify_chain() is True

    def test_get_latest(self, tx_ledger: TransactionLedger):
        assert tx_ledger.get_latest() is None
        tx_ledger.append(_record(1))
        e2 = tx_ledger.append(_record(2))
        latest = tx_ledger.get_latest()
        assert latest is not None
        assert latest.entry_id == e2.entry_id

    def test_get_by_sender(self, tx_ledger: TransactionLedger):
        alice, bob = "0x" + "aa" * 20, "0x" + "bb" * 20
        tx_ledger.append(_record(1, sender=alice))
        tx_ledger.append(_record(2, sender=bob))
        tx_ledger.append(_record(3, sender=alice))
        assert [r.block_number for r in tx_ledger.get_by_sender(alice)] == [1, 3]

    def test_count(self, tx_ledger: TransactionLedger):
        assert tx_ledger.count() == 0
        tx_ledger.append(_record(1))
        assert tx_ledger.count() == 1

    def test_persists_across_instances(self, tmp_dir):
        TransactionLedger(tmp_dir / "chain.db").append(_record(1))
        reopened = TransactionLedger(tmp_dir / "chain.db")
        assert reopened.count() == 1
        assert reopened.verify_chain() is True


class TestConcurrentAppends:
    def test_writers_on_separate_handles_keep_one_chain(self, tmp_dir):
        """Each thread appends through its own ledger handle on the same file."""
        path = tmp_dir / "shared.db"
        TransactionLedger(path)

        def writer(n: int) -> None:
            ledger = TransactionLedger(path)
            for i in range(10):
                ledger.append(_record(n * 100 + i))

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ledger = TransactionLedger(path)
        assert ledger.count() == 40
        assert ledger.verify_chain() is True
        parents = [r.previous_entry_hash for r in ledger.get_all()]
        assert len(set(parents)) == len(parents)


class TestAnchors:
    def test_anchor_of_empty_ledger(self, tx_ledger: TransactionLedger):
        anchor = tx_ledger.export_anchor()
        assert anchor["entry_count"] == 0
        assert tx_ledger.verify_against_anchor(anchor) is True

    def test_anchor_survives_later_appends(self, tx_ledger: TransactionLedger):
        tx_ledger.append(_record(1))
        tx_ledger.append(_record(2))
        anchor = tx_ledger.export_anchor()
        assert anchor["anchor_hash"] != ""
        tx_ledger.append(_record(3))
        assert tx_ledger.verify_against_anchor(anchor) is True

    def test_anchor_detects_truncation(self, tx_ledger: TransactionLedger):
        tx_ledger.append(_record(1))
        anchor = tx_ledger.export_anchor()
        anchor["entry_count"] = 5
        with pytest.raises(LedgerIntegrityError, match="anchor expects"):
            tx_ledger.verify_against_anchor(anchor)

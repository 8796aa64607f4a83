"""Tests for data models and the revert taxonomy."""

from __future__ import annotations

import pytest

from marketfactory.core.errors import (
    REVERT_REASONS,
    AlreadyRegisteredError,
    RevertError,
    RevertKind,
    revert_for,
)
from marketfactory.models import Item, Signer, TransactionReceipt, TransactionRecord, TxStatus


class TestItem:
    def test_defaults_unsold(self):
        item = Item(name="Lamp", price=5)
        assert item.sold is False
        assert item.as_tuple() == ("Lamp", 5, False)

    def test_frozen(self):
        item = Item(name="Lamp", price=5)
        with pytest.raises(Exception):
            item.sold = True


class TestReceipts:
    def test_record_from_receipt(self):
        receipt = TransactionReceipt(
            tx_hash="0xabc", block_number=3, sender="0x1", to="0x2",
            method="register_user", gas_used=100, contract_address="0x3",
        )
        record = TransactionRecord.from_receipt(receipt, [], "")
        assert record.block_number == 3
        assert record.contract_address == "0x3"
        assert record.status == TxStatus.SUCCESS
        assert record.entry_hash == ""

    def test_succeeded(self):
        receipt = TransactionReceipt(
            tx_hash="0x", block_number=1, sender="a", to="b", method="m",
            gas_used=1, status=TxStatus.REVERTED,
        )
        assert receipt.succeeded is False

    def test_signer_str_is_address(self):
        assert str(Signer(index=0, address="0xabc")) == "0xabc"


class TestRevertTaxonomy:
    def test_every_kind_has_reason_and_class(self):
        for kind in RevertKind:
            exc = revert_for(kind)
            assert isinstance(exc, RevertError)
            assert exc.kind is kind
            assert exc.reason == REVERT_REASONS[kind]
            assert str(exc) == exc.reason
            assert exc.receipt is None

    def test_exact_reason_strings(self):
        assert REVERT_REASONS == {
            RevertKind.ALREADY_REGISTERED: "User already registered",
            RevertKind.NOT_REGISTERED: "User not registered",
            RevertKind.UNAUTHORIZED: "Only owner can call this function",
            RevertKind.INVALID_NAME: "Name cannot be empty",
            RevertKind.INVALID_PRICE: "Price must be greater than 0",
            RevertKind.ITEM_NOT_FOUND: "Item does not exist",
        }

    def test_reverts_are_runtime_errors(self):
        assert isinstance(AlreadyRegisteredError(), RuntimeError)

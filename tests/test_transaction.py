"""
Test suite for the transaction model and its wire encoding.
"""

import hashlib
import json

import pytest

from transactor.tx.signer import WalletSigner
from transactor.tx.transaction import (
    Transaction,
    b64url_decode,
    b64url_encode,
    modulus_to_bytes,
)


def make_transaction(target: str = "", anchor: str = "") -> Transaction:
    return Transaction(
        last_tx=anchor,
        owner=b"\x00\xffowner",
        quantity="950",
        target=target,
        data=b"payload",
        reward="50",
    )


class TestEncoding:
    """Tests for base64url helpers."""

    def test_encoding_has_no_padding(self):
        assert b64url_encode(b"\xfb\xff") == "-_8"
        assert b64url_decode("-_8") == b"\xfb\xff"

    def test_empty_values(self):
        assert b64url_encode(b"") == ""
        assert b64url_decode("") == b""

    def test_invalid_value(self):
        with pytest.raises(ValueError):
            b64url_decode("a")

    def test_modulus_bytes_are_big_endian(self):
        assert modulus_to_bytes(0x010203) == b"\x01\x02\x03"
        assert len(modulus_to_bytes((1 << 4095) + 1)) == 512


class TestSigning:
    """Tests for attaching signatures."""

    def test_new_transaction_is_unsigned(self):
        tx = make_transaction()

        assert tx.is_signed is False
        assert tx.signature == b""
        assert tx.id == ""

    def test_signature_fixes_id(self):
        tx = make_transaction()

        tx.set_signature(b"signature-bytes")

        assert tx.is_signed is True
        assert tx.id == b64url_encode(hashlib.sha256(b"signature-bytes").digest())

    def test_signature_is_attached_once(self):
        tx = make_transaction()
        tx.set_signature(b"first")

        with pytest.raises(ValueError, match="already signed"):
            tx.set_signature(b"second")

        assert tx.signature == b"first"

    def test_empty_signature_is_rejected(self):
        tx = make_transaction()

        with pytest.raises(ValueError):
            tx.set_signature(b"")

    def test_signature_data_layout(self):
        target = b64url_encode(b"T" * 32)
        anchor = b64url_encode(b"A" * 48)
        tx = make_transaction(target=target, anchor=anchor)

        expected = b"\x00\xffowner" + b"T" * 32 + b"payload" + b"950" + b"50" + b"A" * 48
        assert tx.signature_data() == expected

    def test_signature_data_without_target(self):
        tx = make_transaction()

        assert tx.signature_data() == b"\x00\xffowner" + b"payload" + b"950" + b"50"

    def test_test_wallet_satisfies_signer_protocol(self, wallet):
        assert isinstance(wallet, WalletSigner)


class TestWireFormat:
    """Tests for the JSON representation."""

    def test_to_dict_encodes_binary_fields(self):
        tx = make_transaction(target="target-address", anchor="anchor")
        tx.set_signature(b"sig")

        wire = tx.to_dict()

        assert wire == {
            "id": tx.id,
            "last_tx": "anchor",
            "owner": b64url_encode(b"\x00\xffowner"),
            "tags": [],
            "target": "target-address",
            "quantity": "950",
            "data": b64url_encode(b"payload"),
            "reward": "50",
            "signature": b64url_encode(b"sig"),
        }

    def test_to_json_is_the_wire_dict(self):
        tx = make_transaction()
        tx.set_signature(b"sig")

        assert json.loads(tx.to_json()) == tx.to_dict()

    def test_from_dict_keeps_node_id(self, mined_tx):
        assert mined_tx.id == "mined-tx"
        assert mined_tx.quantity == "950"
        assert mined_tx.signature == b"\x02" * 64
        assert mined_tx.is_signed is True

    def test_from_dict_accepts_numeric_amounts(self):
        tx = Transaction.from_dict({"id": "x", "quantity": 0, "reward": 12})

        assert tx.quantity == "0"
        assert tx.reward == "12"
        assert tx.data == b""

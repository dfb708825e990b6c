"""
Transaction model.

A value transfer and/or data commit on the weave. Binary fields travel
base64url encoded (no padding) in the node's JSON format.
"""

import base64
import hashlib
import json
from typing import Any, Dict


def b64url_encode(data: bytes) -> str:
    """Encode bytes as unpadded base64url."""
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def b64url_decode(data: str) -> bytes:
    """
    Decode an unpadded base64url string.

    Raises:
        ValueError: If the string is not valid base64url
    """
    padding = "=" * (-len(data) % 4)
    try:
        return base64.urlsafe_b64decode(data + padding)
    except (ValueError, TypeError) as e:
        raise ValueError(f"Invalid base64url value: {data!r}") from e


def modulus_to_bytes(modulus: int) -> bytes:
    """Big-endian bytes of an RSA public key modulus."""
    return modulus.to_bytes((modulus.bit_length() + 7) // 8, "big")


class Transaction:
    """
    A weave transaction.

    Built unsigned by the Transactor; the only mutation allowed afterwards
    is attaching the signature, which also fixes the transaction id.

    Attributes:
        last_tx: Anchor the transaction is bound to (replay protection)
        owner: Sender public key modulus, big-endian bytes
        quantity: Amount to transfer, decimal string
        target: Recipient address (may be empty for pure data commits)
        data: Payload bytes
        reward: Fee paid to miners, decimal string
    """

    def __init__(
        self,
        last_tx: str,
        owner: bytes,
        quantity: str,
        target: str,
        data: bytes,
        reward: str,
    ):
        self.last_tx = last_tx
        self.owner = bytes(owner)
        self.quantity = quantity
        self.target = target
        self.data = bytes(data)
        self.reward = reward
        self._signature = b""
        self._id = ""

    @property
    def signature(self) -> bytes:
        """Signature bytes; empty until signed."""
        return self._signature

    @property
    def id(self) -> str:
        """Transaction id; empty until signed."""
        return self._id

    @property
    def is_signed(self) -> bool:
        return len(self._signature) > 0

    def signature_data(self) -> bytes:
        """
        Bytes the wallet signs.

        Raises:
            ValueError: If target or anchor are not valid base64url
        """
        return b"".join([
            self.owner,
            b64url_decode(self.target) if self.target else b"",
            self.data,
            self.quantity.encode("utf-8"),
            self.reward.encode("utf-8"),
            b64url_decode(self.last_tx) if self.last_tx else b"",
        ])

    def set_signature(self, signature: bytes) -> None:
        """
        Attach the signature produced by an external signer.

        Args:
            signature: Raw signature bytes

        Raises:
            ValueError: If the signature is empty or one is already attached
        """
        if self._signature:
            raise ValueError("Transaction is already signed")
        if not signature:
            raise ValueError("Signature must not be empty")

        self._signature = bytes(signature)
        self._id = b64url_encode(hashlib.sha256(self._signature).digest())

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation of the transaction."""
        return {
            "id": self._id,
            "last_tx": self.last_tx,
            "owner": b64url_encode(self.owner),
            "tags": [],
            "target": self.target,
            "quantity": self.quantity,
            "data": b64url_encode(self.data),
            "reward": self.reward,
            "signature": b64url_encode(self._signature),
        }

    def to_json(self) -> bytes:
        """Serialize to the JSON body accepted by the node."""
        return json.dumps(self.to_dict()).encode("utf-8")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Transaction":
        """
        Parse a transaction record returned by a node.

        The id reported by the node is kept as-is.
        """
        tx = cls(
            last_tx=data.get("last_tx", ""),
            owner=b64url_decode(data.get("owner", "")),
            quantity=str(data.get("quantity", "0")),
            target=data.get("target", ""),
            data=b64url_decode(data.get("data", "")),
            reward=str(data.get("reward", "0")),
        )
        tx._signature = b64url_decode(data.get("signature", ""))
        tx._id = data.get("id", "")
        return tx

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Transaction):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"Transaction(id={self._id or None!r}, target={self.target!r}, "
            f"quantity={self.quantity!r}, reward={self.reward!r}, data_size={len(self.data)})"
        )

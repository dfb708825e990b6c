"""
Wallet signer contract.

Key management and signing live outside this package; the transactor
only needs the wallet's public key to fill in the transaction owner.
"""

from typing import Protocol, runtime_checkable


@runtime_checkable
class WalletSigner(Protocol):
    """
    Interface for a wallet that owns an RSA key pair.

    The transactor calls ``pub_key_modulus`` when assembling a
    transaction. ``sign`` is called by the wallet holder on
    ``Transaction.signature_data()`` before submission.
    """

    def pub_key_modulus(self) -> int:
        """Public key modulus of the wallet's RSA key."""
        ...

    def sign(self, message: bytes) -> bytes:
        """Sign a message with the wallet's private key."""
        ...

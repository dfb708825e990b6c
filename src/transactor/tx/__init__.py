"""
Transaction module.

Transaction model, wire encoding and the wallet signer contract.
"""

from transactor.tx.transaction import Transaction, b64url_decode, b64url_encode
from transactor.tx.signer import WalletSigner

__all__ = [
    "Transaction",
    "WalletSigner",
    "b64url_decode",
    "b64url_encode",
]

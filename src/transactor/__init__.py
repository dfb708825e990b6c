"""
Weave Transactor

Client-side construction, fee bounding, submission and confirmation of
transactions against a remote weave node. Signing and key management stay
with the wallet; the transactor only talks to the node.
"""

__version__ = "0.1.0"

from transactor.core.transactor import Transactor
from transactor.errors import ErrorKind, TransactorError
from transactor.tx.signer import WalletSigner
from transactor.tx.transaction import Transaction

__all__ = [
    "Transactor",
    "Transaction",
    "WalletSigner",
    "ErrorKind",
    "TransactorError",
]

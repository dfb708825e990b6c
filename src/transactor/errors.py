"""
Error taxonomy for the transactor.

Every failure raised by the package derives from TransactorError and
carries an ErrorKind so callers can branch on the kind of failure
rather than on message text.
"""

from enum import Enum
from typing import Any, Optional


class ErrorKind(str, Enum):
    """Kinds of failure a transactor operation can report."""
    CONNECTION_FAILURE = "connection_failure"              # Dial / transport failure
    ANCHOR_UNAVAILABLE = "anchor_unavailable"              # Anchor fetch failed
    FEE_ESTIMATE_UNAVAILABLE = "fee_estimate_unavailable"  # Price query failed
    INVALID_FEE_FORMAT = "invalid_fee_format"              # Price is not an integer
    FEE_EXCEEDS_LIMIT = "fee_exceeds_limit"                # Estimate above max fee
    INVALID_AMOUNT = "invalid_amount"                      # Amount is not an integer
    MISSING_SIGNATURE = "missing_signature"                # Transaction not signed
    SUBMISSION_FAILURE = "submission_failure"              # Commit failed
    POLLING_ERROR = "polling_error"                        # Lookup failed while waiting
    CANCELLED = "cancelled"                                # Wait cancelled or timed out


class TransactorError(Exception):
    """
    Base class for all transactor errors.

    Not raised directly; each subclass sets its own ``kind``.
    """

    kind: Optional[ErrorKind] = None


class NodeConnectionError(TransactorError):
    """Raised when the node cannot be reached or answers with an error."""

    kind = ErrorKind.CONNECTION_FAILURE


class AnchorUnavailableError(TransactorError):
    """Raised when a fresh transaction anchor cannot be fetched."""

    kind = ErrorKind.ANCHOR_UNAVAILABLE


class FeeEstimateUnavailableError(TransactorError):
    """Raised when the node cannot provide a fee estimate."""

    kind = ErrorKind.FEE_ESTIMATE_UNAVAILABLE


class InvalidFeeFormatError(TransactorError):
    """Raised when the fee estimate is not a decimal integer."""

    kind = ErrorKind.INVALID_FEE_FORMAT


class FeeExceedsLimitError(TransactorError):
    """Raised when the finalized fee is above the caller's maximum."""

    kind = ErrorKind.FEE_EXCEEDS_LIMIT

    def __init__(self, fee: int, max_fee: int):
        super().__init__(f"transfer fee {fee} exceeds limit {max_fee}")
        self.fee = fee
        self.max_fee = max_fee


class InvalidAmountError(TransactorError):
    """Raised when the amount is not a decimal integer."""

    kind = ErrorKind.INVALID_AMOUNT


class MissingSignatureError(TransactorError):
    """Raised when an unsigned transaction is submitted or awaited."""

    kind = ErrorKind.MISSING_SIGNATURE


class TransactionSubmitError(TransactorError):
    """Raised when transaction submission fails."""

    kind = ErrorKind.SUBMISSION_FAILURE

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class TransactionLookupError(TransactorError):
    """
    Raised when a transaction lookup fails.

    A node may still hand back a usable record alongside the failure
    (for example a record with an unexpected status code); it is kept
    in ``receipt`` so a waiter can treat it as authoritative.
    """

    kind = ErrorKind.POLLING_ERROR

    def __init__(self, message: str, receipt: Optional[Any] = None):
        super().__init__(message)
        self.receipt = receipt


class WaitCancelledError(TransactorError):
    """Raised when waiting for a transaction is cancelled or times out."""

    kind = ErrorKind.CANCELLED

    def __init__(self, tx_id: str, reason: str = "cancelled"):
        super().__init__(f"stopped waiting for transaction {tx_id}: {reason}")
        self.tx_id = tx_id
        self.reason = reason

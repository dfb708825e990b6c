"""
Transactor - builds, submits and tracks weave transactions.

Fetches anchors and fee estimates from a node, applies the fee policy,
assembles unsigned transactions, submits signed ones and waits for them
to be mined.
"""

import asyncio
import re
from typing import Any, Awaitable, Optional, Tuple, Type

import structlog

from transactor.config import TransactorConfig, get_config
from transactor.errors import (
    AnchorUnavailableError,
    FeeEstimateUnavailableError,
    FeeExceedsLimitError,
    InvalidAmountError,
    InvalidFeeFormatError,
    MissingSignatureError,
    TransactionSubmitError,
    TransactorError,
    WaitCancelledError,
)
from transactor.node.http import HttpNodeClient, resolve_node_url
from transactor.node.interface import ClientCaller
from transactor.tx.signer import WalletSigner
from transactor.tx.transaction import Transaction, modulus_to_bytes

logger = structlog.get_logger(__name__)

_INTEGER = re.compile(r"[+-]?[0-9]+")


def parse_integer(value: str, error_cls: Type[TransactorError], what: str) -> int:
    """Parse a decimal integer string without loss of precision."""
    if not isinstance(value, str) or not _INTEGER.fullmatch(value):
        raise error_cls(f"{what} is not a decimal integer: {value!r}")
    return int(value)


class Transactor:
    """
    Creates and submits transactions through a node.

    The transactor holds no state besides the node client, so one instance
    can serve concurrent calls as long as the client allows it.

    Usage:
        ```python
        async with await Transactor.dial("arweave.net") as tr:
            tx = await tr.create_transaction(wallet, "1000", b"", target, 10, 100, False)
            tx.set_signature(wallet.sign(tx.signature_data()))
            await tr.send_transaction(tx)
            receipt = await tr.wait_mined(tx, timeout=600)
        ```
    """

    def __init__(
        self,
        client: ClientCaller,
        config: Optional[TransactorConfig] = None,
    ):
        """
        Initialize the transactor.

        Args:
            client: Node client used for every network operation
            config: Transactor configuration
        """
        self.client = client
        self.config = config or get_config()

    @classmethod
    async def dial(
        cls,
        full_url: Optional[str] = None,
        config: Optional[TransactorConfig] = None,
        transport: Optional[Any] = None,
    ) -> "Transactor":
        """
        Connect to a node and return a transactor bound to it.

        Args:
            full_url: Node address. Empty means the local node; a bare host
                gets the http scheme and the default port. Defaults to the
                configured node_url.
            config: Transactor configuration
            transport: Custom httpx transport for the node client

        Raises:
            NodeConnectionError: If the address is malformed or the node
                cannot be reached
        """
        config = config or get_config()
        if full_url is None:
            full_url = config.node_url

        base_url = resolve_node_url(full_url)
        client = HttpNodeClient(base_url, config=config, transport=transport)
        await client.connect()

        return cls(client, config)

    async def close(self) -> None:
        """Disconnect the node client."""
        await self.client.disconnect()

    async def __aenter__(self) -> "Transactor":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def create_transaction(
        self,
        signer: WalletSigner,
        amount: str,
        data: bytes,
        target: str,
        min_fee: int,
        max_fee: int,
        include_fee: bool,
    ) -> Transaction:
        """
        Create an unsigned transaction with a fee estimated by the node.

        The estimate is raised to ``min_fee`` if it is lower; a fee above
        ``max_fee`` is rejected rather than capped.

        Args:
            signer: Wallet whose public key becomes the transaction owner
            amount: Amount to transfer, decimal string
            data: Payload bytes
            target: Recipient address
            min_fee: Lowest fee to pay
            max_fee: Highest fee the caller accepts
            include_fee: Whether ``amount`` already includes the fee

        Returns:
            Unsigned transaction

        Raises:
            AnchorUnavailableError: If the anchor cannot be fetched
            FeeEstimateUnavailableError: If the node cannot estimate the fee
            InvalidFeeFormatError: If the estimate is not an integer
            FeeExceedsLimitError: If the fee is above ``max_fee``
            InvalidAmountError: If ``amount`` is not an integer
        """
        anchor = await self._fetch_anchor()

        try:
            price = await self.client.get_reward(data, target)
        except Exception as e:
            logger.error("fee_estimate_failed", data_size=len(data), target=target, error=str(e))
            raise FeeEstimateUnavailableError(f"Failed to fetch fee estimate: {e}") from e

        fee = parse_integer(price, InvalidFeeFormatError, "Fee estimate")
        if fee < min_fee:
            logger.debug("fee_raised_to_minimum", estimate=fee, min_fee=min_fee)
            fee = min_fee
        if fee > max_fee:
            logger.warning("fee_exceeds_limit", fee=fee, max_fee=max_fee)
            raise FeeExceedsLimitError(fee, max_fee)

        return self._assemble(anchor, signer, amount, data, target, fee, include_fee)

    async def create_transaction_with_fee(
        self,
        signer: WalletSigner,
        amount: str,
        data: bytes,
        target: str,
        fee: int,
        include_fee: bool,
    ) -> Transaction:
        """
        Create an unsigned transaction with a fee chosen by the caller.

        No estimate is fetched and the fee is not bounded.

        Raises:
            AnchorUnavailableError: If the anchor cannot be fetched
            InvalidAmountError: If ``amount`` is not an integer
        """
        anchor = await self._fetch_anchor()
        return self._assemble(anchor, signer, amount, data, target, fee, include_fee)

    async def send_transaction(self, tx: Transaction) -> str:
        """
        Submit a signed transaction.

        Args:
            tx: Signed transaction

        Returns:
            Node acknowledgment

        Raises:
            MissingSignatureError: If the transaction is not signed
            TransactionSubmitError: If submission fails
        """
        if len(tx.signature) == 0:
            raise MissingSignatureError("transaction missing signature")

        serialized = tx.to_json()

        try:
            ack = await self.client.commit(serialized)
        except TransactionSubmitError:
            raise
        except Exception as e:
            raise TransactionSubmitError(f"Transaction submission failed: {e}") from e

        logger.info("transaction_sent", tx_id=tx.id, reward=tx.reward, quantity=tx.quantity)
        return ack

    async def last_transaction(self, address: str) -> str:
        """Get the id of the last transaction sent from a wallet."""
        return await self.client.last_transaction(address)

    async def wait_mined(
        self,
        tx: Transaction,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> Transaction:
        """
        Wait until a submitted transaction is mined.

        Raises:
            MissingSignatureError: If the transaction has no id yet
            WaitCancelledError: If ``cancel`` is set or ``timeout`` expires
        """
        if not tx.id:
            raise MissingSignatureError("transaction has no id; sign it before waiting")
        return await self.wait_mined_by_id(tx.id, timeout=timeout, cancel=cancel)

    async def wait_mined_by_id(
        self,
        tx_id: str,
        timeout: Optional[float] = None,
        cancel: Optional[asyncio.Event] = None,
    ) -> Transaction:
        """
        Poll the node until a transaction is mined.

        Lookup failures are logged and polling continues; only a receipt,
        the cancel event or the timeout end the wait. A receipt is returned
        even when the lookup that produced it also reported an error.

        Args:
            tx_id: Transaction id
            timeout: Seconds to wait before giving up, None to wait forever
            cancel: Event that stops the wait when set

        Returns:
            The mined transaction as reported by the node

        Raises:
            WaitCancelledError: If ``cancel`` is set or ``timeout`` expires
        """
        loop = asyncio.get_running_loop()
        deadline = None if timeout is None else loop.time() + timeout
        cancel = cancel or asyncio.Event()

        while True:
            lookup, reason = await self._race(self.client.get_transaction(tx_id), cancel, deadline)
            if reason is not None:
                break

            if lookup.cancelled():
                # The client gave up on the request itself
                receipt, error = None, asyncio.CancelledError("lookup cancelled")
            else:
                error = lookup.exception()
                receipt = lookup.result() if error is None else getattr(error, "receipt", None)

            if receipt is not None:
                logger.info("tx_mined", tx_id=tx_id)
                return receipt

            if error is not None:
                logger.warning("tx_lookup_failed", tx_id=tx_id, error=str(error))
            else:
                logger.info("tx_not_yet_mined", tx_id=tx_id)

            _, reason = await self._race(
                asyncio.sleep(self.config.poll_interval_seconds), cancel, deadline
            )
            if reason is not None:
                break

        logger.warning("tx_wait_stopped", tx_id=tx_id, reason=reason)
        raise WaitCancelledError(tx_id, reason)

    async def _race(
        self,
        aw: Awaitable[Any],
        cancel: asyncio.Event,
        deadline: Optional[float],
    ) -> Tuple[Optional["asyncio.Future[Any]"], Optional[str]]:
        """
        Run ``aw`` against the cancel event and the deadline.

        Returns the finished future and None, or None and the reason the
        wait was stopped. A finished ``aw`` wins over a simultaneous stop,
        including one that cancelled itself.
        """
        loop = asyncio.get_running_loop()
        task = asyncio.ensure_future(aw)
        stopper = asyncio.ensure_future(cancel.wait())
        timeout = None if deadline is None else max(0.0, deadline - loop.time())

        try:
            await asyncio.wait(
                {task, stopper},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            stopper.cancel()
            if not task.done():
                task.cancel()

        if task.done():
            return task, None
        if deadline is not None and not cancel.is_set():
            return None, "deadline exceeded"
        return None, "cancelled"

    async def _fetch_anchor(self) -> str:
        try:
            return await self.client.tx_anchor()
        except Exception as e:
            logger.error("anchor_fetch_failed", error=str(e))
            raise AnchorUnavailableError(f"Failed to fetch transaction anchor: {e}") from e

    def _assemble(
        self,
        anchor: str,
        signer: WalletSigner,
        amount: str,
        data: bytes,
        target: str,
        fee: int,
        include_fee: bool,
    ) -> Transaction:
        """Build the unsigned transaction once the fee is final."""
        if include_fee:
            amount = str(parse_integer(amount, InvalidAmountError, "Amount") - fee)

        tx = Transaction(
            last_tx=anchor,
            owner=modulus_to_bytes(signer.pub_key_modulus()),
            quantity=amount,
            target=target,
            data=data,
            reward=str(fee),
        )

        logger.debug(
            "transaction_created",
            target=target,
            quantity=amount,
            reward=tx.reward,
            data_size=len(data),
        )
        return tx

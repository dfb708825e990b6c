"""
HTTP adapter for node integration.

Talks to a weave node over its REST API.
"""

from typing import Any, Optional
from urllib.parse import urlsplit

import httpx
import structlog

from transactor.config import DEFAULT_PORT, DEFAULT_URL, TransactorConfig, get_config
from transactor.errors import (
    NodeConnectionError,
    TransactionLookupError,
    TransactionSubmitError,
)
from transactor.node.interface import (
    ALLOWED_TX_FIELDS,
    Block,
    ClientCaller,
    NetworkInfo,
)
from transactor.tx.transaction import Transaction

logger = structlog.get_logger(__name__)


def resolve_node_url(full_url: str) -> str:
    """
    Turn a node address into a base URL.

    An empty address means the local default node. An address without a
    scheme is taken as a plain HTTP host and gets the default port unless
    it already names one. Full URLs are used as given.

    Raises:
        NodeConnectionError: If the address is malformed
    """
    if not full_url:
        return DEFAULT_URL

    has_scheme = "://" in full_url
    candidate = full_url if has_scheme else f"http://{full_url}"

    try:
        url = httpx.URL(candidate)
        port = urlsplit(candidate).port
    except (httpx.InvalidURL, ValueError) as e:
        raise NodeConnectionError(f"Malformed node address {full_url!r}: {e}") from e

    if url.scheme not in ("http", "https"):
        raise NodeConnectionError(f"Unsupported scheme in node address {full_url!r}")
    if not url.host:
        raise NodeConnectionError(f"Node address {full_url!r} has no host")

    if has_scheme or port is not None:
        return candidate
    return f"{candidate}:{DEFAULT_PORT}"


class HttpNodeClient(ClientCaller):
    """
    Weave node HTTP adapter.

    Implements the ClientCaller interface using the node's REST API.
    """

    def __init__(
        self,
        base_url: str = DEFAULT_URL,
        config: Optional[TransactorConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the HTTP client.

        Args:
            base_url: Node base URL, already resolved
            config: Transactor configuration. Uses global config if not provided.
            transport: Custom httpx transport (used by tests)
        """
        self.config = config or get_config()
        self.base_url = base_url
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    async def connect(self) -> None:
        """Create the HTTP client and check that the node answers."""
        if self._client is not None:
            return

        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.config.request_timeout_seconds,
            transport=self._transport,
        )

        try:
            info = await self.get_info()
        except Exception:
            await self.disconnect()
            raise

        logger.info(
            "node_connected",
            base_url=self.base_url,
            network=info.network,
            height=info.height,
        )

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None
            logger.info("node_disconnected", base_url=self.base_url)

    async def _request(
        self,
        method: str,
        path: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Make a request to the node."""
        if not self._client:
            await self.connect()

        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.error("node_request_error", path=path, error=str(e))
            raise NodeConnectionError(f"Node request failed: {e}") from e

    async def _get_text(self, path: str) -> str:
        """GET a plain-text resource, failing on any non-200 status."""
        response = await self._request("GET", path)

        if response.status_code != 200:
            logger.error(
                "node_request_failed",
                path=path,
                status=response.status_code,
                error=response.text,
            )
            raise NodeConnectionError(
                f"Node API error on {path} ({response.status_code}): {response.text}"
            )

        return response.text

    async def get_info(self) -> NetworkInfo:
        """Get network information."""
        response = await self._request("GET", "/info")

        if response.status_code != 200:
            raise NodeConnectionError(f"Node health check failed: {response.text}")

        try:
            return NetworkInfo.from_dict(response.json())
        except (ValueError, TypeError, AttributeError) as e:
            raise NodeConnectionError(f"Malformed network info: {e}") from e

    async def get_block(self, block_hash: str) -> Optional[Block]:
        """Get a block by its independent hash."""
        response = await self._request("GET", f"/block/hash/{block_hash}")

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise NodeConnectionError(f"Node API error: {response.text}")

        return Block.from_dict(response.json())

    async def tx_anchor(self) -> str:
        """Get a fresh transaction anchor."""
        return await self._get_text("/tx_anchor")

    async def last_transaction(self, address: str) -> str:
        """Get the last transaction id sent from a wallet."""
        return await self._get_text(f"/wallet/{address}/last_tx")

    async def get_reward(self, data: bytes, target: str) -> str:
        """Get the fee estimate for a payload and target."""
        return await self.get_price(len(data), target)

    async def get_price(self, size: int, target: str = "") -> str:
        """Get the fee estimate for a payload of the given size."""
        path = f"/price/{size}"
        if target:
            path = f"{path}/{target}"

        return await self._get_text(path)

    async def commit(self, data: bytes) -> str:
        """Submit a serialized transaction."""
        try:
            response = await self._request(
                "POST",
                "/tx",
                content=data,
                headers={"Content-Type": "application/json"},
            )
        except NodeConnectionError as e:
            raise TransactionSubmitError(f"Transaction submission request failed: {e}") from e

        if response.status_code != 200:
            logger.error("tx_submit_failed", status=response.status_code, error=response.text)
            raise TransactionSubmitError(
                f"Transaction submission failed: {response.text}",
                error_code=str(response.status_code),
            )

        logger.info("tx_submitted", response=response.text)
        return response.text

    async def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        """Get a mined transaction by id."""
        try:
            response = await self._request("GET", f"/tx/{tx_id}")
        except NodeConnectionError as e:
            raise TransactionLookupError(str(e)) from e

        # 202 means the node has the transaction but it is not mined yet
        if response.status_code in (202, 404):
            return None

        if response.status_code != 200:
            raise TransactionLookupError(
                f"Transaction lookup failed ({response.status_code}): {response.text}"
            )

        try:
            return Transaction.from_dict(response.json())
        except ValueError as e:
            raise TransactionLookupError(f"Malformed transaction record: {e}") from e

    async def get_transaction_field(self, tx_id: str, field: str) -> Optional[str]:
        """
        Get a single field of a transaction.

        Args:
            tx_id: Transaction id
            field: One of ALLOWED_TX_FIELDS

        Returns:
            Field value, None if the transaction is unknown or pending
        """
        if field not in ALLOWED_TX_FIELDS:
            raise ValueError(f"Field {field!r} cannot be queried")

        response = await self._request("GET", f"/tx/{tx_id}/{field}")

        if response.status_code in (202, 404):
            return None
        if response.status_code != 200:
            raise NodeConnectionError(f"Node API error: {response.text}")

        return response.text

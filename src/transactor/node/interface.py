"""
Abstract interface for weave node integration.

Defines the contract for node access that the transactor depends on,
plus the passive data types a node reports about itself.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from transactor.tx.transaction import Transaction


# Transaction sub-fields a node serves individually at /tx/{id}/{field}
ALLOWED_TX_FIELDS = frozenset({
    "id",
    "last_tx",
    "owner",
    "target",
    "quantity",
    "type",
    "data",
    "reward",
    "signature",
    "data.html",
})


@dataclass
class NetworkInfo:
    """Network information reported by a node."""
    network: str
    version: int
    release: int
    height: int
    current: str                       # Hash of the current block
    blocks: int
    peers: int
    queue_length: int
    node_state_latency: int

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkInfo":
        return cls(
            network=data.get("network", ""),
            version=int(data.get("version", 0)),
            release=int(data.get("release", 0)),
            height=int(data.get("height", 0)),
            current=data.get("current", ""),
            blocks=int(data.get("blocks", 0)),
            peers=int(data.get("peers", 0)),
            queue_length=int(data.get("queue_length", 0)),
            node_state_latency=int(data.get("node_state_latency", 0)),
        )


@dataclass
class Block:
    """A block as reported by a node. Contents are not validated."""
    hash: str
    indep_hash: str
    height: int
    previous_block: str
    nonce: str = ""
    timestamp: int = 0
    last_retarget: int = 0
    diff: str = ""
    hash_list: List[str] = field(default_factory=list)
    txs: List[Any] = field(default_factory=list)
    wallet_list: str = ""
    reward_addr: str = ""
    tags: List[Any] = field(default_factory=list)
    reward_pool: str = ""
    weave_size: str = ""
    block_size: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Block":
        return cls(
            hash=data.get("hash", ""),
            indep_hash=data.get("indep_hash", ""),
            height=int(data.get("height", 0)),
            previous_block=data.get("previous_block", ""),
            nonce=data.get("nonce", ""),
            timestamp=int(data.get("timestamp", 0)),
            last_retarget=int(data.get("last_retarget", 0)),
            diff=str(data.get("diff", "")),
            hash_list=list(data.get("hash_list") or []),
            txs=list(data.get("txs") or []),
            wallet_list=data.get("wallet_list", ""),
            reward_addr=data.get("reward_addr", ""),
            tags=list(data.get("tags") or []),
            reward_pool=str(data.get("reward_pool", "")),
            weave_size=str(data.get("weave_size", "")),
            block_size=str(data.get("block_size", "")),
        )


class ClientCaller(ABC):
    """
    Abstract interface for weave node access.

    This interface defines the node operations the transactor needs:
    - Anchor lookup
    - Fee estimation
    - Transaction submission
    - Transaction lookup

    Implementations must be safe for concurrent use if a Transactor
    is shared between tasks.
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish connection to the node.

        Raises:
            NodeConnectionError: If connection cannot be established
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Close connection to the node."""
        pass

    @abstractmethod
    async def tx_anchor(self) -> str:
        """
        Get a fresh anchor for a new transaction.

        Returns:
            Anchor string
        """
        pass

    @abstractmethod
    async def last_transaction(self, address: str) -> str:
        """
        Get the id of the last transaction sent from a wallet.

        Args:
            address: Wallet address

        Returns:
            Transaction id, empty if the wallet has never sent one
        """
        pass

    @abstractmethod
    async def get_reward(self, data: bytes, target: str) -> str:
        """
        Get the fee for storing a payload and transferring to a target.

        Args:
            data: Payload bytes (only the size matters)
            target: Recipient address, may be empty

        Returns:
            Fee estimate as a decimal string
        """
        pass

    @abstractmethod
    async def commit(self, data: bytes) -> str:
        """
        Submit a serialized, signed transaction.

        Args:
            data: JSON-encoded transaction

        Returns:
            Node acknowledgment

        Raises:
            TransactionSubmitError: If submission fails
        """
        pass

    @abstractmethod
    async def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        """
        Get a transaction by id.

        Args:
            tx_id: Transaction id

        Returns:
            The transaction if it has been mined, None otherwise

        Raises:
            TransactionLookupError: If the lookup itself fails
        """
        pass

"""
Pytest configuration and shared fixtures for the test suite.
"""

import hashlib
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

import httpx
import pytest
import structlog

from transactor.config import TransactorConfig
from transactor.core.transactor import Transactor
from transactor.node.interface import ClientCaller
from transactor.tx.transaction import Transaction, b64url_encode


# ============================================================================
# Logging
# ============================================================================

@pytest.fixture(autouse=True)
def capture_structlog():
    """Keep structlog's default stdout logger out of captured command output."""
    with structlog.testing.capture_logs() as logs:
        yield logs


# ============================================================================
# Configuration Fixtures
# ============================================================================

@pytest.fixture
def test_config() -> TransactorConfig:
    """Create a test configuration with a fast polling interval."""
    return TransactorConfig(
        node_url="",
        request_timeout_seconds=5.0,
        poll_interval_seconds=0.01,
        log_level="DEBUG",
    )


# ============================================================================
# Test Data Generators
# ============================================================================

def generate_test_anchor(index: int = 0) -> str:
    """Generate a deterministic base64url anchor."""
    return b64url_encode(hashlib.sha384(f"anchor-{index}".encode()).digest())


def generate_test_address(index: int = 0) -> str:
    """Generate a deterministic base64url wallet address."""
    return b64url_encode(hashlib.sha256(f"wallet-{index}".encode()).digest())


def make_mined_transaction(tx_id: str = "mined-tx") -> Transaction:
    """Create a transaction record as a node would return it."""
    return Transaction.from_dict({
        "id": tx_id,
        "last_tx": generate_test_anchor(),
        "owner": b64url_encode(b"\x01" * 64),
        "target": generate_test_address(1),
        "quantity": "950",
        "data": "",
        "reward": "50",
        "signature": b64url_encode(b"\x02" * 64),
    })


# ============================================================================
# Test Wallet
# ============================================================================

class FakeWallet:
    """Wallet signer with a fixed modulus and a hash in place of RSA."""

    def __init__(self, modulus: int = (1 << 4095) + 65537):
        self.modulus = modulus
        self.signed_messages: List[bytes] = []

    def pub_key_modulus(self) -> int:
        return self.modulus

    def sign(self, message: bytes) -> bytes:
        self.signed_messages.append(message)
        return hashlib.sha512(message).digest()


@pytest.fixture
def wallet() -> FakeWallet:
    """Create a test wallet."""
    return FakeWallet()


# ============================================================================
# Mock Node Interface
# ============================================================================

LookupOutcome = Union[Transaction, None, BaseException]


class MockNode(ClientCaller):
    """Mock node client for testing."""

    def __init__(self):
        self.anchors: List[str] = [generate_test_anchor(i) for i in range(10)]
        self.reward = "50"
        self.anchor_error: Optional[Exception] = None
        self.reward_error: Optional[Exception] = None
        self.commit_error: Optional[Exception] = None
        self.commit_response = "OK"
        self.lookup_outcomes: List[LookupOutcome] = [None]
        self.last_tx_by_address: Dict[str, str] = {}

        self.anchor_calls = 0
        self.reward_calls: List[Tuple[bytes, str]] = []
        self.committed: List[bytes] = []
        self.lookups: List[str] = []
        self._connected = False

    async def connect(self) -> None:
        self._connected = True

    async def disconnect(self) -> None:
        self._connected = False

    async def tx_anchor(self) -> str:
        if self.anchor_error:
            raise self.anchor_error
        anchor = self.anchors[self.anchor_calls % len(self.anchors)]
        self.anchor_calls += 1
        return anchor

    async def last_transaction(self, address: str) -> str:
        return self.last_tx_by_address.get(address, "")

    async def get_reward(self, data: bytes, target: str) -> str:
        self.reward_calls.append((data, target))
        if self.reward_error:
            raise self.reward_error
        return self.reward

    async def commit(self, data: bytes) -> str:
        if self.commit_error:
            raise self.commit_error
        self.committed.append(data)
        return self.commit_response

    async def get_transaction(self, tx_id: str) -> Optional[Transaction]:
        self.lookups.append(tx_id)
        # The last scripted outcome repeats forever
        if len(self.lookup_outcomes) > 1:
            outcome = self.lookup_outcomes.pop(0)
        else:
            outcome = self.lookup_outcomes[0]

        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


@pytest.fixture
def mock_node() -> MockNode:
    """Create a mock node client."""
    return MockNode()


@pytest.fixture
def transactor(mock_node, test_config) -> Transactor:
    """Create a transactor bound to the mock node."""
    return Transactor(mock_node, config=test_config)


# ============================================================================
# HTTP Transport
# ============================================================================

Route = Union[httpx.Response, Callable[[httpx.Request], httpx.Response]]

NETWORK_INFO_JSON: Dict[str, Any] = {
    "network": "arweave.N.1",
    "version": 5,
    "release": 53,
    "height": 1000,
    "current": "current-block-hash",
    "blocks": 1001,
    "peers": 42,
    "queue_length": 0,
    "node_state_latency": 1,
}


def make_transport(routes: Dict[Tuple[str, str], Route]) -> httpx.MockTransport:
    """
    Build an httpx transport answering from a route table.

    Routes are keyed by (method, path). /info answers with healthy network
    information unless overridden. Unknown routes answer 404.
    """
    table = {("GET", "/info"): httpx.Response(200, json=NETWORK_INFO_JSON)}
    table.update(routes)

    def handler(request: httpx.Request) -> httpx.Response:
        route = table.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, text="Not Found")
        if callable(route):
            return route(request)
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    return httpx.MockTransport(handler)


@pytest.fixture
def transport_factory() -> Callable[..., httpx.MockTransport]:
    """Expose make_transport to tests."""
    return make_transport


@pytest.fixture
def target_address() -> str:
    """A recipient address."""
    return generate_test_address(1)


@pytest.fixture
def mined_tx() -> Transaction:
    """A transaction record as returned for a mined transaction."""
    return make_mined_transaction()

"""
Node Integration Layer.

Provides abstracted access to a weave node for anchors, fee estimates,
transaction submission and lookup.
"""

from transactor.node.interface import ClientCaller, NetworkInfo, Block
from transactor.node.http import HttpNodeClient, resolve_node_url

__all__ = [
    "ClientCaller",
    "NetworkInfo",
    "Block",
    "HttpNodeClient",
    "resolve_node_url",
]

"""
Core transactor components.
"""

from transactor.core.transactor import Transactor

__all__ = [
    "Transactor",
]

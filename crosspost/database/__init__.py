"""Persistence: store interfaces, in-memory store and PostgreSQL store"""

from .base import ItemStore, SellerStore, CrossPostLedger
from .memory import InMemoryStore

__all__ = [
    "ItemStore",
    "SellerStore",
    "CrossPostLedger",
    "InMemoryStore",
]

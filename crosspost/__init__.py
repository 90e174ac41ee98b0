"""
Vintage Crib Cross-Poster
=========================
Publishes a seller's vintage items to multiple resale marketplaces, gated by
the seller's subscription tier.

Main components:
- schema: Item, platform, publish-result and subscription types
- formatters: Per-platform listing copy (eBay, Poshmark, Depop, Mercari)
- adapters: Platform publishers (eBay API, manual-post packages, home marketplace)
- subscriptions: Tier table and entitlement gate
- publisher: Cross-posting engine (fan-out, ledger, retry)
- database: Store interfaces, in-memory store, PostgreSQL store
"""

from .schema import (
    Platform,
    ItemStatus,
    Item,
    Seller,
    PublishMode,
    PublishResult,
    ManualPostPackage,
    CrossPostRecord,
    AggregateResult,
    Subscription,
)
from .config import Settings, LookupPolicy
from .formatters import format_listing
from .subscriptions import SubscriptionGate, load_tier_table
from .publisher import CrossPostingEngine
from .database import InMemoryStore

__version__ = "1.0.0"

__all__ = [
    "Platform",
    "ItemStatus",
    "Item",
    "Seller",
    "PublishMode",
    "PublishResult",
    "ManualPostPackage",
    "CrossPostRecord",
    "AggregateResult",
    "Subscription",
    "Settings",
    "LookupPolicy",
    "format_listing",
    "SubscriptionGate",
    "load_tier_table",
    "CrossPostingEngine",
    "InMemoryStore",
]

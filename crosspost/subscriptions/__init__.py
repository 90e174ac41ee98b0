"""Subscription tiers and the entitlement gate"""

from .tiers import Tier, DEFAULT_TIERS, FREE_TIER, UNLIMITED, build_tier_table, load_tier_table
from .gate import SubscriptionGate, PlatformEntitlement, ItemCreationCheck

__all__ = [
    "Tier",
    "DEFAULT_TIERS",
    "FREE_TIER",
    "UNLIMITED",
    "build_tier_table",
    "load_tier_table",
    "SubscriptionGate",
    "PlatformEntitlement",
    "ItemCreationCheck",
]

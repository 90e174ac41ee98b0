"""
Subscription Entitlement Gate
=============================
Answers two questions for a seller:

- may they create another item? (``check_item_creation``)
- which of the requested platforms may they publish to? (``check_platforms``)

Reads are lazy about expiry: a paid subscription whose ``expires_at`` has
passed is treated as free for the current call and persisted as a downgrade.

When the subscription cannot be looked up, the configured ``LookupPolicy``
decides: FAIL_OPEN treats the seller as free, FAIL_CLOSED raises.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Callable, Iterable, List, Mapping, Optional

from .tiers import Tier, DEFAULT_TIERS, FREE_TIER
from ..config import LookupPolicy
from ..database.base import SellerStore
from ..exceptions import NotFoundError, StoreError
from ..schema.item import Platform, parse_platforms
from ..schema.results import utcnow
from ..schema.subscription import Subscription

logger = logging.getLogger(__name__)

LIMIT_WARNING_RATIO = 0.8


@dataclass
class PlatformEntitlement:
    """Result of a platform entitlement check"""
    allowed_platforms: List[Platform]
    denied_platforms: List[Platform]
    tier: Tier

    @property
    def fully_denied(self) -> bool:
        return bool(self.denied_platforms) and not self.allowed_platforms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "allowedPlatforms": [p.value for p in self.allowed_platforms],
            "deniedPlatforms": [p.value for p in self.denied_platforms],
            "tier": self.tier.key,
            "tierName": self.tier.name,
        }


@dataclass
class ItemCreationCheck:
    allowed: bool
    limit: int
    current: int
    tier: Optional[Tier] = field(default=None, repr=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"allowed": self.allowed, "limit": self.limit, "current": self.current}


class SubscriptionGate:
    """
    Subscription entitlement checks.

    Args:
        store: Seller store holding subscriptions
        tiers: Tier table (read-only mapping); defaults to the built-in table
        policy: What to do when the subscription lookup fails
        clock: Returns the current UTC time (injectable for tests)
    """

    def __init__(
        self,
        store: SellerStore,
        tiers: Optional[Mapping[str, Tier]] = None,
        policy: LookupPolicy = LookupPolicy.FAIL_OPEN,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.store = store
        self.tiers = tiers or DEFAULT_TIERS
        self.policy = policy
        self.clock = clock

    # ========================================================================
    # SUBSCRIPTION LOOKUP
    # ========================================================================

    def get_tier_details(self, tier_key: Optional[str]) -> Tier:
        """Tier for a key; unknown keys fall back to free"""
        tier = self.tiers.get(tier_key or FREE_TIER)
        if tier is None:
            logger.warning(f"⚠️  Unknown subscription tier '{tier_key}', treating as free")
            tier = self.tiers[FREE_TIER]
        return tier

    def get_subscription(self, seller_id: str) -> Subscription:
        """
        Current effective subscription for a seller.

        Raises:
            NotFoundError, StoreError: Only under the FAIL_CLOSED policy
        """
        try:
            subscription = self.store.get_subscription(seller_id)
        except (NotFoundError, StoreError) as e:
            if self.policy is LookupPolicy.FAIL_CLOSED:
                raise
            logger.warning(f"⚠️  Subscription lookup failed for seller {seller_id} ({e}); defaulting to free tier")
            return Subscription(seller_id=seller_id, tier=FREE_TIER)

        if subscription is None:
            return self._create_default_subscription(seller_id)

        if subscription.tier != FREE_TIER and subscription.is_expired(self.clock()):
            return self._downgrade_expired(subscription)

        return subscription

    def _create_default_subscription(self, seller_id: str) -> Subscription:
        subscription = Subscription(seller_id=seller_id, tier=FREE_TIER, started_at=self.clock())
        try:
            return self.store.save_subscription(subscription)
        except StoreError as e:
            logger.warning(f"⚠️  Could not create default subscription for seller {seller_id}: {e}")
            return subscription

    def _downgrade_expired(self, subscription: Subscription) -> Subscription:
        logger.warning(
            f"⏰ Subscription for seller {subscription.seller_id} "
            f"({subscription.tier}) expired at {subscription.expires_at}; downgrading to free"
        )
        downgraded = Subscription(
            seller_id=subscription.seller_id,
            tier=FREE_TIER,
            expires_at=None,
            status="active",
            started_at=subscription.started_at,
        )
        try:
            self.store.save_subscription(downgraded)
            self.store.log_subscription_change(
                subscription.seller_id, FREE_TIER, "auto_downgrade_expired",
                reason=f"{subscription.tier} expired",
            )
        except StoreError as e:
            # Still free for this call; the write is retried on the next read
            logger.error(f"❌ Failed to persist downgrade for seller {subscription.seller_id}: {e}")
        return downgraded

    def get_tier(self, seller_id: str) -> Tier:
        return self.get_tier_details(self.get_subscription(seller_id).tier)

    # ========================================================================
    # CHECKS
    # ========================================================================

    def check_item_creation(self, seller_id: str, current_item_count: int) -> ItemCreationCheck:
        """
        Check whether the seller may create another item.

        Args:
            seller_id: Seller to check
            current_item_count: Items the seller already has

        Returns:
            ItemCreationCheck (limit is -1 for unlimited tiers)
        """
        tier = self.get_tier(seller_id)
        if tier.unlimited:
            return ItemCreationCheck(allowed=True, limit=tier.max_items, current=current_item_count, tier=tier)
        return ItemCreationCheck(
            allowed=current_item_count < tier.max_items,
            limit=tier.max_items,
            current=current_item_count,
            tier=tier,
        )

    def check_platforms(self, seller_id: str, requested: Iterable[Any]) -> PlatformEntitlement:
        """
        Split requested platforms into allowed and denied for the seller's tier.

        vintage_crib is always allowed. Request order is kept in both lists.

        Raises:
            InvalidPlatformError: If a requested name is not a platform
        """
        platforms = parse_platforms(requested)
        tier = self.get_tier(seller_id)

        allowed = [p for p in platforms if tier.allows(p)]
        denied = [p for p in platforms if not tier.allows(p)]

        if denied:
            logger.info(
                f"🔒 Seller {seller_id} ({tier.key}) denied: {', '.join(p.value for p in denied)}"
            )
        return PlatformEntitlement(allowed_platforms=allowed, denied_platforms=denied, tier=tier)

    def check_limit_warning(self, seller_id: str, current_item_count: int) -> Optional[Dict[str, Any]]:
        """
        Warning payload once the seller uses 80% of their item limit.

        Returns:
            Warning dict, or None when under the threshold or unlimited
        """
        tier = self.get_tier(seller_id)
        if tier.unlimited or tier.max_items <= 0:
            return None
        if current_item_count < tier.max_items * LIMIT_WARNING_RATIO:
            return None

        percent = round(current_item_count / tier.max_items * 100)
        return {
            "warning": True,
            "message": (
                f"You're using {current_item_count} of {tier.max_items} items ({percent}%). "
                f"Consider upgrading to continue adding items."
            ),
            "currentCount": current_item_count,
            "limit": tier.max_items,
            "tier": tier.key,
        }

    def upgrade_recommendations(self, tier_key: str) -> List[Dict[str, Any]]:
        """
        Higher tiers and what each one adds over the current tier.

        Returns:
            List of tier dicts with a ``benefits`` list, cheapest first
        """
        current = self.get_tier_details(tier_key)
        recommendations = []

        for tier in self.tiers.values():
            if tier.rank <= current.rank:
                continue

            benefits = []
            if tier.unlimited and not current.unlimited:
                benefits.append(f"Unlimited items vs {current.max_items}")
            elif not current.unlimited and tier.max_items > current.max_items:
                benefits.append(f"{tier.max_items} items vs {current.max_items}")

            new_platforms = [p.value for p in Platform if p in tier.allowed_platforms - current.allowed_platforms]
            if new_platforms:
                benefits.append(f"Access to {', '.join(new_platforms)}")

            for feature in tier.features:
                if feature not in current.features:
                    benefits.append(feature.replace("_", " ").capitalize())

            if not benefits:
                continue

            recommendation = tier.to_dict()
            recommendation["benefits"] = benefits
            if tier.price < 20:
                recommendation["savings"] = f"Save ${tier.price * 12 / 10:.2f} with annual billing"
            recommendations.append(recommendation)

        return sorted(recommendations, key=lambda r: r["price"])

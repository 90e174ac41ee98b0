"""Seller subscription record"""

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional, Dict, Any


@dataclass
class Subscription:
    """
    A seller's subscription.

    ``tier`` is one of the names in the tier table (free, starter, pro,
    premium). ``expires_at`` is None for tiers that never expire.
    """

    seller_id: str
    tier: str = "free"
    expires_at: Optional[datetime] = None
    status: str = "active"
    started_at: Optional[datetime] = None

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        if self.expires_at is None:
            return False
        now = now or datetime.now(timezone.utc)
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        return expires_at < now

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seller_id": self.seller_id,
            "tier": self.tier,
            "status": self.status,
            "expires_at": self.expires_at.isoformat() if self.expires_at else None,
            "started_at": self.started_at.isoformat() if self.started_at else None,
        }

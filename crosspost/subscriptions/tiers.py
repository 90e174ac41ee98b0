"""
Subscription Tiers
==================
The tier table: item limits, platform entitlements and pricing per tier.

The table is loaded once and is read-only afterwards. A JSON file with the
same shape as ``DEFAULT_TIERS`` can replace it (``TIER_CONFIG_PATH``):

    {
      "free":    {"name": "Free Tier", "price": 0,    "max_items": 5,
                  "platforms": ["vintage_crib"]},
      "starter": {"name": "Starter",   "price": 4.99, "max_items": 15,
                  "platforms": ["vintage_crib", "ebay"]},
      ...
    }
"""

import json
import logging
from dataclasses import dataclass
from decimal import Decimal
from types import MappingProxyType
from typing import Dict, Any, FrozenSet, Mapping, Optional, Tuple

from ..schema.item import Platform, parse_platforms, to_price

logger = logging.getLogger(__name__)

FREE_TIER = "free"
UNLIMITED = -1


@dataclass(frozen=True)
class Tier:
    """One subscription tier"""
    key: str
    name: str
    price: Decimal
    max_items: int
    allowed_platforms: FrozenSet[Platform]
    features: Tuple[str, ...] = ()
    support: str = "community"
    description: str = ""
    rank: int = 0

    @property
    def unlimited(self) -> bool:
        return self.max_items == UNLIMITED

    def allows(self, platform: Platform) -> bool:
        # The home marketplace is open to every tier
        return platform.is_home or platform in self.allowed_platforms

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tier": self.key,
            "name": self.name,
            "price": float(self.price),
            "maxItems": self.max_items,
            "platforms": [p.value for p in Platform if p in self.allowed_platforms],
            "features": list(self.features),
            "support": self.support,
            "description": self.description,
        }


def _tier(key: str, rank: int, spec: Mapping[str, Any]) -> Tier:
    platforms = set(parse_platforms(spec.get("platforms", [])))
    platforms.add(Platform.VINTAGE_CRIB)
    return Tier(
        key=key,
        name=spec.get("name", key.title()),
        price=to_price(spec.get("price", 0)),
        max_items=int(spec.get("max_items", UNLIMITED)),
        allowed_platforms=frozenset(platforms),
        features=tuple(spec.get("features", ())),
        support=spec.get("support", "community"),
        description=spec.get("description", ""),
        rank=rank,
    )


_DEFAULT_TIER_SPECS = {
    "free": {
        "name": "Free Tier",
        "price": 0,
        "max_items": 5,
        "platforms": ["vintage_crib"],
        "features": ["basic_listing", "profile_page"],
        "support": "community",
        "description": "Perfect for getting started with vintage selling",
    },
    "starter": {
        "name": "Starter",
        "price": "4.99",
        "max_items": 15,
        "platforms": ["vintage_crib", "ebay"],
        "features": ["basic_listing", "profile_page", "ebay_integration"],
        "support": "email",
        "description": "Great for casual sellers expanding to eBay",
    },
    "pro": {
        "name": "Pro",
        "price": "9.99",
        "max_items": 50,
        "platforms": ["vintage_crib", "ebay", "poshmark", "depop"],
        "features": ["basic_listing", "profile_page", "multi_platform_posting", "basic_analytics"],
        "support": "priority_email",
        "description": "Perfect for serious sellers with multi-platform presence",
    },
    "premium": {
        "name": "Premium",
        "price": "19.99",
        "max_items": UNLIMITED,
        "platforms": ["vintage_crib", "ebay", "poshmark", "depop", "mercari"],
        "features": [
            "basic_listing", "profile_page", "multi_platform_posting",
            "advanced_analytics", "custom_branding", "api_access",
        ],
        "support": "priority_phone_email",
        "description": "Complete solution for professional vintage businesses",
    },
}


def build_tier_table(specs: Mapping[str, Mapping[str, Any]]) -> Mapping[str, Tier]:
    """
    Build an immutable tier table from plain dicts.

    Tiers are ranked in the order given (cheapest first).

    Raises:
        ValueError: If the table has no free tier
        InvalidPlatformError: If a tier names an unknown platform
    """
    if FREE_TIER not in specs:
        raise ValueError("Tier table must define a 'free' tier")
    table = {key: _tier(key, rank, spec) for rank, (key, spec) in enumerate(specs.items())}
    return MappingProxyType(table)


DEFAULT_TIERS: Mapping[str, Tier] = build_tier_table(_DEFAULT_TIER_SPECS)


def load_tier_table(path: Optional[str] = None) -> Mapping[str, Tier]:
    """
    Load the tier table.

    Args:
        path: JSON file to read; the built-in table is used when omitted

    Returns:
        Read-only mapping of tier key to Tier
    """
    if not path:
        return DEFAULT_TIERS

    with open(path, "r", encoding="utf-8") as f:
        specs = json.load(f)

    table = build_tier_table(specs)
    logger.info(f"Loaded {len(table)} subscription tiers from {path}")
    return table

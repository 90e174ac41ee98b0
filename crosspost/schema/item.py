"""
Item Schema
===========
The seller-owned catalog item and the closed set of platforms it can be
cross-posted to.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal, ROUND_HALF_UP
from enum import Enum
from typing import List, Optional, Dict, Any, Iterable, FrozenSet

from ..exceptions import InvalidPlatformError


class Platform(Enum):
    """Marketplaces an item can be distributed to"""
    EBAY = "ebay"
    POSHMARK = "poshmark"
    DEPOP = "depop"
    MERCARI = "mercari"
    VINTAGE_CRIB = "vintage_crib"  # home marketplace

    @property
    def is_home(self) -> bool:
        return self is Platform.VINTAGE_CRIB

    @classmethod
    def parse(cls, value: Any) -> "Platform":
        """
        Parse a single platform name.

        Raises:
            InvalidPlatformError: If the name is not one of the known platforms
        """
        if isinstance(value, Platform):
            return value
        if not isinstance(value, str):
            raise InvalidPlatformError([repr(value)])
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise InvalidPlatformError([value])


def parse_platforms(values: Iterable[Any]) -> List[Platform]:
    """
    Validate a list of platform names against the closed enum.

    Every value is checked before anything is returned, so a single bad name
    rejects the whole list. Duplicates are dropped, order is kept.

    Args:
        values: Platform names (or Platform members)

    Returns:
        List of unique Platform members in request order

    Raises:
        InvalidPlatformError: Listing every unrecognised name
    """
    platforms: List[Platform] = []
    invalid: List[str] = []

    for value in values:
        try:
            platform = Platform.parse(value)
        except InvalidPlatformError as e:
            invalid.extend(e.invalid)
            continue
        if platform not in platforms:
            platforms.append(platform)

    if invalid:
        raise InvalidPlatformError(invalid)

    return platforms


class ItemStatus(Enum):
    """Lifecycle status of an item"""
    DRAFT = "draft"
    PUBLISHED = "published"
    SOLD = "sold"
    ARCHIVED = "archived"


def to_price(value: Any) -> Decimal:
    """Normalize a price to a two-decimal Decimal"""
    if isinstance(value, Decimal):
        amount = value
    else:
        amount = Decimal(str(value if value is not None else 0))
    return amount.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


@dataclass
class Seller:
    """Seller profile used when building listing copy"""
    id: str
    store_name: Optional[str] = None
    bio: Optional[str] = None


DEFAULT_SELLER = Seller(id="", store_name="Vintage Crib Official", bio="Curated vintage collection")


@dataclass
class Item:
    """
    A catalog item owned by one seller.

    ``published_to`` is only ever written by the cross-posting engine after a
    publish attempt. ``status`` moves draft -> published on the first
    successful platform and is never reverted automatically.
    """

    id: int
    seller_id: str
    title: str
    description: str = ""
    price: Decimal = Decimal("0.00")
    brand: Optional[str] = None
    size: Optional[str] = None
    condition: Optional[str] = None
    category: Optional[str] = None
    images: List[str] = field(default_factory=list)
    tags: List[str] = field(default_factory=list)
    status: ItemStatus = ItemStatus.DRAFT
    published_to: FrozenSet[Platform] = frozenset()
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def __post_init__(self):
        self.price = to_price(self.price)
        if not isinstance(self.status, ItemStatus):
            self.status = ItemStatus(self.status)
        self.published_to = frozenset(Platform.parse(p) for p in (self.published_to or ()))

    @property
    def price_text(self) -> str:
        """Price as it appears in listing copy, e.g. ``45.00``"""
        return f"{self.price:.2f}"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "id": self.id,
            "seller_id": self.seller_id,
            "title": self.title,
            "description": self.description,
            "price": self.price_text,
            "brand": self.brand,
            "size": self.size,
            "condition": self.condition,
            "category": self.category,
            "images": list(self.images),
            "tags": list(self.tags),
            "status": self.status.value,
            "published_to": sorted(p.value for p in self.published_to),
        }

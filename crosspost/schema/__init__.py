"""Item, subscription and publish-result schema"""

from .item import (
    Platform,
    parse_platforms,
    ItemStatus,
    Item,
    Seller,
    DEFAULT_SELLER,
    to_price,
)
from .results import (
    PublishMode,
    RecordStatus,
    ListingPayload,
    ManualPostPackage,
    PublishResult,
    CrossPostRecord,
    AggregateResult,
    utcnow,
)
from .subscription import Subscription

__all__ = [
    "Platform",
    "parse_platforms",
    "ItemStatus",
    "Item",
    "Seller",
    "DEFAULT_SELLER",
    "to_price",
    "PublishMode",
    "RecordStatus",
    "ListingPayload",
    "ManualPostPackage",
    "PublishResult",
    "CrossPostRecord",
    "AggregateResult",
    "utcnow",
    "Subscription",
]

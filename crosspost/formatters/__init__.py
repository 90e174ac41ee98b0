"""
Platform formatters.

``format_listing(item, platform)`` is the entry point; it dispatches to one
formatter per platform that has listing copy. The home marketplace has no
formatter because it publishes the item record as-is.
"""

from typing import Dict, Optional

from .base import PlatformFormatter, build_title
from .ebay import EbayFormatter
from .poshmark import PoshmarkFormatter
from .depop import DepopFormatter
from .mercari import MercariFormatter
from ..exceptions import InvalidPlatformError, UnsupportedPlatformError
from ..schema.item import Item, Platform, Seller
from ..schema.results import ListingPayload

FORMATTERS: Dict[Platform, PlatformFormatter] = {
    Platform.EBAY: EbayFormatter(),
    Platform.POSHMARK: PoshmarkFormatter(),
    Platform.DEPOP: DepopFormatter(),
    Platform.MERCARI: MercariFormatter(),
}


def get_formatter(platform) -> PlatformFormatter:
    """
    Look up the formatter for a platform.

    Raises:
        UnsupportedPlatformError: If the platform has no listing copy
    """
    try:
        formatter = FORMATTERS.get(Platform.parse(platform))
    except InvalidPlatformError:
        formatter = None
    if formatter is None:
        raise UnsupportedPlatformError(f"No formatter for platform: {platform}")
    return formatter


def format_listing(item: Item, platform, seller: Optional[Seller] = None) -> ListingPayload:
    """Format an item for one platform"""
    return get_formatter(platform).format(item, seller)


__all__ = [
    "PlatformFormatter",
    "EbayFormatter",
    "PoshmarkFormatter",
    "DepopFormatter",
    "MercariFormatter",
    "FORMATTERS",
    "build_title",
    "get_formatter",
    "format_listing",
]

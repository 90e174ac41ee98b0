"""
Manual-Post Publishers
======================
Poshmark, Depop and Mercari have no public listing API. Their publishers
prepare the copy-paste package, the listing-creation URL and the steps the
seller follows to post by hand. No network calls are made here.
"""

from typing import Optional

from .base_adapter import ManualPublisher
from ..exceptions import UnsupportedPlatformError
from ..formatters import get_formatter
from ..schema.item import Item, Platform, Seller
from ..schema.results import ManualPostPackage, ListingPayload


class PoshmarkPublisher(ManualPublisher):
    """Poshmark copy-paste package"""

    platform = Platform.POSHMARK
    LISTING_URL = "https://poshmark.com/create-listing"
    INSTRUCTIONS = (
        "1. Open Poshmark.com and log into your account",
        '2. Click "Sell" to create a new listing',
        "3. Upload your images",
        "4. Copy and paste the title and description",
        "5. Set category, size, and brand",
        "6. Set the price and publish",
    )


class DepopPublisher(ManualPublisher):
    """Depop copy-paste package (description carries the hashtags)"""

    platform = Platform.DEPOP
    LISTING_URL = "https://www.depop.com/products/create/"
    INSTRUCTIONS = (
        "1. Open Depop app or website",
        "2. Tap the camera icon to create listing",
        "3. Upload your photos",
        "4. Copy and paste the description with hashtags",
        "5. Set category and price",
        "6. Publish your item",
    )


class MercariPublisher(ManualPublisher):
    """Mercari copy-paste package"""

    platform = Platform.MERCARI
    LISTING_URL = "https://www.mercari.com/sell/"
    INSTRUCTIONS = (
        "1. Open Mercari app or website",
        '2. Tap "Sell" to create a new listing',
        "3. Upload photos (up to 12)",
        "4. Copy and paste title and description",
        "5. Select category and condition",
        "6. Set price and shipping",
        "7. Publish listing",
    )


EBAY_SELL_URL = "https://www.ebay.com/sl/sell"
EBAY_INSTRUCTIONS = (
    "1. eBay integration is automated",
    "2. Items are published directly via API",
    "3. No manual copying required",
)

MANUAL_PUBLISHERS = {
    Platform.POSHMARK: PoshmarkPublisher,
    Platform.DEPOP: DepopPublisher,
    Platform.MERCARI: MercariPublisher,
}


def prepare_clipboard(item: Item, platform, seller: Optional[Seller] = None) -> ManualPostPackage:
    """
    Build the copy-paste package for one item on one platform.

    eBay is published through its API, so its package is informational only
    (``automated=True``) and carries the plain title, description and price.

    Args:
        item: Item to prepare
        platform: Platform name or member
        seller: Seller that owns the item (defaults to the house seller)

    Returns:
        ManualPostPackage

    Raises:
        InvalidPlatformError: If the name is not a known platform
        UnsupportedPlatformError: If the platform has no clipboard form
    """
    platform = Platform.parse(platform)

    if platform is Platform.EBAY:
        payload = ListingPayload(
            platform=platform,
            title=item.title,
            description=item.description,
            price=item.price,
            category=item.category or "",
            condition=item.condition or "",
        )
        return ManualPostPackage(
            platform=platform,
            clipboard_text=f"{item.title}\n\n{item.description}\n\nPrice: ${item.price_text}",
            listing_url=EBAY_SELL_URL,
            instructions=EBAY_INSTRUCTIONS,
            payload=payload,
            automated=True,
        )

    publisher_cls = MANUAL_PUBLISHERS.get(platform)
    if publisher_cls is None:
        raise UnsupportedPlatformError(
            f"Unsupported platform for clipboard preparation: {platform.value}"
        )
    return publisher_cls(get_formatter(platform)).build_package(item, seller)

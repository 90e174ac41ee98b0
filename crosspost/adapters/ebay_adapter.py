"""
eBay Publisher
==============
Publishes items through the eBay Sell Inventory API.
"""

import logging
from typing import Optional

from .base_adapter import APIPublisher
from .ebay_client import EbayClient
from ..exceptions import PublishFailure
from ..formatters import get_formatter
from ..formatters.base import PlatformFormatter
from ..schema.item import Item, Platform, Seller
from ..schema.results import PublishResult, PublishMode

logger = logging.getLogger(__name__)


class EbayPublisher(APIPublisher):
    """
    eBay publisher.

    Formats the item and hands it to an ``EbayClient``. When no client is
    configured every attempt fails without touching the network.
    """

    platform = Platform.EBAY

    def __init__(self, client: Optional[EbayClient] = None, formatter: Optional[PlatformFormatter] = None):
        self.client = client
        self.formatter = formatter or get_formatter(Platform.EBAY)

    def publish(self, item: Item, seller: Optional[Seller] = None) -> PublishResult:
        if self.client is None:
            return PublishResult.failed(
                self.platform,
                "eBay client not configured. Set EBAY_CLIENT_ID, EBAY_CLIENT_SECRET and EBAY_REFRESH_TOKEN",
                mode=PublishMode.AUTOMATED,
            )

        payload = self.formatter.format(item, seller)

        try:
            listing = self.client.publish(payload)
        except PublishFailure as e:
            logger.warning(f"❌ eBay publish failed for item {item.id}: {e}")
            return PublishResult.failed(self.platform, str(e), mode=PublishMode.AUTOMATED)

        return PublishResult.automated(
            self.platform,
            external_id=listing.listing_id,
            external_url=listing.url,
            fees=listing.fees,
        )

"""Platform publishers: one per platform, API-backed or manual-post"""

import logging
from typing import Dict, Optional

from .base_adapter import PlatformPublisher, APIPublisher, ManualPublisher
from .ebay_client import EbayClient, EbayListing
from .ebay_adapter import EbayPublisher
from .home_adapter import VintageCribPublisher
from .manual_adapters import (
    PoshmarkPublisher,
    DepopPublisher,
    MercariPublisher,
    prepare_clipboard,
)
from ..config import Settings
from ..schema.item import Platform

logger = logging.getLogger(__name__)


def build_publishers(settings: Settings, ebay_client: Optional[EbayClient] = None) -> Dict[Platform, PlatformPublisher]:
    """
    Build the default publisher registry (one publisher per platform).

    Args:
        settings: Application settings
        ebay_client: eBay client to use; built from settings when omitted and
            credentials are configured

    Returns:
        Dict mapping every Platform to its publisher
    """
    if ebay_client is None and settings.ebay.configured:
        ebay_client = EbayClient(settings.ebay, timeout=settings.publish_timeout_seconds)
    if ebay_client is None:
        logger.warning("⚠️  eBay credentials not configured; eBay publishes will fail")

    return {
        Platform.EBAY: EbayPublisher(ebay_client),
        Platform.POSHMARK: PoshmarkPublisher(),
        Platform.DEPOP: DepopPublisher(),
        Platform.MERCARI: MercariPublisher(),
        Platform.VINTAGE_CRIB: VintageCribPublisher(settings.home_base_url),
    }


__all__ = [
    "PlatformPublisher",
    "APIPublisher",
    "ManualPublisher",
    "EbayClient",
    "EbayListing",
    "EbayPublisher",
    "VintageCribPublisher",
    "PoshmarkPublisher",
    "DepopPublisher",
    "MercariPublisher",
    "build_publishers",
    "prepare_clipboard",
]

"""
Home marketplace publisher.

Publishing to Vintage Crib is a status write on our own catalog, which the
engine performs once all platforms have finished. There is no listing copy
and no network call.
"""

from typing import Optional

from .base_adapter import PlatformPublisher
from ..schema.item import Item, Platform, Seller
from ..schema.results import PublishMode, PublishResult


class VintageCribPublisher(PlatformPublisher):

    platform = Platform.VINTAGE_CRIB

    def __init__(self, base_url: str = "https://vintagecrib.com"):
        self.base_url = base_url.rstrip("/")

    def get_integration_type(self) -> PublishMode:
        return PublishMode.AUTOMATED

    def publish(self, item: Item, seller: Optional[Seller] = None) -> PublishResult:
        return PublishResult.automated(
            self.platform,
            external_id=str(item.id),
            external_url=f"{self.base_url}/items/{item.id}",
        )

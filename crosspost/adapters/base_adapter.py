"""
Base Platform Publisher
=======================
Abstract base class for all platform publishers.

There are two kinds of publisher:

- APIPublisher: pushes the listing through an official API (eBay). The result
  is a live listing or a failure.
- ManualPublisher: the platform has no listing API (Poshmark, Depop,
  Mercari). The publisher never touches the network; it prepares a copy-paste
  package with the listing URL and step-by-step instructions. Its "success"
  means the package is ready, not that the item is live.

A publish attempt is ``pending -> success | failed`` with nothing in between.
"""

from abc import ABC, abstractmethod
from typing import Optional, Tuple

from ..formatters import get_formatter
from ..formatters.base import PlatformFormatter
from ..schema.item import Item, Platform, Seller
from ..schema.results import PublishMode, PublishResult, ManualPostPackage


class PlatformPublisher(ABC):
    """
    Abstract base class for all platform publishers.

    Subclasses set ``platform`` and implement ``publish``.
    """

    platform: Platform

    @abstractmethod
    def get_integration_type(self) -> PublishMode:
        """
        Get the integration type.

        Returns:
            PublishMode this publisher produces on success
        """
        pass

    @abstractmethod
    def publish(self, item: Item, seller: Optional[Seller] = None) -> PublishResult:
        """
        Publish an item to the platform.

        For API integrations: makes the API calls
        For manual platforms: prepares the copy-paste package

        Args:
            item: Item to publish
            seller: Seller that owns the item

        Returns:
            PublishResult for this platform
        """
        pass

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"platform={self.platform.value}, "
            f"type={self.get_integration_type().value})"
        )


class APIPublisher(PlatformPublisher):
    """
    Base class for API-based publishers.

    Use this for platforms with an official listing API.
    """

    def get_integration_type(self) -> PublishMode:
        return PublishMode.AUTOMATED


class ManualPublisher(PlatformPublisher):
    """
    Base class for manual-post publishers.

    Use this for platforms with no listing API. Subclasses provide the
    listing-creation URL and the ordered instructions shown to the seller.
    """

    LISTING_URL: str = ""
    INSTRUCTIONS: Tuple[str, ...] = ()

    def __init__(self, formatter: Optional[PlatformFormatter] = None):
        self.formatter = formatter or get_formatter(self.platform)

    def get_integration_type(self) -> PublishMode:
        return PublishMode.MANUAL_PREPARED

    def build_package(self, item: Item, seller: Optional[Seller] = None) -> ManualPostPackage:
        """
        Prepare the copy-paste package (does not post anything).

        Args:
            item: Item to prepare
            seller: Seller that owns the item

        Returns:
            ManualPostPackage with text, URL and instructions
        """
        payload = self.formatter.format(item, seller)
        return ManualPostPackage(
            platform=self.platform,
            clipboard_text=payload.text,
            listing_url=self.LISTING_URL,
            instructions=tuple(self.INSTRUCTIONS),
            payload=payload,
        )

    def publish(self, item: Item, seller: Optional[Seller] = None) -> PublishResult:
        return PublishResult.manual_prepared(self.platform, self.build_package(item, seller))

"""
Base Formatter
==============
Shared pieces for turning an Item into platform-specific listing copy.

Every formatter is pure: no I/O, no randomness, the same item always yields
the same payload. Every description a formatter produces embeds the item's
title, description and price verbatim.
"""

import re
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from ..schema.item import Item, Platform, Seller, DEFAULT_SELLER
from ..schema.results import ListingPayload


def normalize_key(value: Optional[str]) -> str:
    """Turn free-form vocab ("Like New", "like-new") into a map key ("like_new")"""
    if not value:
        return ""
    return re.sub(r"[\s\-]+", "_", value.strip().lower())


def truncate(text: str, max_length: int) -> str:
    """Hard cut to ``max_length`` characters, without trailing whitespace"""
    if len(text) <= max_length:
        return text
    return text[:max_length].rstrip()


def build_title(item: Item, max_length: int, brand_format: str = "{brand} {title}") -> str:
    """
    Build a listing title.

    - prepend the brand unless the title already mentions it
    - prepend "Vintage" unless the title already says so
    - append "(Size X)" when it still fits
    - cut to ``max_length``

    Args:
        item: Item to title
        max_length: Platform's hard title cap
        brand_format: How the brand is joined to the title

    Returns:
        Title no longer than ``max_length``
    """
    title = " ".join(item.title.split())

    if item.brand and item.brand.strip().lower() not in title.lower():
        title = brand_format.format(brand=item.brand.strip(), title=title)

    if "vintage" not in title.lower():
        title = f"Vintage {title}"

    if item.size:
        sized = f"{title} (Size {item.size.strip()})"
        if len(sized) <= max_length:
            title = sized

    return truncate(title, max_length)


def hashtag(value: str) -> str:
    """Lower-case alphanumeric hashtag, or "" when nothing is left"""
    cleaned = re.sub(r"[^a-z0-9]", "", value.lower())
    return f"#{cleaned}" if cleaned else ""


def dedupe(values: List[str]) -> List[str]:
    seen = set()
    result = []
    for value in values:
        if value and value not in seen:
            seen.add(value)
            result.append(value)
    return result


class PlatformFormatter(ABC):
    """
    Base class for per-platform formatters.

    Subclasses declare their vocabulary maps and limits as class attributes and
    implement ``format``.
    """

    platform: Platform
    TITLE_MAX_LENGTH: int = 80
    MAX_IMAGES: int = 12
    CATEGORY_MAP: Dict[str, str] = {}
    DEFAULT_CATEGORY: str = "Other"
    CONDITION_MAP: Dict[str, str] = {}
    DEFAULT_CONDITION: str = "Good"

    def map_category(self, category: Optional[str]) -> str:
        return self.CATEGORY_MAP.get(normalize_key(category), self.DEFAULT_CATEGORY)

    def map_condition(self, condition: Optional[str]) -> str:
        return self.CONDITION_MAP.get(normalize_key(condition), self.DEFAULT_CONDITION)

    def title_for(self, item: Item) -> str:
        return build_title(item, self.TITLE_MAX_LENGTH)

    def images_for(self, item: Item) -> tuple:
        return tuple(img for img in item.images if img)[: self.MAX_IMAGES]

    @staticmethod
    def seller_or_default(seller: Optional[Seller]) -> Seller:
        return seller if seller is not None and seller.store_name else DEFAULT_SELLER

    @staticmethod
    def display_condition(item: Item) -> str:
        return item.condition or "Good"

    @abstractmethod
    def format(self, item: Item, seller: Optional[Seller] = None) -> ListingPayload:
        """
        Convert an item into this platform's listing payload.

        Args:
            item: Item to format
            seller: Seller whose store name/bio is used in the copy

        Returns:
            ListingPayload for this platform
        """
        pass

"""
Depop Formatter
===============
Depop listings have no title field: the copy is one casual description with
hashtags at the end. Hashtags are derived from the item only, so the same item
always gets the same tags.
"""

from typing import Optional, List

from .base import PlatformFormatter, hashtag, dedupe
from ..schema.item import Item, Platform, Seller
from ..schema.results import ListingPayload


class DepopFormatter(PlatformFormatter):
    """Depop listing formatter"""

    platform = Platform.DEPOP
    MAX_IMAGES = 4
    MAX_HASHTAGS = 20

    BASE_HASHTAGS = ["#vintage", "#retro", "#thrifted", "#sustainable"]
    TRAILING_HASHTAGS = ["#depop", "#vintagestyle", "#90s", "#y2k"]

    CATEGORY_MAP = {
        "clothing": "Tops",
        "dresses": "Dresses",
        "accessories": "Accessories",
        "shoes": "Shoes",
        "bags": "Bags",
        "jewelry": "Jewellery",
        "men_clothing": "Menswear",
        "home": "Home",
    }
    DEFAULT_CATEGORY = "Other"

    CONDITION_MAP = {
        "new": "Brand new",
        "new_with_tags": "Brand new",
        "like_new": "Like new",
        "new_without_tags": "Like new",
        "excellent": "Used - Excellent",
        "good": "Used - Good",
        "fair": "Used - Fair",
    }
    DEFAULT_CONDITION = "Used - Good"

    def format(self, item: Item, seller: Optional[Seller] = None) -> ListingPayload:
        seller = self.seller_or_default(seller)
        hashtags = self.build_hashtags(item)
        handle = "".join(seller.store_name.split()).lower() or "vintagecrib"

        lines = [
            item.title,
            "",
            item.description,
            "",
            f"✨ Vintage {item.category or 'piece'}",
        ]
        if item.brand:
            lines.append(f"Brand: {item.brand}")
        if item.size:
            lines.append(f"Size: {item.size}")
        lines.extend([
            f"Condition: {self.display_condition(item)}",
            f"Price: ${item.price_text}",
            "",
            f"From @{handle} 💫",
        ])
        if seller.bio:
            lines.append(seller.bio)
        lines.extend([
            "",
            "Message me with any questions! 💌",
            "",
            " ".join(hashtags),
        ])

        return ListingPayload(
            platform=self.platform,
            title="",
            description="\n".join(lines),
            price=item.price,
            category=self.map_category(item.category),
            condition=self.map_condition(item.condition),
            brand=item.brand or "",
            size=item.size or "S",
            tags=tuple(hashtags),
            images=self.images_for(item),
        )

    def build_hashtags(self, item: Item) -> List[str]:
        tags = list(self.BASE_HASHTAGS)
        if item.brand:
            tags.append(hashtag(item.brand))
        if item.category:
            tags.append(hashtag(item.category))
        if item.size and item.size.strip().lower() != "os":
            tags.append(hashtag(f"size{item.size}"))
        tags.extend(self.TRAILING_HASHTAGS)
        tags.extend(hashtag(tag) for tag in item.tags)

        return dedupe(tags)[: self.MAX_HASHTAGS]

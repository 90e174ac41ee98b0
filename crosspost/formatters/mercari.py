"""
Mercari Formatter
=================
Mercari copy: bracketed brand in an 80-character title and a bullet
"Details" block.
"""

from typing import Optional

from .base import PlatformFormatter, build_title
from ..schema.item import Item, Platform, Seller
from ..schema.results import ListingPayload


class MercariFormatter(PlatformFormatter):
    """Mercari listing formatter"""

    platform = Platform.MERCARI
    TITLE_MAX_LENGTH = 80
    MAX_IMAGES = 12

    CATEGORY_MAP = {
        "clothing": "Women/Tops & Blouses",
        "dresses": "Women/Dresses",
        "accessories": "Women/Accessories",
        "shoes": "Women/Shoes",
        "bags": "Women/Bags",
        "jewelry": "Women/Jewelry",
    }
    DEFAULT_CATEGORY = "Women/Other"

    CONDITION_MAP = {
        "new": "New, unused",
        "new_with_tags": "New, unused",
        "like_new": "Like new",
        "new_without_tags": "Like new",
        "excellent": "Good",
        "good": "Good",
        "fair": "Fair",
        "poor": "Poor",
    }
    DEFAULT_CONDITION = "Good"

    def title_for(self, item: Item) -> str:
        return build_title(item, self.TITLE_MAX_LENGTH, brand_format="[{brand}] {title}")

    def format(self, item: Item, seller: Optional[Seller] = None) -> ListingPayload:
        description = f"""{item.title}

{item.description}

📋 Details:
• Brand: {item.brand or 'Vintage/Unbranded'}
• Size: {item.size or 'See measurements'}
• Condition: {self.display_condition(item)}
• Style: Vintage
• Price: ${item.price_text}

📦 Shipping: Ships within 1-2 business days
💝 Bundle discounts available!

Questions? Feel free to ask! 😊"""

        return ListingPayload(
            platform=self.platform,
            title=self.title_for(item),
            description=description,
            price=item.price,
            category=self.map_category(item.category),
            condition=self.map_condition(item.condition),
            brand=item.brand or "",
            size=item.size or "",
            images=self.images_for(item),
        )

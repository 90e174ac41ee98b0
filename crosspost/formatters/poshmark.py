"""
Poshmark Formatter
==================
Poshmark has no listing API, so everything ends up in the copy-paste text.
The short title goes into Poshmark's title box; the full item title is folded
into the top of the description.
"""

from typing import Optional, List

from .base import PlatformFormatter, normalize_key, dedupe
from ..schema.item import Item, Platform, Seller
from ..schema.results import ListingPayload


class PoshmarkFormatter(PlatformFormatter):
    """Poshmark listing formatter"""

    platform = Platform.POSHMARK
    TITLE_MAX_LENGTH = 50
    MAX_IMAGES = 16

    CATEGORY_MAP = {
        "clothing": "Women > Tops",
        "dresses": "Women > Dresses",
        "accessories": "Women > Accessories",
        "shoes": "Women > Shoes",
        "bags": "Women > Bags",
        "jewelry": "Women > Jewelry",
    }
    DEFAULT_CATEGORY = "Women > Other"

    CONDITION_MAP = {
        "new": "NWT (New With Tags)",
        "new_with_tags": "NWT (New With Tags)",
        "like_new": "NWOT (New Without Tags)",
        "new_without_tags": "NWOT (New Without Tags)",
        "excellent": "Excellent Used Condition",
        "good": "Good Used Condition",
        "fair": "Fair Used Condition",
    }
    DEFAULT_CONDITION = "Good Used Condition"

    def format(self, item: Item, seller: Optional[Seller] = None) -> ListingPayload:
        seller = self.seller_or_default(seller)
        tags = self.build_tags(item)

        description = f"""{item.title}

{item.description}

🌟 ITEM DETAILS:
• Brand: {item.brand or 'Vintage/Unbranded'}
• Size: {item.size or 'See measurements'}
• Condition: {self.display_condition(item)}
• Era: Vintage
• Price: ${item.price_text}

📏 MEASUREMENTS:
Please see photos for detailed measurements

🏠 SOLD BY: {seller.store_name}
{seller.bio or 'Curated vintage finds with love'}

✨ Follow my closet for daily vintage treasures!
❤️ Bundle 2+ items for 10% off!

{' '.join('#' + tag for tag in tags)}"""

        return ListingPayload(
            platform=self.platform,
            title=self.title_for(item),
            description=description,
            price=item.price,
            category=self.map_category(item.category),
            condition=self.map_condition(item.condition),
            brand=item.brand or "Vintage",
            size=item.size or "OS",
            tags=tuple(tags),
            images=self.images_for(item),
        )

    @staticmethod
    def build_tags(item: Item) -> List[str]:
        tags = ["vintage", "retro", "unique"]
        if item.brand:
            tags.append(normalize_key(item.brand).replace("_", ""))
        if item.category:
            tags.append(normalize_key(item.category).replace("_", ""))
        if item.size:
            tags.append(f"size{normalize_key(item.size).replace('_', '')}")

        return dedupe(tags)

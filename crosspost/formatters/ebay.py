"""
eBay Formatter
==============
Builds the eBay listing: an 80-character title, a structured HTML description
and the category/condition/item-specifics the Inventory API expects.
"""

from typing import Dict, Any, List, Optional

from .base import PlatformFormatter
from ..schema.item import Item, Platform, Seller
from ..schema.results import ListingPayload


COLOR_WORDS = ["red", "blue", "green", "black", "white", "pink", "brown"]


class EbayFormatter(PlatformFormatter):
    """eBay listing formatter"""

    platform = Platform.EBAY
    TITLE_MAX_LENGTH = 80  # eBay hard limit
    MAX_IMAGES = 12        # free picture allowance

    # Vintage category ids
    CATEGORY_MAP = {
        "clothing": "11450",       # Vintage Women's Clothing
        "accessories": "45223",
        "jewelry": "4402",
        "shoes": "55793",
        "bags": "169291",
        "men_clothing": "1059",
        "home": "20596",
        "collectibles": "1",
    }
    DEFAULT_CATEGORY = "11450"

    # Inventory API condition enum
    CONDITION_MAP = {
        "new": "NEW",
        "new_with_tags": "NEW",
        "like_new": "NEW_OTHER",
        "new_without_tags": "NEW_OTHER",
        "excellent": "USED_EXCELLENT",
        "very_good": "USED_VERY_GOOD",
        "good": "USED_GOOD",
        "fair": "USED_ACCEPTABLE",
        "poor": "USED_ACCEPTABLE",
        "for_parts": "FOR_PARTS_OR_NOT_WORKING",
    }
    DEFAULT_CONDITION = "USED_GOOD"

    def format(self, item: Item, seller: Optional[Seller] = None) -> ListingPayload:
        seller = self.seller_or_default(seller)
        category_id = self.map_category(item.category)

        return ListingPayload(
            platform=self.platform,
            title=self.title_for(item),
            description=self.build_description(item, seller),
            price=item.price,
            category=category_id,
            condition=self.map_condition(item.condition),
            brand=item.brand or "",
            size=item.size or "",
            images=self.images_for(item),
            attributes={
                "category_id": category_id,
                "sku": f"VC-{item.id}",
                "format": "FIXED_PRICE",
                "currency": "USD",
                "item_specifics": self.build_item_specifics(item),
            },
        )

    def build_description(self, item: Item, seller: Seller) -> str:
        """Rich HTML description with details, description, price and trust blurb"""
        details = [f"<li><strong>Condition:</strong> {self.display_condition(item)}</li>"]
        if item.brand:
            details.append(f"<li><strong>Brand:</strong> {item.brand}</li>")
        if item.size:
            details.append(f"<li><strong>Size:</strong> {item.size}</li>")
        if item.category:
            details.append(f"<li><strong>Category:</strong> {item.category}</li>")
        details.append(f"<li><strong>Price:</strong> ${item.price_text}</li>")
        details_html = "\n                    ".join(details)

        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px;">
            <h2 style="color: #333;">{item.title}</h2>

            <div style="background: #f8f9fa; padding: 15px; margin: 10px 0; border-radius: 5px;">
                <h3>Item Details</h3>
                <ul>
                    {details_html}
                </ul>
            </div>

            <div style="margin: 15px 0;">
                <h3>Description</h3>
                <p>{item.description}</p>
            </div>

            <div style="background: #e8f4f8; padding: 15px; margin: 10px 0; border-radius: 5px;">
                <h3>Why Buy From Us?</h3>
                <ul>
                    <li>✅ Authentic vintage items</li>
                    <li>📦 Fast shipping</li>
                    <li>🔄 Easy returns</li>
                    <li>⭐ 5-star customer service</li>
                </ul>
            </div>

            <div style="text-align: center; margin: 20px 0;">
                <p style="font-size: 12px; color: #666;">
                    Listed by {seller.store_name} - Your trusted vintage marketplace
                </p>
            </div>
        </div>
        """.strip()

    def build_item_specifics(self, item: Item) -> Dict[str, List[str]]:
        specifics: Dict[str, Any] = {}
        if item.brand:
            specifics["Brand"] = [item.brand]
        if item.size:
            specifics["Size"] = [item.size]
        if item.condition:
            specifics["Condition"] = [item.condition]
        specifics["Style"] = ["Vintage"]

        color = next((t for t in item.tags if t.lower() in COLOR_WORDS), None)
        if color:
            specifics["Color"] = [color]

        return specifics

"""
Quick Start Example
===================
Simplest way to cross-post an item: in-memory store, a Pro seller, one item.

eBay is attempted only when EBAY_* credentials are set; without them the eBay
result is a failure and every other platform still goes through.
"""

from datetime import timedelta
from decimal import Decimal

from crosspost import (
    CrossPostingEngine,
    InMemoryStore,
    Item,
    Seller,
    Settings,
    Subscription,
)
from crosspost.logging_config import configure_logging
from crosspost.schema import utcnow


def main():
    """Create a seller and an item, then publish everywhere"""
    configure_logging()

    settings = Settings.from_env()
    store = InMemoryStore()

    store.save_seller(Seller(id="seller-1", store_name="Retro Rack", bio="90s streetwear and denim"))
    store.save_subscription(Subscription(
        seller_id="seller-1",
        tier="pro",
        expires_at=utcnow() + timedelta(days=30),
    ))

    item = store.save_item(Item(
        id=0,
        seller_id="seller-1",
        title="Levi's 501 Jeans",
        description="Classic straight-leg 501s, light wash, no rips or stains.",
        price=Decimal("45.00"),
        brand="Levi's",
        size="32x30",
        condition="excellent",
        category="clothing",
        images=["https://example.com/501-front.jpg", "https://example.com/501-back.jpg"],
        tags=["denim", "blue"],
    ))

    engine = CrossPostingEngine.from_settings(settings, store)

    print("📤 Cross-posting item to every platform...")
    result = engine.publish_to_all(item.id, "seller-1", ["vintage_crib", "ebay", "poshmark", "depop", "mercari"])

    print(f"\n{result.message}")
    for platform, outcome in result.per_platform_results.items():
        if outcome.is_live:
            print(f"✅ {platform.value}: live at {outcome.external_url}")
        elif outcome.success:
            print(f"📋 {platform.value}: ready to post by hand at {outcome.package.listing_url}")
        else:
            print(f"❌ {platform.value}: {outcome.error_message}")

    if result.denied_platforms:
        print(f"🔒 Not on your plan: {', '.join(p.value for p in result.denied_platforms)}")

    print("\n📋 Poshmark copy-paste text:\n")
    print(engine.prepare_clipboard(item.id, "seller-1", "poshmark").clipboard_text)


if __name__ == "__main__":
    main()

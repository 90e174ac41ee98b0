# tests/conftest.py
from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from crosspost.adapters import build_publishers
from crosspost.config import Settings
from crosspost.database import InMemoryStore
from crosspost.publisher import CrossPostingEngine
from crosspost.schema import Item, Seller, Subscription
from crosspost.subscriptions import SubscriptionGate
from tests.mocks.fake_ebay import FakeEbayClient

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


class Clock:
    """Settable clock for expiry and backoff tests"""

    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def add_seller(store, seller_id, tier=None, expires_at=None, store_name="Retro Rack"):
    store.save_seller(Seller(id=seller_id, store_name=store_name, bio="90s streetwear and denim"))
    if tier is not None:
        store.save_subscription(Subscription(seller_id=seller_id, tier=tier, expires_at=expires_at))


def add_item(store, seller_id, **overrides):
    fields = dict(
        id=0,
        seller_id=seller_id,
        title="Levi's 501 Jeans",
        description="Classic straight-leg 501s, light wash, no rips or stains.",
        price=Decimal("45.00"),
        brand="Levi's",
        size="32x30",
        condition="excellent",
        category="clothing",
        images=["https://example.com/501-front.jpg", "https://example.com/501-back.jpg"],
        tags=["denim", "blue"],
    )
    fields.update(overrides)
    return store.save_item(Item(**fields))


@pytest.fixture
def clock():
    return Clock()


@pytest.fixture
def settings():
    """Provide test settings"""
    return Settings(publish_timeout_seconds=2.0, secret_key="test-secret")


@pytest.fixture
def store():
    """In-memory store with a premium, a pro and a free seller"""
    store = InMemoryStore()
    add_seller(store, "seller-premium", tier="premium")
    add_seller(store, "seller-pro", tier="pro")
    add_seller(store, "seller-free")
    return store


@pytest.fixture
def item(store):
    return add_item(store, "seller-premium")


@pytest.fixture
def fake_ebay():
    return FakeEbayClient()


@pytest.fixture
def make_engine(store, fake_ebay, clock):
    """Factory so tests can override settings"""
    def _make(settings: Settings = None, ebay_client=fake_ebay):
        settings = settings or Settings(publish_timeout_seconds=2.0)
        return CrossPostingEngine(
            items=store,
            sellers=store,
            ledger=store,
            gate=SubscriptionGate(store, policy=settings.lookup_policy, clock=clock),
            publishers=build_publishers(settings, ebay_client=ebay_client),
            settings=settings,
            clock=clock,
        )
    return _make


@pytest.fixture
def engine(make_engine, settings):
    return make_engine(settings)

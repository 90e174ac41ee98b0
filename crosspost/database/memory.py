"""
In-memory store.

Implements every store interface on plain dicts behind a single lock.
Everything handed out is a copy, so callers can never mutate stored state
without going through the store.
"""

import copy
import itertools
import logging
import threading
from typing import Dict, Any, List, Optional, Tuple

from .base import ItemStore, SellerStore, CrossPostLedger
from ..exceptions import ItemNotFoundError, SellerNotFoundError
from ..schema.item import Item, Platform, Seller
from ..schema.results import CrossPostRecord, RecordStatus, utcnow
from ..schema.subscription import Subscription

logger = logging.getLogger(__name__)


class InMemoryStore(ItemStore, SellerStore, CrossPostLedger):
    """Thread-safe in-memory implementation of all stores"""

    def __init__(self):
        self._lock = threading.Lock()
        self._items: Dict[int, Item] = {}
        self._sellers: Dict[str, Seller] = {}
        self._subscriptions: Dict[str, Subscription] = {}
        self._records: Dict[Tuple[int, Platform], CrossPostRecord] = {}
        self.subscription_logs: List[Dict[str, Any]] = []
        self._item_ids = itertools.count(1)
        self._record_ids = itertools.count(1)

    # ========================================================================
    # ITEMS
    # ========================================================================

    def get_item(self, item_id: int) -> Item:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                raise ItemNotFoundError(f"Item {item_id} not found")
            return copy.deepcopy(item)

    def update_item(self, item_id: int, fields: Dict[str, Any]) -> Item:
        with self._lock:
            item = self._items.get(item_id)
            if item is None:
                raise ItemNotFoundError(f"Item {item_id} not found")
            updated = copy.deepcopy(item)
            for key, value in fields.items():
                if not hasattr(updated, key):
                    raise ValueError(f"Unknown item field: {key}")
                setattr(updated, key, value)
            updated.updated_at = utcnow()
            # Re-run coercion (status/published_to/price)
            updated.__post_init__()
            self._items[item_id] = updated
            return copy.deepcopy(updated)

    def save_item(self, item: Item) -> Item:
        with self._lock:
            stored = copy.deepcopy(item)
            if not stored.id:
                stored.id = next(self._item_ids)
            stored.created_at = stored.created_at or utcnow()
            self._items[stored.id] = stored
            return copy.deepcopy(stored)

    def list_items(self, seller_id: str) -> List[Item]:
        with self._lock:
            return [copy.deepcopy(i) for i in self._items.values() if i.seller_id == seller_id]

    # ========================================================================
    # SELLERS & SUBSCRIPTIONS
    # ========================================================================

    def get_seller(self, seller_id: str) -> Seller:
        with self._lock:
            seller = self._sellers.get(seller_id)
            if seller is None:
                raise SellerNotFoundError(f"Seller {seller_id} not found")
            return copy.deepcopy(seller)

    def save_seller(self, seller: Seller) -> Seller:
        with self._lock:
            self._sellers[seller.id] = copy.deepcopy(seller)
            return copy.deepcopy(seller)

    def get_subscription(self, seller_id: str) -> Optional[Subscription]:
        with self._lock:
            if seller_id not in self._sellers:
                raise SellerNotFoundError(f"Seller {seller_id} not found")
            subscription = self._subscriptions.get(seller_id)
            return copy.deepcopy(subscription) if subscription else None

    def save_subscription(self, subscription: Subscription) -> Subscription:
        with self._lock:
            self._subscriptions[subscription.seller_id] = copy.deepcopy(subscription)
            return copy.deepcopy(subscription)

    def log_subscription_change(
        self,
        seller_id: str,
        new_tier: str,
        change_type: str,
        reason: Optional[str] = None,
    ) -> None:
        with self._lock:
            self.subscription_logs.append({
                "seller_id": seller_id,
                "new_tier": new_tier,
                "change_type": change_type,
                "reason": reason,
                "created_at": utcnow(),
            })

    # ========================================================================
    # CROSS-POST LEDGER
    # ========================================================================

    def get_record(self, item_id: int, platform: Platform) -> Optional[CrossPostRecord]:
        with self._lock:
            record = self._records.get((item_id, platform))
            return copy.deepcopy(record) if record else None

    def upsert_record(self, record: CrossPostRecord) -> CrossPostRecord:
        with self._lock:
            key = (record.item_id, record.platform)
            stored = copy.deepcopy(record)
            existing = self._records.get(key)
            if existing is not None:
                stored.id = existing.id
            elif stored.id is None:
                stored.id = next(self._record_ids)
            self._records[key] = stored
            return copy.deepcopy(stored)

    def list_records(self, item_id: int) -> List[CrossPostRecord]:
        with self._lock:
            return [copy.deepcopy(r) for (iid, _), r in self._records.items() if iid == item_id]

    def list_seller_records(
        self,
        seller_id: str,
        status: Optional[RecordStatus] = None,
        platform: Optional[Platform] = None,
    ) -> List[CrossPostRecord]:
        with self._lock:
            item_ids = {i.id for i in self._items.values() if i.seller_id == seller_id}
            records = [
                r for r in self._records.values()
                if r.item_id in item_ids
                and (status is None or r.status is status)
                and (platform is None or r.platform is platform)
            ]
            records.sort(key=lambda r: (r.item_id, r.id or 0))
            return [copy.deepcopy(r) for r in records]

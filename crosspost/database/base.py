"""
Store Interfaces
================
The three persistence collaborators the engine and the gate depend on.

- ItemStore: seller-owned catalog items
- SellerStore: seller profiles, subscriptions and the subscription change log
- CrossPostLedger: one current CrossPostRecord per (item, platform)

``InMemoryStore`` and the PostgreSQL ``Database`` both implement all three.
"""

from abc import ABC, abstractmethod
from typing import Dict, Any, List, Optional

from ..schema.item import Item, ItemStatus, Platform, Seller
from ..schema.results import CrossPostRecord, RecordStatus
from ..schema.subscription import Subscription


class ItemStore(ABC):

    @abstractmethod
    def get_item(self, item_id: int) -> Item:
        """
        Raises:
            ItemNotFoundError: If no item has this id
        """

    @abstractmethod
    def update_item(self, item_id: int, fields: Dict[str, Any]) -> Item:
        """Update the given fields and return the stored item"""

    @abstractmethod
    def save_item(self, item: Item) -> Item:
        """Insert or replace an item; assigns an id when ``item.id`` is falsy"""

    @abstractmethod
    def list_items(self, seller_id: str) -> List[Item]:
        pass

    def count_items(self, seller_id: str) -> int:
        """Items that count against the tier limit (drafts and published)"""
        return sum(
            1 for item in self.list_items(seller_id)
            if item.status in (ItemStatus.DRAFT, ItemStatus.PUBLISHED)
        )


class SellerStore(ABC):

    @abstractmethod
    def get_seller(self, seller_id: str) -> Seller:
        """
        Raises:
            SellerNotFoundError: If the seller does not exist
        """

    @abstractmethod
    def save_seller(self, seller: Seller) -> Seller:
        pass

    @abstractmethod
    def get_subscription(self, seller_id: str) -> Optional[Subscription]:
        """
        Current subscription, or None when the seller has never subscribed.

        Raises:
            SellerNotFoundError: If the seller does not exist
        """

    @abstractmethod
    def save_subscription(self, subscription: Subscription) -> Subscription:
        pass

    @abstractmethod
    def log_subscription_change(
        self,
        seller_id: str,
        new_tier: str,
        change_type: str,
        reason: Optional[str] = None,
    ) -> None:
        pass


class CrossPostLedger(ABC):

    @abstractmethod
    def get_record(self, item_id: int, platform: Platform) -> Optional[CrossPostRecord]:
        pass

    @abstractmethod
    def upsert_record(self, record: CrossPostRecord) -> CrossPostRecord:
        """Insert or overwrite the record for ``(record.item_id, record.platform)``"""

    @abstractmethod
    def list_records(self, item_id: int) -> List[CrossPostRecord]:
        pass

    @abstractmethod
    def list_seller_records(
        self,
        seller_id: str,
        status: Optional[RecordStatus] = None,
        platform: Optional[Platform] = None,
    ) -> List[CrossPostRecord]:
        """Records of every item owned by the seller, optionally filtered"""

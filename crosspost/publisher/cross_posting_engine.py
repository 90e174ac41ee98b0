"""
Cross-Posting Engine
====================
The orchestrator that publishes one item to many platforms.

Provides:
- publish_to_all(item_id, seller_id, platforms): validate, gate, publish, record
- retry_failed(seller_id, platform=None): re-run failed platform publishes
- get_cross_post_stats(seller_id): ledger summary for a seller
- prepare_clipboard(item_id, seller_id, platform): copy-paste package

Platforms are published concurrently, one worker per platform, each bounded
by its own timeout. Nothing is written until every platform has finished (or
timed out); the ledger and the item are then updated together under a
per-item lock.
"""

import logging
import threading
import time
from collections import OrderedDict
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FuturesTimeout
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, Any, Callable, Iterable, List, Mapping, Optional

from ..adapters import PlatformPublisher, build_publishers, prepare_clipboard
from ..config import Settings
from ..database.base import ItemStore, SellerStore, CrossPostLedger
from ..exceptions import ItemNotFoundError, ValidationError
from ..schema.item import Item, ItemStatus, Platform, Seller, parse_platforms
from ..schema.results import (
    AggregateResult,
    CrossPostRecord,
    ManualPostPackage,
    PublishMode,
    PublishResult,
    RecordStatus,
    utcnow,
)
from ..subscriptions import SubscriptionGate, load_tier_table

logger = logging.getLogger(__name__)

CLOSED_STATUSES = (ItemStatus.SOLD, ItemStatus.ARCHIVED)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)


@dataclass
class RetryResult:
    """Outcome of retrying one failed ledger record"""
    record_id: Optional[int]
    item_id: int
    platform: Platform
    result: PublishResult

    def to_dict(self) -> Dict[str, Any]:
        return {
            "recordId": self.record_id,
            "itemId": self.item_id,
            "platform": self.platform.value,
            "result": self.result.to_dict(),
        }


class CrossPostingEngine:
    """
    Publishes items to every requested platform the seller is entitled to.

    Handles:
    - Platform validation and subscription gating
    - Concurrent per-platform publishing with timeouts
    - Failure isolation (one platform never affects another)
    - Ledger upserts and the item's published_to/status write-back
    - Retrying failed platforms
    """

    def __init__(
        self,
        items: ItemStore,
        sellers: SellerStore,
        ledger: CrossPostLedger,
        gate: SubscriptionGate,
        publishers: Mapping[Platform, PlatformPublisher],
        settings: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        """
        Initialize the engine.

        Args:
            items: Item store
            sellers: Seller store
            ledger: Cross-post ledger
            gate: Subscription gate
            publishers: One publisher for every Platform
            settings: Timeout and retry settings
            clock: Returns the current UTC time

        Raises:
            ValueError: If a platform has no publisher
        """
        missing = [p.value for p in Platform if p not in publishers]
        if missing:
            raise ValueError(f"No publisher registered for: {', '.join(missing)}")

        self.items = items
        self.sellers = sellers
        self.ledger = ledger
        self.gate = gate
        self.publishers = dict(publishers)
        self.settings = settings or Settings()
        self.clock = clock

        self._item_locks: Dict[int, threading.Lock] = {}
        self._item_locks_guard = threading.Lock()

    @classmethod
    def from_settings(cls, settings: Settings, store, ebay_client=None) -> "CrossPostingEngine":
        """
        Wire an engine from settings and a store implementing all three
        store interfaces (InMemoryStore or Database).
        """
        gate = SubscriptionGate(
            store,
            tiers=load_tier_table(settings.tier_config_path),
            policy=settings.lookup_policy,
        )
        return cls(
            items=store,
            sellers=store,
            ledger=store,
            gate=gate,
            publishers=build_publishers(settings, ebay_client),
            settings=settings,
        )

    # ========================================================================
    # PUBLISH
    # ========================================================================

    def publish_to_all(self, item_id: int, seller_id: str, platforms: Iterable[Any]) -> AggregateResult:
        """
        Publish an item to the requested platforms.

        Args:
            item_id: Item to publish
            seller_id: Seller making the request (must own the item)
            platforms: Platform names

        Returns:
            AggregateResult with one PublishResult per allowed platform

        Raises:
            ValidationError: If a platform name is unknown or none were given
            ItemNotFoundError: If the item does not exist or belongs to another seller
            SellerNotFoundError: If the seller does not exist
        """
        requested = parse_platforms(platforms)
        if not requested:
            raise ValidationError("At least one platform is required")

        item = self._load_owned_item(item_id, seller_id)
        seller = self.sellers.get_seller(seller_id)

        entitlement = self.gate.check_platforms(seller_id, requested)
        denied = frozenset(entitlement.denied_platforms)

        if not entitlement.allowed_platforms:
            logger.info(f"🔒 Item {item_id}: no requested platform is allowed on the {entitlement.tier.key} tier")
            return AggregateResult(
                item_id=item.id,
                success=False,
                per_platform_results={},
                published_count=0,
                total_requested=len(requested),
                denied_platforms=denied,
                published_to=item.published_to,
            )

        logger.info(
            f"🚀 Cross-posting item {item.id} to: "
            f"{', '.join(p.value for p in entitlement.allowed_platforms)}"
        )
        results = self._fan_out(item, seller, entitlement.allowed_platforms)
        published_to = self._write_back(item.id, results)

        published_count = sum(1 for r in results.values() if r.success)
        logger.info(f"📊 Item {item.id}: published to {published_count} of {len(requested)} platforms")

        return AggregateResult(
            item_id=item.id,
            success=published_count > 0,
            per_platform_results=results,
            published_count=published_count,
            total_requested=len(requested),
            denied_platforms=denied,
            published_to=published_to,
        )

    def _load_owned_item(self, item_id: int, seller_id: str) -> Item:
        item = self.items.get_item(item_id)
        if item.seller_id != seller_id:
            # Same error as a missing item so ownership is not revealed
            raise ItemNotFoundError(f"Item {item_id} not found")
        return item

    def _publish_one(self, publisher: PlatformPublisher, item: Item, seller: Seller) -> PublishResult:
        try:
            return publisher.publish(item, seller)
        except Exception as e:
            logger.exception(f"❌ {publisher.platform.value}: unexpected error publishing item {item.id}")
            return PublishResult.failed(publisher.platform, str(e), mode=publisher.get_integration_type())

    def _fan_out(self, item: Item, seller: Seller, platforms: List[Platform]) -> Dict[Platform, PublishResult]:
        """Publish to every platform concurrently and wait for all of them"""
        timeout = self.settings.publish_timeout_seconds
        executor = ThreadPoolExecutor(max_workers=len(platforms), thread_name_prefix="crosspost")
        deadline = time.monotonic() + timeout

        future_to_platform = OrderedDict(
            (executor.submit(self._publish_one, self.publishers[p], item, seller), p)
            for p in platforms
        )

        results: Dict[Platform, PublishResult] = {}
        try:
            for future, platform in future_to_platform.items():
                try:
                    result = future.result(timeout=max(0.0, deadline - time.monotonic()))
                except FuturesTimeout:
                    future.cancel()
                    result = PublishResult.failed(
                        platform,
                        f"{platform.value} publish timed out after {timeout:g}s",
                        mode=self.publishers[platform].get_integration_type(),
                    )
                results[platform] = result
                self._log_result(item, result)
        finally:
            # Timed-out workers are abandoned; they never write anything
            executor.shutdown(wait=False)

        return results

    @staticmethod
    def _log_result(item: Item, result: PublishResult):
        name = result.platform.value
        if not result.success:
            logger.warning(f"❌ {name}: item {item.id} failed - {result.error_message}")
        elif result.mode is PublishMode.MANUAL_PREPARED:
            logger.info(f"📋 {name}: item {item.id} ready for manual post")
        else:
            logger.info(f"✅ {name}: item {item.id} live at {result.external_url}")

    # ========================================================================
    # WRITE-BACK
    # ========================================================================

    def _lock_for(self, item_id: int) -> threading.Lock:
        with self._item_locks_guard:
            return self._item_locks.setdefault(item_id, threading.Lock())

    def _next_retry_at(self, previous: Optional[CrossPostRecord], result: PublishResult) -> Optional[datetime]:
        backoff = self.settings.retry_backoff_seconds
        if result.success or backoff <= 0:
            return None
        attempts = (previous.attempt_count if previous else 0) + 1
        return self.clock() + timedelta(seconds=backoff * 2 ** (attempts - 1))

    def _write_back(self, item_id: int, results: Mapping[Platform, PublishResult]) -> frozenset:
        """
        Upsert one ledger record per result, then recompute published_to
        from every record of the item.

        Returns:
            The item's new published_to set
        """
        with self._lock_for(item_id):
            for platform, result in results.items():
                previous = self.ledger.get_record(item_id, platform)
                record = CrossPostRecord.from_result(
                    item_id,
                    result,
                    previous=previous,
                    next_retry_at=self._next_retry_at(previous, result),
                )
                self.ledger.upsert_record(record)

            published_to = frozenset(
                r.platform for r in self.ledger.list_records(item_id)
                if r.status is RecordStatus.SUCCESS
            )

            item = self.items.get_item(item_id)
            fields: Dict[str, Any] = {"published_to": published_to}
            if published_to and item.status is ItemStatus.DRAFT:
                fields["status"] = ItemStatus.PUBLISHED
            self.items.update_item(item_id, fields)

        return published_to

    # ========================================================================
    # RETRY
    # ========================================================================

    def _retry_eligible(self, record: CrossPostRecord, now: datetime) -> bool:
        max_attempts = self.settings.retry_max_attempts
        if max_attempts is not None and record.attempt_count >= max_attempts:
            return False
        if record.next_retry_at is not None and _as_utc(record.next_retry_at) > now:
            return False
        return True

    def retry_failed(self, seller_id: str, platform: Optional[Any] = None) -> List[RetryResult]:
        """
        Re-publish every failed (item, platform) pair of the seller.

        Only the failed pairs are re-run; successful platforms of the same
        item are left alone. Entitlement is not re-checked.

        Args:
            seller_id: Seller whose failed publishes to retry
            platform: Restrict to one platform

        Returns:
            One RetryResult per retried record (empty when nothing failed)

        Raises:
            InvalidPlatformError: If ``platform`` is not a known platform
        """
        only = Platform.parse(platform) if platform else None
        failed = self.ledger.list_seller_records(seller_id, status=RecordStatus.FAILED, platform=only)
        if not failed:
            return []

        by_item: "OrderedDict[int, List[CrossPostRecord]]" = OrderedDict()
        for record in failed:
            by_item.setdefault(record.item_id, []).append(record)

        now = self.clock()
        seller = None
        outcomes: List[RetryResult] = []

        for item_id, records in by_item.items():
            try:
                item = self.items.get_item(item_id)
            except ItemNotFoundError:
                logger.warning(f"⚠️  Skipping retry for missing item {item_id}")
                continue

            if item.status in CLOSED_STATUSES:
                logger.info(f"⏭️  Skipping retry for item {item_id} ({item.status.value})")
                continue

            eligible = [r for r in records if self._retry_eligible(r, now)]
            if not eligible:
                continue

            if seller is None:
                seller = self.sellers.get_seller(seller_id)

            logger.info(
                f"🔁 Retrying item {item_id} on: {', '.join(r.platform.value for r in eligible)}"
            )
            results = self._fan_out(item, seller, [r.platform for r in eligible])
            self._write_back(item_id, results)

            outcomes.extend(
                RetryResult(record_id=r.id, item_id=item_id, platform=r.platform, result=results[r.platform])
                for r in eligible
            )

        return outcomes

    # ========================================================================
    # STATS & CLIPBOARD
    # ========================================================================

    def get_cross_post_stats(self, seller_id: str) -> Dict[str, Any]:
        """
        Summarize the seller's ledger.

        Returns:
            Totals, per-status counts, per-platform breakdown and success rate
        """
        records = self.ledger.list_seller_records(seller_id)

        breakdown: Dict[str, Dict[str, int]] = {}
        for record in records:
            counts = breakdown.setdefault(
                record.platform.value, {"total": 0, "success": 0, "pending": 0, "failed": 0}
            )
            counts["total"] += 1
            counts[record.status.value] += 1

        total = len(records)
        successful = sum(1 for r in records if r.status is RecordStatus.SUCCESS)

        return {
            "totalPosts": total,
            "successfulPosts": successful,
            "pendingPosts": sum(1 for r in records if r.status is RecordStatus.PENDING),
            "failedPosts": sum(1 for r in records if r.status is RecordStatus.FAILED),
            "livePosts": sum(
                1 for r in records
                if r.status is RecordStatus.SUCCESS and r.mode is PublishMode.AUTOMATED
            ),
            "preparedPosts": sum(
                1 for r in records
                if r.status is RecordStatus.SUCCESS and r.mode is PublishMode.MANUAL_PREPARED
            ),
            "platformBreakdown": breakdown,
            "successRate": round(successful / total * 100, 1) if total else 0.0,
        }

    def prepare_clipboard(self, item_id: int, seller_id: str, platform: Any) -> ManualPostPackage:
        """
        Copy-paste package for one of the seller's items.

        Raises:
            InvalidPlatformError: If the platform name is unknown
            UnsupportedPlatformError: If the platform has no clipboard form
            ItemNotFoundError: If the item does not exist or is not the seller's
        """
        platform = Platform.parse(platform)
        item = self._load_owned_item(item_id, seller_id)
        return prepare_clipboard(item, platform, self.sellers.get_seller(seller_id))

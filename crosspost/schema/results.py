"""
Publish Results and Ledger Records
==================================
Everything a publish attempt produces:

- ListingPayload: platform-specific copy produced by a formatter
- ManualPostPackage: copy-paste hand-off for platforms without an API
- PublishResult: immutable per-platform outcome of one attempt
- CrossPostRecord: the current ledger entry for an (item, platform) pair
- AggregateResult: what one publish_to_all call returns

A manual-prepared result is successful in the sense that its payload is ready
to copy. It is never a live listing, and ``PublishResult.is_live`` is the flag
callers must use to tell the two apart.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional, Dict, Any, Tuple, FrozenSet, List

from .item import Platform


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PublishMode(Enum):
    """How a platform result was obtained"""
    AUTOMATED = "automated"              # pushed through an API (or the home marketplace)
    MANUAL_PREPARED = "manual_prepared"  # copy-paste package, nothing was posted


class RecordStatus(Enum):
    """Ledger status for an (item, platform) pair"""
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass(frozen=True)
class ListingPayload:
    """Platform-specific listing copy"""
    platform: Platform
    title: str
    description: str
    price: Decimal
    category: str
    condition: str
    brand: str = ""
    size: str = ""
    tags: Tuple[str, ...] = ()
    images: Tuple[str, ...] = ()
    attributes: Dict[str, Any] = field(default_factory=dict)

    @property
    def price_text(self) -> str:
        return f"{self.price:.2f}"

    @property
    def text(self) -> str:
        """Full copyable text (title block followed by description)"""
        if self.title:
            return f"{self.title}\n\n{self.description}"
        return self.description

    def to_dict(self) -> Dict[str, Any]:
        return {
            "platform": self.platform.value,
            "title": self.title,
            "description": self.description,
            "price": self.price_text,
            "category": self.category,
            "condition": self.condition,
            "brand": self.brand,
            "size": self.size,
            "tags": list(self.tags),
            "images": list(self.images),
            "attributes": dict(self.attributes),
        }


@dataclass(frozen=True)
class ManualPostPackage:
    """Everything a seller needs to post an item by hand"""
    platform: Platform
    clipboard_text: str
    listing_url: str
    instructions: Tuple[str, ...]
    payload: Optional[ListingPayload] = None
    automated: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "platform": self.platform.value,
            "clipboardData": self.clipboard_text,
            "platformUrl": self.listing_url,
            "instructions": list(self.instructions),
            "automated": self.automated,
            "formattedData": self.payload.to_dict() if self.payload else None,
        }


@dataclass(frozen=True)
class PublishResult:
    """
    Outcome of one publish attempt on one platform.

    Use the constructors rather than building instances by hand:
    ``automated()`` for a live listing, ``manual_prepared()`` for a
    copy-paste package and ``failed()`` for an error.
    """

    platform: Platform
    success: bool
    mode: Optional[PublishMode] = None
    external_id: Optional[str] = None
    external_url: Optional[str] = None
    error_message: Optional[str] = None
    fees: Dict[str, Any] = field(default_factory=dict)
    package: Optional[ManualPostPackage] = None
    timestamp: datetime = field(default_factory=utcnow)

    @classmethod
    def automated(
        cls,
        platform: Platform,
        external_id: Optional[str],
        external_url: Optional[str],
        fees: Optional[Dict[str, Any]] = None,
    ) -> "PublishResult":
        return cls(
            platform=platform,
            success=True,
            mode=PublishMode.AUTOMATED,
            external_id=external_id,
            external_url=external_url,
            fees=dict(fees or {}),
        )

    @classmethod
    def manual_prepared(cls, platform: Platform, package: ManualPostPackage) -> "PublishResult":
        return cls(
            platform=platform,
            success=True,
            mode=PublishMode.MANUAL_PREPARED,
            external_url=package.listing_url,
            package=package,
        )

    @classmethod
    def failed(cls, platform: Platform, error: str, mode: Optional[PublishMode] = None) -> "PublishResult":
        return cls(platform=platform, success=False, mode=mode, error_message=error)

    @property
    def is_live(self) -> bool:
        """True only when the item is actually listed on the platform"""
        return self.success and self.mode is PublishMode.AUTOMATED

    @property
    def record_status(self) -> RecordStatus:
        return RecordStatus.SUCCESS if self.success else RecordStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "platform": self.platform.value,
            "success": self.success,
            "status": "ready_for_manual_post" if self.mode is PublishMode.MANUAL_PREPARED
            else self.record_status.value,
            "mode": self.mode.value if self.mode else None,
            "live": self.is_live,
            "externalId": self.external_id,
            "externalUrl": self.external_url,
            "error": self.error_message,
            "timestamp": self.timestamp.isoformat(),
        }
        if self.fees:
            result["fees"] = self.fees
        if self.package:
            result.update({
                "clipboardData": self.package.clipboard_text,
                "openUrl": self.package.listing_url,
                "instructions": list(self.package.instructions),
                "data": self.package.payload.to_dict() if self.package.payload else None,
            })
        return result


@dataclass
class CrossPostRecord:
    """
    Current ledger entry for one (item, platform) pair.

    A retry overwrites the status of this record instead of appending a new
    one; ``attempt_count`` and ``next_retry_at`` carry the retry bookkeeping.
    """

    item_id: int
    platform: Platform
    status: RecordStatus = RecordStatus.PENDING
    mode: Optional[PublishMode] = None
    external_id: Optional[str] = None
    external_url: Optional[str] = None
    error_message: Optional[str] = None
    attempt_count: int = 0
    next_retry_at: Optional[datetime] = None
    posted_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    id: Optional[int] = None

    def __post_init__(self):
        self.platform = Platform.parse(self.platform)
        if not isinstance(self.status, RecordStatus):
            self.status = RecordStatus(self.status)
        if self.mode is not None and not isinstance(self.mode, PublishMode):
            self.mode = PublishMode(self.mode)

    @classmethod
    def from_result(
        cls,
        item_id: int,
        result: PublishResult,
        previous: Optional["CrossPostRecord"] = None,
        next_retry_at: Optional[datetime] = None,
    ) -> "CrossPostRecord":
        """Build the record that replaces ``previous`` after an attempt"""
        return cls(
            id=previous.id if previous else None,
            item_id=item_id,
            platform=result.platform,
            status=result.record_status,
            mode=result.mode,
            external_id=result.external_id,
            external_url=result.external_url,
            error_message=result.error_message,
            attempt_count=(previous.attempt_count if previous else 0) + 1,
            next_retry_at=None if result.success else next_retry_at,
            posted_at=previous.posted_at if previous and previous.posted_at else result.timestamp,
            updated_at=result.timestamp,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "item_id": self.item_id,
            "platform": self.platform.value,
            "status": self.status.value,
            "mode": self.mode.value if self.mode else None,
            "external_id": self.external_id,
            "external_url": self.external_url,
            "error_message": self.error_message,
            "attempt_count": self.attempt_count,
            "next_retry_at": self.next_retry_at.isoformat() if self.next_retry_at else None,
            "posted_at": self.posted_at.isoformat() if self.posted_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


@dataclass
class AggregateResult:
    """Result of publishing one item to a set of platforms"""
    item_id: int
    success: bool
    per_platform_results: Dict[Platform, PublishResult]
    published_count: int
    total_requested: int
    denied_platforms: FrozenSet[Platform] = frozenset()
    published_to: FrozenSet[Platform] = frozenset()

    @property
    def message(self) -> str:
        return f"Published to {self.published_count} of {self.total_requested} platforms"

    @property
    def live_platforms(self) -> List[Platform]:
        return [p for p, r in self.per_platform_results.items() if r.is_live]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "itemId": self.item_id,
            "success": self.success,
            "message": self.message,
            "results": {p.value: r.to_dict() for p, r in self.per_platform_results.items()},
            "publishedCount": self.published_count,
            "totalPlatforms": self.total_requested,
            "deniedPlatforms": sorted(p.value for p in self.denied_platforms),
            "publishedTo": sorted(p.value for p in self.published_to),
        }

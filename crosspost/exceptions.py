"""
Cross-Poster Exceptions
=======================
Error taxonomy shared by the engine, the gate, the publishers and the routes.

Structural errors (validation, not-found) abort a publish call before any
network activity. Publish failures are captured per platform and never
escape the platform boundary.
"""

from typing import Iterable


class CrossPostError(Exception):
    """Base exception for all cross-posting errors."""
    pass


class ValidationError(CrossPostError):
    """Raised when request data fails validation."""
    pass


class InvalidPlatformError(ValidationError):
    """Raised when one or more requested platform names are not recognised."""

    def __init__(self, invalid: Iterable[str]):
        self.invalid = sorted(set(invalid))
        super().__init__(f"Invalid platforms: {', '.join(self.invalid)}")


class UnsupportedPlatformError(ValidationError):
    """Raised when a formatter or publisher has no handler for a platform."""
    pass


class NotFoundError(CrossPostError):
    """Base exception for missing records."""
    pass


class ItemNotFoundError(NotFoundError):
    """Raised when an item does not exist (or is not owned by the seller)."""
    pass


class SellerNotFoundError(NotFoundError):
    """Raised when a seller or their subscription cannot be found."""
    pass


class EntitlementDenied(CrossPostError):
    """Raised when a seller's tier does not permit an action."""

    def __init__(self, message: str, limit=None, current=None):
        super().__init__(message)
        self.limit = limit
        self.current = current


class PublishFailure(CrossPostError):
    """Raised by a publisher when a single platform publish fails."""
    pass


class PublishTimeoutError(PublishFailure):
    """Raised when a platform call exceeds its timeout."""
    pass


class EbayAPIError(PublishFailure):
    """Raised when the eBay API rejects a request or is unreachable."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code


class StoreError(CrossPostError):
    """Raised when a persistence backend fails."""
    pass

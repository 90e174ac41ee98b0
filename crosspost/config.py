"""
Configuration
=============
Environment-driven settings for the cross-poster.

Values are read once from the environment (a local ``.env`` file is loaded
with python-dotenv) and frozen into a ``Settings`` object that is passed to
the components that need it.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


class LookupPolicy(Enum):
    """What the subscription gate does when a seller lookup fails"""
    FAIL_OPEN = "fail_open"      # treat the seller as free tier
    FAIL_CLOSED = "fail_closed"  # propagate SellerNotFoundError


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass(frozen=True)
class EbaySettings:
    """eBay API credentials and business policy ids"""
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    refresh_token: Optional[str] = None
    environment: str = "production"
    marketplace_id: str = "EBAY_US"
    fulfillment_policy_id: Optional[str] = None
    payment_policy_id: Optional[str] = None
    return_policy_id: Optional[str] = None
    merchant_location_key: Optional[str] = None

    @property
    def configured(self) -> bool:
        return all([self.client_id, self.client_secret, self.refresh_token])

    @classmethod
    def from_env(cls) -> "EbaySettings":
        return cls(
            client_id=os.getenv("EBAY_CLIENT_ID"),
            client_secret=os.getenv("EBAY_CLIENT_SECRET"),
            refresh_token=os.getenv("EBAY_REFRESH_TOKEN"),
            environment=os.getenv("EBAY_ENVIRONMENT", "production"),
            marketplace_id=os.getenv("EBAY_MARKETPLACE_ID", "EBAY_US"),
            fulfillment_policy_id=os.getenv("EBAY_FULFILLMENT_POLICY_ID"),
            payment_policy_id=os.getenv("EBAY_PAYMENT_POLICY_ID"),
            return_policy_id=os.getenv("EBAY_RETURN_POLICY_ID"),
            merchant_location_key=os.getenv("EBAY_MERCHANT_LOCATION_KEY"),
        )


@dataclass(frozen=True)
class Settings:
    """
    Application settings.

    Attributes:
        publish_timeout_seconds: Per-platform timeout for one publish call
        lookup_policy: Fail-open or fail-closed on subscription lookup errors
        tier_config_path: Optional JSON file overriding the default tier table
        retry_max_attempts: Attempt ceiling for retries (None = unbounded)
        retry_backoff_seconds: Base delay for exponential retry backoff (0 = none)
        home_base_url: Public URL of the home marketplace
        database_url: PostgreSQL connection string
        secret_key: Flask secret key
    """
    publish_timeout_seconds: float = 30.0
    lookup_policy: LookupPolicy = LookupPolicy.FAIL_OPEN
    tier_config_path: Optional[str] = None
    retry_max_attempts: Optional[int] = None
    retry_backoff_seconds: float = 0.0
    home_base_url: str = "https://vintagecrib.com"
    database_url: Optional[str] = None
    secret_key: str = "dev-secret-key-change-in-production"
    ebay: EbaySettings = field(default_factory=EbaySettings)

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables.

        Raises:
            ValueError: If a numeric or enum value cannot be parsed
        """
        return cls(
            publish_timeout_seconds=float(os.getenv("PUBLISH_TIMEOUT_SECONDS", "30")),
            lookup_policy=LookupPolicy(
                os.getenv("SUBSCRIPTION_LOOKUP_POLICY", LookupPolicy.FAIL_OPEN.value).lower()
            ),
            tier_config_path=os.getenv("TIER_CONFIG_PATH") or None,
            retry_max_attempts=_optional_int("RETRY_MAX_ATTEMPTS"),
            retry_backoff_seconds=float(os.getenv("RETRY_BACKOFF_SECONDS", "0")),
            home_base_url=os.getenv("HOME_BASE_URL", "https://vintagecrib.com").rstrip("/"),
            database_url=os.getenv("DATABASE_URL"),
            secret_key=os.getenv("SECRET_KEY", "dev-secret-key-change-in-production"),
            ebay=EbaySettings.from_env(),
        )

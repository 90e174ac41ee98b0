"""
eBay API Client
===============
Thin wrapper over the eBay Sell Inventory API.

Publishing a listing takes three calls: create/replace the inventory item,
create an offer for it, then publish the offer. Listing fees are looked up
for the offer before it goes live.

Required environment variables:
- EBAY_CLIENT_ID, EBAY_CLIENT_SECRET, EBAY_REFRESH_TOKEN
- EBAY_FULFILLMENT_POLICY_ID, EBAY_PAYMENT_POLICY_ID, EBAY_RETURN_POLICY_ID
- EBAY_MERCHANT_LOCATION_KEY

Documentation: https://developer.ebay.com/api-docs/sell/inventory/overview.html
"""

import base64
import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Dict, Any, Optional

import requests

from ..config import EbaySettings
from ..exceptions import EbayAPIError, PublishTimeoutError
from ..schema.results import ListingPayload

logger = logging.getLogger(__name__)

INVENTORY_SCOPE = "https://api.ebay.com/oauth/api_scope/sell.inventory"


@dataclass(frozen=True)
class EbayListing:
    """A live eBay listing"""
    listing_id: str
    url: str
    fees: Dict[str, Any] = field(default_factory=dict)


class EbayClient:
    """
    eBay Sell Inventory API client.

    Access tokens are minted from the refresh token and cached until shortly
    before they expire. The client is safe to share between threads.
    """

    def __init__(
        self,
        settings: EbaySettings,
        session: Optional[requests.Session] = None,
        timeout: float = 30.0,
    ):
        """
        Initialize eBay client.

        Args:
            settings: eBay credentials and business policy ids
            session: requests session (one is created if omitted)
            timeout: Per-request timeout in seconds
        """
        if not settings.configured:
            raise ValueError(
                "eBay credentials not configured. "
                "Please set EBAY_CLIENT_ID, EBAY_CLIENT_SECRET, and EBAY_REFRESH_TOKEN"
            )
        self.settings = settings
        self.session = session or requests.Session()
        self.timeout = timeout
        self.base_url = (
            "https://api.sandbox.ebay.com"
            if settings.environment == "sandbox"
            else "https://api.ebay.com"
        )
        self.item_base_url = (
            "https://sandbox.ebay.com/itm"
            if settings.environment == "sandbox"
            else "https://www.ebay.com/itm"
        )
        self._token: Optional[str] = None
        self._token_expires_at = 0.0
        self._token_lock = threading.Lock()

    @classmethod
    def from_env(cls, timeout: float = 30.0) -> "EbayClient":
        """
        Create client from environment variables.

        Raises:
            ValueError: If required environment variables are missing
        """
        return cls(EbaySettings.from_env(), timeout=timeout)

    # ------------------------------------------------------------------
    # Auth
    # ------------------------------------------------------------------

    def _get_access_token(self) -> str:
        with self._token_lock:
            # Reuse until 5 minutes before expiry
            if self._token and time.time() < self._token_expires_at - 300:
                return self._token

            raw = f"{self.settings.client_id}:{self.settings.client_secret}"
            basic = base64.b64encode(raw.encode("utf-8")).decode("utf-8")

            response = self._send(
                "POST",
                f"{self.base_url}/identity/v1/oauth2/token",
                headers={
                    "Content-Type": "application/x-www-form-urlencoded",
                    "Authorization": f"Basic {basic}",
                },
                data={
                    "grant_type": "refresh_token",
                    "refresh_token": self.settings.refresh_token,
                    "scope": INVENTORY_SCOPE,
                },
            )
            token_json = response.json()
            token = token_json.get("access_token")
            if not token:
                raise EbayAPIError("No access_token in eBay token response")

            self._token = token
            self._token_expires_at = time.time() + int(token_json.get("expires_in", 7200))
            return token

    def _get_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._get_access_token()}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "Content-Language": "en-US",
        }

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    def _send(self, method: str, url: str, **kwargs) -> requests.Response:
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.Timeout:
            raise PublishTimeoutError(f"eBay request timed out after {self.timeout:g}s")
        except requests.RequestException as e:
            raise EbayAPIError(f"eBay request failed: {e}")

        if response.status_code >= 400:
            raise EbayAPIError(
                f"eBay API error {response.status_code}: {self._error_message(response)}",
                status_code=response.status_code,
            )
        return response

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        try:
            errors = response.json().get("errors") or []
        except ValueError:
            return response.text
        if errors:
            return errors[0].get("longMessage") or errors[0].get("message") or response.text
        return response.text

    def _api(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self._send(
            method,
            f"{self.base_url}/sell/inventory/v1/{endpoint}",
            headers=self._get_headers(),
            json=payload,
        )

    # ------------------------------------------------------------------
    # Publishing
    # ------------------------------------------------------------------

    def build_inventory_item(self, payload: ListingPayload) -> Dict[str, Any]:
        aspects = dict(payload.attributes.get("item_specifics", {}))
        product = {
            "title": payload.title,
            "description": payload.description[:4000],
            "aspects": aspects,
            "imageUrls": list(payload.images),
        }
        if payload.brand:
            product["brand"] = payload.brand
        return {
            "availability": {"shipToLocationAvailability": {"quantity": 1}},
            "condition": payload.condition,
            "product": product,
        }

    def build_offer(self, payload: ListingPayload) -> Dict[str, Any]:
        offer = {
            "sku": payload.attributes["sku"],
            "marketplaceId": self.settings.marketplace_id,
            "format": payload.attributes.get("format", "FIXED_PRICE"),
            "availableQuantity": 1,
            "categoryId": payload.category,
            "listingDescription": payload.description,
            "listingPolicies": {
                "fulfillmentPolicyId": self.settings.fulfillment_policy_id,
                "paymentPolicyId": self.settings.payment_policy_id,
                "returnPolicyId": self.settings.return_policy_id,
            },
            "pricingSummary": {
                "price": {
                    "value": payload.price_text,
                    "currency": payload.attributes.get("currency", "USD"),
                },
            },
        }
        if self.settings.merchant_location_key:
            offer["merchantLocationKey"] = self.settings.merchant_location_key
        return offer

    def get_listing_fees(self, offer_id: str) -> Dict[str, Any]:
        """Fee summary for an unpublished offer, keyed by fee type"""
        response = self._api("POST", "offer/get_listing_fees", {"offers": [{"offerId": offer_id}]})
        fees = {}
        for summary in response.json().get("feeSummaries", []):
            for fee in summary.get("fees", []):
                amount = fee.get("amount", {})
                fees[fee.get("feeType", "unknown")] = amount.get("value")
        return fees

    def publish(self, payload: ListingPayload) -> EbayListing:
        """
        Publish a formatted listing to eBay.

        Args:
            payload: Listing produced by the eBay formatter

        Returns:
            EbayListing with listing id, URL and fees

        Raises:
            PublishTimeoutError: If eBay does not answer in time
            EbayAPIError: If any API call is rejected or fails
        """
        sku = payload.attributes["sku"]
        logger.info(f"🎯 Publishing {sku} to eBay: {payload.title}")

        self._api("PUT", f"inventory_item/{sku}", self.build_inventory_item(payload))

        offer_id = self._api("POST", "offer", self.build_offer(payload)).json().get("offerId")
        if not offer_id:
            raise EbayAPIError("eBay did not return an offerId")

        try:
            fees = self.get_listing_fees(offer_id)
        except EbayAPIError as e:
            logger.warning(f"⚠️  Could not fetch eBay listing fees for offer {offer_id}: {e}")
            fees = {}

        listing_id = self._api("POST", f"offer/{offer_id}/publish").json().get("listingId")
        if not listing_id:
            raise EbayAPIError("eBay did not return a listingId")

        logger.info(f"✅ eBay listing created: {listing_id}")
        return EbayListing(
            listing_id=str(listing_id),
            url=f"{self.item_base_url}/{listing_id}",
            fees=fees,
        )

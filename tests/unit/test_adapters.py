# tests/unit/test_adapters.py
from decimal import Decimal

import pytest
import requests

from crosspost.adapters import (
    EbayClient,
    EbayPublisher,
    PoshmarkPublisher,
    DepopPublisher,
    MercariPublisher,
    VintageCribPublisher,
    build_publishers,
    prepare_clipboard,
)
from crosspost.config import EbaySettings, Settings
from crosspost.exceptions import EbayAPIError, PublishTimeoutError, UnsupportedPlatformError
from crosspost.formatters import format_listing
from crosspost.schema import Item, Platform, PublishMode, Seller

EBAY_SETTINGS = EbaySettings(
    client_id="client",
    client_secret="secret",
    refresh_token="refresh",
    fulfillment_policy_id="ship-1",
    payment_policy_id="pay-1",
    return_policy_id="ret-1",
    merchant_location_key="warehouse",
)


@pytest.fixture
def jeans():
    return Item(
        id=42,
        seller_id="seller-1",
        title="Levi's 501 Jeans",
        description="Light wash, no rips.",
        price=Decimal("45.00"),
        brand="Levi's",
        size="32x30",
        condition="excellent",
        category="clothing",
        images=["https://example.com/front.jpg"],
    )


def response(mocker, status_code=200, payload=None, text=""):
    resp = mocker.Mock(status_code=status_code, text=text)
    resp.json.return_value = payload if payload is not None else {}
    return resp


def token_response(mocker):
    return response(mocker, payload={"access_token": "token-abc", "expires_in": 7200})


"""
1. eBay client
"""

def test_ebay_client_requires_credentials():
    with pytest.raises(ValueError):
        EbayClient(EbaySettings())


def test_ebay_client_publish_flow(mocker, jeans):
    session = mocker.Mock()
    session.request.side_effect = [
        token_response(mocker),
        response(mocker, status_code=204),
        response(mocker, status_code=201, payload={"offerId": "offer-9"}),
        response(mocker, payload={"feeSummaries": [{"fees": [
            {"feeType": "INSERTION_FEE", "amount": {"value": "0.35", "currency": "USD"}},
        ]}]}),
        response(mocker, payload={"listingId": "110552"}),
    ]
    client = EbayClient(EBAY_SETTINGS, session=session, timeout=5)

    listing = client.publish(format_listing(jeans, Platform.EBAY))

    assert listing.listing_id == "110552"
    assert listing.url == "https://www.ebay.com/itm/110552"
    assert listing.fees == {"INSERTION_FEE": "0.35"}

    calls = session.request.call_args_list
    assert calls[0].args == ("POST", "https://api.ebay.com/identity/v1/oauth2/token")
    assert calls[1].args == ("PUT", "https://api.ebay.com/sell/inventory/v1/inventory_item/VC-42")
    assert calls[1].kwargs["headers"]["Authorization"] == "Bearer token-abc"
    assert calls[1].kwargs["timeout"] == 5

    offer = calls[2].kwargs["json"]
    assert offer["sku"] == "VC-42"
    assert offer["pricingSummary"]["price"] == {"value": "45.00", "currency": "USD"}
    assert offer["listingPolicies"]["fulfillmentPolicyId"] == "ship-1"
    assert offer["merchantLocationKey"] == "warehouse"
    assert calls[4].args == ("POST", "https://api.ebay.com/sell/inventory/v1/offer/offer-9/publish")


def test_ebay_client_reuses_token(mocker, jeans):
    session = mocker.Mock()
    session.request.side_effect = [
        token_response(mocker),
        response(mocker, status_code=204),
        response(mocker, payload={"offerId": "o1"}),
        response(mocker, payload={}),
        response(mocker, payload={"listingId": "1"}),
        response(mocker, status_code=204),
        response(mocker, payload={"offerId": "o2"}),
        response(mocker, payload={}),
        response(mocker, payload={"listingId": "2"}),
    ]
    client = EbayClient(EBAY_SETTINGS, session=session)
    payload = format_listing(jeans, Platform.EBAY)

    client.publish(payload)
    client.publish(payload)

    token_calls = [c for c in session.request.call_args_list if "oauth2/token" in c.args[1]]
    assert len(token_calls) == 1


def test_ebay_client_timeout(mocker, jeans):
    session = mocker.Mock()
    session.request.side_effect = requests.Timeout("read timed out")
    client = EbayClient(EBAY_SETTINGS, session=session, timeout=3)

    with pytest.raises(PublishTimeoutError, match="timed out after 3s"):
        client.publish(format_listing(jeans, Platform.EBAY))


def test_ebay_client_connection_error(mocker, jeans):
    session = mocker.Mock()
    session.request.side_effect = requests.ConnectionError("refused")
    client = EbayClient(EBAY_SETTINGS, session=session)

    with pytest.raises(EbayAPIError, match="eBay request failed"):
        client.publish(format_listing(jeans, Platform.EBAY))


def test_ebay_client_api_error(mocker, jeans):
    session = mocker.Mock()
    session.request.side_effect = [
        token_response(mocker),
        response(mocker, status_code=400, payload={"errors": [{"message": "Invalid SKU"}]}),
    ]
    client = EbayClient(EBAY_SETTINGS, session=session)

    with pytest.raises(EbayAPIError) as exc:
        client.publish(format_listing(jeans, Platform.EBAY))

    assert str(exc.value) == "eBay API error 400: Invalid SKU"
    assert exc.value.status_code == 400


def test_ebay_client_fee_lookup_failure_is_not_fatal(mocker, jeans):
    session = mocker.Mock()
    session.request.side_effect = [
        token_response(mocker),
        response(mocker, status_code=204),
        response(mocker, payload={"offerId": "o1"}),
        response(mocker, status_code=500, text="Internal error"),
        response(mocker, payload={"listingId": "77"}),
    ]
    client = EbayClient(EBAY_SETTINGS, session=session)

    listing = client.publish(format_listing(jeans, Platform.EBAY))

    assert listing.listing_id == "77"
    assert listing.fees == {}


def test_ebay_client_sandbox_urls():
    client = EbayClient(EbaySettings(client_id="a", client_secret="b", refresh_token="c", environment="sandbox"))

    assert client.base_url == "https://api.sandbox.ebay.com"
    assert client.item_base_url == "https://sandbox.ebay.com/itm"


"""
2. Publishers
"""

def test_ebay_publisher_success(mocker, jeans):
    client = mocker.Mock()
    client.publish.return_value = mocker.Mock(listing_id="99", url="https://www.ebay.com/itm/99", fees={"fee": "1"})

    result = EbayPublisher(client).publish(jeans)

    assert result.is_live
    assert result.external_id == "99"
    assert result.fees == {"fee": "1"}
    assert client.publish.call_args.args[0].platform is Platform.EBAY


def test_ebay_publisher_failure_is_returned_not_raised(mocker, jeans):
    client = mocker.Mock()
    client.publish.side_effect = PublishTimeoutError("eBay request timed out after 30s")

    result = EbayPublisher(client).publish(jeans)

    assert result.success is False
    assert result.mode is PublishMode.AUTOMATED
    assert result.error_message == "eBay request timed out after 30s"


@pytest.mark.parametrize("publisher_cls, url, steps", [
    (PoshmarkPublisher, "https://poshmark.com/create-listing", 6),
    (DepopPublisher, "https://www.depop.com/products/create/", 6),
    (MercariPublisher, "https://www.mercari.com/sell/", 7),
])
def test_manual_publishers(jeans, publisher_cls, url, steps):
    publisher = publisher_cls()
    result = publisher.publish(jeans, Seller(id="seller-1", store_name="Retro Rack"))

    assert result.success is True
    assert result.is_live is False
    assert result.mode is PublishMode.MANUAL_PREPARED
    assert result.package.listing_url == url
    assert len(result.package.instructions) == steps
    assert result.package.instructions[0].startswith("1. ")
    assert jeans.description in result.package.clipboard_text
    assert result.to_dict()["status"] == "ready_for_manual_post"


def test_home_publisher(jeans):
    result = VintageCribPublisher("https://shop.example.com/").publish(jeans)

    assert result.is_live
    assert result.external_id == "42"
    assert result.external_url == "https://shop.example.com/items/42"


def test_build_publishers_covers_every_platform(mocker):
    publishers = build_publishers(Settings(), ebay_client=mocker.Mock())

    assert set(publishers) == set(Platform)
    assert publishers[Platform.POSHMARK].get_integration_type() is PublishMode.MANUAL_PREPARED
    assert publishers[Platform.EBAY].get_integration_type() is PublishMode.AUTOMATED


def test_build_publishers_creates_ebay_client_from_settings():
    publishers = build_publishers(Settings(ebay=EBAY_SETTINGS, publish_timeout_seconds=12))

    client = publishers[Platform.EBAY].client
    assert isinstance(client, EbayClient)
    assert client.timeout == 12


"""
3. Clipboard
"""

def test_clipboard_for_ebay_is_informational(jeans):
    package = prepare_clipboard(jeans, "ebay")

    assert package.automated is True
    assert package.listing_url == "https://www.ebay.com/sl/sell"
    assert package.clipboard_text == "Levi's 501 Jeans\n\nLight wash, no rips.\n\nPrice: $45.00"


def test_clipboard_for_depop_is_description_only(jeans):
    package = prepare_clipboard(jeans, "depop")

    assert package.clipboard_text == package.payload.description


def test_clipboard_for_home_marketplace_is_unsupported(jeans):
    with pytest.raises(UnsupportedPlatformError):
        prepare_clipboard(jeans, "vintage_crib")

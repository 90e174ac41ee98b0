# tests/test_routes/test_publish_routes.py
import pytest

from crosspost.exceptions import EbayAPIError
from crosspost.web import create_app
from tests.conftest import add_item


@pytest.fixture
def app(engine, store, settings):
    app = create_app(engine, store, settings)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


def login(client, seller_id):
    with client.session_transaction() as session:
        session["_user_id"] = seller_id
        session["_fresh"] = True


"""
1. Authentication
"""

def test_publish_requires_login(client, item):
    response = client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay"]})

    assert response.status_code == 401


def test_unknown_session_user_is_rejected(client, item):
    login(client, "deleted-seller")

    response = client.get("/items/cross-post-stats")

    assert response.status_code == 401


"""
2. Publish
"""

def test_publish_success(client, item, fake_ebay):
    login(client, "seller-premium")

    response = client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay", "poshmark"]})

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["publishedCount"] == 2
    assert body["totalPlatforms"] == 2
    assert body["results"]["ebay"]["externalId"] == "1234567890"
    assert body["results"]["poshmark"]["status"] == "ready_for_manual_post"
    assert body["results"]["poshmark"]["openUrl"] == "https://poshmark.com/create-listing"
    assert body["publishedTo"] == ["ebay", "poshmark"]


def test_publish_defaults_to_home_marketplace(client, item, fake_ebay):
    login(client, "seller-premium")

    response = client.post(f"/items/{item.id}/publish", json={})

    assert response.status_code == 200
    assert list(response.get_json()["results"]) == ["vintage_crib"]
    assert fake_ebay.calls == []


def test_publish_reports_platform_failure_in_body(client, item, fake_ebay):
    login(client, "seller-premium")
    fake_ebay.error = EbayAPIError("eBay API error 400: Invalid category", status_code=400)

    response = client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay", "depop"]})

    assert response.status_code == 200
    body = response.get_json()
    assert body["results"]["ebay"]["error"] == "eBay API error 400: Invalid category"
    assert body["results"]["depop"]["success"] is True


def test_publish_bogus_platform_is_400(client, item, fake_ebay):
    login(client, "seller-premium")

    response = client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay", "bogus_platform"]})

    assert response.status_code == 400
    assert "bogus_platform" in response.get_json()["error"]
    assert fake_ebay.calls == []


def test_publish_platforms_must_be_a_list(client, item):
    login(client, "seller-premium")

    response = client.post(f"/items/{item.id}/publish", json={"platforms": "ebay"})

    assert response.status_code == 400


def test_publish_missing_item_is_404(client):
    login(client, "seller-premium")

    response = client.post("/items/999/publish", json={"platforms": ["ebay"]})

    assert response.status_code == 404


def test_publish_other_sellers_item_is_404(client, item):
    login(client, "seller-pro")

    response = client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay"]})

    assert response.status_code == 404


def test_fully_denied_publish_is_403(client, store):
    item = add_item(store, "seller-free")
    login(client, "seller-free")

    response = client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay", "mercari"]})

    assert response.status_code == 403
    body = response.get_json()
    assert body["error"] == "Your Free Tier plan does not include: ebay, mercari"
    assert body["deniedPlatforms"] == ["ebay", "mercari"]
    assert body["allowedPlatforms"] == ["vintage_crib"]
    assert body["tier"] == "free"
    assert [r["tier"] for r in body["upgradeRecommendations"]] == ["starter", "pro", "premium"]


def test_partially_denied_publish_is_200(client, store):
    item = add_item(store, "seller-free")
    login(client, "seller-free")

    response = client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay", "vintage_crib"]})

    assert response.status_code == 200
    body = response.get_json()
    assert body["deniedPlatforms"] == ["ebay"]
    assert list(body["results"]) == ["vintage_crib"]


"""
3. Retry, stats and clipboard
"""

def test_retry_failed(client, item, fake_ebay):
    login(client, "seller-premium")
    fake_ebay.error = EbayAPIError("down")
    client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay"]})
    fake_ebay.error = None

    response = client.post("/items/retry-failed", json={})

    assert response.status_code == 200
    results = response.get_json()["results"]
    assert len(results) == 1
    assert results[0]["platform"] == "ebay"
    assert results[0]["result"]["success"] is True


def test_retry_failed_with_bad_platform_is_400(client):
    login(client, "seller-premium")

    response = client.post("/items/retry-failed", json={"platform": "myspace"})

    assert response.status_code == 400


def test_cross_post_stats(client, item):
    login(client, "seller-premium")
    client.post(f"/items/{item.id}/publish", json={"platforms": ["ebay", "depop"]})

    response = client.get("/items/cross-post-stats")

    assert response.status_code == 200
    body = response.get_json()
    assert body["totalPosts"] == 2
    assert body["successRate"] == 100.0
    assert body["platformBreakdown"]["depop"]["success"] == 1


def test_clipboard(client, item):
    login(client, "seller-premium")

    response = client.get(f"/items/{item.id}/clipboard/mercari")

    assert response.status_code == 200
    body = response.get_json()
    assert body["success"] is True
    assert body["platformUrl"] == "https://www.mercari.com/sell/"
    assert body["automated"] is False
    assert item.description in body["clipboardData"]


def test_clipboard_for_home_marketplace_is_400(client, item):
    login(client, "seller-premium")

    response = client.get(f"/items/{item.id}/clipboard/vintage_crib")

    assert response.status_code == 400


"""
4. Subscription
"""

def test_subscription_status_with_limit_warning(client, store):
    for _ in range(4):
        add_item(store, "seller-free")
    login(client, "seller-free")

    response = client.get("/subscription")

    assert response.status_code == 200
    body = response.get_json()
    assert body["subscription"]["tier"] == "free"
    assert body["tierDetails"]["maxItems"] == 5
    assert body["itemLimit"] == {"allowed": True, "limit": 5, "current": 4}
    assert body["limitWarning"]["warning"] is True
    assert len(body["upgradeRecommendations"]) == 3


def test_subscription_status_for_premium(client):
    login(client, "seller-premium")

    body = client.get("/subscription").get_json()

    assert body["tierDetails"]["tier"] == "premium"
    assert body["limitWarning"] is None
    assert body["upgradeRecommendations"] == []

# tests/unit/test_database.py
from datetime import datetime
from decimal import Decimal

import psycopg2
import pytest

from crosspost.database import InMemoryStore
from crosspost.database.db import Database, create_pool
from crosspost.exceptions import ItemNotFoundError, SellerNotFoundError, StoreError
from crosspost.schema import (
    CrossPostRecord,
    Item,
    ItemStatus,
    Platform,
    PublishMode,
    RecordStatus,
    Seller,
)
from tests.conftest import add_item


"""
1. In-memory store
"""

def test_items_are_copied_in_and_out(store):
    item = add_item(store, "seller-pro")
    item.title = "mutated"

    assert store.get_item(item.id).title == "Levi's 501 Jeans"


def test_update_item_coerces_fields(store):
    item = add_item(store, "seller-pro")

    updated = store.update_item(item.id, {"status": "published", "published_to": ["ebay"]})

    assert updated.status is ItemStatus.PUBLISHED
    assert updated.published_to == {Platform.EBAY}
    assert updated.updated_at is not None


def test_update_item_rejects_unknown_field(store):
    item = add_item(store, "seller-pro")

    with pytest.raises(ValueError):
        store.update_item(item.id, {"colour": "blue"})


def test_update_missing_item(store):
    with pytest.raises(ItemNotFoundError):
        store.update_item(404, {"status": "sold"})


def test_count_items_ignores_sold_and_archived(store):
    add_item(store, "seller-free")
    add_item(store, "seller-free", status="sold")
    add_item(store, "seller-free", status="archived")
    add_item(store, "seller-free", status="published")

    assert store.count_items("seller-free") == 2


def test_subscription_lookup_for_unknown_seller(store):
    with pytest.raises(SellerNotFoundError):
        store.get_subscription("nobody")


def test_subscription_is_none_when_never_set(store):
    assert store.get_subscription("seller-free") is None


def test_upsert_keeps_one_record_per_pair(store):
    item = add_item(store, "seller-pro")
    first = store.upsert_record(CrossPostRecord(item_id=item.id, platform=Platform.EBAY, status="failed"))
    second = store.upsert_record(CrossPostRecord(item_id=item.id, platform="ebay", status="success"))

    assert second.id == first.id
    assert [r.status for r in store.list_records(item.id)] == [RecordStatus.SUCCESS]


def test_list_seller_records_filters(store):
    mine = add_item(store, "seller-pro")
    theirs = add_item(store, "seller-premium")
    store.upsert_record(CrossPostRecord(item_id=mine.id, platform=Platform.EBAY, status="failed"))
    store.upsert_record(CrossPostRecord(item_id=mine.id, platform=Platform.DEPOP, status="success"))
    store.upsert_record(CrossPostRecord(item_id=theirs.id, platform=Platform.EBAY, status="failed"))

    failed = store.list_seller_records("seller-pro", status=RecordStatus.FAILED)
    assert [(r.item_id, r.platform) for r in failed] == [(mine.id, Platform.EBAY)]
    assert store.list_seller_records("seller-pro", platform=Platform.DEPOP)[0].status is RecordStatus.SUCCESS


def test_memory_store_round_trips_sellers():
    store = InMemoryStore()
    store.save_seller(Seller(id="s1", store_name="Attic Finds"))

    assert store.get_seller("s1").store_name == "Attic Finds"
    with pytest.raises(SellerNotFoundError):
        store.get_seller("s2")


"""
2. PostgreSQL store (pool mocked)
"""

ITEM_ROW = {
    "id": 3,
    "seller_id": "seller-1",
    "title": "Pendleton Flannel",
    "description": "Wool board shirt",
    "price": Decimal("60.00"),
    "brand": "Pendleton",
    "size": "L",
    "condition": "good",
    "category": "clothing",
    "images": ["https://example.com/a.jpg"],
    "tags": '["wool", "plaid"]',
    "status": "published",
    "published_to": ["ebay", "depop"],
    "created_at": datetime(2024, 5, 1),
    "updated_at": datetime(2024, 5, 2),
}

RECORD_ROW = {
    "id": 11,
    "item_id": 3,
    "platform": "ebay",
    "status": "success",
    "mode": "automated",
    "external_id": "555",
    "external_url": "https://www.ebay.com/itm/555",
    "error_message": None,
    "attempt_count": 1,
    "next_retry_at": None,
    "posted_at": datetime(2024, 5, 2),
    "updated_at": datetime(2024, 5, 2),
}


@pytest.fixture
def pool(mocker):
    return mocker.Mock()


@pytest.fixture
def cursor(pool):
    return pool.getconn.return_value.cursor.return_value


@pytest.fixture
def db(pool, mocker):
    mocker.patch("crosspost.database.db.time.sleep")
    return Database(pool=pool)


def test_create_pool_requires_url():
    with pytest.raises(ValueError, match="DATABASE_URL"):
        create_pool(None)


def test_get_item_converts_row(db, cursor, pool):
    cursor.fetchone.return_value = ITEM_ROW

    item = db.get_item(3)

    assert item.title == "Pendleton Flannel"
    assert item.status is ItemStatus.PUBLISHED
    assert item.published_to == {Platform.EBAY, Platform.DEPOP}
    assert item.tags == ["wool", "plaid"]
    assert cursor.execute.call_args.args[1] == (3,)
    pool.putconn.assert_called_once_with(pool.getconn.return_value, close=False)


def test_get_item_missing(db, cursor):
    cursor.fetchone.return_value = None

    with pytest.raises(ItemNotFoundError):
        db.get_item(99)


def test_update_item_serializes_values(db, cursor, pool):
    cursor.fetchone.return_value = ITEM_ROW

    db.update_item(3, {"status": ItemStatus.PUBLISHED, "published_to": {Platform.EBAY, Platform.DEPOP}})

    sql, params = cursor.execute.call_args.args
    assert sql.startswith("UPDATE items SET status = %s, published_to = %s")
    assert params == ("published", '["depop", "ebay"]', 3)
    pool.getconn.return_value.commit.assert_called_once()


def test_update_item_rejects_unknown_columns(db, cursor):
    with pytest.raises(ValueError):
        db.update_item(3, {"seller_id": "someone-else"})

    cursor.execute.assert_not_called()


def test_subscription_without_row_is_none(db, cursor):
    cursor.fetchone.return_value = {"seller_key": "seller-1", "tier": None}

    assert db.get_subscription("seller-1") is None


def test_subscription_for_unknown_seller(db, cursor):
    cursor.fetchone.return_value = None

    with pytest.raises(SellerNotFoundError):
        db.get_subscription("nobody")


def test_upsert_record_uses_conflict_clause(db, cursor):
    cursor.fetchone.return_value = RECORD_ROW
    record = CrossPostRecord(
        item_id=3,
        platform=Platform.EBAY,
        status=RecordStatus.SUCCESS,
        mode=PublishMode.AUTOMATED,
        external_id="555",
        attempt_count=1,
    )

    saved = db.upsert_record(record)

    sql, params = cursor.execute.call_args.args
    assert "ON CONFLICT (item_id, platform) DO UPDATE" in sql
    assert params[:4] == (3, "ebay", "success", "automated")
    assert saved.id == 11
    assert saved.mode is PublishMode.AUTOMATED


def test_list_seller_records_builds_filters(db, cursor):
    cursor.fetchall.return_value = [RECORD_ROW]

    records = db.list_seller_records("seller-1", status=RecordStatus.FAILED, platform=Platform.EBAY)

    sql, params = cursor.execute.call_args.args
    assert "cp.status = %s" in sql
    assert "cp.platform = %s" in sql
    assert params == ["seller-1", "failed", "ebay"]
    assert records[0].platform is Platform.EBAY


def test_query_error_becomes_store_error(db, cursor, pool):
    cursor.execute.side_effect = psycopg2.ProgrammingError("relation does not exist")

    with pytest.raises(StoreError, match="relation does not exist"):
        db.get_seller("seller-1")

    pool.getconn.return_value.rollback.assert_called_once()


def test_dropped_connection_is_retried(db, cursor, pool):
    cursor.fetchone.return_value = {"id": "seller-1", "store_name": "Attic Finds", "bio": None}
    cursor.execute.side_effect = [psycopg2.OperationalError("server closed the connection"), None]

    seller = db.get_seller("seller-1")

    assert seller.store_name == "Attic Finds"
    assert pool.getconn.call_count == 2
    assert pool.putconn.call_args_list[0].kwargs == {"close": True}


def test_gives_up_after_retries(db, cursor):
    cursor.execute.side_effect = psycopg2.OperationalError("could not connect")

    with pytest.raises(StoreError, match="Database unavailable"):
        db.get_seller("seller-1")

    assert cursor.execute.call_count == 3

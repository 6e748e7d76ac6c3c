"""Unit tests for the SQLAlchemy order repository.

These tests run against an in-memory sqlite database and check the
persistence contract: read-back after create, items encoding, status-only
updates, delete semantics and the mapping of database errors to
``StorageFault``.
"""

import threading
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace

import pytest
from sqlalchemy import text

from orders.domain import Order, OrderDraft, StorageFault
from orders.repo import OrderRepo, decode_items, encode_items, make_engine


def make_draft(**overrides):
    fields = dict(
        delivery_address="1 Main St",
        items=["A", "B"],
        total=12.5,
        status="PENDING",
        discount_code="SAVE5",
        comment="leave at the door",
    )
    fields.update(overrides)
    return OrderDraft(**fields)


@pytest.mark.parametrize(
    "items",
    [[], [""], ["A", "B"], ["café", "日本", "emoji 🍕"], ['quo"te', "back\\slash", "new\nline"], ["\ud800"]],
)
def test_items_encoding_is_lossless(items):
    assert decode_items(encode_items(items)) == items


def test_create_returns_stored_order_with_fresh_uuid(store):
    order = store.create(make_draft())
    uuid.UUID(order.id)
    assert order == Order(
        id=order.id,
        delivery_address="1 Main St",
        items=["A", "B"],
        total=12.5,
        status="PENDING",
        discount_code="SAVE5",
        comment="leave at the door",
    )


def test_get_by_id_matches_created_order(store):
    created = store.create(make_draft(items=[], discount_code=None, comment=None))
    assert store.get_by_id(created.id) == created


def test_items_are_stored_as_json_text(store, engine):
    created = store.create(make_draft(items=["x", "y"]))
    with engine.connect() as conn:
        raw = conn.execute(text("select items from orders where id = :id"), {"id": created.id}).scalar_one()
    assert raw == '["x", "y"]'


def test_get_by_id_missing_returns_none(store):
    assert store.get_by_id(str(uuid.uuid4())) is None


def test_create_generates_distinct_ids(store):
    ids = {store.create(make_draft()).id for _ in range(5)}
    assert len(ids) == 5
    assert store.count() == 5


def test_update_status_changes_only_status(store):
    created = store.create(make_draft())
    updated = store.update_status(created.id, "PAID")
    assert updated.status == "PAID"
    assert updated == replace(created, status="PAID")
    assert store.get_by_id(created.id) == updated


def test_update_status_missing_returns_none(store):
    assert store.update_status(str(uuid.uuid4()), "PAID") is None


def test_store_passes_unknown_status_through(store):
    """The store does not validate statuses; what is written is read back."""
    created = store.create(make_draft())
    store.update_status(created.id, "LOST_IN_TRANSIT")
    assert [o.id for o in store.list_by_status("LOST_IN_TRANSIT")] == [created.id]
    assert store.get_by_id(created.id).status == "LOST_IN_TRANSIT"


def test_list_by_status_returns_exact_matches(store):
    pending = {store.create(make_draft(status="PENDING")).id for _ in range(2)}
    paid = {store.create(make_draft(status="PAID")).id}
    assert {o.id for o in store.list_by_status("PENDING")} == pending
    assert {o.id for o in store.list_by_status("PAID")} == paid
    assert store.list_by_status("DELIVERED") == []
    assert store.list_by_status("pending") == []


def test_list_all_decodes_items(store):
    store.create(make_draft(items=["one"]))
    store.create(make_draft(items=["two", "three"]))
    orders = store.list_all()
    assert sorted(o.items for o in orders) == [["one"], ["two", "three"]]
    assert [o.id for o in orders] == sorted(o.id for o in orders)


def test_delete_returns_true_once(store):
    created = store.create(make_draft())
    assert store.delete_by_id(created.id) is True
    assert store.delete_by_id(created.id) is False
    assert store.get_by_id(created.id) is None


def test_ensure_schema_is_idempotent(store):
    created = store.create(make_draft())
    store.ensure_schema()
    assert store.get_by_id(created.id) == created


def test_duplicate_id_raises_storage_fault(store, monkeypatch):
    fixed = uuid.uuid4()
    monkeypatch.setattr("orders.repo.uuid.uuid4", lambda: fixed)
    store.create(make_draft())
    with pytest.raises(StorageFault):
        store.create(make_draft(comment="second"))
    assert store.count() == 1


def test_database_errors_become_storage_fault(store, engine):
    with engine.begin() as conn:
        conn.execute(text("drop table orders"))
    with pytest.raises(StorageFault):
        store.list_all()
    with pytest.raises(StorageFault):
        store.create(make_draft())


def test_ping_succeeds_on_live_database(store):
    store.ping()


def test_separate_stores_share_committed_rows(engine, store):
    created = store.create(make_draft())
    other = OrderRepo(engine)
    assert other.get_by_id(created.id) == created


def insert_raw_row(engine, order_id, items):
    with engine.begin() as conn:
        conn.execute(
            text(
                "insert into orders (id, deliveryAddress, items, total, status) "
                "values (:id, 'somewhere', :items, 1.0, 'PENDING')"
            ),
            {"id": order_id, "items": items},
        )


@pytest.mark.parametrize("raw", ["not json", '{"a": 1}', "[1, 2]", '"A"'])
def test_corrupt_items_raise_storage_fault(store, engine, raw):
    insert_raw_row(engine, "x", raw)
    with pytest.raises(StorageFault):
        store.get_by_id("x")
    with pytest.raises(StorageFault):
        store.list_all()
    with pytest.raises(StorageFault):
        store.list_by_status("PENDING")


@pytest.mark.parametrize("raw", [None, "not json", '{"a": 1}', "[null]"])
def test_decode_items_rejects_non_string_lists(raw):
    with pytest.raises(StorageFault):
        decode_items(raw)


def test_concurrent_creates_and_deletes_on_file_database(tmp_path):
    """Writers on different ids interleave; readers only see complete rows."""
    engine = make_engine(f"sqlite:///{tmp_path / 'orders.db'}")
    repo = OrderRepo(engine)
    repo.ensure_schema()
    stop = threading.Event()
    seen_partial = []

    def writer(n):
        kept = []
        for i in range(10):
            order = repo.create(make_draft(items=[f"w{n}", f"i{i}", "z"], comment=f"{n}-{i}"))
            if i % 2:
                assert repo.delete_by_id(order.id) is True
            else:
                kept.append(order.id)
        return kept

    def reader():
        while not stop.is_set():
            for order in repo.list_all():
                if len(order.items) != 3 or order.delivery_address != "1 Main St" or order.total != 12.5:
                    seen_partial.append(order)

    try:
        reader_thread = threading.Thread(target=reader)
        reader_thread.start()
        with ThreadPoolExecutor(max_workers=4) as pool:
            kept = [oid for ids in pool.map(writer, range(4)) for oid in ids]
        stop.set()
        reader_thread.join()

        assert seen_partial == []
        assert len(set(kept)) == 20
        assert {o.id for o in repo.list_all()} == set(kept)
    finally:
        stop.set()
        engine.dispose()

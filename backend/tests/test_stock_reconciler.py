import threading
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import (
    ConcurrentCheckout, ReconciliationFailure, RoomNotFound, StockUnderflow, ValidationFailed
)
from app.models import Product, Receipt, Room
from app.services.catalog import load_catalog
from app.services.checkout import checkout_room
from app.services.receipt_builder import build_receipt
from app.services.room_locks import room_lock
from app.services.stock_reconciler import reconcile, write_room_stock

from conftest import room_stock


def _receipt_count(session):
    return session.query(Receipt).count()


def test_checkout_decrements_stock_and_appends_receipt(db, product_ids):
    water, wine = product_ids["Water"], product_ids["Wine"]

    result = checkout_room(db, "101", {water: 2, wine: 1}, operator="frontdesk")

    assert result.persisted
    receipt = result.receipt
    assert receipt.room_number == "101"
    assert receipt.building == 1
    assert receipt.operator == "frontdesk"
    assert receipt.id.startswith("R") and "-101-" in receipt.id
    assert receipt.total_bill == Decimal("13.00")
    assert [(i.product_name, i.quantity) for i in receipt.consumed_items] == [("Water", 2), ("Wine", 1)]
    assert [(i.product_name, i.quantity) for i in receipt.replenishment_items] == [("Water", 2), ("Wine", 1)]

    stock = room_stock("101")
    assert stock[water] == 2
    assert stock[wine] == 1
    assert room_stock("102")[water] == 4


def test_second_checkout_sees_first_checkout_stock(db, product_ids):
    water = product_ids["Water"]

    checkout_room(db, "101", {water: 3})
    second = checkout_room(db, "101", {})

    assert second.draft.consumed_items == ()
    assert [(l.product_id, l.quantity) for l in second.draft.replenishment_items] == [(water, 3)]
    with pytest.raises(StockUnderflow):
        checkout_room(db, "101", {water: 2})


def test_over_consumption_leaves_state_untouched(db, product_ids):
    water = product_ids["Water"]
    before = room_stock("101")

    with pytest.raises(StockUnderflow) as exc_info:
        checkout_room(db, "101", {water: 5})

    assert exc_info.value.room_number == "101"
    assert room_stock("101") == before
    assert _receipt_count(db) == 0


def test_unknown_room(db, seeded):
    with pytest.raises(RoomNotFound):
        checkout_room(db, "999", {})


def test_failed_commit_writes_nothing(db, product_ids, monkeypatch):
    water = product_ids["Water"]

    def failing_commit():
        db.flush()
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db, "commit", failing_commit)
    with pytest.raises(ReconciliationFailure) as exc_info:
        checkout_room(db, "101", {water: 2})
    monkeypatch.undo()

    assert not isinstance(exc_info.value, ConcurrentCheckout)
    assert room_stock("101")[water] == 4
    db.expire_all()
    assert _receipt_count(db) == 0


def test_write_room_stock_rejects_negative_quantity(db, product_ids):
    room = db.query(Room).filter(Room.number == "101").one()

    with pytest.raises(ValidationFailed):
        write_room_stock(db, room, {product_ids["Water"]: -1})


def test_stale_room_version_is_rejected(file_session_factory):
    first = file_session_factory()
    second = file_session_factory()
    try:
        water = first.query(Product).filter(Product.name == "Water").one().id
        room_a = first.query(Room).filter(Room.number == "101").one()
        room_b = second.query(Room).filter(Room.number == "101").one()
        stale_stock = room_b.stock_map()

        catalog = load_catalog(first)
        reconcile(first, room_a, build_receipt(room_a.stock_map(), catalog, {water: 1}))

        with pytest.raises(ConcurrentCheckout):
            reconcile(second, room_b, build_receipt(stale_stock, catalog, {water: 1}))
    finally:
        first.close()
        second.close()

    check = file_session_factory()
    try:
        room = check.query(Room).filter(Room.number == "101").one()
        assert room.stock_map()[water] == 3
        assert _receipt_count(check) == 1
    finally:
        check.close()


def test_concurrent_checkouts_on_one_room_never_oversell(file_session_factory):
    session = file_session_factory()
    water = session.query(Product).filter(Product.name == "Water").one().id
    session.close()

    results = []

    def worker():
        worker_session = file_session_factory()
        try:
            checkout_room(worker_session, "101", {water: 1})
            results.append("ok")
        except StockUnderflow:
            results.append("underflow")
        finally:
            worker_session.close()

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert results.count("ok") == 4
    assert results.count("underflow") == 4

    check = file_session_factory()
    try:
        room = check.query(Room).filter(Room.number == "101").one()
        assert room.stock_map()[water] == 0
        assert _receipt_count(check) == 4
    finally:
        check.close()


def test_checkouts_on_different_rooms_are_independent(file_session_factory):
    session = file_session_factory()
    water = session.query(Product).filter(Product.name == "Water").one().id
    session.close()

    errors = []

    def worker(room_number):
        worker_session = file_session_factory()
        try:
            checkout_room(worker_session, room_number, {water: 2})
        except Exception as exc:  # noqa: BLE001
            errors.append(exc)
        finally:
            worker_session.close()

    threads = [threading.Thread(target=worker, args=(n,)) for n in ("101", "102", "201", "202")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert errors == []
    check = file_session_factory()
    try:
        for room in check.query(Room).filter(Room.number.in_(["101", "102", "201", "202"])):
            assert room.stock_map()[water] == 2
    finally:
        check.close()


def test_room_lock_times_out_while_held():
    held = threading.Event()
    release = threading.Event()

    def holder():
        with room_lock(1, "101"):
            held.set()
            release.wait(5)

    thread = threading.Thread(target=holder)
    thread.start()
    held.wait(5)
    try:
        with pytest.raises(ConcurrentCheckout):
            with room_lock(1, "101", timeout=0.05):
                pass
        # 其他房间不受影响
        with room_lock(2, "102", timeout=0.05):
            pass
    finally:
        release.set()
        thread.join()

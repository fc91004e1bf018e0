from decimal import Decimal

import pytest

from app.core.exceptions import ProductNotFound, StockUnderflow, ValidationFailed
from app.services.catalog import Catalog, CatalogItem
from app.services.consumption_ledger import ConsumptionLedger

WATER = 1
WINE = 2


def test_increment_up_to_available_stock():
    ledger = ConsumptionLedger({WATER: 2}, room_number="101")

    assert ledger.increment(WATER) == 1
    assert ledger.increment(WATER) == 2
    with pytest.raises(StockUnderflow) as exc_info:
        ledger.increment(WATER)

    assert exc_info.value.room_number == "101"
    assert ledger.consumed(WATER) == 2
    assert ledger.remaining(WATER) == 0


def test_increment_product_without_stock():
    ledger = ConsumptionLedger({WATER: 2})

    with pytest.raises(StockUnderflow):
        ledger.increment(WINE)
    assert ledger.as_dict() == {}


def test_decrement_at_zero_is_rejected():
    ledger = ConsumptionLedger({WATER: 2})
    ledger.increment(WATER)

    assert ledger.decrement(WATER) == 0
    with pytest.raises(ValidationFailed):
        ledger.decrement(WATER)
    assert ledger.consumed(WATER) == 0


def test_set_validates_bounds():
    ledger = ConsumptionLedger({WATER: 3})

    ledger.set(WATER, 3)
    assert ledger.total_units() == 3
    with pytest.raises(StockUnderflow):
        ledger.set(WATER, 4)
    with pytest.raises(ValidationFailed):
        ledger.set(WATER, -1)
    assert ledger.consumed(WATER) == 3


def test_as_dict_drops_zero_entries():
    ledger = ConsumptionLedger({WATER: 3, WINE: 1})
    ledger.set(WATER, 0)
    ledger.set(WINE, 1)

    assert ledger.as_dict() == {WINE: 1}


def test_from_mapping_rejects_unknown_product():
    catalog = Catalog([CatalogItem(id=WATER, name="Water", price=Decimal("2.50"), standard_stock=4)])

    with pytest.raises(ProductNotFound) as exc_info:
        ConsumptionLedger.from_mapping({WATER: 4}, {99: 1}, catalog=catalog)
    assert exc_info.value.product_id == 99


def test_from_mapping_rejects_over_consumption():
    with pytest.raises(StockUnderflow):
        ConsumptionLedger.from_mapping({WATER: 1}, {WATER: 2}, room_number="101")

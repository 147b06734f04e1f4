from decimal import Decimal

import pytest

from app.data.seed import FARM_ITEMS, seed
from app.domain.errors import InsufficientStockError, NotFoundError
from app.domain.schemas import StockLevel
from app.services.item_service import stock_level


def test_create_and_get_item(item_service):
    item = item_service.create_item(name="Goat cheese", price=Decimal("9.75"), size=250, quantity=8)

    fetched = item_service.get_item(item.id)

    assert fetched.name == "Goat cheese"
    assert fetched.quantity == 8
    assert fetched.version == 1


def test_create_item_rejects_negative_quantity(item_service):
    with pytest.raises(ValueError):
        item_service.create_item(name="Eggs", price=Decimal("1"), quantity=-1)


def test_get_missing_item(item_service):
    with pytest.raises(NotFoundError):
        item_service.get_item("nope")


def test_delete_item(item_service, make_item):
    item = make_item()

    item_service.delete_item(item.id)

    with pytest.raises(NotFoundError):
        item_service.get_item(item.id)


def test_adjust_stock_delivery_and_correction(item_service, make_item):
    item = make_item(quantity=5)

    assert item_service.adjust_stock(item.id, 10).quantity == 15
    assert item_service.adjust_stock(item.id, -4).quantity == 11
    assert item_service.adjust_stock(item.id, 0).quantity == 11


def test_adjust_stock_bumps_version(item_service, make_item, db):
    item = make_item(quantity=5)

    item_service.adjust_stock(item.id, 1)

    db.expire_all()
    assert item_service.get_item(item.id).version == 2


def test_adjust_stock_cannot_go_negative(item_service, make_item, stock_of):
    item = make_item(quantity=2)

    with pytest.raises(InsufficientStockError):
        item_service.adjust_stock(item.id, -3)

    assert stock_of(item.id) == 2


def test_adjust_stock_of_missing_item(item_service):
    with pytest.raises(NotFoundError):
        item_service.adjust_stock("nope", 5)


@pytest.mark.parametrize(
    "quantity, level",
    [(0, StockLevel.CRITICAL), (3, StockLevel.CRITICAL), (4, StockLevel.LOW), (7, StockLevel.LOW), (8, StockLevel.WARNING)],
)
def test_stock_level(quantity, level):
    assert stock_level(quantity) == level


def test_list_low_stock_sorted_by_quantity(item_service, make_item):
    make_item(name="Eggs", quantity=40)
    make_item(name="Tomatoes", quantity=3)
    make_item(name="Cheese", quantity=8)

    low = item_service.list_low_stock(threshold=10)

    assert [(i.name, i.stock_level) for i in low] == [
        ("Tomatoes", StockLevel.CRITICAL),
        ("Cheese", StockLevel.WARNING),
    ]


def test_seed_only_fills_empty_catalog(db, item_service):
    assert seed(db) == len(FARM_ITEMS)
    assert seed(db) == 0
    assert len(item_service.list_items()) == len(FARM_ITEMS)

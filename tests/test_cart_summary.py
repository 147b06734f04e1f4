from decimal import Decimal
from types import SimpleNamespace

from app.services.cart_summary import summarize


def _line(price, quantity):
    return SimpleNamespace(product_price=Decimal(price), quantity=quantity)


def test_summary_uses_locked_line_prices():
    cart = SimpleNamespace(items=[_line("10.00", 2), _line("5.50", 1)])

    summary = summarize(cart)

    assert summary.total_items == 3
    assert summary.total_price == Decimal("25.50")
    assert summary.line_count == 2


def test_summary_of_missing_cart_is_zero():
    summary = summarize(None)

    assert summary.total_items == 0
    assert summary.total_price == Decimal("0.00")
    assert summary.line_count == 0


def test_summary_of_empty_cart_is_zero():
    assert summarize(SimpleNamespace(items=[])).total_price == Decimal("0")


def test_view_summary_matches_cart(cart_service, make_item):
    eggs = make_item(name="Eggs", price="6.50", quantity=10)
    honey = make_item(name="Honey", price="12.00", quantity=10)
    cart_service.add_reservation("u1", eggs.id, 2)
    cart_service.add_reservation("u1", honey.id, 1)

    view = cart_service.get_cart("u1")

    assert view.summary.total_items == 3
    assert view.summary.total_price == Decimal("25.00")
    assert view.summary.line_count == 2

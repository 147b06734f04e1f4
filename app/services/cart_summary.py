# app/services/cart_summary.py
from decimal import Decimal

from app.domain.schemas import CartSummary


def summarize(cart) -> CartSummary:
    """
    Podsumowanie koszyka (CartModel albo CartOut - cokolwiek z .items).
    Ceny brane z pozycji (zablokowane przy dodaniu), bez pytania katalogu.
    """
    if cart is None or not cart.items:
        return CartSummary()

    return CartSummary(
        total_items=sum(i.quantity for i in cart.items),
        total_price=sum((i.product_price * i.quantity for i in cart.items), Decimal("0.00")),
        line_count=len(cart.items),
    )

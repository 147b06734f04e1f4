#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from app.data.models.item import ItemModel
from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel

__all__ = ["ItemModel", "CartModel", "CartItemModel", "OrderModel", "OrderItemModel"]

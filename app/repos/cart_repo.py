# app/repos/cart_repo.py
from datetime import datetime

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel


class CartRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_cart(self, user_id: str) -> CartModel | None:
        return self.db.get(CartModel, user_id)

    def create_cart(self, cart: CartModel) -> CartModel:
        #flush od razu - duplikat koszyka wyjdzie jako IntegrityError w tej samej probie
        self.db.add(cart)
        self.db.flush()
        return cart

    def list_user_ids_with_expired_items(self, now: datetime) -> list[str]:
        return list(
            self.db.execute(
                select(CartItemModel.user_id)
                .where(CartItemModel.expires_at <= now)
                .distinct()
                .order_by(CartItemModel.user_id)
            ).scalars()
        )

    def count_carts(self) -> int:
        return self.db.execute(select(func.count()).select_from(CartModel)).scalar_one()

    def update_cart_version(self, user_id: str, old_version: int, new_data: dict) -> int:
        # np w bazie update set version 2 where user_id = 'u1' and version 1
        result = self.db.execute(
            update(CartModel)
            .where(CartModel.user_id == user_id, CartModel.version == old_version)
            .values(**new_data)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

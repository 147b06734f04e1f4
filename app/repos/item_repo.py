# app/repos/item_repo.py
from datetime import datetime

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.data.models.item import ItemModel


class ItemRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_item(self, item_id: str) -> ItemModel | None:
        return self.db.get(ItemModel, item_id)

    def list_items(self) -> list[ItemModel]:
        return list(
            self.db.execute(select(ItemModel).order_by(ItemModel.created_at, ItemModel.id)).scalars()
        )

    def list_items_at_or_below(self, threshold: int) -> list[ItemModel]:
        return list(
            self.db.execute(
                select(ItemModel)
                .where(ItemModel.quantity <= threshold)
                .order_by(ItemModel.quantity, ItemModel.name)
            ).scalars()
        )

    def create_item(self, item: ItemModel) -> ItemModel:
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_item(self, item: ItemModel) -> None:
        self.db.delete(item)
        self.db.commit()

    def update_item_stock(self, item_id: str, old_version: int, quantity: int, now: datetime) -> int:
        # optimistic locking: update items set quantity = X, version = v+1 where id = ? and version = v
        result = self.db.execute(
            update(ItemModel)
            .where(ItemModel.id == item_id, ItemModel.version == old_version)
            .values(quantity=quantity, version=old_version + 1, updated_at=now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

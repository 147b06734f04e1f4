# app/services/item_service.py
from decimal import Decimal
from typing import List

from sqlalchemy.orm import Session

from app.data.models.item import ItemModel
from app.data.transaction import run_transaction
from app.domain.errors import NotFoundError
from app.domain.schemas import LowStockItemOut, StockLevel
from app.repos.item_repo import ItemRepo
from app.services.stock_service import StockService
from app.utils.clock import Clock, utc_now
from app.utils.logging import get_logger
from app.utils.retry import DEFAULT_RETRY_POLICY, RetryPolicy
from app.utils.settings import LOW_STOCK_THRESHOLD

logger = get_logger(__name__)


def stock_level(quantity: int) -> StockLevel:
    if quantity <= 3:
        return StockLevel.CRITICAL
    if quantity <= 7:
        return StockLevel.LOW
    return StockLevel.WARNING


class ItemService:
    """Katalog / magazyn od strony admina."""

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    ):
        self.db = db
        self.repo = ItemRepo(db)
        self.stock = StockService(db, clock)
        self.clock = clock
        self.retry_policy = retry_policy

    def create_item(
        self,
        name: str,
        price: Decimal,
        size: int = 0,
        quantity: int = 0,
        description: str | None = None,
        image: str | None = None,
    ) -> ItemModel:
        if quantity < 0:
            raise ValueError("Quantity cannot be negative")

        now = self.clock()
        item = self.repo.create_item(
            ItemModel(
                name=name,
                price=price,
                size=size,
                quantity=quantity,
                description=description,
                image=image,
                version=1,
                created_at=now,
                updated_at=now,
            )
        )
        logger.info(f"Item {item.id} ({name}) created with quantity {quantity}")
        return item

    def get_item(self, item_id: str) -> ItemModel:
        item = self.repo.get_item(item_id)
        if not item:
            raise NotFoundError(f"Product {item_id} not found")
        return item

    def list_items(self) -> List[ItemModel]:
        return self.repo.list_items()

    def delete_item(self, item_id: str) -> None:
        # rezerwacje na ten produkt zostaja w koszykach, ich zwrot bedzie PartialRestoreFailure
        item = self.get_item(item_id)
        self.repo.delete_item(item)
        logger.info(f"Item {item_id} deleted")

    def adjust_stock(self, item_id: str, delta: int) -> ItemModel:
        """Dostawa (+) albo korekta (-) stanu, przez CAS jak kazdy inny zapis."""
        if delta == 0:
            return self.get_item(item_id)

        run_transaction(self.db, self._adjust_stock, item_id, delta, policy=self.retry_policy)
        return self.get_item(item_id)

    def _adjust_stock(self, item_id: str, delta: int) -> None:
        if delta < 0:
            self.stock.take(item_id, -delta)
            return

        if not self.repo.get_item(item_id):
            raise NotFoundError(f"Product {item_id} not found")
        self.stock.restore(item_id, delta, source="adjust")

    def list_low_stock(self, threshold: int = LOW_STOCK_THRESHOLD) -> List[LowStockItemOut]:
        return [
            LowStockItemOut(
                id=item.id,
                name=item.name,
                quantity=item.quantity,
                stock_level=stock_level(item.quantity),
            )
            for item in self.repo.list_items_at_or_below(threshold)
        ]

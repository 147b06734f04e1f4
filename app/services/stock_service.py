# app/services/stock_service.py
from typing import Dict

from sqlalchemy.orm import Session

from app.data.models.item import ItemModel
from app.domain.errors import (
    ConflictError,
    InsufficientStockError,
    NotFoundError,
    PartialRestoreFailure,
)
from app.repos.item_repo import ItemRepo
from app.utils.clock import Clock, utc_now
from app.utils.logging import get_logger

logger = get_logger(__name__)


class StockService:
    """
    Operacje na Item.quantity wykonywane wewnatrz transakcji wolajacego.
    Kazdy zapis to CAS na wersji produktu, nigdy bezwarunkowy set.
    Commit/rollback robi run_transaction.
    """

    def __init__(self, db: Session, clock: Clock = utc_now):
        self.repo = ItemRepo(db)
        self.clock = clock

    def _write(self, item: ItemModel, quantity: int) -> None:
        rowcount = self.repo.update_item_stock(
            item_id=item.id,
            old_version=item.version,
            quantity=quantity,
            now=self.clock(),
        )
        if rowcount == 0:
            raise ConflictError()

    def take(self, product_id: str, quantity: int) -> ItemModel:
        """Zdejmuje quantity ze stanu albo rzuca - bez czesciowej rezerwacji."""
        item = self.repo.get_item(product_id)
        if not item:
            raise NotFoundError(f"Product {product_id} not found")

        if item.quantity < quantity:
            raise InsufficientStockError(item.quantity)

        self._write(item, item.quantity - quantity)
        return item

    def draw_down(self, product_id: str, quantity: int, source: str) -> bool:
        """Trwale zdjecie stanu przy realizacji zamowienia, z podloga na zerze."""
        item = self.repo.get_item(product_id)
        if not item:
            self._report(PartialRestoreFailure(product_id, quantity, source))
            return False

        self._write(item, max(0, item.quantity - quantity))
        return True

    def restore(self, product_id: str, quantity: int, source: str) -> bool:
        item = self.repo.get_item(product_id)
        if not item:
            self._report(PartialRestoreFailure(product_id, quantity, source))
            return False

        self._write(item, item.quantity + quantity)
        return True

    def restore_many(self, quantities: Dict[str, int], source: str) -> int:
        """Zwraca ile zwrotow sie nie udalo (brak produktu)."""
        failed = 0
        for product_id, quantity in quantities.items():
            if not self.restore(product_id, quantity, source):
                failed += 1
        return failed

    @staticmethod
    def _report(failure: PartialRestoreFailure) -> None:
        #dryf magazynu - nie blokujemy operacji na koszyku/zamowieniu
        logger.warning(
            str(failure),
            extra={
                "event": "inventory.partial_restore_failure",
                "product_id": failure.product_id,
                "quantity": failure.quantity,
                "source": failure.source,
            },
        )

# app/services/order_service.py
from collections import defaultdict
from decimal import Decimal
from typing import Dict, List

from sqlalchemy.orm import Session

from app.data.models.order import OrderModel
from app.data.models.order_item import OrderItemModel
from app.data.transaction import run_transaction
from app.domain.errors import ConflictError, InvalidStatusError, NotFoundError
from app.domain.schemas import OrderLineIn, OrderStatus
from app.repos.item_repo import ItemRepo
from app.repos.order_repo import OrderRepo
from app.services.stock_service import StockService
from app.utils.clock import Clock, utc_now
from app.utils.logging import get_logger
from app.utils.retry import DEFAULT_RETRY_POLICY, RetryPolicy

logger = get_logger(__name__)


class OrderService:
    """
    Serwis odpowiedzialny za domenę zamówień.
    Zmiana statusu na fulfilled/cancelled rusza magazyn - w jednej transakcji
    razem ze statusem, dla wszystkich pozycji naraz.
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    ):
        self.db = db
        self.repo = OrderRepo(db)
        self.items = ItemRepo(db)
        self.stock = StockService(db, clock)
        self.clock = clock
        self.retry_policy = retry_policy

    def create_order(
        self,
        customer_name: str,
        customer_email: str,
        lines: List[OrderLineIn],
        customer_phone: str = "",
        customer_address: str = "",
        description: str = "",
    ) -> OrderModel:
        """
        Use Case: Tworzenie zamówienia przez admina.
        Status pending, bez wplywu na magazyn (stan schodzi dopiero przy fulfilled).
        """
        if not lines:
            raise ValueError("Order must contain at least one item")

        now = self.clock()
        order_items = []
        for line in lines:
            item = self.items.get_item(line.item_id)
            if not item:
                raise NotFoundError(f"Product {line.item_id} not found")

            order_items.append(
                OrderItemModel(
                    item_id=item.id,
                    item_name=item.name,
                    quantity=line.quantity,
                    price=item.price,
                    size=item.size,
                    subtotal=item.price * line.quantity,
                )
            )

        order = OrderModel(
            customer_name=customer_name,
            customer_email=customer_email,
            customer_phone=customer_phone,
            customer_address=customer_address,
            description=description,
            status=OrderStatus.PENDING.value,
            total_amount=sum((i.subtotal for i in order_items), Decimal("0.00")),
            items=order_items,
            order_date=now,
            created_at=now,
            updated_at=now,
        )

        created = self.repo.create_order(order)
        logger.info(f"Order {created.id} created with {len(order_items)} lines")
        return created

    def get_order(self, order_id: str) -> OrderModel:
        """
        Use Case: Pobranie zamówienia (Query).
        """
        order = self.repo.get_order(order_id)
        if not order:
            raise NotFoundError(f"Order {order_id} not found")
        return order

    def update_status(self, order_id: str, status: OrderStatus | str) -> OrderModel:
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise InvalidStatusError(f"Unknown order status: {status}")

        run_transaction(
            self.db, self._update_status, order_id, new_status, policy=self.retry_policy
        )
        return self.get_order(order_id)

    def _update_status(self, order_id: str, new_status: OrderStatus) -> None:
        order = self.get_order(order_id)
        previous = OrderStatus(order.status)

        if previous == new_status:
            return

        if new_status == OrderStatus.FULFILLED:
            for item_id, quantity in self._ordered_quantities(order).items():
                self.stock.draw_down(item_id, quantity, source=f"fulfil:{order_id}")
        elif new_status == OrderStatus.CANCELLED:
            self.stock.restore_many(self._ordered_quantities(order), source=f"cancel:{order_id}")

        rowcount = self.repo.update_order_version(
            order_id=order_id,
            old_version=order.version,
            new_data={
                "status": new_status.value,
                "version": order.version + 1,
                "updated_at": self.clock(),
            },
        )
        if rowcount == 0:
            raise ConflictError()

        logger.info(
            f"Order {order_id} status {previous.value} -> {new_status.value}",
            extra={
                "event": "order.status_changed",
                "order_id": order_id,
                "from": previous.value,
                "to": new_status.value,
            },
        )

    @staticmethod
    def _ordered_quantities(order: OrderModel) -> Dict[str, int]:
        #kilka pozycji tego samego produktu = jeden zapis
        totals: Dict[str, int] = defaultdict(int)
        for line in order.items:
            totals[line.item_id] += line.quantity
        return dict(totals)

# app/services/expiry_service.py
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Tuple

from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.transaction import run_transaction
from app.domain.errors import ConflictError, NotFoundError, StoreUnavailableError
from app.domain.schemas import SweepReport
from app.repos.cart_repo import CartRepo
from app.services.stock_service import StockService
from app.utils.clock import Clock, utc_now
from app.utils.logging import get_logger
from app.utils.retry import DEFAULT_RETRY_POLICY, RetryPolicy

logger = get_logger(__name__)


def partition(
    items: Iterable[CartItemModel], now: datetime
) -> Tuple[List[CartItemModel], List[CartItemModel]]:
    """Dzieli pozycje na (aktywne, wygasle). Wygasla = now >= expires_at."""
    active, expired = [], []
    for item in items:
        (expired if item.expires_at <= now else active).append(item)
    return active, expired


class ExpiryService:
    """
    Zwalnianie rezerwacji po TTL.
    Wolane z taska celery (wszystkie koszyki) i przy kazdym odczycie koszyka.
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    ):
        self.db = db
        self.repo = CartRepo(db)
        self.stock = StockService(db, clock)
        self.clock = clock
        self.retry_policy = retry_policy

    def sweep_cart(self, cart: CartModel) -> CartModel:
        # pusty zbior wygaslych - zadnej transakcji
        _, expired = partition(cart.items, self.clock())
        if not expired:
            return cart

        run_transaction(self.db, self._release_expired, cart.user_id, policy=self.retry_policy)
        return self.repo.get_cart(cart.user_id)

    def sweep_all(self) -> SweepReport:
        now = self.clock()
        report = SweepReport(carts_scanned=self.repo.count_carts())

        user_ids = self.repo.list_user_ids_with_expired_items(now)
        logger.info(f"Found {len(user_ids)} carts with expired reservations")

        for user_id in user_ids:
            try:
                released = run_transaction(
                    self.db, self._release_expired, user_id, policy=self.retry_policy
                )
            except (ConflictError, StoreUnavailableError) as e:
                #zostawiamy na nastepny przebieg
                report.failures += 1
                logger.warning(
                    f"Sweep of cart {user_id} abandoned for this pass: {e}",
                    extra={"event": "cart.sweep_failed", "user_id": user_id},
                )
                continue

            if released:
                report.carts_swept += 1
                report.lines_released += released

        logger.info(
            f"Sweep finished: {report.lines_released} expired lines released "
            f"from {report.carts_swept} carts ({report.failures} failed)"
        )
        return report

    def _release_expired(self, user_id: str) -> int:
        now = self.clock()
        cart = self.repo.get_cart(user_id)
        if not cart:
            raise NotFoundError(f"Cart for user {user_id} not found")

        # liczymy od nowa na swiezym odczycie - rownolegly sweep mogl juz zwolnic
        _, expired = partition(cart.items, now)
        if not expired:
            return 0

        released: Dict[str, int] = defaultdict(int)
        for line in expired:
            released[line.product_id] += line.quantity
            cart.items.remove(line)

        self.stock.restore_many(released, source=f"expiry:{user_id}")

        rowcount = self.repo.update_cart_version(
            user_id=user_id,
            old_version=cart.version,
            new_data={"version": cart.version + 1, "updated_at": now},
        )
        if rowcount == 0:
            raise ConflictError()

        logger.info(
            f"Released {len(expired)} expired lines from cart {user_id}",
            extra={"event": "cart.expired_released", "user_id": user_id, "lines": len(expired)},
        )
        return len(expired)

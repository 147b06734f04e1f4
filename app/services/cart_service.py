import uuid
from datetime import timedelta

from sqlalchemy.orm import Session

from app.data.models.cart import CartModel
from app.data.models.cart_item import CartItemModel
from app.data.transaction import run_transaction
from app.domain.errors import ConflictError, NotFoundError, StoreUnavailableError
from app.domain.schemas import CartItemOut, CartOut, ProductSnapshot
from app.repos.cart_repo import CartRepo
from app.services.cart_summary import summarize
from app.services.expiry_service import ExpiryService, partition
from app.services.stock_service import StockService
from app.utils.clock import Clock, utc_now
from app.utils.logging import get_logger
from app.utils.retry import DEFAULT_RETRY_POLICY, RetryPolicy
from app.utils.settings import RESERVATION_TTL_SECONDS

logger = get_logger(__name__)


def new_cart_item_id() -> str:
    return uuid.uuid4().hex


class CartService:
    """
    Rezerwacje w koszyku.
    Kazda komenda (add, update, remove, clear) to jedna transakcja ktora rusza
    naraz Item.quantity i pozycje koszyka - nigdy jedno bez drugiego.
    Query (get) przy okazji zwalnia wygasle rezerwacje.
    """

    def __init__(
        self,
        db: Session,
        clock: Clock = utc_now,
        ttl: timedelta = timedelta(seconds=RESERVATION_TTL_SECONDS),
        retry_policy: RetryPolicy = DEFAULT_RETRY_POLICY,
    ):
        self.db = db
        self.repo = CartRepo(db)
        self.stock = StockService(db, clock)
        self.expiry = ExpiryService(db, clock=clock, retry_policy=retry_policy)
        self.clock = clock
        self.ttl = ttl
        self.retry_policy = retry_policy

    #query - odczyt
    def get_cart(self, user_id: str) -> CartOut | None:
        cart = self.repo.get_cart(user_id)
        if not cart:
            return None

        try:
            cart = self.expiry.sweep_cart(cart)
            lines = list(cart.items)
        except (ConflictError, StoreUnavailableError) as e:
            # zwolnienie poleci przy nastepnym sweepie, user i tak nie widzi wygaslych
            logger.warning(f"On-read sweep of cart {user_id} failed: {e}")
            cart = self.repo.get_cart(user_id)
            lines, _ = partition(cart.items, self.clock())

        view = CartOut(
            user_id=cart.user_id,
            items=[CartItemOut.model_validate(i) for i in lines],
            summary=summarize(None),
            created_at=cart.created_at,
            updated_at=cart.updated_at,
        )
        view.summary = summarize(view)
        return view

    #commands
    def add_reservation(
        self,
        user_id: str,
        product_id: str,
        quantity: int,
        snapshot: ProductSnapshot | None = None,
    ) -> CartItemModel:
        if quantity < 1:
            raise ValueError("Quantity must be at least 1")

        return run_transaction(
            self.db,
            self._add_reservation,
            user_id,
            product_id,
            quantity,
            snapshot,
            policy=self.retry_policy,
        )

    def _add_reservation(
        self,
        user_id: str,
        product_id: str,
        quantity: int,
        snapshot: ProductSnapshot | None,
    ) -> CartItemModel:
        now = self.clock()
        expires = now + self.ttl

        # NotFound / InsufficientStock przerywaja cala transakcje
        item = self.stock.take(product_id, quantity)

        cart = self.repo.get_cart(user_id)
        if not cart:
            logger.info(f"Creating cart for user {user_id}")
            cart = self.repo.create_cart(
                CartModel(user_id=user_id, version=1, created_at=now, updated_at=now)
            )
            old_version = None
        else:
            old_version = cart.version

        existing = next((i for i in cart.items if i.product_id == product_id), None)

        if existing:
            logger.info(
                f"Product {product_id} already in cart {user_id}, quantity "
                f"{existing.quantity} -> {existing.quantity + quantity}"
            )
            existing.quantity += quantity
            existing.expires_at = expires
            line = existing
        else:
            if snapshot is None:
                snapshot = ProductSnapshot(
                    name=item.name, price=item.price, size=item.size, image=item.image
                )
            line = CartItemModel(
                id=new_cart_item_id(),
                product_id=product_id,
                product_name=snapshot.name,
                product_price=snapshot.price,
                product_size=snapshot.size,
                product_image=snapshot.image,
                quantity=quantity,
                position=max((i.position for i in cart.items), default=-1) + 1,
                added_at=now,
                expires_at=expires,
            )
            cart.items.append(line)
            logger.info(f"Adding product {product_id} x{quantity} to cart {user_id}")

        if old_version is not None:
            self._bump_version(user_id, old_version)

        logger.info(
            "cart.reserved",
            extra={
                "event": "cart.reserved",
                "user_id": user_id,
                "product_id": product_id,
                "quantity": quantity,
            },
        )
        return line

    def remove_reservation(self, user_id: str, cart_item_id: str) -> None:
        run_transaction(
            self.db, self._remove_reservation, user_id, cart_item_id, policy=self.retry_policy
        )

    def _remove_reservation(self, user_id: str, cart_item_id: str) -> None:
        cart = self._get_cart_or_raise(user_id)
        line = self._get_line_or_raise(cart, cart_item_id)

        cart.items.remove(line)
        self.stock.restore(line.product_id, line.quantity, source=f"remove:{user_id}")
        self._bump_version(user_id, cart.version)

        logger.info(f"Removed line {cart_item_id} ({line.product_id} x{line.quantity}) from cart {user_id}")

    def update_reservation_quantity(self, user_id: str, cart_item_id: str, quantity: int) -> None:
        if quantity <= 0:
            return self.remove_reservation(user_id, cart_item_id)

        run_transaction(
            self.db,
            self._update_reservation_quantity,
            user_id,
            cart_item_id,
            quantity,
            policy=self.retry_policy,
        )

    def _update_reservation_quantity(self, user_id: str, cart_item_id: str, quantity: int) -> None:
        cart = self._get_cart_or_raise(user_id)
        line = self._get_line_or_raise(cart, cart_item_id)

        delta = quantity - line.quantity
        if delta > 0:
            self.stock.take(line.product_id, delta)
        elif delta < 0:
            self.stock.restore(line.product_id, -delta, source=f"update:{user_id}")

        line.quantity = quantity
        line.expires_at = self.clock() + self.ttl
        self._bump_version(user_id, cart.version)

        logger.info(f"Line {cart_item_id} in cart {user_id} set to {quantity} (delta {delta:+d})")

    def clear_cart(self, user_id: str) -> None:
        run_transaction(self.db, self._clear_cart, user_id, policy=self.retry_policy)

    def _clear_cart(self, user_id: str) -> None:
        cart = self.repo.get_cart(user_id)
        if not cart:
            return

        restored = {}
        for line in cart.items:
            restored[line.product_id] = restored.get(line.product_id, 0) + line.quantity

        self.stock.restore_many(restored, source=f"clear:{user_id}")
        cart.items.clear()
        self._bump_version(user_id, cart.version)

        logger.info(f"Cart {user_id} cleared, {len(restored)} products restored")

    def _get_cart_or_raise(self, user_id: str) -> CartModel:
        cart = self.repo.get_cart(user_id)
        if not cart:
            raise NotFoundError(f"Cart for user {user_id} not found")
        return cart

    @staticmethod
    def _get_line_or_raise(cart: CartModel, cart_item_id: str) -> CartItemModel:
        line = next((i for i in cart.items if i.id == cart_item_id), None)
        if not line:
            raise NotFoundError(f"Item {cart_item_id} not found in cart")
        return line

    def _bump_version(self, user_id: str, old_version: int) -> None:
        # Optimistic locking warunek na wersje
        rowcount = self.repo.update_cart_version(
            user_id=user_id,
            old_version=old_version,
            new_data={"version": old_version + 1, "updated_at": self.clock()},
        )
        if rowcount == 0:
            raise ConflictError()

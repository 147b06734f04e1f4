import os

# testy zawsze na sqlite w pamieci, niezaleznie od .env
os.environ["DATABASE_URL"] = "sqlite+pysqlite:///:memory:"

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.data.database import Base, SessionLocal, engine, get_db
from app.data.models import CartModel, ItemModel
from app.services.cart_service import CartService
from app.services.expiry_service import ExpiryService
from app.services.item_service import ItemService
from app.services.order_service import OrderService
from app.utils.clock import get_clock
from app.utils.retry import RetryPolicy


class FrozenClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def tables():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FrozenClock(datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def retry_policy():
    return RetryPolicy(max_attempts=3, backoff_multiplier=0, backoff_min=0, backoff_max=0, timeout=5)


@pytest.fixture
def item_service(db, clock, retry_policy):
    return ItemService(db, clock=clock, retry_policy=retry_policy)


@pytest.fixture
def cart_service(db, clock, retry_policy):
    return CartService(db, clock=clock, retry_policy=retry_policy)


@pytest.fixture
def expiry_service(db, clock, retry_policy):
    return ExpiryService(db, clock=clock, retry_policy=retry_policy)


@pytest.fixture
def order_service(db, clock, retry_policy):
    return OrderService(db, clock=clock, retry_policy=retry_policy)


@pytest.fixture
def make_item(item_service):
    def _make(name="Raw honey", price="12.00", quantity=5, size=500):
        return item_service.create_item(name=name, price=Decimal(price), size=size, quantity=quantity)

    return _make


@pytest.fixture
def stock_of(db):
    def _stock(item_id: str) -> int:
        return db.get(ItemModel, item_id, populate_existing=True).quantity

    return _stock


@pytest.fixture
def cart_lines(db):
    def _lines(user_id: str):
        db.expire_all()
        cart = db.get(CartModel, user_id)
        return list(cart.items) if cart else []

    return _lines


@pytest.fixture
def client(clock):
    from app.main import app

    def _get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture
def file_sessions(tmp_path):
    # dwie sesje na jednym pliku sqlite - dwa "procesy" scigajace sie o te same wiersze
    race_engine = create_engine(f"sqlite+pysqlite:///{tmp_path / 'race.db'}")
    Base.metadata.create_all(bind=race_engine)
    factory = sessionmaker(bind=race_engine, autoflush=True, expire_on_commit=True)
    first, second = factory(), factory()
    yield first, second
    first.close()
    second.close()
    race_engine.dispose()

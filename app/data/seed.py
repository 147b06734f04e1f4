# app/data/seed.py
from decimal import Decimal

from app.data.database import SessionLocal, init_db
from app.services.item_service import ItemService
from app.utils.logging import get_logger

logger = get_logger(__name__)

FARM_ITEMS = [
    {"name": "Free-range eggs (dozen)", "price": Decimal("6.50"), "size": 12, "quantity": 40},
    {"name": "Raw honey", "price": Decimal("12.00"), "size": 500, "quantity": 15},
    {"name": "Goat cheese", "price": Decimal("9.75"), "size": 250, "quantity": 8},
    {"name": "Heirloom tomatoes", "price": Decimal("4.25"), "size": 1000, "quantity": 3},
]


def seed(db) -> int:
    svc = ItemService(db)
    # not forcing: only seed if empty
    if svc.list_items():
        return 0
    for data in FARM_ITEMS:
        svc.create_item(**data)
    logger.info(f"Seeded {len(FARM_ITEMS)} items")
    return len(FARM_ITEMS)


if __name__ == "__main__":
    init_db()
    session = SessionLocal()
    try:
        seed(session)
    finally:
        session.close()

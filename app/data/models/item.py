#app/data/models/item.py
import uuid
from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Column, Integer, Numeric, String, Text

from app.data.database import Base, UTCDateTime


def _now():
    return datetime.now(timezone.utc)


class ItemModel(Base):
    __tablename__ = "items"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    size = Column(Integer, nullable=False, default=0)

    #sztuki dostepne - ani zarezerwowane w koszykach ani sprzedane
    quantity = Column(Integer, nullable=False, default=0)

    description = Column(Text, nullable=True)
    image = Column(String(500), nullable=True)

    version = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime(), nullable=False, default=_now)
    updated_at = Column(UTCDateTime(), nullable=False, default=_now)

    __table_args__ = (
        CheckConstraint("quantity >= 0", name="item_quantity_non_negative"),
        CheckConstraint("price >= 0", name="item_price_non_negative"),
        CheckConstraint("size >= 0", name="item_size_non_negative"),
    )

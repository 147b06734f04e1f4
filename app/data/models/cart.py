#app/data/models/cart.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship

from app.data.database import Base, UTCDateTime


class CartModel(Base):
    __tablename__ = "carts"

    #jeden koszyk na usera, user_id jest kluczem
    user_id = Column(String(128), primary_key=True)

    #wersja pilnuje calej listy pozycji
    version = Column(Integer, nullable=False, default=1)
    created_at = Column(UTCDateTime(), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(UTCDateTime(), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "CartItemModel",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItemModel.position",
    )

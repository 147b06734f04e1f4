from sqlalchemy import Column, Integer, String, Numeric, Text
from sqlalchemy.orm import relationship
from datetime import datetime, timezone
import uuid

from app.data.database import Base, UTCDateTime


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))

    customer_name = Column(String(200), nullable=False)
    customer_email = Column(String(200), nullable=False)
    customer_phone = Column(String(50), nullable=False, default="")
    customer_address = Column(String(500), nullable=False, default="")
    description = Column(Text, nullable=False, default="")

    status = Column(String(16), nullable=False, default="pending")  # pending, processing, fulfilled, cancelled
    total_amount = Column(Numeric(10, 2), nullable=False)
    version = Column(Integer, nullable=False, default=1)

    order_date = Column(UTCDateTime(), nullable=False, default=lambda: datetime.now(timezone.utc))
    created_at = Column(UTCDateTime(), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(UTCDateTime(), nullable=False, default=lambda: datetime.now(timezone.utc))

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )

# app/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class OrderStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    FULFILLED = "fulfilled"
    CANCELLED = "cancelled"


class StockLevel(str, Enum):
    CRITICAL = "critical"
    LOW = "low"
    WARNING = "warning"


class ProductSnapshot(BaseModel):
    """Dane produktu zapisywane w pozycji koszyka w chwili dodania."""

    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0)
    size: int = Field(0, ge=0)
    image: Optional[str] = None


class ReservationIn(BaseModel):
    """Schema dla dodawania produktu do koszyka."""

    product_id: str = Field(..., min_length=1, description="ID produktu")
    quantity: int = Field(..., ge=1, description="Ilosc produktu (musi byc >= 1)")
    snapshot: Optional[ProductSnapshot] = None


class ReservationQuantityIn(BaseModel):
    # 0 albo mniej = usuniecie pozycji
    quantity: int


class CartItemOut(BaseModel):
    id: str
    product_id: str
    product_name: str
    product_price: Decimal
    product_size: int
    product_image: Optional[str] = None
    quantity: int
    added_at: datetime
    expires_at: datetime

    model_config = ConfigDict(from_attributes=True)


class CartSummary(BaseModel):
    total_items: int = 0
    total_price: Decimal = Decimal("0.00")
    line_count: int = 0


class CartOut(BaseModel):
    user_id: str
    items: List[CartItemOut]
    summary: CartSummary
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ItemCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    price: Decimal = Field(..., ge=0)
    size: int = Field(0, ge=0)
    quantity: int = Field(0, ge=0)
    description: Optional[str] = None
    image: Optional[str] = None


class ItemOut(BaseModel):
    id: str
    name: str
    price: Decimal
    size: int
    quantity: int
    description: Optional[str] = None
    image: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StockAdjustIn(BaseModel):
    delta: int


class LowStockItemOut(BaseModel):
    id: str
    name: str
    quantity: int
    stock_level: StockLevel


class OrderLineIn(BaseModel):
    item_id: str = Field(..., min_length=1)
    quantity: int = Field(..., ge=1)


class OrderCreate(BaseModel):
    customer_name: str = Field(..., min_length=1, max_length=200)
    customer_email: str = Field(..., min_length=3, max_length=200)
    customer_phone: str = ""
    customer_address: str = ""
    description: str = ""
    items: List[OrderLineIn] = Field(..., min_length=1)


class OrderItemOut(BaseModel):
    item_id: str
    item_name: str
    quantity: int
    price: Decimal
    size: int
    subtotal: Decimal

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    id: str
    customer_name: str
    customer_email: str
    customer_phone: str
    customer_address: str
    description: str
    status: OrderStatus
    total_amount: Decimal
    items: List[OrderItemOut]
    order_date: datetime
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class OrderStatusUpdate(BaseModel):
    # walidowane w serwisie, nieznany status = 400
    status: str = Field(..., min_length=1)


class SweepReport(BaseModel):
    carts_scanned: int = 0
    carts_swept: int = 0
    lines_released: int = 0
    failures: int = 0

from sqlalchemy import CheckConstraint, Column, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import relationship

from app.data.database import Base, UTCDateTime


class CartItemModel(Base):
    __tablename__ = "cart_items"

    id = Column(String(32), primary_key=True)
    user_id = Column(String(128), ForeignKey("carts.user_id", ondelete="CASCADE"), nullable=False, index=True)
    position = Column(Integer, nullable=False, default=0)

    #slaba referencja - bez FK, produkt moze zostac usuniety
    product_id = Column(String(36), nullable=False)

    #snapshot produktu z chwili dodania (cena zablokowana)
    product_name = Column(String(200), nullable=False)
    product_price = Column(Numeric(10, 2), nullable=False)
    product_size = Column(Integer, nullable=False, default=0)
    product_image = Column(String(500), nullable=True)

    quantity = Column(Integer, nullable=False)
    added_at = Column(UTCDateTime(), nullable=False)
    expires_at = Column(UTCDateTime(), nullable=False, index=True)

    cart = relationship("CartModel", back_populates="items")

    __table_args__ = (
        UniqueConstraint("user_id", "product_id", name="u_cart_product"),
        CheckConstraint("quantity >= 1", name="cart_item_quantity_positive"),
    )

from datetime import date, datetime, timezone

from sqlalchemy import (
    Column, Integer, String, Text, ForeignKey, Date, DateTime,
    Numeric, CheckConstraint, UniqueConstraint, Index
)
from sqlalchemy.orm import relationship
from .database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# 👤 User
class User(Base):
    __tablename__ = "usuarios"

    id = Column(Integer, primary_key=True, index=True)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(String(255), nullable=True)
    registered_on = Column(Date, nullable=False, default=date.today)
    birth_date = Column(Date, nullable=True)
    gender = Column(String(30), nullable=True)


# 📦 Inventory product
class Product(Base):
    __tablename__ = "inventario"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)  # available units, reserved ones excluded

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_inventario_price_nonneg"),
        CheckConstraint("stock >= 0", name="ck_inventario_stock_nonneg"),
    )


# 🛒 Cart: one per user
class Cart(Base):
    __tablename__ = "carritos"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("usuarios.id", ondelete="CASCADE"), unique=True, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, default=utcnow, onupdate=utcnow)

    items = relationship(
        "CartItem",
        back_populates="cart",
        cascade="all, delete-orphan",
        order_by="CartItem.id",
    )

    def touch(self):
        self.updated_at = utcnow()


class CartItem(Base):
    __tablename__ = "carrito_items"

    id = Column(Integer, primary_key=True, index=True)
    cart_id = Column(Integer, ForeignKey("carritos.id", ondelete="CASCADE"), nullable=False)
    product_id = Column(Integer, ForeignKey("inventario.id", ondelete="CASCADE"), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)

    cart = relationship("Cart", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        UniqueConstraint("cart_id", "product_id", name="uq_carrito_item_producto"),  # 🚫 one row per product
        CheckConstraint("quantity > 0", name="ck_carrito_item_quantity_pos"),
        Index("ix_carrito_items_cart", "cart_id"),
    )

# storefront/data/models/order.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric
from sqlalchemy.orm import relationship

from storefront.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    order_number = Column(String(40), nullable=False, unique=True)

    customer_name = Column(String(100), nullable=False)
    customer_email = Column(String(255), nullable=False)
    customer_phone = Column(String(20), nullable=False)

    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(String(20), nullable=False, default="cod")
    notes = Column(String(500), nullable=True)

    order_status = Column(String(20), nullable=False, default="Pending")  # Pending, Processing, Shipped, Delivered, Cancelled
    tracking_number = Column(String(100), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)
    delivered_at = Column(DateTime(timezone=True), nullable=True)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)

    items = relationship(
        "OrderItemModel",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItemModel.id",
    )
    shipping_address = relationship(
        "ShippingAddressModel",
        back_populates="order",
        cascade="all, delete-orphan",
        uselist=False,
    )


class OrderItemModel(Base):
    """Snapshot produktu z chwili zakupu, nie odwoluje sie do zywego wiersza products."""

    __tablename__ = "order_items"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, index=True)
    # bez FK, produkt moze zostac usuniety a historia zamowien zostaje
    product_id = Column(Integer, nullable=True)

    product_name = Column(String(200), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    quantity = Column(Integer, nullable=False)
    size = Column(String(50), nullable=True)
    color = Column(String(50), nullable=True)
    image = Column(String(255), nullable=True)

    order = relationship("OrderModel", back_populates="items")


class ShippingAddressModel(Base):
    __tablename__ = "shipping_addresses"

    id = Column(Integer, primary_key=True)
    order_id = Column(Integer, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False, unique=True)

    street = Column(String(255), nullable=False)
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=True)
    pincode = Column(String(20), nullable=True)
    country = Column(String(100), nullable=False)

    order = relationship("OrderModel", back_populates="shipping_address")

# storefront/data/models/product.py
from datetime import datetime, timezone

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    Boolean,
    DateTime,
    Numeric,
    ForeignKey,
    JSON,
    CheckConstraint,
)

from storefront.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class ProductModel(Base):
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("stock >= 0", name="stock_non_negative"),)

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    slug = Column(String(220), nullable=False, unique=True, index=True)
    description = Column(Text, nullable=True)

    price = Column(Numeric(10, 2), nullable=False)
    discount_price = Column(Numeric(10, 2), nullable=True)

    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    subcategory_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)

    # stock zmienia tylko OrderService (dekrementacja) albo admin (restock)
    stock = Column(Integer, nullable=False, default=0)
    # licznik wersji dla optimistic locking, +1 przy kazdym zapisie stocku
    version = Column(Integer, nullable=False, default=1)

    primary_image = Column(String(255), nullable=False, default="")
    images = Column(JSON, nullable=False, default=list)
    sizes = Column(JSON, nullable=False, default=list)
    colors = Column(JSON, nullable=False, default=list)

    is_trending = Column(Boolean, nullable=False, default=False)
    is_popular = Column(Boolean, nullable=False, default=False)
    is_featured = Column(Boolean, nullable=False, default=False)
    is_men_collection = Column(Boolean, nullable=False, default=False)
    is_women_collection = Column(Boolean, nullable=False, default=False)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

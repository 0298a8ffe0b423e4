# storefront/data/models/category.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey

from storefront.data.database import Base


def _utcnow():
    return datetime.now(timezone.utc)


class CategoryModel(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False, unique=True)
    slug = Column(String(120), nullable=False, unique=True, index=True)
    type = Column(String(20), nullable=False, default="General")  # Men, Women, Accessories, General
    description = Column(String(500), nullable=True)
    image = Column(String(255), nullable=True)

    # baza nie pilnuje acyklicznosci, robi to CategoryGraphResolver
    parent_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow)

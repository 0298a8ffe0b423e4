# storefront/domain/schemas.py
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from storefront.utils.text import check_length, is_valid_phone, sanitize_input


class CategoryType(str, Enum):
    MEN = "Men"
    WOMEN = "Women"
    ACCESSORIES = "Accessories"
    GENERAL = "General"


class OrderStatus(str, Enum):
    PENDING = "Pending"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


# =====================================================
# CHECKOUT (wejscie)
# =====================================================
class CustomerInfoIn(BaseModel):
    """Dane klienta przy checkoucie."""

    name: str
    email: EmailStr
    phone: str

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        return check_length(v, 2, 100, "Customer name")

    @field_validator("email", mode="before")
    @classmethod
    def _email(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("phone")
    @classmethod
    def _phone(cls, v: str) -> str:
        v = v.strip()
        if not is_valid_phone(v):
            raise ValueError("Invalid phone number (10-15 digits required)")
        # kolumna customer_phone ma 20 znakow, separatory tez sie licza
        if len(v) > 20:
            raise ValueError("Phone number must be at most 20 characters")
        return v


class CheckoutItemIn(BaseModel):
    """
    Pozycja koszyka. Pole price jest przyjmowane tylko dla zgodnosci z frontem
    i ignorowane, cena zawsze idzie z zablokowanego wiersza products.
    """

    product_id: int = Field(..., gt=0, description="ID produktu (musi być > 0)")
    quantity: int = Field(..., gt=0, description="Ilość produktu (musi być > 0)")
    size: Optional[str] = Field(None, max_length=50)
    color: Optional[str] = Field(None, max_length=50)
    price: Optional[Decimal] = None


class ShippingAddressIn(BaseModel):
    street: str
    city: str
    state: Optional[str] = Field(None, max_length=100)
    pincode: Optional[str] = Field(None, max_length=20)
    country: Optional[str] = Field(None, max_length=100)

    @field_validator("street")
    @classmethod
    def _street(cls, v: str) -> str:
        return check_length(v, 5, 255, "Street address")

    @field_validator("city")
    @classmethod
    def _city(cls, v: str) -> str:
        return check_length(v, 2, 100, "City")

    @field_validator("state", "pincode", "country")
    @classmethod
    def _optional_text(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return None
        return sanitize_input(v) or None


class CheckoutIn(BaseModel):
    """Schema dla tworzenia zamówienia (checkout)."""

    customer_info: CustomerInfoIn
    items: List[CheckoutItemIn] = Field(..., min_length=1)
    shipping_address: ShippingAddressIn
    payment_method: str = Field("cod", max_length=20)
    notes: Optional[str] = None

    @field_validator("notes")
    @classmethod
    def _notes(cls, v: Optional[str]) -> Optional[str]:
        if not v:
            return None
        return check_length(v, 0, 500, "Notes") or None

    @field_validator("payment_method", mode="before")
    @classmethod
    def _payment_method(cls, v):
        return v or "cod"


# =====================================================
# ORDERS (wyjscie)
# =====================================================
class OrderItemOut(BaseModel):
    product_id: Optional[int]
    product_name: str
    price: Decimal
    quantity: int
    size: Optional[str] = None
    color: Optional[str] = None
    image: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class OrderPlacedOut(BaseModel):
    order_id: int
    order_number: str
    total: Decimal
    items: List[OrderItemOut]


class ShippingAddressOut(BaseModel):
    street: str
    city: str
    state: Optional[str] = None
    pincode: Optional[str] = None
    country: str

    model_config = ConfigDict(from_attributes=True)


class OrderOut(BaseModel):
    """Schema dla zamówienia (response)."""

    id: int
    order_number: str
    customer_name: str
    customer_email: str
    customer_phone: str
    total_amount: Decimal
    payment_method: str
    notes: Optional[str] = None
    order_status: str
    tracking_number: Optional[str] = None
    created_at: datetime
    delivered_at: Optional[datetime] = None
    cancelled_at: Optional[datetime] = None
    item_count: Optional[int] = None
    items: Optional[List[OrderItemOut]] = None
    shipping_address: Optional[ShippingAddressOut] = None

    model_config = ConfigDict(from_attributes=True)


class OrderStatusUpdate(BaseModel):
    order_status: Optional[OrderStatus] = None
    tracking_number: Optional[str] = Field(None, max_length=100)
    notes: Optional[str] = Field(None, max_length=500)


# =====================================================
# CATEGORIES
# =====================================================
class CategoryCreate(BaseModel):
    name: str
    type: CategoryType
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None
    parent_id: Optional[int] = Field(None, gt=0)

    @field_validator("name")
    @classmethod
    def _name(cls, v: str) -> str:
        v = v.strip()
        if len(v) < 2 or len(v) > 100:
            raise ValueError("Name must be between 2 and 100 characters")
        return v

    @field_validator("image")
    @classmethod
    def _image(cls, v: Optional[str]) -> Optional[str]:
        if v and (".." in v or not v.startswith("/uploads/")):
            raise ValueError("Invalid image path")
        return v or None


class CategoryUpdate(BaseModel):
    """Czesciowa aktualizacja, znaczenie maja tylko pola podane w body."""

    name: Optional[str] = None
    type: Optional[CategoryType] = None
    description: Optional[str] = Field(None, max_length=500)
    image: Optional[str] = None
    is_active: Optional[bool] = None
    parent_id: Optional[int] = Field(None, gt=0)

    @field_validator("name")
    @classmethod
    def _name(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if len(v) < 2 or len(v) > 100:
            raise ValueError("Name must be between 2 and 100 characters")
        return v

    @field_validator("image")
    @classmethod
    def _image(cls, v: Optional[str]) -> Optional[str]:
        if v and ".." in v:
            raise ValueError("Invalid image path")
        return v


class CategoryOut(BaseModel):
    id: int
    name: str
    slug: str
    type: str
    description: Optional[str] = None
    image: Optional[str] = None
    is_active: bool
    parent_id: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class CategoryNodeOut(CategoryOut):
    children: Optional[List["CategoryNodeOut"]] = None


class CategoryDeletionCheck(BaseModel):
    category_id: int
    child_count: int
    product_count: int
    descendant_ids: List[int]


# =====================================================
# PRODUCTS
# =====================================================
class ProductOut(BaseModel):
    id: int
    name: str
    slug: str
    description: Optional[str] = None
    price: Decimal
    discount_price: Optional[Decimal] = None
    category_id: int
    subcategory_id: Optional[int] = None
    category_name: Optional[str] = None
    category_slug: Optional[str] = None
    category_type: Optional[str] = None
    subcategory_name: Optional[str] = None
    stock: int
    primary_image: str
    images: List[str] = []
    sizes: List[str] = []
    colors: List[str] = []
    is_trending: bool
    is_popular: bool
    is_featured: bool
    is_men_collection: bool
    is_women_collection: bool
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ProductPageOut(BaseModel):
    results: int
    total: int
    page: int
    total_pages: int
    products: List[ProductOut]

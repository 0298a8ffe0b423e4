# storefront/services/catalog_service.py
import math
from typing import Any, Dict

from sqlalchemy.orm import Session

from storefront.data.database import MAX_ID
from storefront.data.models.product import ProductModel
from storefront.domain.category_graph import CategoryGraphResolver
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.repos.category_repo import CategoryRepo
from storefront.repos.product_repo import ProductRepo
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

FLAG_FILTERS = {
    "trending": "is_trending",
    "popular": "is_popular",
    "featured": "is_featured",
    "men": "is_men_collection",
    "women": "is_women_collection",
}


def product_to_dict(product: ProductModel, **extra) -> Dict[str, Any]:
    data = {
        "id": product.id,
        "name": product.name,
        "slug": product.slug,
        "description": product.description,
        "price": product.price,
        "discount_price": product.discount_price,
        "category_id": product.category_id,
        "subcategory_id": product.subcategory_id,
        "stock": product.stock,
        "primary_image": product.primary_image,
        "images": product.images or [],
        "sizes": product.sizes or [],
        "colors": product.colors or [],
        "is_trending": product.is_trending,
        "is_popular": product.is_popular,
        "is_featured": product.is_featured,
        "is_men_collection": product.is_men_collection,
        "is_women_collection": product.is_women_collection,
        "created_at": product.created_at,
    }
    data.update(extra)
    return data


class CatalogService:
    """
    Listing produktow. Filtr kategorii rozwijany do potomkow przez
    CategoryGraphResolver. Tylko odczyt, bez blokad, nieaktualne drzewo
    jest akceptowalne (zadna decyzja o pieniadzach od niego nie zalezy).
    """

    def __init__(self, db: Session):
        self.categories = CategoryRepo(db)
        self.products = ProductRepo(db)

    def resolve_category_id(self, category_filter: str | int) -> int:
        value = str(category_filter).strip()

        if value.lstrip("-").isdigit():
            category_id = int(value)
        else:
            cat = self.categories.get_by_slug(value)
            if not cat:
                raise NotFoundError("Category not found")
            category_id = cat.id

        if category_id < 1 or category_id > MAX_ID:
            raise ValidationError("Invalid category ID")

        return category_id

    def category_scope(self, category_id: int) -> set[int]:
        resolver = CategoryGraphResolver(self.categories.load_links())
        return {category_id} | resolver.descendants_of(category_id)

    def filter_products(
        self,
        category: str | int | None = None,
        subcategory: int | None = None,
        type: str | None = None,
        search: str | None = None,
        page: int = 1,
        limit: int = 20,
        **flags: bool,
    ) -> Dict[str, Any]:
        unknown = set(flags) - set(FLAG_FILTERS)
        if unknown:
            raise ValidationError(f"Unknown filter(s): {', '.join(sorted(unknown))}")

        category_ids = None
        if category not in (None, ""):
            category_id = self.resolve_category_id(category)
            category_ids = self.category_scope(category_id)
            logger.debug(f"Category filter {category!r} expanded to {sorted(category_ids)}")

        if subcategory is not None and not 1 <= int(subcategory) <= MAX_ID:
            raise ValidationError("Invalid subcategory ID")

        page = max(1, int(page))
        limit = min(100, max(1, int(limit)))

        rows, total = self.products.search(
            category_ids=category_ids,
            subcategory_id=subcategory,
            category_type=type,
            flags={FLAG_FILTERS[name]: bool(value) for name, value in flags.items()},
            search=str(search)[:200] if search else None,
            limit=limit,
            offset=(page - 1) * limit,
        )

        products = [
            product_to_dict(
                product,
                category_name=category_name,
                category_slug=category_slug,
                category_type=category_type,
            )
            for product, category_name, category_slug, category_type in rows
        ]

        return {
            "results": len(products),
            "total": total,
            "page": page,
            "total_pages": math.ceil(total / limit),
            "products": products,
        }

    def get_product(self, id_or_slug: str | int) -> Dict[str, Any]:
        row = self.products.find_one(str(id_or_slug))

        if not row:
            raise NotFoundError("Product not found")

        product, category_name, category_slug, category_type, subcategory_name = row
        return product_to_dict(
            product,
            category_name=category_name,
            category_slug=category_slug,
            category_type=category_type,
            subcategory_name=subcategory_name,
        )

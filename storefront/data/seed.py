# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal
from storefront.data.models import CategoryModel, ProductModel
from storefront.utils.text import slugify
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# (nazwa, typ, rodzic)
CATEGORIES = [
    ("Men", "Men", None),
    ("Shirts", "Men", "Men"),
    ("Formal Shirts", "Men", "Shirts"),
    ("Women", "Women", None),
    ("Kurtis", "Women", "Women"),
    ("Accessories", "Accessories", None),
    ("Watches", "Accessories", "Accessories"),
]

PRODUCTS = [
    ("Oxford Formal Shirt", "Shirts", "Formal Shirts", Decimal("1499.00"), 25),
    ("Linen Casual Shirt", "Men", "Shirts", Decimal("1199.00"), 40),
    ("Printed Cotton Kurti", "Women", "Kurtis", Decimal("899.00"), 30),
    ("Steel Chronograph", "Accessories", "Watches", Decimal("3499.00"), 5),
]


def seed(session_factory=SessionLocal):
    db = session_factory()
    try:
        # not forcing: only seed if empty
        if db.query(CategoryModel).first():
            return

        by_name = {}
        for name, type_, parent in CATEGORIES:
            cat = CategoryModel(
                name=name,
                slug=slugify(name),
                type=type_,
                parent_id=by_name[parent].id if parent else None,
            )
            db.add(cat)
            db.flush()
            by_name[name] = cat

        for name, category, subcategory, price, stock in PRODUCTS:
            db.add(
                ProductModel(
                    name=name,
                    slug=slugify(name),
                    price=price,
                    stock=stock,
                    category_id=by_name[category].id,
                    subcategory_id=by_name[subcategory].id,
                    primary_image=f"/uploads/{slugify(name)}.jpg",
                    sizes=["S", "M", "L"],
                )
            )

        db.commit()
        logger.info(f"Seeded {len(CATEGORIES)} categories and {len(PRODUCTS)} products")
    finally:
        db.close()


if __name__ == "__main__":
    seed()

# storefront/repos/product_repo.py
from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, aliased

from storefront.data.database import MAX_ID
from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel


class ProductRepo:
    def __init__(self, db: Session):
        self.db = db

    # =====================================================
    # WRITE PATH (tylko wewnatrz transakcji zamowienia)
    # =====================================================
    def lock_product(self, product_id: int) -> ProductModel | None:
        """
        SELECT ... FOR UPDATE na jednym wierszu.
        Na SQLite klauzula jest pomijana, tam chroni warunek na version.
        """
        return self.db.execute(
            select(ProductModel)
            .where(ProductModel.id == product_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()

    def decrement_stock(self, product_id: int, quantity: int, expected_version: int) -> int:
        # UPDATE products SET stock = stock - q, version = version + 1 WHERE id = ? AND version = ?
        result = self.db.execute(
            update(ProductModel)
            .where(
                ProductModel.id == product_id,
                ProductModel.version == expected_version,
                ProductModel.stock >= quantity,
            )
            .values(
                stock=ProductModel.stock - quantity,
                version=ProductModel.version + 1,
            )
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    # =====================================================
    # READ PATH (katalog, bez blokad)
    # =====================================================
    def get_product(self, product_id: int) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def find_one(self, id_or_slug: str):
        cat = aliased(CategoryModel)
        sub = aliased(CategoryModel)

        stmt = (
            select(
                ProductModel,
                cat.name.label("category_name"),
                cat.slug.label("category_slug"),
                cat.type.label("category_type"),
                sub.name.label("subcategory_name"),
            )
            .outerjoin(cat, ProductModel.category_id == cat.id)
            .outerjoin(sub, ProductModel.subcategory_id == sub.id)
        )

        if str(id_or_slug).isdigit():
            if int(id_or_slug) > MAX_ID:
                return None
            stmt = stmt.where(ProductModel.id == int(id_or_slug))
        else:
            stmt = stmt.where(ProductModel.slug == id_or_slug)

        return self.db.execute(stmt).first()

    def search(
        self,
        category_ids: set[int] | None = None,
        subcategory_id: int | None = None,
        category_type: str | None = None,
        flags: dict | None = None,
        search: str | None = None,
        limit: int = 20,
        offset: int = 0,
    ):
        """Zwraca (wiersze z nazwa kategorii, total) dla listingu."""
        cat = aliased(CategoryModel)
        conditions = []

        if category_ids is not None:
            ids = sorted(i for i in category_ids if i > 0)
            if ids:
                conditions.append(
                    or_(
                        ProductModel.category_id.in_(ids),
                        ProductModel.subcategory_id.in_(ids),
                    )
                )
            else:
                conditions.append(ProductModel.id.is_(None))

        if subcategory_id is not None:
            conditions.append(ProductModel.subcategory_id == subcategory_id)

        if category_type:
            conditions.append(cat.type == category_type)

        for column, wanted in (flags or {}).items():
            if wanted:
                conditions.append(getattr(ProductModel, column).is_(True))

        if search:
            term = f"%{search}%"
            conditions.append(
                or_(ProductModel.name.like(term), ProductModel.description.like(term))
            )

        total = self.db.execute(
            select(func.count(ProductModel.id))
            .select_from(ProductModel)
            .outerjoin(cat, ProductModel.category_id == cat.id)
            .where(*conditions)
        ).scalar_one()

        rows = self.db.execute(
            select(
                ProductModel,
                cat.name.label("category_name"),
                cat.slug.label("category_slug"),
                cat.type.label("category_type"),
            )
            .outerjoin(cat, ProductModel.category_id == cat.id)
            .where(*conditions)
            .order_by(ProductModel.created_at.desc(), ProductModel.id.desc())
            .limit(limit)
            .offset(offset)
        ).all()

        return rows, total

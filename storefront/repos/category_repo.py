# storefront/repos/category_repo.py
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel


def category_to_dict(cat: CategoryModel) -> dict:
    return {
        "id": cat.id,
        "name": cat.name,
        "slug": cat.slug,
        "type": cat.type,
        "description": cat.description,
        "image": cat.image,
        "is_active": cat.is_active,
        "parent_id": cat.parent_id,
        "created_at": cat.created_at,
        "updated_at": cat.updated_at,
    }


class CategoryRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_category(self, category_id: int) -> CategoryModel | None:
        return self.db.get(CategoryModel, category_id)

    def get_by_slug(self, slug: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.slug == slug)
        ).scalar_one_or_none()

    def get_by_name(self, name: str) -> CategoryModel | None:
        return self.db.execute(
            select(CategoryModel).where(CategoryModel.name == name)
        ).scalar_one_or_none()

    def list_active(self, type: str | None = None) -> list[CategoryModel]:
        stmt = select(CategoryModel).where(CategoryModel.is_active.is_(True))
        if type:
            stmt = stmt.where(CategoryModel.type == type)
        return list(self.db.execute(stmt.order_by(CategoryModel.name)).scalars().all())

    def load_links(self) -> list[dict]:
        """Wszystkie (id, parent_id), takze nieaktywne, jeden odczyt bez blokad."""
        rows = self.db.execute(select(CategoryModel.id, CategoryModel.parent_id)).all()
        return [{"id": r.id, "parent_id": r.parent_id} for r in rows]

    def count_children(self, category_id: int) -> int:
        return self.db.execute(
            select(func.count(CategoryModel.id)).where(CategoryModel.parent_id == category_id)
        ).scalar_one()

    def count_product_references(self, category_id: int) -> int:
        return self.db.execute(
            select(func.count(ProductModel.id)).where(
                or_(
                    ProductModel.category_id == category_id,
                    ProductModel.subcategory_id == category_id,
                )
            )
        ).scalar_one()

    def add_category(self, category: CategoryModel) -> CategoryModel:
        self.db.add(category)
        self.db.flush()
        return category

    def delete_category(self, category_id: int) -> int:
        cat = self.get_category(category_id)
        if not cat:
            return 0
        self.db.delete(cat)
        self.db.flush()
        return 1

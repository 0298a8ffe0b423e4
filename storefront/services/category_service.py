# storefront/services/category_service.py
from typing import Any, Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from storefront.data.database import begin_write
from storefront.data.models.category import CategoryModel
from storefront.domain.category_graph import CategoryGraphResolver
from storefront.domain.errors import ConflictError, NotFoundError, ValidationError
from storefront.domain.schemas import CategoryCreate, CategoryType, CategoryUpdate
from storefront.repos.category_repo import CategoryRepo, category_to_dict
from storefront.utils.text import slugify
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class CategoryService:
    """
    Kategorie: listing (plaski / drzewo), potomkowie i zmiany admina.

    Listing toleruje zepsuty graf (resolver ucina galaz i loguje).
    Operacje ktore moga cos zepsuc (delete, zmiana parenta) uzywaja
    strict=True, wiec cykl albo za gleboki graf to twardy stop.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CategoryRepo(db)

    def _resolver(self) -> CategoryGraphResolver:
        return CategoryGraphResolver(self.repo.load_links())

    # =====================================================
    # QUERY
    # =====================================================
    def list_categories(self, nested: bool = False, type: str | None = None) -> List[Dict[str, Any]]:
        if type:
            try:
                type = CategoryType(type).value
            except ValueError:
                raise ValidationError("Type must be one of: Men, Women, Accessories, General")

        categories = [category_to_dict(c) for c in self.repo.list_active(type)]

        if nested:
            return CategoryGraphResolver(categories).build_tree()
        return categories

    def get_category(self, category_id: int) -> Dict[str, Any]:
        cat = self.repo.get_category(category_id)
        if not cat:
            raise NotFoundError("Category not found")
        return category_to_dict(cat)

    def descendants_of(self, category_id: int, strict: bool = False) -> set[int]:
        return self._resolver().descendants_of(category_id, strict=strict)

    def count_children(self, category_id: int) -> int:
        return self.repo.count_children(category_id)

    def count_product_references(self, category_id: int) -> int:
        return self.repo.count_product_references(category_id)

    def deletion_check(self, category_id: int) -> Dict[str, Any]:
        """Liczniki, ktore musi sprawdzic kazde usuwanie kategorii."""
        return {
            "category_id": category_id,
            "child_count": self.count_children(category_id),
            "product_count": self.count_product_references(category_id),
            "descendant_ids": sorted(self.descendants_of(category_id, strict=True)),
        }

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_category(self, payload: CategoryCreate) -> Dict[str, Any]:
        with begin_write(self.db):
            if payload.parent_id is not None and not self.repo.get_category(payload.parent_id):
                raise ValidationError("Parent category not found")

            if self.repo.get_by_name(payload.name):
                raise ConflictError("A category with this name already exists")

            cat = CategoryModel(
                name=payload.name,
                slug=slugify(payload.name),
                type=payload.type.value,
                description=payload.description,
                image=payload.image,
                parent_id=payload.parent_id,
            )
            try:
                self.repo.add_category(cat)
            except IntegrityError as e:
                raise ConflictError("A category with this name already exists") from e

            created = category_to_dict(cat)

        logger.info(f"Category {created['id']} ({created['slug']}) created")
        return created

    def update_category(self, category_id: int, payload: CategoryUpdate) -> Dict[str, Any]:
        fields = payload.model_fields_set
        if not fields:
            raise ValidationError("No fields to update")

        with begin_write(self.db):
            cat = self.repo.get_category(category_id)
            if not cat:
                raise NotFoundError("Category not found")

            if "parent_id" in fields and payload.parent_id is not None:
                self._check_new_parent(category_id, payload.parent_id)

            if payload.name is not None:
                cat.name = payload.name
                cat.slug = slugify(payload.name)
            if payload.type is not None:
                cat.type = payload.type.value
            if "description" in fields:
                cat.description = payload.description
            if "image" in fields:
                cat.image = payload.image
            if payload.is_active is not None:
                cat.is_active = payload.is_active
            if "parent_id" in fields:
                cat.parent_id = payload.parent_id

            try:
                self.db.flush()
            except IntegrityError as e:
                raise ConflictError("A category with this name already exists") from e

            updated = category_to_dict(cat)

        logger.info(f"Category {category_id} updated: {sorted(fields)}")
        return updated

    def _check_new_parent(self, category_id: int, parent_id: int):
        if parent_id == category_id:
            raise ValidationError("Category cannot be its own parent")

        # strict: jesli graf juz jest zepsuty, nie doklejamy do niego nic wiecej
        descendants = self.descendants_of(category_id, strict=True)
        if parent_id in descendants:
            raise ValidationError("Cannot set parent to a descendant category (circular reference)")

        if not self.repo.get_category(parent_id):
            raise ValidationError("Parent category not found")

    def delete_category(self, category_id: int) -> None:
        with begin_write(self.db):
            if not self.repo.get_category(category_id):
                raise NotFoundError("Category not found")

            child_count = self.count_children(category_id)
            if child_count > 0:
                raise ConflictError(
                    f"Cannot delete category with {child_count} subcategories. "
                    f"Delete or reassign children first."
                )

            product_count = self.count_product_references(category_id)
            if product_count > 0:
                raise ConflictError(
                    f"Cannot delete category with {product_count} products. "
                    f"Reassign products first."
                )

            # IntegrityGuardError (cykl przez ta kategorie) przerywa usuwanie
            descendants = self.descendants_of(category_id, strict=True)
            if descendants:
                raise ConflictError(
                    f"Cannot delete category with {len(descendants)} descendant categories."
                )

            self.repo.delete_category(category_id)

        logger.info(f"Category {category_id} deleted")

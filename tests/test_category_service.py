# tests/test_category_service.py
import pytest
from sqlalchemy import func, select

from storefront.data.models import CategoryModel
from storefront.domain.errors import ConflictError, IntegrityGuardError, NotFoundError, ValidationError
from storefront.domain.schemas import CategoryCreate, CategoryUpdate
from storefront.services.category_service import CategoryService


def category_count(session_factory):
    with session_factory() as s:
        return s.execute(select(func.count(CategoryModel.id))).scalar_one()


def make_cycle(session_factory, make_category):
    a = make_category("Cycle A")
    b = make_category("Cycle B", parent=a)
    with session_factory() as s:
        s.get(CategoryModel, a).parent_id = b
        s.commit()
    return a, b


def test_flat_listing_is_active_only_and_sorted(db, make_category):
    make_category("Women", type="Women")
    make_category("Accessories", type="Accessories")
    make_category("Hidden", is_active=False)

    result = CategoryService(db).list_categories()

    assert [c["name"] for c in result] == ["Accessories", "Women"]


def test_type_filter_is_validated(db, make_category):
    make_category("Women", type="Women")
    make_category("Men", type="Men")
    svc = CategoryService(db)

    assert [c["name"] for c in svc.list_categories(type="Men")] == ["Men"]
    with pytest.raises(ValidationError):
        svc.list_categories(type="Kids")


def test_nested_listing_builds_forest(db, make_category):
    men = make_category("Men", type="Men")
    make_category("Shirts", parent=men, type="Men")
    make_category("Women", type="Women")

    tree = CategoryService(db).list_categories(nested=True)

    assert [n["name"] for n in tree] == ["Men", "Women"]
    assert [n["name"] for n in tree[0]["children"]] == ["Shirts"]
    assert "children" not in tree[1]


def test_deletion_blocked_by_child(session_factory, make_category):
    parent = make_category("Parent")
    make_category("Child", parent=parent)
    before = category_count(session_factory)

    with session_factory() as s:
        with pytest.raises(ConflictError) as exc:
            CategoryService(s).delete_category(parent)

    assert "1 subcategories" in str(exc.value)
    assert category_count(session_factory) == before


def test_deletion_blocked_by_referencing_product(session_factory, make_category, make_product):
    cat = make_category("Stocked")
    make_product("Only Product", cat)

    with session_factory() as s:
        with pytest.raises(ConflictError) as exc:
            CategoryService(s).delete_category(cat)

    assert "1 products" in str(exc.value)
    assert category_count(session_factory) == 1


def test_deletion_blocked_by_subcategory_reference(session_factory, make_category, make_product):
    parent = make_category("Main")
    sub = make_category("Sub", parent=parent)
    make_product("Sub Product", parent, subcategory_id=sub)

    with session_factory() as s:
        assert CategoryService(s).count_product_references(sub) == 1
    with session_factory() as s:
        with pytest.raises(ConflictError):
            CategoryService(s).delete_category(sub)


def test_delete_unreferenced_leaf(session_factory, make_category):
    parent = make_category("Keep")
    leaf = make_category("Drop", parent=parent)

    with session_factory() as s:
        CategoryService(s).delete_category(leaf)

    assert category_count(session_factory) == 1
    with session_factory() as s:
        with pytest.raises(NotFoundError):
            CategoryService(s).delete_category(leaf)


def test_deletion_check_is_hard_stop_on_cycle(session_factory, make_category):
    a, _ = make_cycle(session_factory, make_category)

    with session_factory() as s:
        with pytest.raises(IntegrityGuardError):
            CategoryService(s).deletion_check(a)
    with session_factory() as s:
        with pytest.raises(ConflictError):
            CategoryService(s).delete_category(a)

    assert category_count(session_factory) == 2


def test_deletion_check_reports_counts(db, make_category, make_product):
    root = make_category("Root")
    child = make_category("Child", parent=root)
    make_category("Grandchild", parent=child)
    make_product("Root Product", root)

    check = CategoryService(db).deletion_check(root)

    assert check["child_count"] == 1
    assert check["product_count"] == 1
    assert len(check["descendant_ids"]) == 2


def test_create_category_derives_slug(session_factory, make_category):
    parent = make_category("Men", type="Men")

    with session_factory() as s:
        created = CategoryService(s).create_category(
            CategoryCreate(name="  Formal  Shirts ", type="Men", parent_id=parent)
        )

    assert created["name"] == "Formal  Shirts"
    assert created["slug"] == "formal-shirts"
    assert created["parent_id"] == parent


def test_create_category_rejects_duplicates_and_missing_parent(session_factory, make_category):
    make_category("Watches", type="Accessories")

    with session_factory() as s:
        with pytest.raises(ConflictError):
            CategoryService(s).create_category(CategoryCreate(name="Watches", type="Accessories"))
    with session_factory() as s:
        with pytest.raises(ValidationError):
            CategoryService(s).create_category(
                CategoryCreate(name="Orphan", type="General", parent_id=404)
            )


def test_update_rejects_self_and_descendant_parent(session_factory, make_category):
    root = make_category("Root")
    child = make_category("Child", parent=root)
    grandchild = make_category("Grandchild", parent=child)

    with session_factory() as s:
        with pytest.raises(ValidationError, match="own parent"):
            CategoryService(s).update_category(root, CategoryUpdate(parent_id=root))
    with session_factory() as s:
        with pytest.raises(ValidationError, match="circular"):
            CategoryService(s).update_category(root, CategoryUpdate(parent_id=grandchild))

    with session_factory() as s:
        assert s.get(CategoryModel, root).parent_id is None


def test_update_can_reparent_and_clear_parent(session_factory, make_category):
    a = make_category("Alpha")
    b = make_category("Beta")
    child = make_category("Gamma", parent=a)

    with session_factory() as s:
        moved = CategoryService(s).update_category(child, CategoryUpdate(parent_id=b, name="Gamma Two"))
    assert moved["parent_id"] == b
    assert moved["slug"] == "gamma-two"

    with session_factory() as s:
        cleared = CategoryService(s).update_category(child, CategoryUpdate(parent_id=None))
    assert cleared["parent_id"] is None

    with session_factory() as s:
        with pytest.raises(ValidationError):
            CategoryService(s).update_category(child, CategoryUpdate())


def test_writes_after_reads_on_one_session(session_factory, make_category):
    parent = make_category("Footwear")
    leaf = make_category("Sandals", parent=parent)

    with session_factory() as s:
        svc = CategoryService(s)

        svc.get_category(leaf)
        renamed = svc.update_category(leaf, CategoryUpdate(name="Flip Flops"))

        svc.list_categories()
        created = svc.create_category(CategoryCreate(name="Sneakers", type="General", parent_id=parent))

        svc.deletion_check(created["id"])
        svc.delete_category(created["id"])

    assert renamed["slug"] == "flip-flops"
    assert category_count(session_factory) == 2

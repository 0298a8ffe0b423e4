# tests/test_catalog_service.py
import pytest

from storefront.data.models import CategoryModel
from storefront.domain.errors import NotFoundError, ValidationError
from storefront.services.catalog_service import CatalogService


@pytest.fixture
def catalog(make_category, make_product):
    """
    Men
     └─ Shirts
         └─ Formal Shirts
    Women
    """
    men = make_category("Men", type="Men")
    shirts = make_category("Shirts", parent=men, type="Men")
    formal = make_category("Formal Shirts", parent=shirts, type="Men")
    women = make_category("Women", type="Women")

    return {
        "men": men,
        "shirts": shirts,
        "formal": formal,
        "women": women,
        "jeans": make_product("Slim Jeans", men, is_trending=True),
        "oxford": make_product("Oxford", shirts, subcategory_id=formal),
        "tux": make_product("Tuxedo Shirt", formal, is_featured=True),
        "kurti": make_product("Kurti", women, is_women_collection=True),
    }


def names(page):
    return sorted(p["name"] for p in page["products"])


def test_category_filter_includes_descendants(db, catalog):
    page = CatalogService(db).filter_products(category=catalog["men"])

    assert names(page) == ["Oxford", "Slim Jeans", "Tuxedo Shirt"]
    assert page["total"] == 3


def test_subcategory_column_is_matched_too(db, catalog):
    page = CatalogService(db).filter_products(category=catalog["formal"])

    assert names(page) == ["Oxford", "Tuxedo Shirt"]


def test_category_filter_accepts_slug(db, catalog):
    page = CatalogService(db).filter_products(category="shirts")

    assert names(page) == ["Oxford", "Tuxedo Shirt"]
    assert page["products"][0]["category_type"] == "Men"


def test_unknown_slug_is_not_found(db, catalog):
    with pytest.raises(NotFoundError):
        CatalogService(db).filter_products(category="no-such-thing")


def test_unknown_numeric_category_matches_nothing(db, catalog):
    page = CatalogService(db).filter_products(category="9999")

    assert page["products"] == []
    assert page["total"] == 0


def test_non_positive_ids_are_rejected(db, catalog):
    svc = CatalogService(db)
    with pytest.raises(ValidationError):
        svc.filter_products(category="0")
    with pytest.raises(ValidationError):
        svc.filter_products(subcategory=0)


def test_cyclic_category_graph_still_lists(db, catalog, make_category, make_product, session_factory):
    a = make_category("Loop A")
    b = make_category("Loop B", parent=a)
    make_product("Loop Tee", b)
    with session_factory() as s:
        s.get(CategoryModel, a).parent_id = b
        s.commit()

    page = CatalogService(db).filter_products(category=a)

    assert names(page) == ["Loop Tee"]


def test_flags_type_and_search(db, catalog):
    svc = CatalogService(db)

    assert names(svc.filter_products(trending=True)) == ["Slim Jeans"]
    assert names(svc.filter_products(featured=True, category=catalog["men"])) == ["Tuxedo Shirt"]
    assert names(svc.filter_products(women=True)) == ["Kurti"]
    assert names(svc.filter_products(type="Women")) == ["Kurti"]
    assert names(svc.filter_products(search="shirt")) == ["Tuxedo Shirt"]

    with pytest.raises(ValidationError):
        svc.filter_products(on_sale=True)


def test_pagination_is_clamped(db, catalog):
    svc = CatalogService(db)

    page = svc.filter_products(page=2, limit=3)
    assert page["page"] == 2
    assert page["total"] == 4
    assert page["total_pages"] == 2
    assert page["results"] == 1

    assert svc.filter_products(page=-5, limit=1000)["page"] == 1
    assert svc.filter_products(limit=0)["total_pages"] == 4


def test_get_product_by_id_and_slug(db, catalog):
    svc = CatalogService(db)

    by_id = svc.get_product(catalog["oxford"])
    by_slug = svc.get_product("oxford")

    assert by_id["id"] == by_slug["id"] == catalog["oxford"]
    assert by_id["category_name"] == "Shirts"
    assert by_id["subcategory_name"] == "Formal Shirts"

    with pytest.raises(NotFoundError):
        svc.get_product("missing")


def test_out_of_range_ids_are_rejected(db, catalog):
    svc = CatalogService(db)
    huge = "9" * 25

    with pytest.raises(ValidationError):
        svc.filter_products(category=huge)
    with pytest.raises(ValidationError):
        svc.filter_products(subcategory=2**31)
    with pytest.raises(NotFoundError):
        svc.get_product(huge)

# storefront/api/routers/products.py
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import ProductOut, ProductPageOut
from storefront.services.catalog_service import CatalogService

router = APIRouter(prefix="/products", tags=["products"])


def get_service(db: Session):
    return CatalogService(db)


@router.get("/", response_model=ProductPageOut)
def list_products(
    category: str | None = Query(None, description="ID albo slug, obejmuje podkategorie"),
    subcategory: int | None = Query(None),
    type: str | None = Query(None),
    trending: bool = Query(False),
    popular: bool = Query(False),
    featured: bool = Query(False),
    men: bool = Query(False),
    women: bool = Query(False),
    search: str | None = Query(None),
    page: int = Query(1),
    limit: int = Query(20),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.filter_products(
            category=category,
            subcategory=subcategory,
            type=type,
            search=search,
            page=page,
            limit=limit,
            trending=trending,
            popular=popular,
            featured=featured,
            men=men,
            women=women,
        )
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{id_or_slug}", response_model=ProductOut)
def get_product(id_or_slug: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_product(id_or_slug)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

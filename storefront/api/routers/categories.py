# storefront/api/routers/categories.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    CategoryCreate,
    CategoryDeletionCheck,
    CategoryNodeOut,
    CategoryOut,
    CategoryUpdate,
)
from storefront.services.category_service import CategoryService

router = APIRouter(prefix="/categories", tags=["categories"])


def get_service(db: Session):
    return CategoryService(db)


@router.get("/", response_model=List[CategoryNodeOut], response_model_exclude_unset=True)
def list_categories(
    nested: bool = Query(False),
    type: str | None = Query(None),
    db: Session = Depends(get_db),
):
    """
    Aktywne kategorie, plasko albo jako drzewo (nested=true).
    Liscie drzewa nie maja pola children.
    """
    svc = get_service(db)
    try:
        return svc.list_categories(nested=nested, type=type)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{category_id}", response_model=CategoryOut)
def get_category(category_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.get_category(category_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{category_id}/descendants", response_model=List[int])
def descendants(category_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    return sorted(svc.descendants_of(category_id))


@router.get("/{category_id}/deletion-check", response_model=CategoryDeletionCheck)
def deletion_check(category_id: int, db: Session = Depends(get_db)):
    """Liczniki dla zewnetrznego usuwania: dzieci, produkty, potomkowie."""
    svc = get_service(db)
    try:
        return svc.deletion_check(category_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.post("/", response_model=CategoryOut, status_code=201)
def create_category(payload: CategoryCreate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.create_category(payload)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.put("/{category_id}", response_model=CategoryOut)
def update_category(category_id: int, payload: CategoryUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update_category(category_id, payload)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.delete("/{category_id}")
def delete_category(category_id: int, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.delete_category(category_id)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))
    return {"status": "success", "message": "Category deleted successfully"}

# storefront/api/routers/orders.py
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from storefront.data.database import get_db
from storefront.domain.errors import StorefrontError
from storefront.domain.schemas import (
    OrderOut,
    OrderPlacedOut,
    OrderStatusUpdate,
)
from storefront.services.order_service import OrderService

router = APIRouter(prefix="/orders", tags=["orders"])


def get_service(db: Session):
    return OrderService(db)


@router.post("/", response_model=OrderPlacedOut, status_code=201)
def create_order(
    payload: Dict[str, Any] = Body(...),
    db: Session = Depends(get_db),
):
    """
    Checkout: blokuje stock, liczy total z cen w bazie, zapisuje zamowienie atomowo.
    Wysyła powiadomienie asynchronicznie.
    Body walidowany w serwisie (CheckoutIn), bledne dane to 400 a nie 422.
    """
    svc = get_service(db)
    try:
        return svc.create_order(
            customer_info=payload.get("customer_info"),
            items=payload.get("items"),
            shipping_address=payload.get("shipping_address"),
            payment_method=payload.get("payment_method"),
            notes=payload.get("notes"),
        )
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/", response_model=List[OrderOut], response_model_exclude_none=True)
def list_orders(
    status: str | None = Query(None),
    limit: int | None = Query(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        return svc.list_orders(status=status, limit=limit)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.get("/{id_or_number}", response_model=OrderOut)
def get_order(id_or_number: str, db: Session = Depends(get_db)):
    """
    Pobiera szczegóły zamówienia (po id albo numerze).
    """
    svc = get_service(db)
    try:
        return svc.get_order(id_or_number)
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))


@router.patch("/{order_id}", response_model=OrderOut, response_model_exclude_none=True)
def update_order(order_id: int, payload: OrderStatusUpdate, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        return svc.update_order_status(
            order_id,
            status=payload.order_status.value if payload.order_status else None,
            tracking_number=payload.tracking_number,
            notes=payload.notes,
        )
    except StorefrontError as e:
        raise HTTPException(status_code=e.status_code, detail=str(e))

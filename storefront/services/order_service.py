# storefront/services/order_service.py
from collections import OrderedDict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from tenacity import RetryError

from storefront.data.database import begin_write
from storefront.data.models.order import OrderModel, OrderItemModel, ShippingAddressModel
from storefront.data.models.product import ProductModel
from storefront.domain.errors import (
    InsufficientStockError,
    NotFoundError,
    OrderNumberCollisionError,
    OrderNumberExhaustedError,
    StaleStockError,
    StoreError,
    ValidationError,
)
from storefront.domain.order_number import generate_order_number
from storefront.domain.schemas import CheckoutIn, OrderStatus
from storefront.repos.order_repo import OrderRepo
from storefront.repos.product_repo import ProductRepo
from storefront.services.notification_service import NotificationService
from storefront.utils.retry import conflict_retry, order_number_attempts
from storefront.utils.settings import DEFAULT_COUNTRY
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

CENT = Decimal("0.01")


def _first_error(exc: PydanticValidationError) -> str:
    err = exc.errors()[0]
    where = ".".join(str(p) for p in err.get("loc", ()))
    msg = err.get("msg", "Invalid value").removeprefix("Value error, ")
    return f"{where}: {msg}" if where else msg


class OrderService:
    """
    Silnik zamowien: VALIDATE -> LOCK_STOCK -> COMPUTE_TOTAL ->
    ALLOCATE_ORDER_NUMBER -> PERSIST -> COMMIT.

    Kazda proba to jedna transakcja (Session.begin), blad po walidacji
    cofa wszystko lacznie z dekrementacja stocku.
    """

    def __init__(self, db: Session, notification_service: NotificationService | None = None):
        self.db = db
        self.repo = OrderRepo(db)
        self.products = ProductRepo(db)
        self.notification_service = notification_service or NotificationService()

    # =====================================================
    # COMMANDS
    # =====================================================
    def create_order(
        self,
        customer_info: Dict[str, Any],
        items: List[Dict[str, Any]],
        shipping_address: Dict[str, Any],
        payment_method: str | None = "cod",
        notes: str | None = None,
    ) -> Dict[str, Any]:
        # VALIDATE - przed jakakolwiek transakcja, zly request nie trzyma locka
        try:
            checkout = CheckoutIn.model_validate(
                {
                    "customer_info": customer_info,
                    "items": items,
                    "shipping_address": shipping_address,
                    "payment_method": payment_method,
                    "notes": notes,
                }
            )
        except PydanticValidationError as e:
            raise ValidationError(_first_error(e)) from e

        return self.place_order(checkout)

    def place_order(self, checkout: CheckoutIn) -> Dict[str, Any]:
        try:
            result = self._place_order_attempt(checkout)
        except (StaleStockError, OrderNumberCollisionError) as e:
            logger.warning(f"Order aborted after repeated write conflicts: {e}")
            raise
        except SQLAlchemyError as e:
            # szczegoly tylko do logu, klient dostaje ogolny komunikat
            logger.exception(f"Store failure while creating order: {e}")
            raise StoreError("An error occurred while creating the order") from e

        logger.info(
            f"Order {result['order_id']} ({result['order_number']}) created, total {result['total']}"
        )

        # dopiero po commit
        try:
            self.notification_service.send_order_notification(
                result["order_id"], result["order_number"], checkout.customer_info.email
            )
        except Exception as e:
            logger.warning(f"Failed to queue notification for order {result['order_id']}: {e}")

        return result

    @conflict_retry()
    def _place_order_attempt(self, checkout: CheckoutIn) -> Dict[str, Any]:
        with begin_write(self.db):
            locked = self._lock_stock(checkout)
            total = self._compute_total(checkout, locked)
            order_number = self._allocate_order_number()
            return self._persist(checkout, locked, total, order_number)

    # =====================================================
    # STEPS
    # =====================================================
    def _lock_stock(self, checkout: CheckoutIn) -> Dict[int, ProductModel]:
        requested: Dict[int, int] = {}
        for item in checkout.items:
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

        # zawsze rosnaco po id, dwa zamowienia z tymi samymi produktami nie zrobia deadlocka
        locked: Dict[int, ProductModel] = OrderedDict()
        for product_id in sorted(requested):
            product = self.products.lock_product(product_id)
            if not product:
                raise NotFoundError(f"Product ID {product_id} not found")

            if product.stock < requested[product_id]:
                raise InsufficientStockError(
                    product_id=product.id,
                    product_name=product.name,
                    available=product.stock,
                    requested=requested[product_id],
                )
            locked[product_id] = product

        return locked

    def _compute_total(self, checkout: CheckoutIn, locked: Dict[int, ProductModel]) -> Decimal:
        # cena tylko z zablokowanego wiersza, item.price z requestu jest ignorowane
        total = sum(
            (Decimal(locked[item.product_id].price) * item.quantity for item in checkout.items),
            Decimal("0.00"),
        )
        return total.quantize(CENT)

    def _allocate_order_number(self) -> str:
        def candidate():
            number = generate_order_number()
            if self.repo.order_number_exists(number):
                logger.info(f"Order number {number} already taken, retrying")
                return None
            return number

        try:
            return order_number_attempts()(candidate)
        except RetryError as e:
            raise OrderNumberExhaustedError("Failed to generate unique order number") from e

    def _persist(
        self,
        checkout: CheckoutIn,
        locked: Dict[int, ProductModel],
        total: Decimal,
        order_number: str,
    ) -> Dict[str, Any]:
        requested: Dict[int, int] = {}
        for item in checkout.items:
            requested[item.product_id] = requested.get(item.product_id, 0) + item.quantity

        # 1. stock
        for product_id, product in locked.items():
            rowcount = self.products.decrement_stock(
                product_id=product_id,
                quantity=requested[product_id],
                expected_version=product.version,
            )
            # optimistic locking: 0 rows -> ktos zmienil wiersz po naszym odczycie
            if rowcount == 0:
                raise StaleStockError(product_id)

        # 2. naglowek zamowienia
        customer = checkout.customer_info
        order = OrderModel(
            order_number=order_number,
            customer_name=customer.name,
            customer_email=customer.email,
            customer_phone=customer.phone,
            total_amount=total,
            payment_method=checkout.payment_method,
            notes=checkout.notes,
            order_status=OrderStatus.PENDING.value,
        )
        try:
            self.repo.create_order(order)
        except IntegrityError as e:
            if "order_number" in str(e.orig):
                raise OrderNumberCollisionError(f"Order number {order_number} taken concurrently") from e
            raise

        # 3. pozycje jako snapshot
        snapshots = [
            OrderItemModel(
                product_id=item.product_id,
                product_name=locked[item.product_id].name,
                price=Decimal(locked[item.product_id].price).quantize(CENT),
                quantity=item.quantity,
                size=item.size,
                color=item.color,
                image=locked[item.product_id].primary_image,
            )
            for item in checkout.items
        ]
        self.repo.add_items(order, snapshots)

        # 4. adres
        address = checkout.shipping_address
        self.repo.add_shipping_address(
            ShippingAddressModel(
                order_id=order.id,
                street=address.street,
                city=address.city,
                state=address.state,
                pincode=address.pincode,
                country=address.country or DEFAULT_COUNTRY,
            )
        )

        return {
            "order_id": order.id,
            "order_number": order.order_number,
            "total": total,
            "items": [
                {
                    "product_id": s.product_id,
                    "product_name": s.product_name,
                    "price": s.price,
                    "quantity": s.quantity,
                    "size": s.size,
                    "color": s.color,
                    "image": s.image,
                }
                for s in snapshots
            ],
        }

    # =====================================================
    # QUERY / STATUS
    # =====================================================
    def get_order(self, id_or_number: str | int) -> Dict[str, Any]:
        order = self.repo.find_order(str(id_or_number))

        if not order:
            raise NotFoundError("Order not found")

        return self._order_to_dict(order, with_details=True)

    def list_orders(self, status: str | None = None, limit: int | None = None) -> List[Dict[str, Any]]:
        if status is not None:
            try:
                status = OrderStatus(status).value
            except ValueError:
                raise ValidationError("Invalid order status")

        if limit is not None:
            limit = min(100, max(1, int(limit)))

        rows = self.repo.list_orders(status=status, limit=limit)
        return [
            {**self._order_to_dict(order), "item_count": item_count}
            for order, item_count in rows
        ]

    def update_order_status(
        self,
        order_id: int,
        status: str | None = None,
        tracking_number: str | None = None,
        notes: str | None = None,
    ) -> Dict[str, Any]:
        if status is None and tracking_number is None and notes is None:
            raise ValidationError("No fields to update")

        if status is not None:
            try:
                status = OrderStatus(status)
            except ValueError:
                valid = ", ".join(s.value for s in OrderStatus)
                raise ValidationError(f"Invalid order status. Must be one of: {valid}")

        with begin_write(self.db):
            order = self.repo.get_order(order_id)
            if not order:
                raise NotFoundError("Order not found")

            if status is not None:
                order.order_status = status.value
                now = datetime.now(timezone.utc)
                if status is OrderStatus.DELIVERED:
                    order.delivered_at = now
                elif status is OrderStatus.CANCELLED:
                    order.cancelled_at = now
            if tracking_number:
                order.tracking_number = tracking_number
            if notes is not None:
                order.notes = notes

            self.db.flush()
            updated = self._order_to_dict(order)

        logger.info(f"Order {order_id} updated, status {updated['order_status']}")
        return updated

    @staticmethod
    def _order_to_dict(order: OrderModel, with_details: bool = False) -> Dict[str, Any]:
        data = {
            "id": order.id,
            "order_number": order.order_number,
            "customer_name": order.customer_name,
            "customer_email": order.customer_email,
            "customer_phone": order.customer_phone,
            "total_amount": order.total_amount,
            "payment_method": order.payment_method,
            "notes": order.notes,
            "order_status": order.order_status,
            "tracking_number": order.tracking_number,
            "created_at": order.created_at,
            "delivered_at": order.delivered_at,
            "cancelled_at": order.cancelled_at,
        }
        if with_details:
            data["items"] = [
                {
                    "product_id": i.product_id,
                    "product_name": i.product_name,
                    "price": i.price,
                    "quantity": i.quantity,
                    "size": i.size,
                    "color": i.color,
                    "image": i.image,
                }
                for i in order.items
            ]
            addr = order.shipping_address
            data["shipping_address"] = (
                {
                    "street": addr.street,
                    "city": addr.city,
                    "state": addr.state,
                    "pincode": addr.pincode,
                    "country": addr.country,
                }
                if addr
                else None
            )
        return data

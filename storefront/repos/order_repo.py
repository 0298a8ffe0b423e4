# storefront/repos/order_repo.py
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from storefront.data.database import MAX_ID
from storefront.data.models.order import OrderModel, OrderItemModel, ShippingAddressModel


class OrderRepo:
    """Tylko flush, commit/rollback nalezy do OrderService."""

    def __init__(self, db: Session):
        self.db = db

    def order_number_exists(self, order_number: str) -> bool:
        return (
            self.db.execute(
                select(OrderModel.id).where(OrderModel.order_number == order_number)
            ).first()
            is not None
        )

    def create_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def add_items(self, order: OrderModel, items: list[OrderItemModel]) -> list[OrderItemModel]:
        for item in items:
            item.order_id = order.id
            self.db.add(item)
        self.db.flush()
        return items

    def add_shipping_address(self, address: ShippingAddressModel) -> ShippingAddressModel:
        self.db.add(address)
        self.db.flush()
        return address

    def get_order(self, order_id: int) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def find_order(self, id_or_number: str) -> OrderModel | None:
        stmt = select(OrderModel).options(
            selectinload(OrderModel.items),
            selectinload(OrderModel.shipping_address),
        )
        if str(id_or_number).isdigit() and int(id_or_number) <= MAX_ID:
            stmt = stmt.where(
                or_(OrderModel.id == int(id_or_number), OrderModel.order_number == str(id_or_number))
            )
        else:
            stmt = stmt.where(OrderModel.order_number == id_or_number)
        return self.db.execute(stmt).scalars().first()

    def list_orders(self, status: str | None = None, limit: int | None = None):
        item_count = (
            select(func.count(OrderItemModel.id))
            .where(OrderItemModel.order_id == OrderModel.id)
            .correlate(OrderModel)
            .scalar_subquery()
        )
        stmt = select(OrderModel, item_count.label("item_count"))
        if status:
            stmt = stmt.where(OrderModel.order_status == status)
        stmt = stmt.order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
        if limit:
            stmt = stmt.limit(limit)
        return self.db.execute(stmt).all()

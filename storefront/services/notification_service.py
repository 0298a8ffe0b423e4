# storefront/services/notification_service.py
from storefront.celery_worker import celery_app
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class NotificationService:
    """Powiadomienia o zamowieniach, kolejkowane w Celery."""

    @staticmethod
    def send_order_notification(order_id: int, order_number: str, customer_email: str):
        # wolane dopiero po commit, rollback nie moze wyslac maila
        send_order_notification_task.delay(order_id, order_number, customer_email)


@celery_app.task(name="storefront.send_order_notification")
def send_order_notification_task(order_id: int, order_number: str, customer_email: str):
    """
    Potwierdzenie przyjecia zamowienia dla klienta.
    Bez bramki mailowej tylko wpis w logu.
    """
    logger.info(f"[NOTIFICATION] {customer_email}: order {order_number} (id {order_id}) received")

    return {"order_id": order_id, "order_number": order_number, "customer_email": customer_email, "status": "logged"}

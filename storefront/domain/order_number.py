# storefront/domain/order_number.py
import secrets
import time
from datetime import datetime, timezone

from storefront.utils.settings import ORDER_NUMBER_PREFIX


def generate_order_number(now: datetime | None = None, prefix: str | None = None) -> str:
    """
    Kandydat na numer zamowienia: prefix + YYYYMMDD + 6 cyfr mikrosekund + 4 cyfry losowe.
    Unikalnosc sprawdza OrderService w tej samej transakcji.
    """
    now = now or datetime.now(timezone.utc)
    prefix = ORDER_NUMBER_PREFIX if prefix is None else prefix

    micros = (time.time_ns() // 1000) % 1_000_000
    suffix = 1000 + secrets.randbelow(9000)

    return f"{prefix}{now:%Y%m%d}{micros:06d}{suffix}"

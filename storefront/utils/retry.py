# storefront/utils/retry.py
from tenacity import (
    Retrying,
    retry,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_random_exponential,
)

from storefront.domain.errors import StaleStockError, OrderNumberCollisionError
from storefront.utils.settings import STOCK_CONFLICT_RETRIES, ORDER_NUMBER_MAX_ATTEMPTS


def conflict_retry():
    """
    Ponawia cala transakcje zamowienia gdy optimistic locking wykryje
    zmiane wiersza albo unique na order_number odrzuci insert.
    Jitter rozprasza rownolegle checkouty na tym samym produkcie.
    """
    return retry(
        reraise=True,
        stop=stop_after_attempt(STOCK_CONFLICT_RETRIES),
        wait=wait_random_exponential(multiplier=0.02, max=0.5),
        retry=retry_if_exception_type((StaleStockError, OrderNumberCollisionError)),
    )


def order_number_attempts():
    # kandydat zajety -> None -> kolejna proba, bez czekania
    return Retrying(
        stop=stop_after_attempt(ORDER_NUMBER_MAX_ATTEMPTS),
        retry=retry_if_result(lambda number: number is None),
    )

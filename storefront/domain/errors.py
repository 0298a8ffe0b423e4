# storefront/domain/errors.py


class StorefrontError(Exception):
    """Baza dla bledow domenowych, status_code uzywaja routery."""

    status_code = 500
    client_fault = False


class ValidationError(StorefrontError):
    status_code = 400
    client_fault = True


class NotFoundError(StorefrontError):
    status_code = 404
    client_fault = True


class ConflictError(StorefrontError):
    status_code = 409
    client_fault = True


class InsufficientStockError(ConflictError):
    def __init__(self, product_id: int, product_name: str, available: int, requested: int):
        self.product_id = product_id
        self.product_name = product_name
        self.available = available
        self.requested = requested
        super().__init__(f"Insufficient stock for {product_name}. Available: {available}")


class StaleStockError(ConflictError):
    """Wiersz produktu zmienil sie miedzy odczytem a zapisem (version mismatch)."""

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Stock for product {product_id} changed concurrently, please retry")


class OrderNumberCollisionError(ConflictError):
    """Rownolegla transakcja zapisala ten sam numer zamowienia."""


class OrderNumberExhaustedError(ConflictError):
    status_code = 503
    client_fault = False


class IntegrityGuardError(StorefrontError):
    """Cykl albo limit glebokosci w grafie kategorii."""

    status_code = 409

    def __init__(self, category_id: int, reason: str):
        self.category_id = category_id
        self.reason = reason
        super().__init__(f"Category graph integrity problem at category {category_id}: {reason}")


class StoreError(StorefrontError):
    status_code = 500

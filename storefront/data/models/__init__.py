#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from storefront.data.models.category import CategoryModel
from storefront.data.models.product import ProductModel
from storefront.data.models.order import OrderModel, OrderItemModel, ShippingAddressModel

__all__ = [
    "CategoryModel",
    "ProductModel",
    "OrderModel",
    "OrderItemModel",
    "ShippingAddressModel",
]

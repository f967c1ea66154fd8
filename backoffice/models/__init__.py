"""Models package - exports all SQLAlchemy models."""
from backoffice.models.mixins import SoftDeleteMixin, TimestampMixin, TRASHED_FILTERS
from backoffice.models.brand import Brand
from backoffice.models.category import Category
from backoffice.models.product import Product, ProductType, category_product
from backoffice.models.customer import Customer
from backoffice.models.order import Order, OrderStatus
from backoffice.models.order_item import OrderItem

__all__ = [
    'SoftDeleteMixin', 'TimestampMixin', 'TRASHED_FILTERS',
    'Brand', 'Category', 'Product', 'ProductType', 'category_product',
    'Customer', 'Order', 'OrderStatus', 'OrderItem',
]

"""Product model."""
import enum
from sqlalchemy import Column, BigInteger, String, Text, Boolean, Integer, Numeric, Date, ForeignKey, Table, CheckConstraint, Enum
from sqlalchemy.orm import relationship
from datetime import date
from backoffice.database import Base, BigIntegerPK
from backoffice.models.mixins import TimestampMixin, SoftDeleteMixin


class ProductType(str, enum.Enum):
    """How a product reaches the customer."""
    DOWNLOADABLE = 'Downloadable'
    DELIVERABLE = 'Deliverable'


# Many-to-many link between categories and products
category_product = Table(
    'category_product',
    Base.metadata,
    Column('category_id', BigInteger, ForeignKey('category.id', ondelete='CASCADE'), primary_key=True),
    Column('product_id', BigInteger, ForeignKey('product.id', ondelete='CASCADE'), primary_key=True),
)


class Product(TimestampMixin, SoftDeleteMixin, Base):
    """Product model."""

    __tablename__ = 'product'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    brand_id = Column(BigInteger, ForeignKey('brand.id'), nullable=False, index=True)
    name = Column(String(255), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True)
    sku = Column(String(64), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    price = Column(Numeric(8, 2), nullable=False)  # up to 6 integer digits
    quantity = Column(Integer, nullable=False, default=0)
    type = Column(
        Enum(ProductType, name='product_type', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=ProductType.DELIVERABLE
    )
    is_visible = Column(Boolean, nullable=False, default=True)
    is_featured = Column(Boolean, nullable=False, default=False)
    published_at = Column(Date, nullable=True, default=date.today)

    # Relationships
    brand = relationship('Brand', back_populates='products')
    categories = relationship('Category', secondary=category_product, back_populates='products')

    __table_args__ = (
        CheckConstraint('quantity >= 0 AND quantity <= 100', name='product_quantity_range_check'),
        CheckConstraint('price >= 0', name='product_price_check'),
    )

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', sku='{self.sku}')>"

"""Order model."""
import enum
from sqlalchemy import Column, BigInteger, String, Numeric, Text, ForeignKey, Enum
from sqlalchemy.orm import relationship
from backoffice.database import Base, BigIntegerPK
from backoffice.models.mixins import TimestampMixin, SoftDeleteMixin
from backoffice.services.order_line_service import recompute_order_total


class OrderStatus(str, enum.Enum):
    """Order status enum."""
    PENDING = 'pending'
    PROCESSING = 'processing'
    COMPLETED = 'completed'
    DECLINED = 'declined'


class Order(TimestampMixin, SoftDeleteMixin, Base):
    """
    Customer order.

    The number is generated once at creation and never regenerated.
    Line items are owned by the order (delete-orphan).
    """

    __tablename__ = 'orders'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    number = Column(String(32), nullable=False, unique=True)
    customer_id = Column(BigInteger, ForeignKey('customer.id'), nullable=False, index=True)
    status = Column(
        Enum(OrderStatus, name='order_status', values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=OrderStatus.PENDING,
        index=True
    )
    shipping_price = Column(Numeric(10, 2), nullable=False, default=0)
    notes = Column(Text, nullable=True)

    # Relationships
    customer = relationship('Customer', back_populates='orders')
    items = relationship('OrderItem', back_populates='order', cascade='all, delete-orphan', order_by='OrderItem.id')

    @property
    def total_price(self):
        """Sum of the line totals (shipping excluded)."""
        return recompute_order_total(self.items)

    def __repr__(self):
        return f"<Order(id={self.id}, number='{self.number}', status='{self.status}')>"

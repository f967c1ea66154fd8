"""Order line item model."""
from sqlalchemy import Column, BigInteger, Integer, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from backoffice.database import Base, BigIntegerPK
from backoffice.services.order_line_service import line_total


class OrderItem(Base):
    """
    Order Item (line).

    unit_price is a snapshot of the product price taken when the product
    was selected; total_price is derived and never stored.
    """

    __tablename__ = 'order_item'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    order_id = Column(BigInteger, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(BigInteger, ForeignKey('product.id'), nullable=True, index=True)
    quantity = Column(Integer, nullable=False, default=1)
    unit_price = Column(Numeric(10, 2), nullable=False, default=0)

    # Relationships
    order = relationship('Order', back_populates='items')
    product = relationship('Product')

    __table_args__ = (
        CheckConstraint('quantity >= 0', name='order_item_quantity_check'),
    )

    @property
    def total_price(self):
        return line_total(self.quantity, self.unit_price)

    def __repr__(self):
        return f"<OrderItem(id={self.id}, product_id={self.product_id}, qty={self.quantity}, unit_price={self.unit_price})>"

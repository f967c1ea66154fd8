"""Customer model."""
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from backoffice.database import Base, BigIntegerPK
from backoffice.models.mixins import TimestampMixin, SoftDeleteMixin


class Customer(TimestampMixin, SoftDeleteMixin, Base):
    """Customer placing orders."""

    __tablename__ = 'customer'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(200), nullable=False)
    email = Column(String(255), nullable=False, unique=True)
    phone = Column(String(50), nullable=True)

    # Relationships
    orders = relationship('Order', back_populates='customer')

    def __repr__(self):
        return f"<Customer(id={self.id}, name='{self.name}')>"

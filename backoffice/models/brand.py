"""Brand model."""
from sqlalchemy import Column, String, Text, Boolean
from sqlalchemy.orm import relationship
from backoffice.database import Base, BigIntegerPK
from backoffice.models.mixins import TimestampMixin, SoftDeleteMixin


class Brand(TimestampMixin, SoftDeleteMixin, Base):
    """Product brand."""

    __tablename__ = 'brand'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True)  # URL-safe identifier, frozen after creation
    url = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_visible = Column(Boolean, nullable=False, default=True)
    primary_hex = Column(String(7), nullable=True)

    # Relationships
    products = relationship('Product', back_populates='brand')

    def __repr__(self):
        return f"<Brand(id={self.id}, name='{self.name}', slug='{self.slug}')>"

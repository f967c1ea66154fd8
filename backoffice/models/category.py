"""Category model."""
from sqlalchemy import Column, String, Text, Boolean, BigInteger, ForeignKey
from sqlalchemy.orm import relationship
from backoffice.database import Base, BigIntegerPK
from backoffice.models.mixins import TimestampMixin, SoftDeleteMixin


class Category(TimestampMixin, SoftDeleteMixin, Base):
    """
    Product Category.

    Categories form a tree through the nullable parent_id self-reference.
    """

    __tablename__ = 'category'

    id = Column(BigIntegerPK, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False, unique=True)
    slug = Column(String(255), nullable=False, unique=True)
    description = Column(Text, nullable=True)
    is_visible = Column(Boolean, nullable=False, default=True)
    parent_id = Column(BigInteger, ForeignKey('category.id', ondelete='SET NULL'), nullable=True, index=True)

    # Relationships
    parent = relationship('Category', remote_side=[id], back_populates='children')
    children = relationship('Category', back_populates='parent')
    products = relationship('Product', secondary='category_product', back_populates='categories')

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}', parent_id={self.parent_id})>"

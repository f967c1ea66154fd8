"""Shared column mixins for back-office models."""
from datetime import datetime, timezone
from sqlalchemy import Column, DateTime
from sqlalchemy.sql import func


TRASHED_FILTERS = ('without', 'with', 'only')


class TimestampMixin:
    """created_at / updated_at columns maintained by the database."""

    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
    updated_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now())


class SoftDeleteMixin:
    """
    Logical deletion.

    Rows are never purged: deleting sets deleted_at and restoring clears it.
    Listings hide trashed rows unless asked otherwise.
    """

    deleted_at = Column(DateTime(timezone=True), nullable=True, index=True)

    @property
    def is_trashed(self):
        return self.deleted_at is not None

    def soft_delete(self):
        """Mark the record as deleted (idempotent)."""
        if self.deleted_at is None:
            self.deleted_at = datetime.now(timezone.utc)

    def restore(self):
        """Bring a trashed record back."""
        self.deleted_at = None

    @classmethod
    def apply_trashed_filter(cls, query, trashed='without'):
        """
        Restrict a query according to the trashed filter.

        Args:
            query: SQLAlchemy query over cls
            trashed: 'without' (default), 'with' or 'only'
        """
        if trashed == 'with':
            return query
        if trashed == 'only':
            return query.filter(cls.deleted_at.isnot(None))
        return query.filter(cls.deleted_at.is_(None))

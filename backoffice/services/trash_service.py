"""Soft-delete operations shared by every resource."""

import logging
from typing import Iterable, List
from backoffice.exceptions import BusinessLogicError, NotFoundError

logger = logging.getLogger(__name__)


def get_record_or_404(session, model, record_id: int, with_trashed: bool = False, label: str = 'Registro'):
    """Fetch a row by id or raise NotFoundError."""
    query = session.query(model).filter(model.id == record_id)
    if not with_trashed:
        query = query.filter(model.deleted_at.is_(None))
    record = query.first()
    if not record:
        raise NotFoundError(f'{label} no encontrado')
    return record


def delete_record(session, model, record_id: int, label: str = 'Registro'):
    """Soft-delete one row."""
    record = get_record_or_404(session, model, record_id, label=label)
    record.soft_delete()
    session.flush()
    logger.info(f"Soft-deleted {model.__tablename__} id={record_id}")
    return record


def restore_record(session, model, record_id: int, label: str = 'Registro'):
    """Restore a trashed row."""
    record = get_record_or_404(session, model, record_id, with_trashed=True, label=label)
    if not record.is_trashed:
        raise BusinessLogicError(f'{label} no está eliminado.')
    record.restore()
    session.flush()
    logger.info(f"Restored {model.__tablename__} id={record_id}")
    return record


def bulk_delete(session, model, record_ids: Iterable[int]) -> List[int]:
    """
    Soft-delete every listed row that is still active.

    Returns:
        ids actually deleted (unknown or already trashed ids are skipped)
    """
    ids = [int(record_id) for record_id in record_ids]
    if not ids:
        return []

    records = session.query(model).filter(
        model.id.in_(ids),
        model.deleted_at.is_(None)
    ).all()
    for record in records:
        record.soft_delete()
    session.flush()

    deleted = sorted(record.id for record in records)
    logger.info(f"Bulk soft-deleted {len(deleted)} {model.__tablename__} rows")
    return deleted

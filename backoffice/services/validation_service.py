"""Shared field validation for resource services."""

from typing import Dict, Iterable, Optional, Tuple
from sqlalchemy import func


def find_duplicate(session, model, field: str, value, exclude_id: Optional[int] = None):
    """
    Return the row whose `field` matches `value` (case-insensitive for
    strings), ignoring the record being edited. Trashed rows still count:
    the database constraint does not know about soft deletion.
    """
    column = getattr(model, field)
    if isinstance(value, str):
        query = session.query(model).filter(func.lower(column) == value.lower())
    else:
        query = session.query(model).filter(column == value)

    if exclude_id:
        query = query.filter(model.id != exclude_id)

    return query.first()


def validate_unique(session, model, fields: Iterable[Tuple[str, str]], data: Dict, exclude_id: Optional[int] = None) -> Dict[str, str]:
    """
    Check several unique fields at once.

    Args:
        model: Mapped class
        fields: (field_name, human label) pairs
        data: Submitted values
        exclude_id: Id of the record being edited

    Returns:
        dict field -> error message (empty when all values are free)
    """
    errors = {}
    for field, label in fields:
        value = data.get(field)
        if value in (None, ''):
            continue
        if find_duplicate(session, model, field, value, exclude_id):
            errors[field] = f"Ya existe un registro con {label} '{value}'"
    return errors

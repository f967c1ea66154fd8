"""Brand service - create, edit and list brands."""

import logging
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from backoffice.models import Brand
from backoffice.exceptions import BusinessLogicError, ValidationError
from backoffice.services.slug_service import Operation, derive_slug
from backoffice.services.validation_service import validate_unique
from backoffice.services.trash_service import get_record_or_404
from backoffice.utils.query_helpers import apply_search, apply_sort

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = (('name', 'el nombre'), ('slug', 'el slug'), ('url', 'la URL'))

SORTABLE = {
    'name': Brand.name,
    'url': Brand.url,
    'is_visible': Brand.is_visible,
    'updated_at': Brand.updated_at,
}


def list_brands(session, search: Optional[str] = None, sort: str = 'name', direction: str = 'asc', trashed: str = 'without') -> List[Brand]:
    """Brands matching the search (name or URL), sorted."""
    query = Brand.apply_trashed_filter(session.query(Brand), trashed)
    query = apply_search(query, [Brand.name, Brand.url], search)
    query = apply_sort(query, sort, direction, SORTABLE, default='name')
    return query.all()


def get_brand_or_404(session, brand_id: int, with_trashed: bool = False) -> Brand:
    return get_record_or_404(session, Brand, brand_id, with_trashed=with_trashed, label='Marca')


def create_brand(session, data: Dict[str, Any]) -> Brand:
    """
    Create a brand; the slug is derived from the name here, once.

    Raises:
        ValidationError: empty slug or duplicate name/slug/url
    """
    data = dict(data)
    if not str(data.get('url') or '').strip():
        raise ValidationError({'url': 'La URL es obligatoria'})

    data['slug'] = derive_slug(Operation.CREATE, data.get('name'))
    if not data['slug']:
        raise ValidationError({'name': 'El nombre no genera un slug válido'})

    errors = validate_unique(session, Brand, UNIQUE_FIELDS, data)
    if errors:
        raise ValidationError(errors)

    brand = Brand(
        name=data['name'],
        slug=data['slug'],
        url=data['url'],
        description=data.get('description'),
        is_visible=data.get('is_visible', True),
        primary_hex=data.get('primary_hex'),
    )
    session.add(brand)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f'No se pudo crear la marca "{data["name"]}": valor duplicado.')

    logger.info(f"Brand created: id={brand.id} slug={brand.slug}")
    return brand


def update_brand(session, brand_id: int, data: Dict[str, Any]) -> Brand:
    """Update a brand. The slug is never recomputed on edit."""
    brand = get_brand_or_404(session, brand_id)

    data = {key: value for key, value in data.items() if key != 'slug'}
    errors = validate_unique(session, Brand, UNIQUE_FIELDS, data, exclude_id=brand.id)
    if errors:
        raise ValidationError(errors)

    for key in ('name', 'url', 'description', 'is_visible', 'primary_hex'):
        if key in data:
            setattr(brand, key, data[key])

    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f'No se pudo actualizar la marca "{brand.name}": valor duplicado.')
    return brand

"""
Category service.

Categories form a tree through parent_id. Assigning a parent that is the
category itself or one of its descendants is rejected.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased

from backoffice.models import Category, Product
from backoffice.exceptions import BusinessLogicError, ValidationError
from backoffice.services.slug_service import Operation, derive_slug
from backoffice.services.validation_service import validate_unique
from backoffice.services.trash_service import get_record_or_404
from backoffice.services import product_service
from backoffice.utils.query_helpers import apply_search, apply_sort

logger = logging.getLogger(__name__)

UNIQUE_FIELDS = (('name', 'el nombre'), ('slug', 'el slug'))

ParentCategory = aliased(Category)

SORTABLE = {
    'name': Category.name,
    'parent': ParentCategory.name,
    'is_visible': Category.is_visible,
    'updated_at': Category.updated_at,
}


def list_categories(session, search: Optional[str] = None, sort: str = 'name', direction: str = 'asc', trashed: str = 'without') -> List[Category]:
    """Categories matching name or parent name."""
    query = session.query(Category).outerjoin(ParentCategory, Category.parent_id == ParentCategory.id)
    query = Category.apply_trashed_filter(query, trashed)
    query = apply_search(query, [Category.name, ParentCategory.name], search)
    query = apply_sort(query, sort, direction, SORTABLE, default='name')
    return query.all()


def get_category_or_404(session, category_id: int, with_trashed: bool = False) -> Category:
    return get_record_or_404(session, Category, category_id, with_trashed=with_trashed, label='Categoría')


def parent_map(session) -> Dict[int, Optional[int]]:
    """category id -> parent id (None for roots), trashed rows included."""
    return {row.id: row.parent_id for row in session.query(Category.id, Category.parent_id).all()}


def would_create_cycle(parents: Dict[int, Optional[int]], category_id: Optional[int], parent_id: Optional[int]) -> bool:
    """
    True if making `parent_id` the parent of `category_id` closes a loop.

    Walks up from the proposed parent; reaching category_id means the
    parent is the category itself or one of its descendants.
    """
    if parent_id is None or category_id is None:
        return False

    seen = set()
    current = parent_id
    while current is not None and current not in seen:
        if current == category_id:
            return True
        seen.add(current)
        current = parents.get(current)
    return False


def _resolve_parent(session, category_id: Optional[int], parent_id) -> Optional[Category]:
    if not parent_id:
        return None

    parent = session.query(Category).filter(
        Category.id == int(parent_id),
        Category.deleted_at.is_(None)
    ).first()
    if not parent:
        raise ValidationError({'parent_id': 'La categoría padre no existe'})
    if would_create_cycle(parent_map(session), category_id, parent.id):
        raise ValidationError({'parent_id': 'Una categoría no puede ser su propio ancestro'})
    return parent


def create_category(session, data: Dict[str, Any]) -> Category:
    """Create a category; slug derived from the name here, once."""
    data = dict(data)
    if not str(data.get('name') or '').strip():
        raise ValidationError({'name': 'El nombre es obligatorio'})

    data['slug'] = derive_slug(Operation.CREATE, data['name'])
    if not data['slug']:
        raise ValidationError({'name': 'El nombre no genera un slug válido'})

    errors = validate_unique(session, Category, UNIQUE_FIELDS, data)
    if errors:
        raise ValidationError(errors)

    category = Category(
        name=data['name'],
        slug=data['slug'],
        description=data.get('description'),
        is_visible=data.get('is_visible', True),
        parent=_resolve_parent(session, None, data.get('parent_id')),
    )
    session.add(category)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f'No se pudo crear la categoría "{data["name"]}": valor duplicado.')

    logger.info(f"Category created: id={category.id} slug={category.slug}")
    return category


def set_parent(session, category_id: int, parent_id) -> Category:
    """
    Move a category under another one (None makes it a root).

    Raises:
        ValidationError: the parent doesn't exist or would close a cycle
    """
    category = get_category_or_404(session, category_id)
    category.parent = _resolve_parent(session, category.id, parent_id)
    session.flush()
    logger.info(f"Category {category.id} moved under parent_id={category.parent_id}")
    return category


def update_category(session, category_id: int, data: Dict[str, Any]) -> Category:
    """Update a category; the slug is left as created."""
    category = get_category_or_404(session, category_id)

    data = {key: value for key, value in data.items() if key != 'slug'}
    errors = validate_unique(session, Category, UNIQUE_FIELDS, data, exclude_id=category.id)
    if errors:
        raise ValidationError(errors)

    for key in ('name', 'description', 'is_visible'):
        if key in data:
            setattr(category, key, data[key])
    if 'parent_id' in data:
        category.parent = _resolve_parent(session, category.id, data['parent_id'])

    session.flush()
    return category


# =====================================================
# PRODUCTS OF A CATEGORY (relation manager)
# =====================================================

def list_category_products(session, category_id: int, **filters) -> List[Product]:
    """Products attached to a category, with the usual product filters."""
    get_category_or_404(session, category_id)
    return product_service.list_products(session, category_id=category_id, **filters)


def create_product_in_category(session, category_id: int, data: Dict[str, Any]) -> Product:
    """Create a product already attached to this category."""
    category = get_category_or_404(session, category_id)
    data = dict(data)
    category_ids = [int(cid) for cid in (data.get('category_ids') or [])]
    if category.id not in category_ids:
        category_ids.append(category.id)
    data['category_ids'] = category_ids
    return product_service.create_product(session, data)


def detach_product(session, category_id: int, product_id: int) -> Product:
    """
    Remove the link between a category and a product.

    Raises:
        BusinessLogicError: it is the product's only category
    """
    category = get_category_or_404(session, category_id)
    product = product_service.get_product_or_404(session, product_id)

    if category not in product.categories:
        raise BusinessLogicError(f'El producto "{product.name}" no pertenece a "{category.name}".')
    if len(product.categories) == 1:
        raise BusinessLogicError(f'El producto "{product.name}" debe tener al menos una categoría.')

    product.categories.remove(category)
    session.flush()
    return product

"""
Product service - catalog products with pricing, inventory and associations.

Validation mirrors the product form: price has at most 6 integer and 2
fractional digits, stock quantity stays within 0..100, a brand and at least
one category are required.
"""

import logging
import re
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import joinedload

from backoffice.models import Product, ProductType, Brand, Category
from backoffice.exceptions import BusinessLogicError, ValidationError
from backoffice.services.slug_service import Operation, derive_slug
from backoffice.services.validation_service import validate_unique
from backoffice.services.trash_service import get_record_or_404
from backoffice.utils.query_helpers import apply_search, apply_sort

logger = logging.getLogger(__name__)

PRICE_PATTERN = re.compile(r'^\d{1,6}(\.\d{0,2})?$')
MIN_STOCK_QTY = 0
MAX_STOCK_QTY = 100

UNIQUE_FIELDS = (('name', 'el nombre'), ('slug', 'el slug'), ('sku', 'el SKU'))

SORTABLE = {
    'name': Product.name,
    'brand': Brand.name,
    'price': Product.price,
    'quantity': Product.quantity,
    'published_at': Product.published_at,
    'is_visible': Product.is_visible,
}


def parse_price(value) -> Decimal:
    """
    Validate and convert a price.

    Raises:
        ValidationError: not matching ^\\d{1,6}(\\.\\d{0,2})?$
    """
    raw = str(value if value is not None else '').strip()
    if not PRICE_PATTERN.match(raw):
        raise ValidationError({'price': 'Precio inválido: hasta 6 dígitos enteros y 2 decimales'})
    try:
        return Decimal(raw).quantize(Decimal('0.01'))
    except InvalidOperation:
        raise ValidationError({'price': 'Precio inválido'})


def _validate_fields(session, data: Dict[str, Any], partial: bool = False) -> Dict[str, Any]:
    """
    Check field rules and resolve brand/categories.

    Returns:
        cleaned dict ready to apply on a Product
    """
    errors = {}
    cleaned = {}

    for key, message in (('name', 'El nombre es obligatorio'), ('sku', 'El SKU es obligatorio')):
        if (key in data or not partial) and not str(data.get(key) or '').strip():
            errors[key] = message

    if 'price' in data or not partial:
        try:
            cleaned['price'] = parse_price(data.get('price'))
        except ValidationError as e:
            errors.update(e.errors)

    if 'quantity' in data or not partial:
        quantity = data.get('quantity')
        if quantity is None or isinstance(quantity, bool) or not str(quantity).strip().isdigit():
            errors['quantity'] = 'La cantidad debe ser un entero entre 0 y 100'
        elif not MIN_STOCK_QTY <= int(quantity) <= MAX_STOCK_QTY:
            errors['quantity'] = 'La cantidad debe ser un entero entre 0 y 100'
        else:
            cleaned['quantity'] = int(quantity)

    if 'type' in data or not partial:
        try:
            cleaned['type'] = ProductType(data.get('type'))
        except ValueError:
            errors['type'] = 'Tipo de producto inválido'

    if 'brand_id' in data or not partial:
        brand = None
        if data.get('brand_id'):
            brand = session.query(Brand).filter(
                Brand.id == data['brand_id'],
                Brand.deleted_at.is_(None)
            ).first()
        if not brand:
            errors['brand_id'] = 'La marca es obligatoria'
        else:
            cleaned['brand'] = brand

    if 'category_ids' in data or not partial:
        ids = [int(category_id) for category_id in (data.get('category_ids') or [])]
        categories = []
        if ids:
            categories = session.query(Category).filter(
                Category.id.in_(ids),
                Category.deleted_at.is_(None)
            ).all()
        if not ids:
            errors['category_ids'] = 'Selecciona al menos una categoría'
        elif len(categories) != len(set(ids)):
            errors['category_ids'] = 'Alguna de las categorías no existe'
        else:
            cleaned['categories'] = categories

    if errors:
        raise ValidationError(errors)

    for key in ('name', 'sku', 'description', 'is_visible', 'is_featured', 'published_at'):
        if key in data:
            cleaned[key] = data[key]
    return cleaned


def list_products(
    session,
    search: Optional[str] = None,
    visible: Optional[bool] = None,
    brand_id: Optional[int] = None,
    category_id: Optional[int] = None,
    sort: str = 'name',
    direction: str = 'asc',
    trashed: str = 'without'
) -> List[Product]:
    """
    Product listing.

    Args:
        search: matches name, slug or description
        visible: ternary visibility filter (None = all)
        brand_id: only products of this brand
        category_id: only products attached to this category
    """
    query = session.query(Product).join(Brand, Product.brand_id == Brand.id).options(
        joinedload(Product.brand)
    )
    query = Product.apply_trashed_filter(query, trashed)
    query = apply_search(query, [Product.name, Product.slug, Product.description], search)

    if visible is not None:
        query = query.filter(Product.is_visible == visible)
    if brand_id:
        query = query.filter(Product.brand_id == brand_id)
    if category_id:
        query = query.filter(Product.categories.any(Category.id == category_id))

    query = apply_sort(query, sort, direction, SORTABLE, default='name')
    return query.all()


def get_product_or_404(session, product_id: int, with_trashed: bool = False) -> Product:
    return get_record_or_404(session, Product, product_id, with_trashed=with_trashed, label='Producto')


def get_product_price(session, product_id) -> Optional[Decimal]:
    """Current price of an active product, None if it doesn't exist."""
    try:
        product_id = int(product_id)
    except (TypeError, ValueError):
        return None
    product = session.query(Product).filter(
        Product.id == product_id,
        Product.deleted_at.is_(None)
    ).first()
    return product.price if product else None


def create_product(session, data: Dict[str, Any]) -> Product:
    """Create a product; slug derived from the name at creation."""
    data = dict(data)
    cleaned = _validate_fields(session, data)

    slug = derive_slug(Operation.CREATE, data.get('name'))
    if not slug:
        raise ValidationError({'name': 'El nombre no genera un slug válido'})
    data['slug'] = slug

    errors = validate_unique(session, Product, UNIQUE_FIELDS, data)
    if errors:
        raise ValidationError(errors)

    product = Product(
        slug=slug,
        is_visible=True,
        is_featured=False,
        published_at=date.today(),
    )
    for key, value in cleaned.items():
        if value is None and key in ('is_visible', 'is_featured', 'published_at'):
            continue
        setattr(product, key, value)

    session.add(product)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f'No se pudo crear el producto "{data.get("name")}": valor duplicado.')

    logger.info(f"Product created: id={product.id} sku={product.sku} slug={product.slug}")
    return product


def update_product(session, product_id: int, data: Dict[str, Any]) -> Product:
    """
    Update a product. The slug stays as it was derived at creation.

    Price changes only affect future order lines: existing lines keep
    their snapshot.
    """
    product = get_product_or_404(session, product_id)

    data = {key: value for key, value in data.items() if key != 'slug'}
    errors = validate_unique(session, Product, UNIQUE_FIELDS, data, exclude_id=product.id)
    if errors:
        raise ValidationError(errors)

    cleaned = _validate_fields(session, data, partial=True)
    for key, value in cleaned.items():
        setattr(product, key, value)

    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f'No se pudo actualizar el producto "{product.name}": valor duplicado.')
    return product

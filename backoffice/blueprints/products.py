"""Products blueprint - product table, filters and form endpoints."""
from flask import Blueprint, request, current_app
from typing import Any, Dict, Tuple
from backoffice.database import get_session
from backoffice.exceptions import BusinessLogicError, NotFoundError, ValidationError
from backoffice.forms.catalog_forms import ProductForm
from backoffice.models import Product, TRASHED_FILTERS
from backoffice.services import product_service, trash_service
from backoffice.services.slug_service import derive_slug
from backoffice.utils.query_helpers import parse_ternary
from backoffice.utils.serializers import product_to_dict

products_bp = Blueprint('products', __name__, url_prefix='/products')


def get_product_data_from_form(form: ProductForm) -> Dict[str, Any]:
    """Extract and sanitize product data from a validated form."""
    return {
        'name': form.name.data.strip(),
        'sku': form.sku.data.strip(),
        'description': (form.description.data or '').strip() or None,
        'price': form.price.data.strip(),
        'quantity': form.quantity.data,
        'type': form.type.data,
        'is_visible': form.is_visible.data,
        'is_featured': form.is_featured.data,
        'published_at': form.published_at.data,
        'brand_id': form.brand_id.data,
        'category_ids': form.category_ids.data,
    }


def validated_product_form(form_class=ProductForm) -> ProductForm:
    form = form_class()
    if not form.validate_on_submit():
        raise ValidationError(form.errors)
    return form


def listing_filters() -> Dict[str, Any]:
    """Product table filters taken from the query string."""
    trashed = request.args.get('trashed', 'without')
    return {
        'search': request.args.get('q'),
        'visible': parse_ternary(request.args.get('visible')),
        'brand_id': request.args.get('brand_id', type=int),
        'sort': request.args.get('sort', 'name'),
        'direction': request.args.get('direction', 'asc'),
        'trashed': trashed if trashed in TRASHED_FILTERS else 'without',
    }


@products_bp.route('/', methods=['GET'])
def list_products() -> Dict[str, Any]:
    """
    List products.

    Query params: q, visible (1/0), brand_id, sort, direction, trashed.
    """
    session = get_session()
    products = product_service.list_products(session, **listing_filters())
    return {'results': [product_to_dict(product) for product in products]}


@products_bp.route('/slug', methods=['POST'])
def preview_slug() -> Dict[str, Any]:
    """Slug for the name just entered ({'slug': None} on edit)."""
    payload = request.get_json(silent=True) or request.form
    return {'slug': derive_slug(payload.get('operation'), payload.get('name', ''))}


@products_bp.route('/<int:product_id>', methods=['GET'])
def view_product(product_id: int) -> Dict[str, Any]:
    session = get_session()
    return product_to_dict(product_service.get_product_or_404(session, product_id, with_trashed=True))


@products_bp.route('/new', methods=['POST'])
def create_product() -> Tuple[Dict[str, Any], int]:
    """Create a new product."""
    session = get_session()
    data = get_product_data_from_form(validated_product_form())

    try:
        product = product_service.create_product(session, data)
        session.commit()
        current_app.logger.info(f"Product '{product.name}' created (sku={product.sku})")
        return product_to_dict(product), 201
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error creating product: {e}")
        raise BusinessLogicError(f'Error al crear producto: {str(e)}')


@products_bp.route('/<int:product_id>/edit', methods=['POST'])
def update_product(product_id: int) -> Dict[str, Any]:
    """Update a product."""
    session = get_session()
    data = get_product_data_from_form(validated_product_form())

    try:
        product = product_service.update_product(session, product_id, data)
        session.commit()
        return product_to_dict(product)
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error updating product {product_id}: {e}")
        raise BusinessLogicError(f'Error al actualizar producto: {str(e)}')


@products_bp.route('/<int:product_id>/delete', methods=['POST'])
def delete_product(product_id: int) -> Dict[str, Any]:
    session = get_session()
    product = trash_service.delete_record(session, Product, product_id, label='Producto')
    session.commit()
    return product_to_dict(product)


@products_bp.route('/<int:product_id>/restore', methods=['POST'])
def restore_product(product_id: int) -> Dict[str, Any]:
    session = get_session()
    product = trash_service.restore_record(session, Product, product_id, label='Producto')
    session.commit()
    return product_to_dict(product)


@products_bp.route('/bulk-delete', methods=['POST'])
def bulk_delete_products() -> Dict[str, Any]:
    session = get_session()
    ids = request.form.getlist('ids', type=int) or (request.get_json(silent=True) or {}).get('ids', [])
    deleted = trash_service.bulk_delete(session, Product, ids)
    session.commit()
    return {'deleted': deleted}

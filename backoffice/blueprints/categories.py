"""Categories blueprint - categories plus the products attached to each one."""
from flask import Blueprint, request, current_app
from typing import Any, Dict, Tuple
from backoffice.database import get_session
from backoffice.exceptions import BusinessLogicError, NotFoundError, ValidationError
from backoffice.forms.catalog_forms import CategoryForm, CategoryProductForm
from backoffice.models import Category, TRASHED_FILTERS
from backoffice.services import category_service, trash_service
from backoffice.services.slug_service import derive_slug
from backoffice.blueprints.products import get_product_data_from_form, validated_product_form, listing_filters
from backoffice.utils.serializers import category_to_dict, product_to_dict

categories_bp = Blueprint('categories', __name__, url_prefix='/categories')


def _get_category_data_from_form(form: CategoryForm) -> Dict[str, Any]:
    """Extract and sanitize category data from a validated form."""
    return {
        'name': form.name.data.strip(),
        'description': (form.description.data or '').strip() or None,
        'is_visible': form.is_visible.data,
        'parent_id': form.parent_id.data,
    }


def _validated_form() -> CategoryForm:
    form = CategoryForm()
    if not form.validate_on_submit():
        raise ValidationError(form.errors)
    return form


@categories_bp.route('/', methods=['GET'])
def list_categories() -> Dict[str, Any]:
    """List categories with their parent name."""
    session = get_session()
    trashed = request.args.get('trashed', 'without')
    categories = category_service.list_categories(
        session,
        search=request.args.get('q'),
        sort=request.args.get('sort', 'name'),
        direction=request.args.get('direction', 'asc'),
        trashed=trashed if trashed in TRASHED_FILTERS else 'without'
    )
    return {'results': [category_to_dict(category) for category in categories]}


@categories_bp.route('/slug', methods=['POST'])
def preview_slug() -> Dict[str, Any]:
    payload = request.get_json(silent=True) or request.form
    return {'slug': derive_slug(payload.get('operation'), payload.get('name', ''))}


@categories_bp.route('/<int:category_id>', methods=['GET'])
def view_category(category_id: int) -> Dict[str, Any]:
    session = get_session()
    return category_to_dict(category_service.get_category_or_404(session, category_id, with_trashed=True))


@categories_bp.route('/new', methods=['POST'])
def create_category() -> Tuple[Dict[str, Any], int]:
    """Create a new category."""
    session = get_session()
    data = _get_category_data_from_form(_validated_form())

    try:
        category = category_service.create_category(session, data)
        session.commit()
        return category_to_dict(category), 201
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error creating category: {e}")
        raise BusinessLogicError(f'Error al crear categoría: {str(e)}')


@categories_bp.route('/<int:category_id>/edit', methods=['POST'])
def update_category(category_id: int) -> Dict[str, Any]:
    """Update a category (parent changes are checked for cycles)."""
    session = get_session()
    data = _get_category_data_from_form(_validated_form())

    try:
        category = category_service.update_category(session, category_id, data)
        session.commit()
        return category_to_dict(category)
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error updating category {category_id}: {e}")
        raise BusinessLogicError(f'Error al actualizar categoría: {str(e)}')


@categories_bp.route('/<int:category_id>/delete', methods=['POST'])
def delete_category(category_id: int) -> Dict[str, Any]:
    session = get_session()
    category = trash_service.delete_record(session, Category, category_id, label='Categoría')
    session.commit()
    return category_to_dict(category)


@categories_bp.route('/<int:category_id>/restore', methods=['POST'])
def restore_category(category_id: int) -> Dict[str, Any]:
    session = get_session()
    category = trash_service.restore_record(session, Category, category_id, label='Categoría')
    session.commit()
    return category_to_dict(category)


@categories_bp.route('/bulk-delete', methods=['POST'])
def bulk_delete_categories() -> Dict[str, Any]:
    session = get_session()
    ids = request.form.getlist('ids', type=int) or (request.get_json(silent=True) or {}).get('ids', [])
    deleted = trash_service.bulk_delete(session, Category, ids)
    session.commit()
    return {'deleted': deleted}


# =====================================================
# PRODUCTS RELATION
# =====================================================

@categories_bp.route('/<int:category_id>/products', methods=['GET'])
def list_category_products(category_id: int) -> Dict[str, Any]:
    """Products attached to the category (same filters as /products)."""
    session = get_session()
    products = category_service.list_category_products(session, category_id, **listing_filters())
    return {'results': [product_to_dict(product) for product in products]}


@categories_bp.route('/<int:category_id>/products/new', methods=['POST'])
def create_category_product(category_id: int) -> Tuple[Dict[str, Any], int]:
    """Create a product from the category page; the category is attached automatically."""
    session = get_session()
    form = validated_product_form(CategoryProductForm)

    try:
        product = category_service.create_product_in_category(session, category_id, get_product_data_from_form(form))
        session.commit()
        return product_to_dict(product), 201
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error creating product in category {category_id}: {e}")
        raise BusinessLogicError(f'Error al crear producto: {str(e)}')


@categories_bp.route('/<int:category_id>/products/<int:product_id>/detach', methods=['POST'])
def detach_category_product(category_id: int, product_id: int) -> Dict[str, Any]:
    session = get_session()
    try:
        product = category_service.detach_product(session, category_id, product_id)
        session.commit()
        return product_to_dict(product)
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e

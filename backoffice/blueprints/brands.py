"""Brands blueprint - JSON endpoints used by the brand form and table."""
from flask import Blueprint, request, current_app
from typing import Any, Dict, Tuple
from backoffice.database import get_session
from backoffice.exceptions import BusinessLogicError, NotFoundError, ValidationError
from backoffice.forms.catalog_forms import BrandForm
from backoffice.models import Brand, TRASHED_FILTERS
from backoffice.services import brand_service, trash_service
from backoffice.services.slug_service import derive_slug
from backoffice.utils.serializers import brand_to_dict

brands_bp = Blueprint('brands', __name__, url_prefix='/brands')


def _get_brand_data_from_form(form: BrandForm) -> Dict[str, Any]:
    """Extract and sanitize brand data from a validated form."""
    return {
        'name': form.name.data.strip(),
        'url': form.url.data.strip(),
        'description': (form.description.data or '').strip() or None,
        'is_visible': form.is_visible.data,
        'primary_hex': (form.primary_hex.data or '').strip() or None,
    }


def _validated_form() -> BrandForm:
    form = BrandForm()
    if not form.validate_on_submit():
        raise ValidationError(form.errors)
    return form


@brands_bp.route('/', methods=['GET'])
def list_brands() -> Dict[str, Any]:
    """List brands (search, sort, trashed filter)."""
    session = get_session()
    trashed = request.args.get('trashed', 'without')
    if trashed not in TRASHED_FILTERS:
        trashed = 'without'

    brands = brand_service.list_brands(
        session,
        search=request.args.get('q'),
        sort=request.args.get('sort', 'name'),
        direction=request.args.get('direction', 'asc'),
        trashed=trashed
    )
    return {'results': [brand_to_dict(brand) for brand in brands]}


@brands_bp.route('/slug', methods=['POST'])
def preview_slug() -> Dict[str, Any]:
    """
    Name field lost focus: tell the form what to put in the slug field.

    Returns {'slug': None} on edit forms, meaning "leave the field alone".
    """
    payload = request.get_json(silent=True) or request.form
    return {'slug': derive_slug(payload.get('operation'), payload.get('name', ''))}


@brands_bp.route('/<int:brand_id>', methods=['GET'])
def view_brand(brand_id: int) -> Dict[str, Any]:
    """Brand detail."""
    session = get_session()
    brand = brand_service.get_brand_or_404(session, brand_id, with_trashed=True)
    return brand_to_dict(brand)


@brands_bp.route('/new', methods=['POST'])
def create_brand() -> Tuple[Dict[str, Any], int]:
    """Create a new brand."""
    session = get_session()
    data = _get_brand_data_from_form(_validated_form())

    try:
        brand = brand_service.create_brand(session, data)
        session.commit()
        current_app.logger.info(f"Brand '{brand.name}' created")
        return brand_to_dict(brand), 201
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error creating brand: {e}")
        raise BusinessLogicError(f'Error al crear marca: {str(e)}')


@brands_bp.route('/<int:brand_id>/edit', methods=['POST'])
def update_brand(brand_id: int) -> Dict[str, Any]:
    """Update a brand (slug stays as created)."""
    session = get_session()
    data = _get_brand_data_from_form(_validated_form())

    try:
        brand = brand_service.update_brand(session, brand_id, data)
        session.commit()
        return brand_to_dict(brand)
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error updating brand {brand_id}: {e}")
        raise BusinessLogicError(f'Error al actualizar marca: {str(e)}')


@brands_bp.route('/<int:brand_id>/delete', methods=['POST'])
def delete_brand(brand_id: int) -> Dict[str, Any]:
    """Soft-delete a brand."""
    session = get_session()
    brand = trash_service.delete_record(session, Brand, brand_id, label='Marca')
    session.commit()
    return brand_to_dict(brand)


@brands_bp.route('/<int:brand_id>/restore', methods=['POST'])
def restore_brand(brand_id: int) -> Dict[str, Any]:
    """Restore a trashed brand."""
    session = get_session()
    brand = trash_service.restore_record(session, Brand, brand_id, label='Marca')
    session.commit()
    return brand_to_dict(brand)


@brands_bp.route('/bulk-delete', methods=['POST'])
def bulk_delete_brands() -> Dict[str, Any]:
    """Soft-delete several brands at once."""
    session = get_session()
    ids = request.form.getlist('ids', type=int) or (request.get_json(silent=True) or {}).get('ids', [])
    deleted = trash_service.bulk_delete(session, Brand, ids)
    session.commit()
    return {'deleted': deleted}

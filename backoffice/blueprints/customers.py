from flask import Blueprint, request, current_app
from typing import Any, Dict, Tuple
from backoffice.database import get_session
from backoffice.exceptions import BusinessLogicError, NotFoundError, ValidationError
from backoffice.forms.customer_forms import CustomerForm
from backoffice.models import Customer, TRASHED_FILTERS
from backoffice.services import customer_service, trash_service
from backoffice.utils.serializers import customer_to_dict

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')


def _get_customer_data_from_form(form: CustomerForm) -> Dict[str, Any]:
    """Extract and sanitize customer data from a validated form."""
    return {
        'name': form.name.data.strip(),
        'email': form.email.data.strip().lower(),
        'phone': (form.phone.data or '').strip() or None,
    }


def _validated_form() -> CustomerForm:
    form = CustomerForm()
    if not form.validate_on_submit():
        raise ValidationError(form.errors)
    return form


@customers_bp.route('/', methods=['GET'])
def list_customers() -> Dict[str, Any]:
    """List customers (search over name, email and phone)."""
    session = get_session()
    trashed = request.args.get('trashed', 'without')
    customers = customer_service.list_customers(
        session,
        search=request.args.get('q'),
        sort=request.args.get('sort', 'name'),
        direction=request.args.get('direction', 'asc'),
        trashed=trashed if trashed in TRASHED_FILTERS else 'without'
    )
    return {'results': [customer_to_dict(customer) for customer in customers]}


@customers_bp.route('/<int:customer_id>', methods=['GET'])
def view_customer(customer_id: int) -> Dict[str, Any]:
    session = get_session()
    return customer_to_dict(customer_service.get_customer_or_404(session, customer_id, with_trashed=True))


@customers_bp.route('/new', methods=['POST'])
def create_customer() -> Tuple[Dict[str, Any], int]:
    """Create a new customer."""
    session = get_session()
    data = _get_customer_data_from_form(_validated_form())

    try:
        customer = customer_service.create_customer(session, data)
        session.commit()
        current_app.logger.info(f"Customer '{customer.name}' created")
        return customer_to_dict(customer), 201
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error creating customer: {e}")
        raise BusinessLogicError(f'Error al crear cliente: {str(e)}')


@customers_bp.route('/<int:customer_id>/edit', methods=['POST'])
def update_customer(customer_id: int) -> Dict[str, Any]:
    """Update a customer."""
    session = get_session()
    data = _get_customer_data_from_form(_validated_form())

    try:
        customer = customer_service.update_customer(session, customer_id, data)
        session.commit()
        return customer_to_dict(customer)
    except (BusinessLogicError, NotFoundError) as e:
        session.rollback()
        raise e
    except Exception as e:
        session.rollback()
        current_app.logger.error(f"Error updating customer {customer_id}: {e}")
        raise BusinessLogicError(f'Error al actualizar cliente: {str(e)}')


@customers_bp.route('/<int:customer_id>/delete', methods=['POST'])
def delete_customer(customer_id: int) -> Dict[str, Any]:
    session = get_session()
    customer = trash_service.delete_record(session, Customer, customer_id, label='Cliente')
    session.commit()
    return customer_to_dict(customer)


@customers_bp.route('/<int:customer_id>/restore', methods=['POST'])
def restore_customer(customer_id: int) -> Dict[str, Any]:
    session = get_session()
    customer = trash_service.restore_record(session, Customer, customer_id, label='Cliente')
    session.commit()
    return customer_to_dict(customer)


@customers_bp.route('/bulk-delete', methods=['POST'])
def bulk_delete_customers() -> Dict[str, Any]:
    session = get_session()
    ids = request.form.getlist('ids', type=int) or (request.get_json(silent=True) or {}).get('ids', [])
    deleted = trash_service.bulk_delete(session, Customer, ids)
    session.commit()
    return {'deleted': deleted}

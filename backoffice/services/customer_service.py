"""Customer service - the people orders belong to."""

import logging
from typing import Any, Dict, List, Optional
from sqlalchemy.exc import IntegrityError
from backoffice.models import Customer
from backoffice.exceptions import BusinessLogicError, ValidationError
from backoffice.services.validation_service import validate_unique
from backoffice.services.trash_service import get_record_or_404
from backoffice.utils.query_helpers import apply_search, apply_sort

logger = logging.getLogger(__name__)

SORTABLE = {
    'name': Customer.name,
    'email': Customer.email,
    'created_at': Customer.created_at,
}


def list_customers(session, search: Optional[str] = None, sort: str = 'name', direction: str = 'asc', trashed: str = 'without') -> List[Customer]:
    query = Customer.apply_trashed_filter(session.query(Customer), trashed)
    query = apply_search(query, [Customer.name, Customer.email, Customer.phone], search)
    query = apply_sort(query, sort, direction, SORTABLE, default='name')
    return query.all()


def get_customer_or_404(session, customer_id: int, with_trashed: bool = False) -> Customer:
    return get_record_or_404(session, Customer, customer_id, with_trashed=with_trashed, label='Cliente')


def create_customer(session, data: Dict[str, Any]) -> Customer:
    """Create a customer (email unique)."""
    errors = validate_unique(session, Customer, (('email', 'el email'),), data)
    if errors:
        raise ValidationError(errors)

    customer = Customer(name=data['name'], email=data['email'], phone=data.get('phone'))
    session.add(customer)
    try:
        session.flush()
    except IntegrityError:
        session.rollback()
        raise BusinessLogicError(f'No se pudo crear el cliente "{data["name"]}".')

    logger.info(f"Customer created: id={customer.id}")
    return customer


def update_customer(session, customer_id: int, data: Dict[str, Any]) -> Customer:
    customer = get_customer_or_404(session, customer_id)
    errors = validate_unique(session, Customer, (('email', 'el email'),), data, exclude_id=customer.id)
    if errors:
        raise ValidationError(errors)

    for key in ('name', 'email', 'phone'):
        if key in data:
            setattr(customer, key, data[key])
    session.flush()
    return customer

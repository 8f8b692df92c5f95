"""Customer service: customer records and their sales/quote history."""
from typing import Dict, List, Optional

from sqlalchemy import or_

from bizhub.exceptions import NotFoundError, ValidationError
from bizhub.models import Customer, Quote, Sale

CUSTOMER_FIELDS = ('name', 'email', 'phone', 'address', 'notes')


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def list_customers(session, business_id: int, search: Optional[str] = None) -> List[Customer]:
    """Customers of a business ordered by name, filtered by name or email."""
    query = session.query(Customer).filter(Customer.business_id == business_id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(Customer.name.ilike(pattern), Customer.email.ilike(pattern)))
    return query.order_by(Customer.name).all()


def get_customer(session, business_id: int, customer_id: int) -> Customer:
    customer = session.query(Customer).filter(
        Customer.id == customer_id,
        Customer.business_id == business_id
    ).first()
    if not customer:
        raise NotFoundError(f'Customer {customer_id} not found.')
    return customer


def create_customer(session, business_id: int, data: Dict) -> Customer:
    """
    Create a customer.

    Raises:
        ValidationError: If the name is empty
    """
    name = _clean(data.get('name'))
    if not name:
        raise ValidationError('Customer name is required.')

    customer = Customer(business_id=business_id, name=name)
    for field in CUSTOMER_FIELDS[1:]:
        setattr(customer, field, _clean(data.get(field)))

    session.add(customer)
    session.commit()
    return customer


def update_customer(session, business_id: int, customer_id: int, data: Dict) -> Customer:
    customer = get_customer(session, business_id, customer_id)

    if 'name' in data and not _clean(data.get('name')):
        raise ValidationError('Customer name is required.')

    for field in CUSTOMER_FIELDS:
        if field in data:
            setattr(customer, field, _clean(data[field]))

    session.commit()
    return customer


def delete_customer(session, business_id: int, customer_id: int) -> None:
    """Delete a customer; their sales and quotes keep the stored client name."""
    customer = get_customer(session, business_id, customer_id)
    try:
        session.query(Sale).filter(
            Sale.business_id == business_id, Sale.customer_id == customer.id
        ).update({Sale.customer_id: None}, synchronize_session=False)
        session.query(Quote).filter(
            Quote.business_id == business_id, Quote.customer_id == customer.id
        ).update({Quote.customer_id: None}, synchronize_session=False)
        session.delete(customer)
        session.commit()
    except Exception:
        session.rollback()
        raise


def get_customer_history(session, business_id: int, customer_id: int) -> Dict:
    """
    Sales (newest first by date) and quotes (newest first) for a customer.

    Returns:
        dict with customer, sales and quotes (model instances)
    """
    customer = get_customer(session, business_id, customer_id)
    sales = session.query(Sale).filter(
        Sale.business_id == business_id,
        Sale.customer_id == customer.id
    ).order_by(Sale.date.desc()).all()
    quotes = session.query(Quote).filter(
        Quote.business_id == business_id,
        Quote.customer_id == customer.id
    ).order_by(Quote.created_at.desc()).all()
    return {'customer': customer, 'sales': sales, 'quotes': quotes}

"""Lead service: pipeline tracking and conversion into customers."""
import logging
from typing import Dict, List, Optional

from sqlalchemy import or_

from bizhub.exceptions import NotFoundError, ValidationError
from bizhub.models import Customer, Lead, LeadStatus

logger = logging.getLogger(__name__)

LEAD_STATUSES = [status.value for status in LeadStatus]
LEAD_FIELDS = ('name', 'email', 'phone', 'source', 'notes')


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _validate_status(status: Optional[str]) -> str:
    # Status names are matched case-insensitively ("new" == "New")
    for value in LEAD_STATUSES:
        if status and status.lower() == value.lower():
            return value
    raise ValidationError(f"Invalid lead status '{status}'.")


def list_leads(session, business_id: int, search: Optional[str] = None,
               status: Optional[str] = None) -> List[Lead]:
    """
    Leads of a business, newest first.

    Args:
        search: Matches name, email, source or status
        status: A LeadStatus value or 'all'
    """
    query = session.query(Lead).filter(Lead.business_id == business_id)
    if search and search.strip():
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Lead.name.ilike(pattern),
            Lead.email.ilike(pattern),
            Lead.source.ilike(pattern),
            Lead.status.ilike(pattern)
        ))
    if status and status.lower() != 'all':
        query = query.filter(Lead.status == _validate_status(status))
    return query.order_by(Lead.created_at.desc(), Lead.id.desc()).all()


def get_lead(session, business_id: int, lead_id: int) -> Lead:
    lead = session.query(Lead).filter(Lead.id == lead_id, Lead.business_id == business_id).first()
    if not lead:
        raise NotFoundError(f'Lead {lead_id} not found.')
    return lead


def create_lead(session, business_id: int, data: Dict) -> Lead:
    name = _clean(data.get('name'))
    if not name:
        raise ValidationError('Lead name is required.')

    lead = Lead(
        business_id=business_id,
        name=name,
        status=_validate_status(data.get('status') or LeadStatus.NEW.value)
    )
    for field in LEAD_FIELDS[1:]:
        setattr(lead, field, _clean(data.get(field)))

    session.add(lead)
    session.commit()
    return lead


def update_lead(session, business_id: int, lead_id: int, data: Dict) -> Lead:
    lead = get_lead(session, business_id, lead_id)

    if 'name' in data and not _clean(data.get('name')):
        raise ValidationError('Lead name is required.')

    for field in LEAD_FIELDS:
        if field in data:
            setattr(lead, field, _clean(data[field]))
    if data.get('status'):
        lead.status = _validate_status(data['status'])

    session.commit()
    return lead


def delete_lead(session, business_id: int, lead_id: int) -> None:
    lead = get_lead(session, business_id, lead_id)
    session.delete(lead)
    session.commit()


def convert_lead_to_customer(session, business_id: int, lead_id: int) -> Customer:
    """
    Create a customer from a lead and mark the lead as Won.

    Returns:
        The new Customer
    """
    lead = get_lead(session, business_id, lead_id)
    try:
        customer = Customer(
            business_id=business_id,
            name=lead.name,
            email=lead.email,
            phone=lead.phone,
            notes=lead.notes
        )
        session.add(customer)
        lead.status = LeadStatus.WON.value
        session.commit()
        logger.info(f"Lead {lead.id} converted to customer {customer.id}")
        return customer
    except Exception:
        session.rollback()
        raise

"""
Dashboard service.
Provides aggregated counts and recent records for the dashboard view.
"""
from decimal import Decimal

from sqlalchemy import func

from bizhub.models import Customer, Lead, LeadStatus, Sale, SaleStatus, Task, TaskStatus
from bizhub.services.compliance_service import load_compliance_documents
from bizhub.services.pricing import round_money

RECENT_LEADS_LIMIT = 5


def get_dashboard_data(session, business, storage=None, today=None) -> dict:
    """
    Get all dashboard data for a business.

    Args:
        session: SQLAlchemy session
        business: Current BusinessProfile
        storage: StorageService used for the compliance summary (None shows it degraded)
        today: Reference date for document expiry

    Returns:
        dict with keys:
            - new_leads_count, lead_count, customer_count, pending_task_count: int
            - sales_total: str (2 decimals, cancelled sales excluded)
            - pending_sales_count: int
            - recent_leads: list of dicts
            - compliance: summary dict plus degraded flag
    """
    business_id = business.id

    lead_count = session.query(func.count(Lead.id)).filter(Lead.business_id == business_id).scalar()
    new_leads_count = session.query(func.count(Lead.id)).filter(
        Lead.business_id == business_id,
        Lead.status == LeadStatus.NEW.value
    ).scalar()
    customer_count = session.query(func.count(Customer.id)).filter(
        Customer.business_id == business_id
    ).scalar()
    pending_task_count = session.query(func.count(Task.id)).filter(
        Task.business_id == business_id,
        Task.status == TaskStatus.PENDING.value
    ).scalar()

    sales_total = session.query(func.coalesce(func.sum(Sale.amount), 0)).filter(
        Sale.business_id == business_id,
        Sale.status != SaleStatus.CANCELLED.value
    ).scalar()
    pending_sales_count = session.query(func.count(Sale.id)).filter(
        Sale.business_id == business_id,
        Sale.status == SaleStatus.PENDING.value
    ).scalar()

    recent_leads = session.query(Lead).filter(
        Lead.business_id == business_id
    ).order_by(Lead.created_at.desc(), Lead.id.desc()).limit(RECENT_LEADS_LIMIT).all()

    compliance = load_compliance_documents(session, business, storage, today=today)

    return {
        'lead_count': lead_count or 0,
        'new_leads_count': new_leads_count or 0,
        'customer_count': customer_count or 0,
        'pending_task_count': pending_task_count or 0,
        'sales_total': f"{round_money(Decimal(str(sales_total or 0))):.2f}",
        'pending_sales_count': pending_sales_count or 0,
        'recent_leads': [lead.to_dict() for lead in recent_leads],
        'compliance': {**compliance['summary'], 'degraded': compliance['degraded']},
    }

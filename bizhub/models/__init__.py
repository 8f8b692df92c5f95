"""Models package - exports all SQLAlchemy models."""
# Account Models
from bizhub.models.app_user import AppUser
from bizhub.models.business_profile import BusinessProfile
from bizhub.models.business_type_change_request import BusinessTypeChangeRequest

# Business Models
from bizhub.models.customer import Customer
from bizhub.models.lead import Lead, LeadStatus
from bizhub.models.sale import Sale, SaleStatus
from bizhub.models.quote import Quote, QuoteStatus
from bizhub.models.task import Task, TaskPriority, TaskStatus
from bizhub.models.compliance_document import ComplianceDocument
from bizhub.models.website_data import WebsiteData

__all__ = [
    # Accounts
    'AppUser', 'BusinessProfile', 'BusinessTypeChangeRequest',
    # Business
    'Customer', 'Lead', 'LeadStatus', 'Sale', 'SaleStatus',
    'Quote', 'QuoteStatus', 'Task', 'TaskPriority', 'TaskStatus',
    'ComplianceDocument', 'WebsiteData',
]

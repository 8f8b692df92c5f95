"""Business profile service: onboarding, profile edits and type change requests."""
import logging
from typing import Dict, Optional

from bizhub.exceptions import ValidationError
from bizhub.models import BusinessProfile, BusinessTypeChangeRequest

logger = logging.getLogger(__name__)

BUSINESS_TYPES = {
    'retail': {'name': 'Retail Shop',
               'description': 'Product-based business selling directly to consumers'},
    'tender': {'name': 'Tender Business',
               'description': 'Contract-based business bidding for projects'},
    'construction': {'name': 'Construction',
                     'description': 'Project-based construction and contracting'},
    'professional': {'name': 'Professional Services',
                     'description': 'Service-based consulting and professional work'},
    'education': {'name': 'Education & Training',
                  'description': 'Training programs and educational services'},
    'restaurant': {'name': 'Restaurant & Hospitality',
                   'description': 'Food service and hospitality business'},
    'salon': {'name': 'Salon & Beauty',
              'description': 'Hair, beauty and wellness services'},
    'property': {'name': 'Property & Real Estate',
                 'description': 'Estate agency and property management'},
}

PROFILE_FIELDS = ('business_name', 'address', 'email', 'phone', 'logo_url')


def list_business_types():
    return [{'id': key, **value} for key, value in BUSINESS_TYPES.items()]


def _validate_business_type(business_type: Optional[str]) -> str:
    if not business_type:
        raise ValidationError('Business type is required.')
    if business_type not in BUSINESS_TYPES:
        raise ValidationError(f"Unknown business type '{business_type}'.")
    return business_type


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def create_business_profile(session, owner_id: int, data: Dict) -> BusinessProfile:
    """
    Create the business profile for a user (last onboarding step).

    Raises:
        ValidationError: If the user already has a profile, or name/type are missing
    """
    existing = session.query(BusinessProfile).filter(BusinessProfile.owner_id == owner_id).first()
    if existing:
        raise ValidationError('You already have a business profile.')

    business_name = _clean(data.get('business_name'))
    if not business_name:
        raise ValidationError('Business name is required.')

    try:
        profile = BusinessProfile(
            owner_id=owner_id,
            business_name=business_name,
            business_type=_validate_business_type(data.get('business_type')),
            address=_clean(data.get('address')),
            email=_clean(data.get('email')),
            phone=_clean(data.get('phone')),
            logo_url=_clean(data.get('logo_url')),
        )
        session.add(profile)
        session.commit()
        logger.info(f"Business profile created: {profile.business_name} ({profile.business_type})")
        return profile
    except Exception:
        session.rollback()
        raise


def update_business_profile(session, business: BusinessProfile, data: Dict) -> BusinessProfile:
    """
    Update editable profile fields.

    The business type is not editable here; it changes through a
    type change request.
    """
    if 'business_name' in data and not _clean(data.get('business_name')):
        raise ValidationError('Business name is required.')

    for field in PROFILE_FIELDS:
        if field in data:
            setattr(business, field, _clean(data[field]))

    session.commit()
    return business


def request_business_type_change(session, business: BusinessProfile, requested_type: str) -> BusinessTypeChangeRequest:
    """Record a pending request to move the business to another type."""
    requested_type = _validate_business_type(requested_type)
    if requested_type == business.business_type:
        raise ValidationError('Your business already has this type.')

    change_request = BusinessTypeChangeRequest(
        business_id=business.id,
        current_type=business.business_type,
        requested_type=requested_type,
        status='pending'
    )
    session.add(change_request)
    session.commit()
    logger.info(
        f"Business {business.id} requested type change "
        f"{business.business_type} -> {requested_type}"
    )
    return change_request

"""Onboarding blueprint: business type selection and business profile creation."""
from flask import Blueprint, g, current_app

from bizhub.database import get_session
from bizhub.middleware import require_login
from bizhub.services.business_service import create_business_profile, list_business_types
from bizhub.services.website_service import recommended_templates
from bizhub.utils.request_data import request_payload

onboarding_bp = Blueprint('onboarding', __name__, url_prefix='/onboarding')


@onboarding_bp.route('/business-types')
def business_types():
    return {'business_types': list_business_types()}


@onboarding_bp.route('', methods=['POST'])
@require_login
def complete_onboarding():
    """Create the business profile for the signed-in user."""
    session = get_session()
    business = create_business_profile(session, g.ctx.user_id, request_payload())
    g.ctx.business = business
    current_app.logger.info(f"Onboarding completed for user {g.ctx.user_id}: business {business.id}")
    return {
        'status': 'success',
        'business': business.to_dict(),
        'recommended_templates': recommended_templates(business.business_type),
    }, 201

"""Profile blueprint for business details and business type change requests."""
from flask import Blueprint, g

from bizhub.database import get_session
from bizhub.middleware import require_login, require_business
from bizhub.services.business_service import update_business_profile, request_business_type_change
from bizhub.utils.request_data import request_payload

profile_bp = Blueprint('profile', __name__, url_prefix='/profile')


@profile_bp.route('', methods=['GET'])
@require_login
@require_business
def get_profile():
    return {'business': g.ctx.business.to_dict(), 'user': g.ctx.user.to_dict()}


@profile_bp.route('', methods=['PUT'])
@require_login
@require_business
def update_profile():
    business = update_business_profile(get_session(), g.ctx.business, request_payload())
    return {'status': 'success', 'business': business.to_dict()}


@profile_bp.route('/type-change', methods=['POST'])
@require_login
@require_business
def type_change():
    """Ask support to move the business to another type."""
    data = request_payload()
    change_request = request_business_type_change(get_session(), g.ctx.business, data.get('requested_type'))
    return {'status': 'success', 'request': change_request.to_dict()}, 201

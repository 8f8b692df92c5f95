"""Website blueprint for landing page templates and editor content."""
from flask import Blueprint, g

from bizhub.database import get_session
from bizhub.middleware import require_login, require_business
from bizhub.services import website_service
from bizhub.utils.request_data import request_payload

website_bp = Blueprint('website', __name__, url_prefix='/website')


@website_bp.route('/templates')
@require_login
@require_business
def templates():
    return {
        'templates': [dict(t) for t in website_service.WEBSITE_TEMPLATES],
        'recommended': website_service.recommended_templates(g.ctx.business.business_type),
    }


@website_bp.route('/', methods=['GET'])
@require_login
@require_business
def get_website():
    return {'website': website_service.get_website_data(get_session(), g.ctx.business)}


@website_bp.route('/', methods=['PUT'])
@require_login
@require_business
def save_website():
    row = website_service.save_website_data(get_session(), g.ctx.business, request_payload())
    return {'status': 'success', 'website': row.to_dict()}

"""Leads blueprint for lead tracking and conversion to customers."""
from flask import Blueprint, request, g, current_app

from bizhub.database import get_session
from bizhub.middleware import require_login, require_business
from bizhub.services import lead_service
from bizhub.utils.request_data import request_payload

leads_bp = Blueprint('leads', __name__, url_prefix='/leads')


@leads_bp.route('/', methods=['GET'])
@require_login
@require_business
def list_leads():
    """Leads filtered by ?q= (text) and ?status= (pipeline stage or 'all')."""
    leads = lead_service.list_leads(
        get_session(), g.ctx.business_id,
        search=request.args.get('q'),
        status=request.args.get('status', 'all')
    )
    return {'leads': [lead.to_dict() for lead in leads], 'statuses': lead_service.LEAD_STATUSES}


@leads_bp.route('/', methods=['POST'])
@require_login
@require_business
def create_lead():
    lead = lead_service.create_lead(get_session(), g.ctx.business_id, request_payload())
    return {'status': 'success', 'lead': lead.to_dict()}, 201


@leads_bp.route('/<int:lead_id>', methods=['GET'])
@require_login
@require_business
def view_lead(lead_id):
    return {'lead': lead_service.get_lead(get_session(), g.ctx.business_id, lead_id).to_dict()}


@leads_bp.route('/<int:lead_id>', methods=['PUT'])
@require_login
@require_business
def update_lead(lead_id):
    lead = lead_service.update_lead(get_session(), g.ctx.business_id, lead_id, request_payload())
    return {'status': 'success', 'lead': lead.to_dict()}


@leads_bp.route('/<int:lead_id>', methods=['DELETE'])
@require_login
@require_business
def delete_lead(lead_id):
    lead_service.delete_lead(get_session(), g.ctx.business_id, lead_id)
    return {'status': 'success'}


@leads_bp.route('/<int:lead_id>/convert', methods=['POST'])
@require_login
@require_business
def convert_lead(lead_id):
    """Turn a lead into a customer."""
    session = get_session()
    customer = lead_service.convert_lead_to_customer(session, g.ctx.business_id, lead_id)
    current_app.logger.info(f"Lead {lead_id} converted by user {g.ctx.user_id}")
    return {
        'status': 'success',
        'customer': customer.to_dict(),
        'lead': lead_service.get_lead(session, g.ctx.business_id, lead_id).to_dict(),
    }, 201

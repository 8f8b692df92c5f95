from flask import Blueprint, request, g

from bizhub.database import get_session
from bizhub.middleware import require_login, require_business
from bizhub.services import customer_service
from bizhub.services.quote_service import serialize_quote
from bizhub.services.sales_service import serialize_sale
from bizhub.utils.request_data import request_payload

customers_bp = Blueprint('customers', __name__, url_prefix='/customers')


@customers_bp.route('/', methods=['GET'])
@require_login
@require_business
def list_customers():
    """Customers of the current business (?q= filters by name or email)."""
    customers = customer_service.list_customers(get_session(), g.ctx.business_id, request.args.get('q'))
    return {'customers': [c.to_dict() for c in customers]}


@customers_bp.route('/', methods=['POST'])
@require_login
@require_business
def create_customer():
    customer = customer_service.create_customer(get_session(), g.ctx.business_id, request_payload())
    return {'status': 'success', 'customer': customer.to_dict()}, 201


@customers_bp.route('/<int:customer_id>', methods=['GET'])
@require_login
@require_business
def view_customer(customer_id):
    """Customer details with sales and quote history."""
    history = customer_service.get_customer_history(get_session(), g.ctx.business_id, customer_id)
    return {
        'customer': history['customer'].to_dict(),
        'sales': [serialize_sale(sale) for sale in history['sales']],
        'quotes': [serialize_quote(quote) for quote in history['quotes']],
    }


@customers_bp.route('/<int:customer_id>', methods=['PUT'])
@require_login
@require_business
def update_customer(customer_id):
    customer = customer_service.update_customer(get_session(), g.ctx.business_id, customer_id, request_payload())
    return {'status': 'success', 'customer': customer.to_dict()}


@customers_bp.route('/<int:customer_id>', methods=['DELETE'])
@require_login
@require_business
def delete_customer(customer_id):
    customer_service.delete_customer(get_session(), g.ctx.business_id, customer_id)
    return {'status': 'success'}

"""Sales blueprint for recorded sales and their line items."""
from flask import Blueprint, request, g

from bizhub.database import get_session
from bizhub.middleware import require_login, require_business
from bizhub.services import sales_service
from bizhub.utils.request_data import request_payload

sales_bp = Blueprint('sales', __name__, url_prefix='/sales')


@sales_bp.route('/', methods=['GET'])
@require_login
@require_business
def list_sales():
    sales = sales_service.list_sales(
        get_session(), g.ctx.business_id,
        search=request.args.get('q'),
        status=request.args.get('status', 'all')
    )
    return {
        'sales': [sales_service.serialize_sale(sale) for sale in sales],
        'summary': sales_service.summarize_sales(sales),
    }


@sales_bp.route('/', methods=['POST'])
@require_login
@require_business
def create_sale():
    """Record a sale; the amount is computed from its items."""
    sale = sales_service.create_sale(get_session(), g.ctx.business_id, request_payload())
    return {'status': 'success', 'sale': sales_service.serialize_sale(sale)}, 201


@sales_bp.route('/<int:sale_id>', methods=['GET'])
@require_login
@require_business
def view_sale(sale_id):
    sale = sales_service.get_sale(get_session(), g.ctx.business_id, sale_id)
    return {'sale': sales_service.serialize_sale(sale)}


@sales_bp.route('/<int:sale_id>', methods=['PUT'])
@require_login
@require_business
def update_sale(sale_id):
    sale = sales_service.update_sale(get_session(), g.ctx.business_id, sale_id, request_payload())
    return {'status': 'success', 'sale': sales_service.serialize_sale(sale)}


@sales_bp.route('/<int:sale_id>', methods=['DELETE'])
@require_login
@require_business
def delete_sale(sale_id):
    sales_service.delete_sale(get_session(), g.ctx.business_id, sale_id)
    return {'status': 'success'}

"""Quotes blueprint: quote history, editing and PDF export."""
from datetime import date

from flask import Blueprint, request, send_file, current_app, g

from bizhub.database import get_session
from bizhub.middleware import require_login, require_business
from bizhub.services import quote_service
from bizhub.services.pricing import calculate_totals, normalize_line_items, present_totals
from bizhub.utils.request_data import request_payload

quotes_bp = Blueprint('quotes', __name__, url_prefix='/quotes')


def _currency_symbol():
    return current_app.config.get('CURRENCY_SYMBOL', 'R')


@quotes_bp.route('/', methods=['GET'])
@require_login
@require_business
def list_quotes():
    """Quote history filtered by ?q= and ?status=."""
    quotes = quote_service.list_quotes(
        get_session(), g.ctx.business_id,
        search=request.args.get('q'),
        status=request.args.get('status', 'all')
    )
    return {'quotes': [quote_service.serialize_quote(q) for q in quotes]}


@quotes_bp.route('/', methods=['POST'])
@require_login
@require_business
def create_quote():
    data = request_payload()
    data.setdefault('tax_rate', current_app.config.get('DEFAULT_TAX_RATE'))
    quote = quote_service.create_quote(get_session(), g.ctx.business_id, data)
    return {'status': 'success', 'quote': quote_service.serialize_quote(quote)}, 201


@quotes_bp.route('/totals', methods=['POST'])
@require_login
@require_business
def totals():
    """Live totals for the quote editor."""
    data = request_payload()
    items = normalize_line_items(data.get('items'))
    tax_rate = data.get('tax_rate', current_app.config.get('DEFAULT_TAX_RATE'))
    return {'items': items, 'totals': present_totals(calculate_totals(items, tax_rate))}


@quotes_bp.route('/preview', methods=['POST'])
@require_login
@require_business
def preview_pdf():
    """PDF of an unsaved quote."""
    data = request_payload()
    data.setdefault('tax_rate', current_app.config.get('DEFAULT_TAX_RATE'))
    pdf_buffer = quote_service.generate_preview_pdf(g.ctx.business, data, _currency_symbol())
    return send_file(
        pdf_buffer,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=quote_service.quote_filename(date.today())
    )


@quotes_bp.route('/<int:quote_id>', methods=['GET'])
@require_login
@require_business
def view_quote(quote_id):
    quote = quote_service.get_quote(get_session(), g.ctx.business_id, quote_id)
    return {'quote': quote_service.serialize_quote(quote)}


@quotes_bp.route('/<int:quote_id>', methods=['PUT'])
@require_login
@require_business
def update_quote(quote_id):
    quote = quote_service.update_quote(get_session(), g.ctx.business_id, quote_id, request_payload())
    return {'status': 'success', 'quote': quote_service.serialize_quote(quote)}


@quotes_bp.route('/<int:quote_id>', methods=['DELETE'])
@require_login
@require_business
def delete_quote(quote_id):
    quote_service.delete_quote(get_session(), g.ctx.business_id, quote_id)
    return {'status': 'success'}


@quotes_bp.route('/<int:quote_id>/pdf', methods=['GET'])
@require_login
@require_business
def quote_pdf(quote_id):
    """Download a stored quote as PDF."""
    session = get_session()
    quote = quote_service.get_quote(session, g.ctx.business_id, quote_id)
    pdf_buffer = quote_service.generate_quote_pdf_from_db(session, g.ctx.business, quote.id, _currency_symbol())
    current_app.logger.info(f"Quote {quote.id} exported by user {g.ctx.user_id}")
    return send_file(
        pdf_buffer,
        mimetype='application/pdf',
        as_attachment=True,
        download_name=quote_service.quote_filename(quote.created_at)
    )

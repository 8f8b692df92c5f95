"""Quote service: persistence, totals and PDF export."""
from datetime import datetime, date
from decimal import Decimal
from io import BytesIO
from typing import Dict, Any, List, Optional, Union
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib import colors
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.enums import TA_CENTER, TA_RIGHT

from sqlalchemy import or_
from sqlalchemy.orm import Session

from bizhub.models import Customer, Quote, QuoteStatus
from bizhub.exceptions import NotFoundError, ValidationError
from bizhub.services.pricing import (
    calculate_totals, coerce_tax_rate, derive_tax_rate, line_total,
    normalize_line_items, present_totals, DEFAULT_TAX_RATE
)
from bizhub.utils.formatters import money, quantity, date_iso, date_long

QUOTE_STATUSES = [status.value for status in QuoteStatus]

FOOTER_COLOR = colors.HexColor('#95A5A6')


def quote_filename(created_at: Union[date, datetime, None] = None) -> str:
    """Download name for an exported quote; exports on the same day share it."""
    return f"Quote-{date_iso(created_at or date.today())}.pdf"


def _paragraph_text(value) -> str:
    """Escape user text for a reportlab Paragraph, keeping line breaks."""
    return escape(str(value)).replace('\n', '<br/>')


def _contact_line(business: Dict[str, Any]) -> str:
    parts = []
    if business.get('address'):
        parts.append(business['address'].replace('\n', ', '))
    if business.get('phone'):
        parts.append(f"Tel: {business['phone']}")
    if business.get('email'):
        parts.append(f"Email: {business['email']}")
    return " | ".join(parts)


def render_quote_pdf(
    business: Dict[str, Any],
    client: Dict[str, Any],
    items: List[Dict[str, Any]],
    notes: Optional[str],
    tax_rate=DEFAULT_TAX_RATE,
    created_at: Union[date, datetime, None] = None,
    title: Optional[str] = None,
    currency_symbol: str = 'R',
    totals: Optional[Dict[str, Decimal]] = None
) -> BytesIO:
    """
    Render a quote as an A4 PDF.

    Layout, top to bottom: business header, QUOTE label with date, client
    block, item table (header repeated on every page), totals, notes. The
    business contact line is drawn as a footer on every page.

    Args:
        business: dict with name, address, phone, email
        client: dict with name and optional email
        items: Ordered LineItem dicts (at least one)
        notes: Optional free text
        tax_rate: Percentage used for the VAT line
        created_at: Date shown on the quote (defaults to today)
        totals: Stored totals to print as they are; computed from items and
            tax_rate when omitted

    Returns:
        BytesIO positioned at 0
    """
    created_at = created_at or datetime.now()
    items = normalize_line_items(items)
    if totals is None:
        totals = calculate_totals(items, tax_rate)
    shown = present_totals(totals)

    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.75*inch,
        leftMargin=0.75*inch,
        topMargin=0.75*inch,
        bottomMargin=inch,
        title=title or 'Quote',
        author=business.get('name') or ''
    )

    elements = []
    styles = getSampleStyleSheet()

    business_style = ParagraphStyle(
        'BusinessName',
        parent=styles['Heading1'],
        fontSize=20,
        textColor=colors.HexColor('#2C3E50'),
        spaceAfter=6,
        fontName='Helvetica-Bold'
    )

    header_style = ParagraphStyle(
        'BusinessContact',
        parent=styles['Normal'],
        fontSize=10,
        textColor=colors.HexColor('#7F8C8D'),
        spaceAfter=4
    )

    label_style = ParagraphStyle(
        'QuoteLabel',
        parent=styles['Heading2'],
        fontSize=16,
        textColor=colors.HexColor('#3498DB'),
        alignment=TA_RIGHT,
        fontName='Helvetica-Bold'
    )

    cell_style = ParagraphStyle('Cell', parent=styles['Normal'], fontSize=9, leading=11)

    # 1. Business header
    elements.append(Paragraph(_paragraph_text(business.get('name') or 'Quote'), business_style))
    if business.get('address'):
        elements.append(Paragraph(_paragraph_text(business['address']), header_style))
    contact_parts = []
    if business.get('phone'):
        contact_parts.append(f"Tel: {business['phone']}")
    if business.get('email'):
        contact_parts.append(f"Email: {business['email']}")
    if contact_parts:
        elements.append(Paragraph(_paragraph_text(" | ".join(contact_parts)), header_style))

    elements.append(Spacer(1, 0.2*inch))

    # 2. Quote label and date
    elements.append(Paragraph("QUOTE", label_style))
    quote_info_data = [['Date:', date_long(created_at)]]
    if title:
        quote_info_data.append(['Reference:', Paragraph(_paragraph_text(title), cell_style)])

    quote_info_table = Table(quote_info_data, colWidths=[1.2*inch, 5.5*inch])
    quote_info_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (0, -1), 'RIGHT'),
        ('FONTNAME', (0, 0), (0, -1), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 0), (-1, -1), colors.HexColor('#34495E')),
    ]))
    elements.append(quote_info_table)
    elements.append(Spacer(1, 0.2*inch))

    # 3. Client block
    client_lines = [f"<b>Prepared for:</b> {_paragraph_text(client.get('name') or '-')}"]
    if client.get('email'):
        client_lines.append(_paragraph_text(client['email']))
    elements.append(Paragraph('<br/>'.join(client_lines), styles['Normal']))
    elements.append(Spacer(1, 0.3*inch))

    # 4. Items table
    table_data = [['Item', 'Description', 'Qty', 'Unit Price', 'Line Total']]
    for item in items:
        table_data.append([
            Paragraph(_paragraph_text(item['name'] or '-'), cell_style),
            Paragraph(_paragraph_text(item['description'] or ''), cell_style),
            quantity(item['quantity']),
            money(item['unit_price'], currency_symbol),
            money(line_total(item), currency_symbol),
        ])

    items_table = Table(
        table_data,
        colWidths=[1.6*inch, 2.4*inch, 0.6*inch, 1.05*inch, 1.1*inch],
        repeatRows=1
    )
    items_table.setStyle(TableStyle([
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#3498DB')),
        ('TEXTCOLOR', (0, 0), (-1, 0), colors.whitesmoke),
        ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('BOTTOMPADDING', (0, 0), (-1, 0), 10),
        ('VALIGN', (0, 1), (-1, -1), 'TOP'),
        ('ALIGN', (2, 1), (2, -1), 'CENTER'),
        ('ALIGN', (3, 1), (4, -1), 'RIGHT'),
        ('FONTSIZE', (2, 1), (4, -1), 9),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.HexColor('#BDC3C7')),
        ('ROWBACKGROUNDS', (0, 1), (-1, -1), [colors.white, colors.HexColor('#ECF0F1')]),
    ]))

    elements.append(items_table)
    elements.append(Spacer(1, 0.2*inch))

    # 5. Totals
    totals_table = Table([
        ['Subtotal:', money(shown['subtotal'], currency_symbol)],
        [f"VAT ({shown['tax_rate']}%):", money(shown['tax_amount'], currency_symbol)],
        ['Total:', money(shown['total'], currency_symbol)],
    ], colWidths=[5.6*inch, 1.15*inch])
    totals_table.setStyle(TableStyle([
        ('ALIGN', (0, 0), (-1, -1), 'RIGHT'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('TEXTCOLOR', (0, 0), (-1, 1), colors.HexColor('#34495E')),
        ('FONTNAME', (0, 2), (-1, 2), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 2), (-1, 2), 13),
        ('TEXTCOLOR', (0, 2), (-1, 2), colors.HexColor('#27AE60')),
        ('LINEABOVE', (1, 2), (1, 2), 1.5, colors.HexColor('#27AE60')),
    ]))
    elements.append(totals_table)

    # 6. Notes
    if notes and notes.strip():
        notes_style = ParagraphStyle('Notes', parent=styles['Normal'], fontSize=9,
                                     textColor=colors.HexColor('#34495E'))
        elements.append(Spacer(1, 0.3*inch))
        elements.append(Paragraph(f"<b>Notes:</b><br/>{_paragraph_text(notes.strip())}", notes_style))

    footer_text = _contact_line(business)

    def draw_footer(canvas, document):
        canvas.saveState()
        canvas.setFont('Helvetica', 8)
        canvas.setFillColor(FOOTER_COLOR)
        width = document.pagesize[0]
        if footer_text:
            canvas.drawCentredString(width / 2, 0.6*inch, footer_text)
        canvas.drawRightString(width - document.rightMargin, 0.4*inch, f"Page {document.page}")
        canvas.restoreState()

    doc.build(elements, onFirstPage=draw_footer, onLaterPages=draw_footer)
    buffer.seek(0)
    return buffer


def _clean(value) -> Optional[str]:
    if value is None:
        return None
    value = str(value).strip()
    return value or None


def _resolve_customer(session: Session, business_id: int, customer_id) -> Optional[Customer]:
    if customer_id in (None, ''):
        return None
    try:
        customer_id = int(customer_id)
    except (TypeError, ValueError) as e:
        raise ValidationError('Invalid customer.') from e
    customer = session.query(Customer).filter(
        Customer.id == customer_id,
        Customer.business_id == business_id
    ).first()
    if not customer:
        raise NotFoundError(f'Customer {customer_id} not found.')
    return customer


def _apply_quote_data(session: Session, business_id: int, quote: Quote, data: Dict[str, Any]) -> None:
    items = normalize_line_items(data.get('items'))
    if not items:
        raise ValidationError('A quote needs at least one item.')

    customer = _resolve_customer(session, business_id, data.get('customer_id'))
    client_name = _clean(data.get('client_name')) or (customer.name if customer else None)
    if not client_name:
        raise ValidationError('Client name is required.')

    status = data.get('status') or quote.status or QuoteStatus.DRAFT.value
    if status not in QUOTE_STATUSES:
        raise ValidationError(f"Invalid quote status '{status}'.")

    totals = calculate_totals(items, data.get('tax_rate'))

    quote.customer_id = customer.id if customer else None
    quote.client_name = client_name
    quote.client_email = _clean(data.get('client_email')) or (customer.email if customer else None)
    quote.title = _clean(data.get('title')) or f"Quote for {client_name}"
    quote.items = items
    quote.notes = _clean(data.get('notes'))
    quote.status = status
    quote.subtotal = totals['subtotal']
    quote.vat = totals['tax_amount']
    quote.total = totals['total']


def get_quote_totals(quote: Quote) -> Dict[str, Decimal]:
    """Totals of a stored quote; the tax rate is recovered from subtotal and VAT."""
    subtotal = Decimal(quote.subtotal or 0)
    vat = Decimal(quote.vat or 0)
    return {
        'subtotal': subtotal,
        'tax_rate': derive_tax_rate(subtotal, vat),
        'tax_amount': vat,
        'total': Decimal(quote.total or 0),
    }


def serialize_quote(quote: Quote) -> Dict[str, Any]:
    totals = present_totals(get_quote_totals(quote))
    return {
        'id': quote.id,
        'customer_id': quote.customer_id,
        'title': quote.title,
        'client_name': quote.client_name,
        'client_email': quote.client_email,
        'items': normalize_line_items(quote.items),
        'notes': quote.notes,
        'status': quote.status,
        'subtotal': totals['subtotal'],
        'vat': totals['tax_amount'],
        'tax_rate': totals['tax_rate'],
        'total': totals['total'],
        'created_at': quote.created_at.isoformat() if quote.created_at else None,
    }


def list_quotes(session: Session, business_id: int, search: Optional[str] = None,
                status: Optional[str] = None) -> List[Quote]:
    """Quotes of a business, newest first, optionally filtered by text and status."""
    query = session.query(Quote).filter(Quote.business_id == business_id)
    if search:
        pattern = f"%{search.strip()}%"
        query = query.filter(or_(
            Quote.title.ilike(pattern),
            Quote.client_name.ilike(pattern),
            Quote.client_email.ilike(pattern)
        ))
    if status and status != 'all':
        query = query.filter(Quote.status == status)
    return query.order_by(Quote.created_at.desc(), Quote.id.desc()).all()


def get_quote(session: Session, business_id: int, quote_id: int) -> Quote:
    quote = session.query(Quote).filter(Quote.id == quote_id, Quote.business_id == business_id).first()
    if not quote:
        raise NotFoundError(f'Quote {quote_id} not found.')
    return quote


def create_quote(session: Session, business_id: int, data: Dict[str, Any]) -> Quote:
    """Create a quote; subtotal, VAT and total are computed from the items."""
    try:
        quote = Quote(business_id=business_id)
        _apply_quote_data(session, business_id, quote, data)
        session.add(quote)
        session.commit()
        return quote
    except Exception:
        session.rollback()
        raise


def update_quote(session: Session, business_id: int, quote_id: int, data: Dict[str, Any]) -> Quote:
    """Rewrite a quote wholesale (last write wins)."""
    try:
        quote = get_quote(session, business_id, quote_id)
        merged = serialize_quote(quote)
        merged.update(data)
        if 'tax_rate' not in data:
            merged['tax_rate'] = get_quote_totals(quote)['tax_rate']
        _apply_quote_data(session, business_id, quote, merged)
        session.commit()
        return quote
    except Exception:
        session.rollback()
        raise


def delete_quote(session: Session, business_id: int, quote_id: int) -> None:
    quote = get_quote(session, business_id, quote_id)
    session.delete(quote)
    session.commit()


def generate_quote_pdf_from_db(session: Session, business, quote_id: int, currency_symbol: str = 'R') -> BytesIO:
    """Render a stored quote with the business's current contact details."""
    quote = get_quote(session, business.id, quote_id)
    items = normalize_line_items(quote.items)
    if not items:
        raise ValidationError('Add at least one item before exporting this quote.')

    return render_quote_pdf(
        business.contact_info(),
        {'name': quote.client_name, 'email': quote.client_email},
        items,
        quote.notes,
        created_at=quote.created_at,
        title=quote.title,
        currency_symbol=currency_symbol,
        totals=get_quote_totals(quote)
    )


def generate_preview_pdf(business, data: Dict[str, Any], currency_symbol: str = 'R') -> BytesIO:
    """Render a quote straight from form data without saving it."""
    items = normalize_line_items(data.get('items'))
    if not items:
        raise ValidationError('Add at least one item before exporting this quote.')

    return render_quote_pdf(
        business.contact_info(),
        {'name': _clean(data.get('client_name')), 'email': _clean(data.get('client_email'))},
        items,
        data.get('notes'),
        tax_rate=coerce_tax_rate(data.get('tax_rate')),
        created_at=datetime.now(),
        title=_clean(data.get('title')),
        currency_symbol=currency_symbol
    )

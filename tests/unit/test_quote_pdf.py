"""
Unit tests for quote PDF export.
"""

from datetime import date, datetime
from decimal import Decimal

from pypdf import PdfReader

from bizhub.services.quote_service import quote_filename, render_quote_pdf

BUSINESS = {
    'name': 'Thandi & Sons Builders',
    'address': '12 Long Street\nCape Town',
    'phone': '021 555 0101',
    'email': 'hello@thandi.co.za',
}
CLIENT = {'name': 'Acme <Holdings>', 'email': 'buyer@acme.test'}
ITEMS = [
    {'name': 'Labour', 'description': 'Two days', 'quantity': 2, 'unit_price': '100.00'},
    {'name': 'Materials', 'description': '', 'quantity': 1, 'unit_price': '50.50'},
]
FOOTER = '12 Long Street, Cape Town | Tel: 021 555 0101 | Email: hello@thandi.co.za'


def _page_texts(buffer):
    return [page.extract_text() for page in PdfReader(buffer).pages]


class TestQuoteFilename:

    def test_embeds_creation_date(self):
        assert quote_filename(date(2026, 3, 7)) == 'Quote-2026-03-07.pdf'

    def test_accepts_datetime(self):
        assert quote_filename(datetime(2026, 12, 1, 16, 45)) == 'Quote-2026-12-01.pdf'

    def test_same_day_exports_share_name(self):
        assert quote_filename(datetime(2026, 5, 5, 8, 0)) == quote_filename(datetime(2026, 5, 5, 23, 59))

    def test_defaults_to_today(self):
        assert quote_filename() == f"Quote-{date.today().isoformat()}.pdf"


class TestRenderQuotePdf:

    def test_returns_pdf_buffer(self):
        buffer = render_quote_pdf(BUSINESS, CLIENT, ITEMS, 'Valid for 30 days', 15, date(2026, 10, 19))
        data = buffer.getvalue()
        assert data.startswith(b'%PDF')
        assert buffer.tell() == 0

    def test_client_without_email_and_no_notes(self):
        buffer = render_quote_pdf(BUSINESS, {'name': 'Walk-in'}, ITEMS, None, 15)
        assert buffer.getvalue().startswith(b'%PDF')

    def test_many_items_span_pages(self):
        items = [
            {'name': f'Item {n}', 'description': 'Line ' * 10, 'quantity': n, 'unit_price': '9.99'}
            for n in range(1, 120)
        ]
        single = render_quote_pdf(BUSINESS, CLIENT, ITEMS, None, 15).getvalue()
        multi = render_quote_pdf(BUSINESS, CLIENT, items, 'notes', 15, title='Big job').getvalue()
        assert multi.count(b'/Type /Page') > single.count(b'/Type /Page')

    def test_business_without_contact_details(self):
        buffer = render_quote_pdf({'name': 'Solo'}, CLIENT, ITEMS, None, 0)
        assert buffer.getvalue().startswith(b'%PDF')


class TestQuotePdfContent:
    """What the rendered quote actually says."""

    def test_sections_in_fixed_order(self):
        buffer = render_quote_pdf(BUSINESS, CLIENT, ITEMS, 'Valid for 30 days', 15,
                                  date(2026, 10, 19), title='Kitchen refit')
        text = _page_texts(buffer)[0]

        markers = [
            'Thandi & Sons Builders', 'QUOTE', '19 October 2026', 'Kitchen refit',
            'Prepared for:', 'Acme <Holdings>', 'buyer@acme.test',
            'Item', 'Description', 'Qty', 'Unit Price', 'Line Total', 'Labour', 'Materials',
            'Subtotal:', 'VAT (15%):', 'Total:', 'Notes:', 'Valid for 30 days',
        ]
        positions = [text.index(marker) for marker in markers]
        assert positions == sorted(positions)

    def test_amounts_have_two_decimals(self):
        text = _page_texts(render_quote_pdf(BUSINESS, CLIENT, ITEMS, None, 15))[0]

        for amount in ('R 100.00', 'R 200.00', 'R 50.50', 'R 250.50', 'R 37.58', 'R 288.08'):
            assert amount in text
        assert text.index('R 37.58') < text.index('R 288.08')

    def test_vat_label_shows_the_rate(self):
        text = _page_texts(render_quote_pdf(BUSINESS, CLIENT, ITEMS, None, '7.125'))[0]
        assert 'VAT (7.125%):' in text

    def test_no_notes_block_without_notes(self):
        text = _page_texts(render_quote_pdf(BUSINESS, {'name': 'Walk-in'}, ITEMS, '  ', 15))[0]
        assert 'Notes:' not in text
        assert 'Walk-in' in text

    def test_stored_totals_are_printed_as_given(self):
        totals = {
            'subtotal': Decimal('1000000'),
            'tax_rate': Decimal('7.125'),
            'tax_amount': Decimal('71250'),
            'total': Decimal('1071250'),
        }
        items = [{'name': 'Warehouse', 'quantity': 1, 'unit_price': 1000000}]

        text = _page_texts(render_quote_pdf(BUSINESS, CLIENT, items, None, totals=totals))[0]

        assert 'VAT (7.125%):' in text
        assert 'R 71,250.00' in text
        assert 'R 1,071,250.00' in text

    def test_footer_and_table_header_on_every_page(self):
        items = [
            {'name': f'Item {n}', 'description': 'Line ' * 10, 'quantity': n, 'unit_price': '9.99'}
            for n in range(1, 120)
        ]
        pages = _page_texts(render_quote_pdf(BUSINESS, CLIENT, items, None, 15))

        assert len(pages) > 1
        for number, text in enumerate(pages, start=1):
            assert FOOTER in text
            assert 'Unit Price' in text
            assert f'Page {number}' in text

"""
Integration tests for quotes: persistence, totals and PDF export.
"""

import re
from io import BytesIO

from pypdf import PdfReader

ITEMS = [
    {'name': 'Tiling', 'description': 'Bathroom floor', 'quantity': 2, 'unit_price': '100.25'},
    {'name': 'Grout', 'quantity': 1, 'unit_price': '50'},
]


def _create(client, **overrides):
    data = {'client_name': 'Sipho Dlamini', 'client_email': 'sipho@example.com', 'items': ITEMS}
    data.update(overrides)
    return client.post('/quotes/', json=data)


class TestQuoteCrud:

    def test_create_computes_totals(self, authenticated_client):
        response = _create(authenticated_client)

        assert response.status_code == 201
        quote = response.get_json()['quote']
        assert quote['subtotal'] == '250.50'
        assert quote['vat'] == '37.58'
        assert quote['total'] == '288.08'
        assert quote['tax_rate'] == '15'
        assert quote['title'] == 'Quote for Sipho Dlamini'
        assert quote['status'] == 'draft'
        assert [item['id'] for item in quote['items']] == ['item1', 'item2']

    def test_needs_at_least_one_item(self, authenticated_client):
        response = _create(authenticated_client, items=[])
        assert response.status_code == 400
        assert response.get_json()['message'] == 'A quote needs at least one item.'

    def test_needs_client_name(self, authenticated_client):
        response = _create(authenticated_client, client_name='  ')
        assert response.status_code == 400

    def test_invalid_status(self, authenticated_client):
        assert _create(authenticated_client, status='won').status_code == 400

    def test_client_taken_from_customer(self, authenticated_client):
        customer = authenticated_client.post('/customers/', json={
            'name': 'Thandi Mokoena', 'email': 'thandi@example.com'
        }).get_json()['customer']

        quote = _create(authenticated_client, client_name='', client_email='',
                        customer_id=customer['id']).get_json()['quote']
        assert quote['client_name'] == 'Thandi Mokoena'
        assert quote['client_email'] == 'thandi@example.com'
        assert quote['customer_id'] == customer['id']

    def test_update_keeps_stored_tax_rate(self, authenticated_client):
        quote = _create(authenticated_client, tax_rate=10).get_json()['quote']
        assert quote['tax_rate'] == '10'
        assert quote['total'] == '275.55'

        response = authenticated_client.put(f"/quotes/{quote['id']}", json={
            'items': [{'name': 'Tiling', 'quantity': 1, 'unit_price': 200}],
            'status': 'sent',
        })
        updated = response.get_json()['quote']
        assert updated['tax_rate'] == '10'
        assert updated['subtotal'] == '200.00'
        assert updated['vat'] == '20.00'
        assert updated['total'] == '220.00'
        assert updated['status'] == 'sent'
        assert updated['client_name'] == 'Sipho Dlamini'

    def test_rate_with_three_decimals_survives_update(self, authenticated_client):
        quote = _create(authenticated_client, tax_rate='7.125',
                        items=[{'name': 'Warehouse', 'quantity': 1, 'unit_price': 1000000}]).get_json()['quote']
        assert quote['vat'] == '71250.00'
        assert quote['tax_rate'] == '7.125'

        updated = authenticated_client.put(f"/quotes/{quote['id']}", json={'status': 'sent'}).get_json()['quote']

        assert updated['tax_rate'] == '7.125'
        assert updated['vat'] == '71250.00'
        assert updated['total'] == '1071250.00'

    def test_non_numeric_customer_id(self, authenticated_client):
        response = _create(authenticated_client, customer_id='abc')
        assert response.status_code == 400
        assert response.get_json()['message'] == 'Invalid customer.'

    def test_list_search_and_status(self, authenticated_client):
        _create(authenticated_client, client_name='Alpha Builders')
        _create(authenticated_client, client_name='Beta Plumbing', status='accepted')

        names = [q['client_name'] for q in authenticated_client.get('/quotes/?q=plumb').get_json()['quotes']]
        assert names == ['Beta Plumbing']

        accepted = authenticated_client.get('/quotes/?status=accepted').get_json()['quotes']
        assert [q['client_name'] for q in accepted] == ['Beta Plumbing']

    def test_delete(self, authenticated_client):
        quote_id = _create(authenticated_client).get_json()['quote']['id']
        assert authenticated_client.delete(f'/quotes/{quote_id}').status_code == 200
        assert authenticated_client.get(f'/quotes/{quote_id}').status_code == 404


class TestQuoteTotals:

    def test_live_totals(self, authenticated_client):
        response = authenticated_client.post('/quotes/totals', json={'items': ITEMS})
        body = response.get_json()
        assert body['totals'] == {
            'subtotal': '250.50', 'tax_rate': '15', 'tax_amount': '37.58', 'total': '288.08'
        }

    def test_bad_quantity_counts_as_zero(self, authenticated_client):
        response = authenticated_client.post('/quotes/totals', json={
            'items': [{'name': 'A', 'quantity': 'abc', 'unit_price': 99}, {'name': 'B', 'quantity': 1, 'unit_price': 10}],
            'tax_rate': 0,
        })
        assert response.get_json()['totals']['total'] == '10.00'


class TestQuotePdf:

    def test_stored_quote_pdf(self, authenticated_client):
        quote_id = _create(authenticated_client).get_json()['quote']['id']

        response = authenticated_client.get(f'/quotes/{quote_id}/pdf')

        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert response.data.startswith(b'%PDF')
        disposition = response.headers['Content-Disposition']
        assert re.search(r'Quote-\d{4}-\d{2}-\d{2}\.pdf', disposition)

    def test_stored_quote_pdf_prints_stored_totals(self, authenticated_client):
        quote_id = _create(authenticated_client, tax_rate='7.125',
                           items=[{'name': 'Warehouse', 'quantity': 1, 'unit_price': 1000000}]).get_json()['quote']['id']

        response = authenticated_client.get(f'/quotes/{quote_id}/pdf')
        text = PdfReader(BytesIO(response.data)).pages[0].extract_text()

        assert 'VAT (7.125%):' in text
        assert 'R 71,250.00' in text
        assert 'R 1,071,250.00' in text

    def test_preview_pdf(self, authenticated_client):
        response = authenticated_client.post('/quotes/preview', json={
            'client_name': 'Preview <Client> & Co', 'items': ITEMS, 'notes': 'Valid for 30 days'
        })
        assert response.status_code == 200
        assert response.data.startswith(b'%PDF')

    def test_preview_without_items(self, authenticated_client):
        response = authenticated_client.post('/quotes/preview', json={'client_name': 'X', 'items': []})
        assert response.status_code == 400

    def test_other_business_quote_pdf_is_404(self, authenticated_client, session, business2):
        from bizhub.services.quote_service import create_quote

        quote = create_quote(session, business2.id, {'client_name': 'Hidden', 'items': ITEMS})
        assert authenticated_client.get(f'/quotes/{quote.id}/pdf').status_code == 404

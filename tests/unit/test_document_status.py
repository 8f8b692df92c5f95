"""
Unit tests for document classification, the catalog and the compliance summary.
"""

from datetime import date, timedelta

import pytest

from bizhub.services.compliance_service import (
    BASE_DOCUMENTS, DocumentStatus, add_months, classify_document, get_required_documents,
    mark_uploaded, status_progress, summarize_compliance
)

TODAY = date(2026, 10, 19)
FILE = '12/tax-clearance-1700000000000.pdf'


class TestAddMonths:

    def test_simple(self):
        assert add_months(date(2026, 10, 19), 3) == date(2027, 1, 19)

    def test_clamps_to_month_end(self):
        assert add_months(date(2026, 11, 30), 3) == date(2027, 2, 28)
        assert add_months(date(2027, 11, 30), 3) == date(2028, 2, 29)

    def test_year_rollover(self):
        assert add_months(date(2026, 12, 31), 1) == date(2027, 1, 31)


class TestClassifyDocument:
    """Status derived from file presence and expiry date."""

    def test_no_file_is_missing_regardless_of_expiry(self):
        assert classify_document(None, None, TODAY) == DocumentStatus.MISSING
        assert classify_document(None, TODAY + timedelta(days=400), TODAY) == DocumentStatus.MISSING
        assert classify_document('', TODAY - timedelta(days=1), TODAY) == DocumentStatus.MISSING

    def test_file_without_expiry_is_valid(self):
        status = classify_document(FILE, None, TODAY)
        assert status == DocumentStatus.VALID
        assert status_progress(status) == 100

    def test_expiry_just_inside_three_months_is_expiring(self):
        boundary = add_months(TODAY, 3)
        assert classify_document(FILE, boundary - timedelta(days=1), TODAY) == DocumentStatus.EXPIRING

    def test_expiry_just_past_three_months_is_valid(self):
        boundary = add_months(TODAY, 3)
        assert classify_document(FILE, boundary + timedelta(days=1), TODAY) == DocumentStatus.VALID

    def test_expiry_exactly_three_months_is_valid(self):
        assert classify_document(FILE, add_months(TODAY, 3), TODAY) == DocumentStatus.VALID

    def test_expiry_yesterday_is_expired(self):
        assert classify_document(FILE, TODAY - timedelta(days=1), TODAY) == DocumentStatus.EXPIRED

    def test_expiry_today_is_expired(self):
        assert classify_document(FILE, TODAY, TODAY) == DocumentStatus.EXPIRED

    def test_expiry_tomorrow_is_expiring(self):
        assert classify_document(FILE, TODAY + timedelta(days=1), TODAY) == DocumentStatus.EXPIRING

    def test_defaults_to_current_date(self):
        assert classify_document(FILE, date.today() - timedelta(days=1)) == DocumentStatus.EXPIRED


class TestProgress:

    @pytest.mark.parametrize('status,progress', [
        ('valid', 100), ('expiring', 75), ('expired', 25), ('missing', 0),
    ])
    def test_status_progress(self, status, progress):
        assert status_progress(status) == progress

    def test_mark_uploaded_is_valid_immediately(self):
        document = {'key': 'tax-clearance', 'status': 'missing', 'progress': 0}
        mark_uploaded(document)
        assert document['status'] == 'valid'
        assert document['progress'] == 100


class TestCatalog:

    def test_unknown_type_gets_base_documents(self):
        keys = [doc['key'] for doc in get_required_documents('tender')]
        assert keys == [doc['key'] for doc in BASE_DOCUMENTS]

    def test_none_type_gets_base_documents(self):
        assert len(get_required_documents(None)) == len(BASE_DOCUMENTS)

    def test_restaurant_extras(self):
        docs = {doc['key']: doc for doc in get_required_documents('restaurant')}
        assert {'business-registration', 'tax-clearance', 'health-certificate',
                'food-license', 'liquor-license'} == set(docs)
        assert docs['liquor-license']['required'] is False

    def test_catalog_entries_are_copies(self):
        docs = get_required_documents('salon')
        docs[0]['name'] = 'changed'
        assert get_required_documents('salon')[0]['name'] == 'Business Registration'


class TestSummarizeCompliance:
    """Completion summary over classified documents."""

    def test_empty_list(self):
        summary = summarize_compliance([])
        assert summary['overall_percent'] == 0
        assert summary['total'] == 0
        assert summary['by_category'] == {}

    def test_counts_and_percent(self):
        documents = [
            {'status': 'valid', 'category': 'registration'},
            {'status': 'expiring', 'category': 'tax'},
            {'status': 'expired', 'category': 'legal'},
            {'status': 'missing', 'category': 'legal'},
            {'status': 'valid', 'category': 'legal'},
            {'status': 'missing', 'category': 'insurance'},
        ]
        summary = summarize_compliance(documents)

        assert summary['overall_percent'] == 33
        assert summary['valid_count'] == 2
        assert summary['expiring_count'] == 1
        assert summary['expired_count'] == 1
        assert summary['missing_count'] == 2
        assert summary['by_category']['legal'] == {
            'missing': 1, 'valid': 1, 'expiring': 0, 'expired': 1, 'total': 3
        }

    def test_percent_rounds(self):
        documents = [{'status': 'valid', 'category': 'tax'}] * 2 + [{'status': 'missing', 'category': 'tax'}]
        assert summarize_compliance(documents)['overall_percent'] == 67

    def test_all_valid(self):
        documents = [{'status': 'valid', 'category': 'tax'}] * 4
        assert summarize_compliance(documents)['overall_percent'] == 100

    def test_half_percent_rounds_up(self):
        documents = [{'status': 'valid', 'category': 'tax'}] + [{'status': 'missing', 'category': 'tax'}] * 7
        assert summarize_compliance(documents)['overall_percent'] == 13

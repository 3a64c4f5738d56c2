"""
Tests for invoice construction and status tracking
"""
import pytest
from datetime import timedelta
from unittest.mock import patch

from dateutil import parser as date_parser

from services.invoice_service import (
    InvoiceService,
    build_line_item,
    calculate_totals,
    feature_description
)
from validators import ValidationError


@pytest.mark.unit
class TestTotals:
    """Tests for line and invoice totals"""

    def test_line_item_total(self):
        item = build_line_item(1, 'Pages', 3, 50)
        assert item == {'id': '1', 'description': 'Pages', 'quantity': 3, 'unit_price': 50, 'total': 150}

    def test_negative_values_rejected(self):
        with pytest.raises(ValidationError):
            build_line_item(1, 'Refund', -1, 50)
        with pytest.raises(ValidationError):
            build_line_item(1, 'Refund', 1, -50)

    def test_calculate_totals(self):
        items = [build_line_item(1, 'A', 1, 200), build_line_item(2, 'B', 2, 50)]
        totals = calculate_totals(items, 0.13)
        assert totals['subtotal'] == 300
        assert totals['tax_amount'] == pytest.approx(39)
        assert totals['total'] == pytest.approx(339)
        assert totals['total'] == totals['subtotal'] + totals['tax_amount']

    def test_no_items(self):
        assert calculate_totals([], 0.13) == {'subtotal': 0, 'tax_rate': 0.13, 'tax_amount': 0, 'total': 0}

    def test_feature_description_fallback(self):
        assert feature_description('seo_optimization') == 'SEO Optimization'
        assert feature_description('live_chat') == 'Live Chat'


@pytest.mark.integration
class TestInvoiceGeneration:
    """Tests for invoices generated from a website request"""

    def test_generate_from_request(self, store):
        service = InvoiceService(store)
        invoice = service.generate_invoice_from_project('p1', {
            'website_type': 'ecommerce',
            'features': ['contact_form', 'seo_optimization', 'unpriced_feature'],
            'hosting_preference': 'managed',
            'domain_preference': 'new',
            'client_name': 'Jane Baker',
        })

        descriptions = [item['description'] for item in invoice['items']]
        assert descriptions == [
            'Ecommerce Website Development',
            'Contact Form Integration',
            'SEO Optimization',
            'Managed Hosting (1 Year)',
            'Domain Registration (1 Year)',
        ]
        assert invoice['subtotal'] == 499 + 25 + 50 + 120 + 15
        assert invoice['total'] == pytest.approx(invoice['subtotal'] * 1.13)
        assert invoice['payment_options']['minimum_payment'] >= invoice['total'] / 2
        assert invoice['due_date'] - invoice['issue_date'] == timedelta(days=30)
        assert invoice['status'] == 'draft'

    def test_unknown_website_type_uses_default_price(self, store):
        invoice = InvoiceService(store).generate_invoice_from_project('p1', {'website_type': 'wiki'})
        assert invoice['items'][0]['unit_price'] == 299

    def test_non_string_website_type_treated_as_business(self, store):
        invoice = InvoiceService(store).generate_invoice_from_project('p1', {'website_type': ['blog']})
        assert invoice['items'][0]['description'] == 'Business Website Development'

    def test_invoice_numbers_increment(self, store):
        service = InvoiceService(store, prefix='WS')
        with patch('services.invoice_service.utcnow') as now:
            now.return_value = date_parser.isoparse('2026-03-01T10:00:00')
            first = service.create_invoice({'project_id': 'p1', 'items': []})
            now.return_value = date_parser.isoparse('2026-03-02T10:00:00')
            second = service.create_invoice({'project_id': 'p1', 'items': []})

        assert first['invoice_number'] == 'WS-2026-001'
        assert second['invoice_number'] == 'WS-2026-002'

    def test_create_recomputes_totals(self, store):
        """Test that caller-supplied totals are replaced with computed ones"""
        invoice = InvoiceService(store, tax_rate=0.1).create_invoice({
            'project_id': 'p1',
            'items': [{'description': 'Design', 'quantity': 2, 'unit_price': 100, 'total': 5}],
            'subtotal': 1,
            'total': 1,
        })
        assert invoice['items'][0]['total'] == 200
        assert invoice['subtotal'] == 200
        assert invoice['tax_amount'] == pytest.approx(20)
        assert invoice['total'] == pytest.approx(220)

    def test_create_requires_project(self, store):
        with pytest.raises(ValidationError):
            InvoiceService(store).create_invoice({'items': []})


@pytest.mark.integration
class TestInvoiceStatus:
    """Tests for status changes"""

    def test_sent_and_paid_timestamps(self, store):
        service = InvoiceService(store)
        invoice = service.create_invoice({'project_id': 'p1', 'items': []})

        sent = service.update_invoice_status(invoice['id'], 'sent')
        assert sent['sent_at'] is not None
        assert sent['paid_at'] is None

        paid = service.update_invoice_status(invoice['id'], 'paid')
        assert paid['paid_at'] is not None

    def test_invalid_status(self, store):
        with pytest.raises(ValidationError):
            InvoiceService(store).update_invoice_status('i1', 'refunded')

    def test_missing_invoice(self, store):
        assert InvoiceService(store).update_invoice_status('missing', 'sent') is None

    def test_listing(self, store):
        service = InvoiceService(store)
        service.create_invoice({'project_id': 'p1', 'items': []})
        service.create_invoice({'project_id': 'p2', 'items': []})

        assert len(service.get_invoices_by_project('p1')) == 1
        assert len(service.get_all_invoices()) == 2

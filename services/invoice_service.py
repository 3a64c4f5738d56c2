"""
Invoice Service - Builds invoices from structured line items and tracks their status.

Totals are computed here and only here:
    line total = quantity * unit_price
    subtotal   = sum of line totals
    tax_amount = subtotal * tax_rate
    total      = subtotal + tax_amount
"""

import logging
import math
from datetime import timedelta
from typing import Dict, List, Optional

from database.models import utcnow
from validators import ValidationError, validate_invoice_status

logger = logging.getLogger(__name__)

INVOICES_TABLE = 'invoices'

BASE_PRICES = {
    'business': 299,
    'ecommerce': 499,
    'portfolio': 199,
    'blog': 149,
    'landing': 99,
    'nonprofit': 199,
}
DEFAULT_BASE_PRICE = 299

FEATURE_PRICES = {
    'contact_form': 25,
    'newsletter_signup': 20,
    'social_media_integration': 15,
    'google_analytics': 10,
    'seo_optimization': 50,
    'blog_functionality': 75,
    'ecommerce_basic': 150,
    'ecommerce_advanced': 300,
    'booking_system': 100,
    'membership_area': 200,
    'multilingual': 100,
    'custom_forms': 50,
}

FEATURE_DESCRIPTIONS = {
    'contact_form': 'Contact Form Integration',
    'newsletter_signup': 'Newsletter Signup Form',
    'social_media_integration': 'Social Media Integration',
    'google_analytics': 'Google Analytics Setup',
    'seo_optimization': 'SEO Optimization',
    'blog_functionality': 'Blog Functionality',
    'ecommerce_basic': 'Basic E-commerce Features',
    'ecommerce_advanced': 'Advanced E-commerce Features',
    'booking_system': 'Online Booking System',
    'membership_area': 'Member Login Area',
    'multilingual': 'Multi-language Support',
    'custom_forms': 'Custom Forms',
}

MANAGED_HOSTING_PRICE = 120
DOMAIN_REGISTRATION_PRICE = 15
MINIMUM_PAYMENT_RATIO = 0.5

DEFAULT_TERMS = 'Payment is due within 30 days of invoice date. Late payments may incur additional fees.'
DEFAULT_NOTES = 'Thank you for choosing Websiter for your website development needs!'


def feature_description(feature: str) -> str:
    if feature in FEATURE_DESCRIPTIONS:
        return FEATURE_DESCRIPTIONS[feature]
    return feature.replace('_', ' ').title()


def build_line_item(item_id: str, description: str, quantity: float, unit_price: float) -> Dict:
    if quantity < 0 or unit_price < 0:
        raise ValidationError("Quantity and unit price must not be negative", field='items')
    return {
        'id': str(item_id),
        'description': description,
        'quantity': quantity,
        'unit_price': unit_price,
        'total': quantity * unit_price
    }


def calculate_totals(items: List[Dict], tax_rate: float) -> Dict[str, float]:
    subtotal = sum(item['quantity'] * item['unit_price'] for item in items)
    tax_amount = subtotal * tax_rate
    return {
        'subtotal': subtotal,
        'tax_rate': tax_rate,
        'tax_amount': tax_amount,
        'total': subtotal + tax_amount
    }


class InvoiceService:
    """Invoice construction and persistence against a remote store."""

    def __init__(self, store, tax_rate: float = 0.13, prefix: str = 'WS', payment_terms_days: int = 30):
        self.store = store
        self.tax_rate = tax_rate
        self.prefix = prefix
        self.payment_terms_days = payment_terms_days

    def generate_invoice_number(self) -> str:
        """Next number in the current year's sequence, e.g. WS-2026-007."""
        latest = self.store.select(INVOICES_TABLE, order_by='created_at', descending=True, limit=1)
        prefix = f"{self.prefix}-{utcnow().year}-"

        if not latest:
            return f"{prefix}001"

        try:
            last_number = int(latest[0]['invoice_number'].rsplit('-', 1)[-1])
        except (ValueError, AttributeError, KeyError):
            logger.warning(f"Unparseable invoice number: {latest[0].get('invoice_number')!r}")
            last_number = 0

        return f"{prefix}{last_number + 1:03d}"

    def generate_invoice_from_project(self, project_id: str, request: Dict) -> Dict:
        """
        Draft invoice values for a website request (not yet stored).

        Args:
            project_id: Project being billed
            request: website_type, features, hosting_preference,
                domain_preference, client_id, client_name, client_email
        """
        website_type = request.get('website_type')
        if not website_type or not isinstance(website_type, str):
            website_type = 'business'
        base_price = BASE_PRICES.get(website_type, DEFAULT_BASE_PRICE)

        items = [build_line_item(1, f"{website_type.capitalize()} Website Development", 1, base_price)]

        for feature in request.get('features') or []:
            price = FEATURE_PRICES.get(feature, 0)
            if price > 0:
                items.append(build_line_item(len(items) + 1, feature_description(feature), 1, price))

        if request.get('hosting_preference') == 'managed':
            items.append(build_line_item(len(items) + 1, 'Managed Hosting (1 Year)', 1, MANAGED_HOSTING_PRICE))

        if request.get('domain_preference') == 'new':
            items.append(build_line_item(len(items) + 1, 'Domain Registration (1 Year)', 1, DOMAIN_REGISTRATION_PRICE))

        totals = calculate_totals(items, self.tax_rate)
        issue_date = utcnow()

        invoice = {
            'invoice_number': self.generate_invoice_number(),
            'project_id': project_id,
            'client_id': request.get('client_id'),
            'client_name': request.get('client_name') or 'Client',
            'client_email': request.get('client_email') or '',
            'issue_date': issue_date,
            'due_date': issue_date + timedelta(days=self.payment_terms_days),
            'status': 'draft',
            'items': items,
            'payment_options': {
                'full_payment': True,
                'partial_payment': True,
                'minimum_payment': math.ceil(totals['total'] * MINIMUM_PAYMENT_RATIO)
            },
            'terms': DEFAULT_TERMS,
            'notes': DEFAULT_NOTES,
        }
        invoice.update(totals)
        return invoice

    def create_invoice(self, invoice: Dict) -> Dict:
        validate_invoice_status(invoice.get('status', 'draft'))
        if not invoice.get('project_id'):
            raise ValidationError("project_id is required", field='project_id')

        values = dict(invoice)
        values['items'] = [
            build_line_item(item.get('id', index), item['description'], item['quantity'], item['unit_price'])
            for index, item in enumerate(values.get('items') or [], start=1)
        ]
        values.update(calculate_totals(values['items'], values.get('tax_rate', self.tax_rate)))
        if not values.get('invoice_number'):
            values['invoice_number'] = self.generate_invoice_number()

        created = self.store.insert(INVOICES_TABLE, values)
        logger.info(f"Invoice {created['invoice_number']} created for project {created['project_id']}")
        return created

    def get_invoice(self, invoice_id: str) -> Optional[Dict]:
        return self.store.get(INVOICES_TABLE, invoice_id)

    def get_invoices_by_project(self, project_id: str) -> List[Dict]:
        return self.store.select(
            INVOICES_TABLE,
            filters={'project_id': project_id},
            order_by='created_at',
            descending=True
        )

    def get_all_invoices(self) -> List[Dict]:
        return self.store.select(INVOICES_TABLE, order_by='created_at', descending=True)

    def update_invoice_status(self, invoice_id: str, status: str) -> Optional[Dict]:
        validate_invoice_status(status)

        now = utcnow()
        updates = {'status': status, 'updated_at': now}
        if status == 'sent':
            updates['sent_at'] = now
        elif status == 'paid':
            updates['paid_at'] = now

        logger.info(f"Invoice {invoice_id} status -> {status}")
        return self.store.update(INVOICES_TABLE, invoice_id, updates)

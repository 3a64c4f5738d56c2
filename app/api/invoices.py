"""
Invoice Routes Blueprint

- /api/projects/<project_id>/invoices: List a project's invoices, or generate one
- /api/invoices: All invoices (admin)
- /api/invoices/<invoice_id>: Get one invoice
- /api/invoices/<invoice_id>/status: Set status (draft, sent, paid, overdue, cancelled)
"""

from flask import Blueprint, request, jsonify
import logging

from app_init import get_service
from services.projects_repository import mapping_field, selected_features
from validators import ValidationError

logger = logging.getLogger(__name__)

invoices_bp = Blueprint('invoices_bp', __name__)


@invoices_bp.route('/api/projects/<project_id>/invoices', methods=['GET'])
def list_project_invoices(project_id):
    invoices = get_service('invoices').get_invoices_by_project(project_id)
    return jsonify({'success': True, 'invoices': invoices})


@invoices_bp.route('/api/projects/<project_id>/invoices', methods=['POST'])
def generate_project_invoice(project_id):
    """Generate and store a draft invoice from the project's website request."""
    project = get_service('projects').get_project(project_id)
    if project is None:
        return jsonify({'success': False, 'error': 'Project not found'}), 404

    data = request.get_json(silent=True) or {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be an object")

    purpose = mapping_field(project, 'purpose')
    preferences = mapping_field(project, 'preferences')
    website_request = {
        'website_type': data.get('website_type') or purpose.get('website_type'),
        'features': selected_features(data['features'] if 'features' in data else project.get('features')),
        'hosting_preference': data.get('hosting_preference', preferences.get('hosting')),
        'domain_preference': data.get('domain_preference', preferences.get('domain')),
        'client_id': project.get('client_id'),
        'client_name': data.get('client_name') or mapping_field(project, 'contact_info').get('name'),
        'client_email': project.get('client_email'),
    }

    service = get_service('invoices')
    invoice = service.create_invoice(service.generate_invoice_from_project(project_id, website_request))
    return jsonify({'success': True, 'invoice': invoice}), 201


@invoices_bp.route('/api/invoices', methods=['GET'])
def list_invoices():
    return jsonify({'success': True, 'invoices': get_service('invoices').get_all_invoices()})


@invoices_bp.route('/api/invoices/<invoice_id>', methods=['GET'])
def get_invoice(invoice_id):
    invoice = get_service('invoices').get_invoice(invoice_id)
    if invoice is None:
        return jsonify({'success': False, 'error': 'Invoice not found'}), 404
    return jsonify({'success': True, 'invoice': invoice})


@invoices_bp.route('/api/invoices/<invoice_id>/status', methods=['PUT'])
def update_invoice_status(invoice_id):
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        raise ValidationError("status is required", field='status')

    invoice = get_service('invoices').update_invoice_status(invoice_id, data['status'])
    if invoice is None:
        return jsonify({'success': False, 'error': 'Invoice not found'}), 404
    return jsonify({'success': True, 'invoice': invoice})

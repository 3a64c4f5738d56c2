"""
Support Ticket Routes Blueprint

- /api/tickets: List tickets (?client_id= filters by client), or open one
- /api/tickets/<ticket_id>: Get a ticket with its replies
- /api/tickets/<ticket_id>/status: Set status (open, in_progress, resolved, closed)
- /api/tickets/<ticket_id>/responses: Reply to a ticket
"""

from flask import Blueprint, request, jsonify
import logging

from app_init import get_service
from validators import ValidationError

logger = logging.getLogger(__name__)

tickets_bp = Blueprint('tickets_bp', __name__)


def _not_found():
    return jsonify({'success': False, 'error': 'Ticket not found'}), 404


@tickets_bp.route('/api/tickets', methods=['GET'])
def list_tickets():
    repository = get_service('tickets')
    client_id = request.args.get('client_id')
    tickets = repository.get_client_tickets(client_id) if client_id else repository.get_all_tickets()
    return jsonify({'success': True, 'tickets': tickets})


@tickets_bp.route('/api/tickets', methods=['POST'])
def create_ticket():
    data = request.get_json(silent=True) or {}
    ticket = get_service('tickets').create_ticket(data, data.get('client_id'))
    return jsonify({'success': True, 'ticket': ticket}), 201


@tickets_bp.route('/api/tickets/<ticket_id>', methods=['GET'])
def get_ticket(ticket_id):
    ticket = get_service('tickets').get_ticket(ticket_id)
    if ticket is None:
        return _not_found()
    return jsonify({'success': True, 'ticket': ticket})


@tickets_bp.route('/api/tickets/<ticket_id>/status', methods=['PUT'])
def update_ticket_status(ticket_id):
    data = request.get_json(silent=True) or {}
    if not data.get('status'):
        raise ValidationError("status is required", field='status')

    ticket = get_service('tickets').update_ticket_status(ticket_id, data['status'])
    if ticket is None:
        return _not_found()
    return jsonify({'success': True, 'ticket': ticket})


@tickets_bp.route('/api/tickets/<ticket_id>/responses', methods=['POST'])
def add_ticket_response(ticket_id):
    data = request.get_json(silent=True) or {}
    response = get_service('tickets').add_ticket_response(
        ticket_id,
        data.get('user_id'),
        data.get('message'),
        is_admin_response=data.get('is_admin_response', False)
    )
    if response is None:
        return _not_found()
    return jsonify({'success': True, 'response': response}), 201

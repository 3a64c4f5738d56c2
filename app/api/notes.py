"""
Client Notes Routes Blueprint

Handles admin notes on clients:
- /api/clients/<client_id>/notes: List/create notes (optional ?email= for the email fallback)
- /api/clients/<client_id>/notes/stats: Total/completed/pending counts
- /api/notes/<note_id>: Edit text, set completion, delete
"""

from flask import Blueprint, request, jsonify
import logging

from app_init import get_service
from services.notes_repository import OwnerKey
from validators import ValidationError, validate_completed_flag

logger = logging.getLogger(__name__)

notes_bp = Blueprint('notes_bp', __name__)


def _owner(client_id, data=None):
    email = request.args.get('email') or (data or {}).get('client_email')
    return OwnerKey(client_id=client_id, client_email=email)


@notes_bp.route('/api/clients/<client_id>/notes', methods=['GET'])
def list_client_notes(client_id):
    notes = get_service('notes').get_client_notes(_owner(client_id))
    return jsonify({'success': True, 'notes': [note.to_dict() for note in notes]})


@notes_bp.route('/api/clients/<client_id>/notes', methods=['POST'])
def add_client_note(client_id):
    data = request.get_json(silent=True) or {}
    note = get_service('notes').add_client_note(
        _owner(client_id, data),
        data.get('text'),
        created_by=data.get('created_by')
    )
    return jsonify({'success': True, 'note': note.to_dict()}), 201


@notes_bp.route('/api/clients/<client_id>/notes/stats', methods=['GET'])
def client_notes_stats(client_id):
    stats = get_service('notes').get_client_notes_stats(_owner(client_id))
    return jsonify({'success': True, 'stats': stats})


@notes_bp.route('/api/notes/<note_id>', methods=['PATCH'])
def update_client_note(note_id):
    data = request.get_json(silent=True) or {}
    repository = get_service('notes')

    if 'text' not in data and 'completed' not in data:
        raise ValidationError("Provide text and/or completed")

    # Checked up front so a bad flag never leaves a half-applied text edit
    completed = validate_completed_flag(data['completed']) if 'completed' in data else None

    row = None
    if 'text' in data:
        row = repository.update_client_note(note_id, data['text'])
        if row is None:
            return jsonify({'success': False, 'error': 'Note not found'}), 404
    if completed is not None:
        row = repository.toggle_client_note(note_id, completed)
        if row is None:
            return jsonify({'success': False, 'error': 'Note not found'}), 404

    return jsonify({'success': True, 'note': row})


@notes_bp.route('/api/notes/<note_id>', methods=['DELETE'])
def delete_client_note(note_id):
    get_service('notes').delete_client_note(note_id)
    return jsonify({'success': True})

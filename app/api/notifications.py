"""
Notification Routes Blueprint

- /api/notifications: A user's notifications (?user_id=&page=&limit=), or create one
- /api/notifications/unread-count: Unread count for ?user_id=
- /api/notifications/<notification_id>/read: Mark as read
"""

from flask import Blueprint, request, jsonify
import logging

from app_init import get_service
from validators import ValidationError, validate_notification_request

logger = logging.getLogger(__name__)

notifications_bp = Blueprint('notifications_bp', __name__)


def _user_id():
    user_id = request.args.get('user_id')
    if not user_id:
        raise ValidationError("user_id is required", field='user_id')
    return user_id


@notifications_bp.route('/api/notifications', methods=['GET'])
def list_notifications():
    page = request.args.get('page', 1, type=int)
    limit = request.args.get('limit', 10, type=int)
    result = get_service('notifications').get_user_notifications(_user_id(), page=page, limit=limit)
    return jsonify({'success': True, **result})


@notifications_bp.route('/api/notifications', methods=['POST'])
def create_notification():
    data = request.get_json(silent=True) or {}
    is_valid, error = validate_notification_request(data)
    if not is_valid:
        raise ValidationError(error)

    service = get_service('notifications')
    notification_type = data.get('type', 'info')
    if data.get('is_global'):
        notification = service.create_global_notification(data['title'], data['message'], notification_type)
    else:
        notification = service.create_user_notification(
            data['recipient_id'], data['title'], data['message'], notification_type
        )
    return jsonify({'success': True, 'notification': notification}), 201


@notifications_bp.route('/api/notifications/unread-count', methods=['GET'])
def unread_count():
    count = get_service('notifications').get_unread_count(_user_id())
    return jsonify({'success': True, 'unread_count': count})


@notifications_bp.route('/api/notifications/<notification_id>/read', methods=['POST'])
def mark_notification_read(notification_id):
    if not get_service('notifications').mark_as_read(notification_id):
        return jsonify({'success': False, 'error': 'Notification not found'}), 404
    return jsonify({'success': True})

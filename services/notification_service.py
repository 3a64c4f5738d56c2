"""
Notification Service - Manages in-app notifications.

This service handles:
- Creating global and user-specific notifications
- Listing a user's notifications (personal plus global) with pagination
- Marking notifications as read
- Admin alerts for new projects, status milestones and support tickets
"""

import logging
from typing import Dict, Any, Optional

from services.remote_store import RemoteStoreError
from validators import ValidationError, sanitize_string, validate_notification_type

logger = logging.getLogger(__name__)

NOTIFICATIONS_TABLE = 'notifications'

# Status changes admins are told about
MILESTONE_STATUSES = ('submitted', 'confirmed', 'completed')


class NotificationService:
    """Service for managing notifications."""

    def __init__(self, store):
        self.store = store

    def create_global_notification(self, title: str, message: str,
                                   notification_type: str = 'info') -> Dict:
        """Create a notification shown to every user."""
        notification = self.store.insert(NOTIFICATIONS_TABLE, self._values(
            title, message, notification_type, recipient_id=None, is_global=True
        ))
        logger.info(f"Global notification created: {title}")
        return notification

    def create_user_notification(self, recipient_id: str, title: str, message: str,
                                 notification_type: str = 'info') -> Dict:
        """Create a notification for one user."""
        if not recipient_id:
            raise ValidationError(
                'recipient_id is required for user-specific notifications', field='recipient_id'
            )

        notification = self.store.insert(NOTIFICATIONS_TABLE, self._values(
            title, message, notification_type, recipient_id=recipient_id, is_global=False
        ))
        logger.info(f"User notification created for {recipient_id}")
        return notification

    def get_user_notifications(self, user_id: str, page: int = 1, limit: int = 10) -> Dict[str, Any]:
        """
        Get a page of notifications for a user, newest first.

        Args:
            user_id: Recipient; global notifications are always included
            page: 1-based page number
            limit: Page size

        Returns:
            Dict with notifications, total_count and has_more
        """
        page = max(int(page), 1)
        limit = max(int(limit), 1)
        offset = (page - 1) * limit
        audience = {'recipient_id': user_id, 'is_global': True}

        notifications = self.store.select(
            NOTIFICATIONS_TABLE,
            any_of=audience,
            order_by='created_at',
            descending=True,
            limit=limit,
            offset=offset
        )
        total_count = self.store.count(NOTIFICATIONS_TABLE, any_of=audience)

        return {
            'notifications': notifications,
            'total_count': total_count,
            'has_more': total_count > offset + limit
        }

    def get_unread_count(self, user_id: str) -> int:
        """Unread personal notifications plus unread global ones."""
        personal = self.store.count(NOTIFICATIONS_TABLE, filters={'recipient_id': user_id, 'is_read': False})
        shared = self.store.count(NOTIFICATIONS_TABLE, filters={'is_global': True, 'is_read': False})
        return personal + shared

    def mark_as_read(self, notification_id: str) -> bool:
        """Mark a notification as read. Returns False when it does not exist."""
        updated = self.store.update(NOTIFICATIONS_TABLE, notification_id, {'is_read': True})
        if updated is None:
            logger.warning(f"Notification {notification_id} not found")
            return False
        logger.info(f"Notification {notification_id} marked as read")
        return True

    # -- admin alerts ----------------------------------------------------------
    # Alerts ride along with the write that triggered them. A failed alert is
    # logged and reported as None; the project or ticket write still stands.

    def notify_project_created(self, project: Dict) -> Optional[Dict]:
        """Tell admins a client has placed a new project."""
        return self._alert(
            'New Project Created',
            f"{_client_label(project)} has created a new project: \"{project.get('title')}\"",
            'info'
        )

    def notify_project_status_change(self, project: Dict, old_status: Optional[str],
                                     new_status: str) -> Optional[Dict]:
        """Tell admins a project reached a milestone status; other moves are ignored."""
        if new_status not in MILESTONE_STATUSES:
            return None

        logger.debug(f"Project {project.get('id')} moved {old_status} -> {new_status}")
        return self._alert(
            'Project Status Updated',
            f"Project \"{project.get('title')}\" by {_client_label(project)} is now {new_status}",
            'success' if new_status == 'completed' else 'info'
        )

    def notify_support_ticket_created(self, ticket: Dict,
                                      client_name: Optional[str] = None) -> Optional[Dict]:
        """Tell admins a client opened a ticket; high and urgent ones are warnings."""
        priority = ticket.get('priority', 'medium')
        return self._alert(
            'New Support Ticket',
            f"{client_name or ticket.get('client_id')} created a {priority} priority ticket: "
            f"\"{ticket.get('subject')}\"",
            'warning' if priority in ('high', 'urgent') else 'info'
        )

    def _alert(self, title, message, notification_type):
        try:
            return self.create_global_notification(title, message, notification_type)
        except (RemoteStoreError, ValidationError) as e:
            logger.error(f"Failed to send admin notification '{title}': {e}")
            return None

    def _values(self, title, message, notification_type, recipient_id, is_global):
        title = sanitize_string(title or '', max_length=255)
        message = sanitize_string(message or '', max_length=5000)
        if not title or not message:
            raise ValidationError('Notification title and message are required')
        validate_notification_type(notification_type)

        return {
            'title': title,
            'message': message,
            'type': notification_type,
            'recipient_id': recipient_id,
            'is_global': is_global,
            'is_read': False
        }


def _client_label(project: Dict) -> str:
    contact = project.get('contact_info')
    name = contact.get('name') if isinstance(contact, dict) else None
    email = project.get('client_email')
    if name and email:
        return f"{name} ({email})"
    return name or email or project.get('client_id') or 'A client'

"""
Tickets Repository - Support tickets raised by clients and their reply threads.
"""

import logging
from typing import Dict, List, Optional

from database.models import utcnow
from validators import (
    ValidationError,
    sanitize_string,
    validate_ticket_request,
    validate_ticket_status
)

logger = logging.getLogger(__name__)

TICKETS_TABLE = 'support_tickets'
RESPONSES_TABLE = 'ticket_responses'


class TicketsRepository:
    """Ticket reads and writes; payloads are validated before any remote call."""

    def __init__(self, store, notifications=None):
        self.store = store
        self.notifications = notifications

    def create_ticket(self, data: Dict, client_id: str) -> Dict:
        """
        Open a ticket for a client.

        Args:
            data: subject, category, priority, description, optional project_id
                and client_name (used in the admin alert only)
            client_id: Client raising the ticket

        Returns:
            The stored ticket
        """
        if not client_id:
            raise ValidationError("client_id is required", field='client_id')

        is_valid, error = validate_ticket_request(data)
        if not is_valid:
            raise ValidationError(error)

        ticket = self.store.insert(TICKETS_TABLE, {
            'client_id': client_id,
            'project_id': data.get('project_id') or None,
            'subject': sanitize_string(data['subject'], max_length=255),
            'category': data['category'],
            'priority': data['priority'],
            'description': sanitize_string(data['description'], max_length=10000),
            'status': 'open'
        })
        logger.info(f"Ticket {ticket['id']} opened by client {client_id}")

        if self.notifications is not None:
            self.notifications.notify_support_ticket_created(ticket, client_name=data.get('client_name'))
        return ticket

    def get_ticket(self, ticket_id: str) -> Optional[Dict]:
        ticket = self.store.get(TICKETS_TABLE, ticket_id)
        if ticket is None:
            return None
        return self._with_responses([ticket])[0]

    def get_client_tickets(self, client_id: str) -> List[Dict]:
        tickets = self.store.select(
            TICKETS_TABLE,
            filters={'client_id': client_id},
            order_by='created_at',
            descending=True
        )
        return self._with_responses(tickets)

    def get_all_tickets(self) -> List[Dict]:
        tickets = self.store.select(TICKETS_TABLE, order_by='created_at', descending=True)
        return self._with_responses(tickets)

    def update_ticket_status(self, ticket_id: str, status: str) -> Optional[Dict]:
        validate_ticket_status(status)
        logger.info(f"Updating ticket {ticket_id} status to {status}")
        return self.store.update(TICKETS_TABLE, ticket_id, {
            'status': status,
            'updated_at': utcnow()
        })

    def add_ticket_response(self, ticket_id: str, user_id: str, message: str,
                            is_admin_response: bool = False) -> Optional[Dict]:
        """
        Append a reply to a ticket and bump the ticket's updated_at.

        Returns None when the ticket does not exist.
        """
        message = sanitize_string(message or '', max_length=10000)
        if not message:
            raise ValidationError("message is required", field='message')
        if not user_id:
            raise ValidationError("user_id is required", field='user_id')
        if not isinstance(is_admin_response, bool):
            raise ValidationError("is_admin_response must be true or false", field='is_admin_response')

        if self.store.update(TICKETS_TABLE, ticket_id, {'updated_at': utcnow()}) is None:
            return None

        response = self.store.insert(RESPONSES_TABLE, {
            'ticket_id': ticket_id,
            'user_id': user_id,
            'message': message,
            'is_admin_response': is_admin_response
        })
        logger.info(f"Response added to ticket {ticket_id}")
        return response

    def _with_responses(self, tickets: List[Dict]) -> List[Dict]:
        # One query per ticket; ticket lists are short
        return [
            dict(ticket, responses=self.store.select(
                RESPONSES_TABLE,
                filters={'ticket_id': ticket['id']},
                order_by='created_at'
            ))
            for ticket in tickets
        ]

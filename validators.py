"""
Input Validation & Sanitization Utilities
Validation for note text, project status/priority, invoices and notifications.
All checks run before any request reaches the remote store.
"""
import re
from typing import Dict, Any, List, Optional, Tuple
import logging

logger = logging.getLogger(__name__)

PROJECT_PRIORITIES = ('low', 'medium', 'high')
INVOICE_STATUSES = ('draft', 'sent', 'paid', 'overdue', 'cancelled')
NOTIFICATION_TYPES = ('info', 'success', 'warning', 'error')
TICKET_CATEGORIES = ('Technical Issue', 'Design Change', 'Content Update', 'General Question')
TICKET_PRIORITIES = ('low', 'medium', 'high', 'urgent')
TICKET_STATUSES = ('open', 'in_progress', 'resolved', 'closed')

MAX_NOTE_LENGTH = 5000

EMAIL_PATTERN = re.compile(r'^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$')


class ValidationError(Exception):
    """Custom exception for validation errors"""
    def __init__(self, message: str, field: Optional[str] = None):
        self.message = message
        self.field = field
        super().__init__(self.message)


def validate_required_fields(data: Dict[str, Any], required_fields: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate that all required fields are present in the data

    Args:
        data: Dictionary of input data
        required_fields: List of required field names

    Returns:
        Tuple of (is_valid, error_message)
    """
    missing_fields = [field for field in required_fields if field not in data or data[field] is None or data[field] == '']

    if missing_fields:
        return False, f"Missing required fields: {', '.join(missing_fields)}"

    return True, None


def validate_email(email: str) -> Tuple[bool, Optional[str]]:
    """
    Validate email format

    Args:
        email: Email address to validate

    Returns:
        Tuple of (is_valid, error_message)
    """
    if not email or not isinstance(email, str):
        return False, "Email must be a non-empty string"

    if not EMAIL_PATTERN.match(email):
        return False, "Invalid email format"

    if len(email) > 254:  # RFC 5321
        return False, "Email address too long"

    return True, None


def sanitize_string(value: str, max_length: int = 1000) -> str:
    """
    Sanitize string input by removing null bytes, trimming and truncating

    Args:
        value: String to sanitize
        max_length: Maximum allowed length

    Returns:
        Sanitized string
    """
    if not isinstance(value, str):
        return str(value)

    sanitized = value.replace('\x00', '').strip()

    if len(sanitized) > max_length:
        sanitized = sanitized[:max_length]

    return sanitized


def clean_note_text(text: Optional[str]) -> str:
    """Trimmed note text; an empty result means the caller should do nothing."""
    if text is None:
        return ''
    return sanitize_string(text, max_length=MAX_NOTE_LENGTH)


def ensure_choice(value: Any, choices, field: str) -> str:
    """
    Raise ValidationError unless value is one of choices

    Args:
        value: Candidate value
        choices: Allowed values
        field: Field name reported with the error

    Returns:
        The value, unchanged
    """
    if value not in choices:
        logger.warning(f"Rejected {field} value: {value!r}")
        raise ValidationError(
            f"Invalid {field} value: {value}. Valid values are: {', '.join(choices)}",
            field=field
        )
    return value


def validate_priority(priority: str) -> str:
    return ensure_choice(priority, PROJECT_PRIORITIES, 'priority')


def validate_invoice_status(status: str) -> str:
    return ensure_choice(status, INVOICE_STATUSES, 'status')


def validate_notification_type(notification_type: str) -> str:
    return ensure_choice(notification_type, NOTIFICATION_TYPES, 'type')


def validate_ticket_status(status: str) -> str:
    return ensure_choice(status, TICKET_STATUSES, 'status')


def validate_ticket_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate a support ticket payload

    Args:
        data: Request data with subject, category, priority, description

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, error = validate_required_fields(data, ['subject', 'category', 'priority', 'description'])
    if not is_valid:
        return False, error

    if data['category'] not in TICKET_CATEGORIES:
        return False, f"Invalid ticket category: {data['category']}"

    if data['priority'] not in TICKET_PRIORITIES:
        return False, f"Invalid ticket priority: {data['priority']}"

    return True, None


def validate_notification_request(data: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate a notification creation payload

    Args:
        data: Request data with title, message, optional type/recipient_id/is_global

    Returns:
        Tuple of (is_valid, error_message)
    """
    is_valid, error = validate_required_fields(data, ['title', 'message'])
    if not is_valid:
        return False, error

    if data.get('type', 'info') not in NOTIFICATION_TYPES:
        return False, f"Invalid notification type: {data.get('type')}"

    if data.get('is_global') and data.get('recipient_id'):
        return False, "A notification is either global or addressed to one recipient"

    if not data.get('is_global') and not data.get('recipient_id'):
        return False, "recipient_id is required for user-specific notifications"

    return True, None


def parse_amount(value: Any, field: str, default: float = 0) -> float:
    """
    Parse a non-negative number (price, hours, days)

    Args:
        value: Raw value; None or '' gives the default
        field: Field name reported with the error
        default: Value used when nothing was supplied

    Returns:
        The value as a float
    """
    if value is None or value == '':
        return float(default)

    # bool is an int subclass; True is not a price
    if isinstance(value, bool):
        raise ValidationError(f"Invalid {field}: {value!r}", field=field)

    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {field}: {value!r}", field=field)

    if amount != amount or amount < 0:
        raise ValidationError(f"{field} must be a non-negative number", field=field)
    return amount


def validate_completed_flag(value: Any) -> bool:
    """Completion flags must be real JSON booleans; "false" is not False."""
    if not isinstance(value, bool):
        raise ValidationError("completed must be true or false", field='completed')
    return value

"""
Tests for input validation utilities
"""
import pytest
from validators import (
    ValidationError,
    clean_note_text,
    ensure_choice,
    sanitize_string,
    validate_email,
    validate_invoice_status,
    validate_notification_request,
    validate_notification_type,
    validate_priority,
    validate_required_fields,
    MAX_NOTE_LENGTH,
    parse_amount,
    validate_completed_flag,
    validate_ticket_request,
    validate_ticket_status
)


@pytest.mark.unit
class TestRequiredFields:
    """Tests for required fields validation"""

    def test_validate_all_fields_present(self):
        """Test validation passes when all fields present"""
        data = {'client_id': 'c1', 'title': 'Site'}
        is_valid, error = validate_required_fields(data, ['client_id', 'title'])
        assert is_valid is True
        assert error is None

    def test_validate_missing_field(self):
        """Test validation fails when field missing"""
        is_valid, error = validate_required_fields({'client_id': 'c1'}, ['client_id', 'title'])
        assert is_valid is False
        assert 'title' in error

    def test_validate_empty_and_none_fields(self):
        """Test validation fails when field is empty or None"""
        assert validate_required_fields({'title': ''}, ['title'])[0] is False
        assert validate_required_fields({'title': None}, ['title'])[0] is False


@pytest.mark.unit
class TestEmailValidation:
    """Tests for email validation"""

    def test_valid_email(self):
        """Test valid email passes"""
        assert validate_email('test@example.com') == (True, None)

    def test_invalid_emails(self):
        """Test malformed, empty and overlong emails fail"""
        assert validate_email('invalidemail.com')[0] is False
        assert validate_email('test@')[0] is False
        assert validate_email('')[0] is False
        assert validate_email('a' * 250 + '@example.com')[0] is False


@pytest.mark.unit
class TestSanitization:
    """Tests for string and note text cleanup"""

    def test_sanitize_strips_and_truncates(self):
        assert sanitize_string('  hello\x00 ') == 'hello'
        assert sanitize_string('abcdef', max_length=3) == 'abc'

    def test_sanitize_non_string(self):
        assert sanitize_string(42) == '42'

    def test_clean_note_text(self):
        assert clean_note_text('  call client  ') == 'call client'
        assert clean_note_text('   ') == ''
        assert clean_note_text(None) == ''
        assert len(clean_note_text('x' * (MAX_NOTE_LENGTH + 10))) == MAX_NOTE_LENGTH


@pytest.mark.unit
class TestChoices:
    """Tests for closed-set validation"""

    def test_ensure_choice(self):
        assert ensure_choice('a', ('a', 'b'), 'letter') == 'a'
        with pytest.raises(ValidationError) as exc_info:
            ensure_choice('c', ('a', 'b'), 'letter')
        assert exc_info.value.field == 'letter'

    def test_priority(self):
        assert validate_priority('high') == 'high'
        with pytest.raises(ValidationError):
            validate_priority('urgent')

    def test_invoice_status(self):
        assert validate_invoice_status('overdue') == 'overdue'
        with pytest.raises(ValidationError):
            validate_invoice_status('refunded')

    def test_notification_type(self):
        assert validate_notification_type('success') == 'success'
        with pytest.raises(ValidationError):
            validate_notification_type('critical')


@pytest.mark.unit
class TestNotificationRequest:
    """Tests for notification payload validation"""

    def test_user_notification(self):
        data = {'title': 'Hi', 'message': 'Welcome', 'recipient_id': 'u1'}
        assert validate_notification_request(data) == (True, None)

    def test_global_notification(self):
        data = {'title': 'Hi', 'message': 'Welcome', 'is_global': True, 'type': 'warning'}
        assert validate_notification_request(data) == (True, None)

    def test_missing_message(self):
        assert validate_notification_request({'title': 'Hi', 'recipient_id': 'u1'})[0] is False

    def test_bad_type(self):
        data = {'title': 'Hi', 'message': 'x', 'recipient_id': 'u1', 'type': 'critical'}
        assert validate_notification_request(data)[0] is False

    def test_both_or_neither_audience(self):
        assert validate_notification_request({'title': 'Hi', 'message': 'x'})[0] is False
        assert validate_notification_request(
            {'title': 'Hi', 'message': 'x', 'recipient_id': 'u1', 'is_global': True}
        )[0] is False


@pytest.mark.unit
class TestAmounts:
    """Tests for price and effort parsing"""

    @pytest.mark.parametrize('value, expected', [(None, 0), ('', 0), (0, 0), ('12.5', 12.5), (499, 499)])
    def test_valid_amounts(self, value, expected):
        assert parse_amount(value, 'price') == expected

    @pytest.mark.parametrize('value', ['abc', -1, '-0.5', [1], {}, True, 'nan'])
    def test_invalid_amounts(self, value):
        with pytest.raises(ValidationError) as exc_info:
            parse_amount(value, 'price')
        assert exc_info.value.field == 'price'


@pytest.mark.unit
class TestCompletedFlag:
    """Tests for the note completion flag"""

    def test_booleans_pass_through(self):
        assert validate_completed_flag(True) is True
        assert validate_completed_flag(False) is False

    @pytest.mark.parametrize('value', ['false', 'true', 0, 1, None, []])
    def test_non_booleans_rejected(self, value):
        with pytest.raises(ValidationError) as exc_info:
            validate_completed_flag(value)
        assert exc_info.value.field == 'completed'


@pytest.mark.unit
class TestTicketValidation:
    """Tests for support ticket payloads"""

    def test_valid_ticket(self):
        is_valid, error = validate_ticket_request({
            'subject': 'Typo', 'category': 'Content Update', 'priority': 'low', 'description': 'Fix it'
        })
        assert is_valid is True
        assert error is None

    def test_unknown_category_and_priority(self):
        base = {'subject': 'Typo', 'category': 'Content Update', 'priority': 'low', 'description': 'Fix it'}
        assert validate_ticket_request(dict(base, category='Billing'))[0] is False
        assert validate_ticket_request(dict(base, priority='critical'))[0] is False
        assert validate_ticket_request(dict(base, description=''))[0] is False

    def test_status(self):
        assert validate_ticket_status('in_progress') == 'in_progress'
        with pytest.raises(ValidationError):
            validate_ticket_status('escalated')

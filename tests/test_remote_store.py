"""
Tests for the SQLAlchemy-backed remote store
"""
import pytest
from datetime import datetime
from unittest.mock import Mock

from services.change_feed import INSERT, UPDATE, DELETE
from services.remote_store import RemoteStoreError


@pytest.mark.integration
class TestDatabaseStoreCrud:
    """Tests for insert/select/update/delete"""

    def test_insert_returns_row_with_defaults(self, store):
        """Test that insert fills id and timestamps"""
        row = store.insert('client_notes', {'client_id': 'client-1', 'text': 'hello'})
        assert len(row['id']) == 36
        assert row['completed'] is False
        assert row['created_at'] is not None

    def test_select_with_filters_and_order(self, store, seeded_notes):
        """Test equality filters and descending order"""
        rows = store.select('client_notes', filters={'client_id': 'client-1'},
                            order_by='created_at', descending=True)
        assert [row['id'] for row in rows] == ['n3', 'n2', 'n1']

    def test_select_limit_and_offset(self, store, seeded_notes):
        """Test paging through rows"""
        rows = store.select('client_notes', order_by='created_at', limit=1, offset=1)
        assert [row['id'] for row in rows] == ['n2']

    def test_select_any_of(self, store):
        """Test that any_of matches rows satisfying either condition"""
        store.insert('notifications', {'title': 'a', 'message': 'm', 'recipient_id': 'u1'})
        store.insert('notifications', {'title': 'b', 'message': 'm', 'is_global': True})
        store.insert('notifications', {'title': 'c', 'message': 'm', 'recipient_id': 'u2'})

        rows = store.select('notifications', any_of={'recipient_id': 'u1', 'is_global': True})
        assert sorted(row['title'] for row in rows) == ['a', 'b']
        assert store.count('notifications', any_of={'recipient_id': 'u1', 'is_global': True}) == 2

    def test_count(self, store, seeded_notes):
        """Test counting with and without filters"""
        assert store.count('client_notes') == 3
        assert store.count('client_notes', filters={'completed': True}) == 1

    def test_get(self, store, seeded_notes):
        """Test fetching one row by id"""
        assert store.get('client_notes', 'n2')['text'] == 'send mockups'
        assert store.get('client_notes', 'missing') is None

    def test_update_parses_iso_timestamps(self, store, seeded_notes):
        """Test that ISO strings are stored as naive UTC datetimes"""
        row = store.update('client_notes', 'n1', {
            'completed': True,
            'completed_at': '2024-05-04T12:00:00+02:00'
        })
        assert row['completed'] is True
        assert row['completed_at'] == datetime(2024, 5, 4, 10, 0).isoformat()

    def test_update_missing_row_returns_none(self, store):
        """Test that updating a missing row returns None"""
        assert store.update('client_notes', 'missing', {'text': 'x'}) is None

    def test_delete(self, store, seeded_notes):
        """Test deleting a row and deleting a missing one"""
        store.delete('client_notes', 'n1')
        store.delete('client_notes', 'n1')
        assert store.get('client_notes', 'n1') is None
        assert store.count('client_notes') == 2


@pytest.mark.integration
class TestDatabaseStoreErrors:
    """Tests for error reporting"""

    def test_unknown_table(self, store):
        """Test that an unknown table raises with a relation error code"""
        with pytest.raises(RemoteStoreError) as exc_info:
            store.select('archived_notes')
        assert exc_info.value.code == '42P01'

    def test_unknown_filter_column(self, store):
        """Test that filtering on an unknown column raises"""
        with pytest.raises(RemoteStoreError) as exc_info:
            store.select('client_notes', filters={'owner': 'x'})
        assert exc_info.value.code == '42703'

    def test_unknown_write_column(self, store):
        """Test that writing an unknown column raises"""
        with pytest.raises(RemoteStoreError) as exc_info:
            store.insert('client_notes', {'client_id': 'c', 'text': 't', 'colour': 'red'})
        assert exc_info.value.code == 'PGRST204'

    def test_constraint_violation_wrapped(self, store):
        """Test that a database error surfaces as RemoteStoreError"""
        with pytest.raises(RemoteStoreError):
            store.insert('client_notes', {'client_id': 'client-1', 'text': None})

    def test_error_to_dict(self):
        """Test the error payload shape"""
        error = RemoteStoreError('boom', code='500')
        assert error.to_dict() == {'error': 'boom', 'code': '500'}


@pytest.mark.integration
class TestDatabaseStoreEvents:
    """Tests for change events published after writes"""

    def test_writes_publish_events(self, store):
        """Test insert, update and delete each publish one event"""
        callback = Mock()
        store.subscribe('client_notes', None, callback)

        row = store.insert('client_notes', {'client_id': 'client-1', 'text': 'hello'})
        store.update('client_notes', row['id'], {'text': 'hello again'})
        store.delete('client_notes', row['id'])

        events = [call.args[0] for call in callback.call_args_list]
        assert [event.event_type for event in events] == [INSERT, UPDATE, DELETE]
        assert all(event.origin == 'test-session' for event in events)
        assert events[1].old['text'] == 'hello'
        assert events[1].new['text'] == 'hello again'
        assert events[2].old['id'] == row['id']

    def test_failed_write_publishes_nothing(self, store):
        """Test that no event is published when the write fails"""
        callback = Mock()
        store.subscribe('client_notes', None, callback)

        with pytest.raises(RemoteStoreError):
            store.insert('client_notes', {'client_id': 'client-1', 'text': None})
        store.update('client_notes', 'missing', {'text': 'x'})

        callback.assert_not_called()

    def test_stores_share_feed(self, store, other_store):
        """Test that a write through one store reaches subscribers of the other"""
        callback = Mock()
        store.subscribe('client_notes', None, callback)

        other_store.insert('client_notes', {'client_id': 'client-1', 'text': 'from elsewhere'})

        event = callback.call_args.args[0]
        assert event.origin == 'other-session'


@pytest.mark.integration
class TestConnectionHelpers:
    """Tests for engine construction and connection checks"""

    def test_check_db_connection(self, engine):
        from database.connection import check_db_connection
        assert check_db_connection(engine) is True

    def test_missing_url(self):
        from database.connection import build_engine
        with pytest.raises(RuntimeError):
            build_engine('')

    def test_session_rolls_back_on_error(self, engine):
        from database.connection import get_db_session, get_session_factory
        from database.models import ClientNote

        factory = get_session_factory(engine)
        with pytest.raises(ValueError):
            with get_db_session(factory) as db:
                db.add(ClientNote(client_id='client-1', text='never committed'))
                db.flush()
                raise ValueError('abort')

        with get_db_session(factory) as db:
            assert db.query(ClientNote).count() == 0

"""
Tests for the PostgREST remote store, with the HTTP session mocked
"""
import pytest
import requests
from datetime import datetime
from unittest.mock import Mock

from services.change_feed import ChangeFeed, INSERT, UPDATE, DELETE
from services.rest_store import RestStore
from services.remote_store import RemoteStoreError


def _response(status=200, payload=None, headers=None, content=b'x'):
    response = Mock()
    response.status_code = status
    response.ok = status < 400
    response.json.return_value = payload
    response.headers = headers or {}
    response.content = content
    response.text = ''
    response.reason = 'Error'
    return response


@pytest.fixture
def http():
    session = Mock()
    session.headers = {}
    return session


@pytest.fixture
def rest(http):
    return RestStore('https://example.supabase.co/', 'anon-key', feed=ChangeFeed(),
                     origin='tab-1', timeout=5, session=http)


@pytest.mark.unit
class TestRestStoreRequests:
    """Tests for how operations map onto PostgREST requests"""

    def test_auth_headers(self, rest, http):
        assert http.headers['apikey'] == 'anon-key'
        assert http.headers['Authorization'] == 'Bearer anon-key'

    def test_access_token_used_for_authorization(self, http):
        RestStore('https://example.supabase.co', 'anon-key', access_token='jwt', session=http)
        assert http.headers['Authorization'] == 'Bearer jwt'

    def test_base_url_required(self, http):
        with pytest.raises(ValueError):
            RestStore('', 'anon-key', session=http)

    def test_select_params(self, rest, http):
        http.request.return_value = _response(payload=[{'id': 'n1'}])

        rows = rest.select('client_notes', filters={'client_id': 'c1', 'completed': False},
                           order_by='created_at', descending=True, limit=10, offset=20)

        assert rows == [{'id': 'n1'}]
        method, url = http.request.call_args.args
        params = http.request.call_args.kwargs['params']
        assert method == 'GET'
        assert url == 'https://example.supabase.co/rest/v1/client_notes'
        assert params['client_id'] == 'eq.c1'
        assert params['completed'] == 'eq.false'
        assert params['order'] == 'created_at.desc'
        assert params['limit'] == 10
        assert params['offset'] == 20
        assert http.request.call_args.kwargs['timeout'] == 5

    def test_any_of_and_null_filters(self, rest, http):
        http.request.return_value = _response(payload=[])

        rest.select('notifications', filters={'recipient_id': None},
                    any_of={'recipient_id': 'u1', 'is_global': True})

        params = http.request.call_args.kwargs['params']
        assert params['recipient_id'] == 'is.null'
        assert params['or'] == '(recipient_id.eq.u1,is_global.eq.true)'

    def test_count_reads_content_range(self, rest, http):
        http.request.return_value = _response(headers={'Content-Range': '0-9/42'})

        assert rest.count('notifications', filters={'is_read': False}) == 42
        assert http.request.call_args.args[0] == 'HEAD'
        assert http.request.call_args.kwargs['headers'] == {'Prefer': 'count=exact'}

    def test_count_without_range_raises(self, rest, http):
        http.request.return_value = _response(headers={})
        with pytest.raises(RemoteStoreError):
            rest.count('notifications')

    def test_insert_serializes_datetimes(self, rest, http):
        http.request.return_value = _response(status=201, payload=[{'id': 'n1', 'text': 'x'}])

        row = rest.insert('client_notes', {'text': 'x', 'created_at': datetime(2024, 5, 1, 9, 0)})

        assert row == {'id': 'n1', 'text': 'x'}
        assert http.request.call_args.kwargs['json'] == {'text': 'x', 'created_at': '2024-05-01T09:00:00'}
        assert http.request.call_args.kwargs['headers'] == {'Prefer': 'return=representation'}

    def test_update_missing_row_returns_none(self, rest, http):
        http.request.return_value = _response(payload=[])
        assert rest.update('client_notes', 'missing', {'text': 'x'}) is None
        assert http.request.call_args.kwargs['params'] == {'id': 'eq.missing'}


@pytest.mark.unit
class TestRestStoreErrors:
    """Tests for error propagation"""

    def test_backend_error_carries_message_and_code(self, rest, http):
        http.request.return_value = _response(status=403, payload={
            'message': 'new row violates row-level security policy', 'code': '42501'
        })

        with pytest.raises(RemoteStoreError) as exc_info:
            rest.insert('client_notes', {'text': 'x'})

        assert exc_info.value.code == '42501'
        assert 'row-level security' in exc_info.value.message

    def test_error_without_json_body(self, rest, http):
        response = _response(status=502)
        response.json.side_effect = ValueError('no json')
        http.request.return_value = response

        with pytest.raises(RemoteStoreError) as exc_info:
            rest.select('projects')
        assert exc_info.value.code == '502'

    def test_network_error(self, rest, http):
        http.request.side_effect = requests.ConnectionError('unreachable')

        with pytest.raises(RemoteStoreError) as exc_info:
            rest.delete('client_notes', 'n1')
        assert exc_info.value.code == 'network_error'


@pytest.mark.unit
class TestRestStoreEvents:
    """Tests for change events on writes made through this store"""

    def test_writes_publish_events(self, rest, http):
        callback = Mock()
        rest.subscribe('client_notes', None, callback)

        http.request.return_value = _response(payload=[{'id': 'n1', 'client_id': 'c1'}])
        rest.insert('client_notes', {'client_id': 'c1', 'text': 'x'})
        rest.update('client_notes', 'n1', {'text': 'y'})
        rest.delete('client_notes', 'n1')

        events = [call.args[0] for call in callback.call_args_list]
        assert [event.event_type for event in events] == [INSERT, UPDATE, DELETE]
        assert all(event.origin == 'tab-1' for event in events)

    def test_failed_write_publishes_nothing(self, rest, http):
        callback = Mock()
        rest.subscribe('client_notes', None, callback)
        http.request.return_value = _response(status=500, payload={'message': 'boom'})

        with pytest.raises(RemoteStoreError):
            rest.update('client_notes', 'n1', {'text': 'y'})
        callback.assert_not_called()

"""
Pytest configuration and shared fixtures
"""
import os
import sys
import pytest
from datetime import datetime
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


@pytest.fixture
def app_config():
    """Fixture providing test configuration"""
    from config import TestingConfig
    return TestingConfig


@pytest.fixture
def test_env_vars():
    """Fixture providing test environment variables"""
    original_env = os.environ.copy()

    os.environ['FLASK_ENV'] = 'testing'
    os.environ['SECRET_KEY'] = 'test-secret-key-minimum-32-chars-long-for-security'
    os.environ['SUPABASE_URL'] = 'https://example.supabase.co'
    os.environ['SUPABASE_KEY'] = 'test-anon-key'

    yield

    # Restore original environment
    os.environ.clear()
    os.environ.update(original_env)


@pytest.fixture
def engine():
    """Fresh in-memory SQLite database with all tables"""
    from database.connection import build_engine, init_db

    eng = build_engine('sqlite://')
    init_db(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def feed():
    from services.change_feed import ChangeFeed
    return ChangeFeed()


@pytest.fixture
def store(engine, feed):
    """DatabaseStore over the in-memory database"""
    from database.connection import get_session_factory
    from services.remote_store import DatabaseStore

    return DatabaseStore(get_session_factory(engine), feed=feed, origin='test-session')


@pytest.fixture
def other_store(engine, feed):
    """A second session on the same database and feed, e.g. another admin's browser tab"""
    from database.connection import get_session_factory
    from services.remote_store import DatabaseStore

    return DatabaseStore(get_session_factory(engine), feed=feed, origin='other-session')


@pytest.fixture
def owner():
    from services.notes_repository import OwnerKey
    return OwnerKey(client_id='client-1', client_email='client@example.com')


@pytest.fixture
def seeded_notes(store):
    """Three notes for client-1, one completed, with fixed creation times"""
    rows = [
        {'id': 'n1', 'client_id': 'client-1', 'client_email': 'client@example.com',
         'text': 'call client', 'completed': False, 'created_at': datetime(2024, 5, 1, 9, 0)},
        {'id': 'n2', 'client_id': 'client-1', 'client_email': 'client@example.com',
         'text': 'send mockups', 'completed': True, 'created_at': datetime(2024, 5, 2, 9, 0),
         'completed_at': datetime(2024, 5, 3, 9, 0)},
        {'id': 'n3', 'client_id': 'client-1', 'client_email': 'client@example.com',
         'text': 'collect logo files', 'completed': False, 'created_at': datetime(2024, 5, 3, 9, 0)},
    ]
    return [store.insert('client_notes', row) for row in rows]


@pytest.fixture
def sample_project_data():
    """Fixture providing sample project data"""
    return {
        'client_id': 'client-1',
        'client_email': 'client@example.com',
        'title': 'Bakery Website',
        'priority': 'high',
        'price': 499,
        'contact_info': {'name': 'Jane Baker', 'phone': '+14165550100'},
        'purpose': {'website_type': 'ecommerce'},
        'features': {'selected': ['contact_form', 'seo_optimization']},
        'preferences': {'hosting': 'managed', 'domain': 'new'},
    }


@pytest.fixture
def app(store, tmp_path):
    """Flask app wired to the in-memory store"""
    from app_init import create_app
    return create_app('testing', store=store, log_dir=str(tmp_path / 'logs'))


@pytest.fixture
def client(app):
    return app.test_client()

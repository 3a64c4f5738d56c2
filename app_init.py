"""
Application Initialization Module
Creates the Flask app and wires the remote store and services into it
"""
import os
from flask import Flask, current_app
from config import get_config
from logging_config import setup_logging
from security import setup_security
from health_checks import register_health_checks
import logging

logger = logging.getLogger(__name__)


def create_remote_store(config):
    """
    Build the remote store selected by REMOTE_BACKEND

    Args:
        config: Application configuration mapping

    Returns:
        RemoteStore instance
    """
    from services.change_feed import ChangeFeed

    feed = ChangeFeed()
    backend = config.get('REMOTE_BACKEND', 'database')

    if backend == 'rest':
        from services.rest_store import RestStore

        logger.info(f"Using hosted REST backend at {config.get('SUPABASE_URL')}")
        return RestStore(
            config.get('SUPABASE_URL'),
            config.get('SUPABASE_KEY'),
            feed=feed,
            timeout=config.get('REMOTE_TIMEOUT', 15)
        )

    if backend != 'database':
        raise RuntimeError(f"Unknown REMOTE_BACKEND: {backend}")

    from database.connection import build_engine, check_db_connection, get_session_factory, init_db
    from services.remote_store import DatabaseStore

    engine = build_engine(config['DATABASE_URL'])
    check_db_connection(engine)
    init_db(engine)
    logger.info("Using SQLAlchemy database backend")
    return DatabaseStore(get_session_factory(engine), feed=feed)


def init_services(app, store):
    """Attach the store and the services built on it to app.extensions['websiter']"""
    from services.notes_repository import ClientNotesRepository
    from services.projects_repository import ProjectsRepository
    from services.project_status import KanbanBoard
    from services.invoice_service import InvoiceService
    from services.notification_service import NotificationService
    from services.tickets_repository import TicketsRepository

    notifications = NotificationService(store)
    projects = ProjectsRepository(store, notifications=notifications)
    app.extensions['websiter'] = {
        'store': store,
        'notes': ClientNotesRepository(store, lookup_mode=app.config['NOTES_OWNER_LOOKUP']),
        'projects': projects,
        'kanban': KanbanBoard(projects),
        'invoices': InvoiceService(
            store,
            tax_rate=app.config['DEFAULT_TAX_RATE'],
            prefix=app.config['INVOICE_PREFIX'],
            payment_terms_days=app.config['PAYMENT_TERMS_DAYS']
        ),
        'notifications': notifications,
        'tickets': TicketsRepository(store, notifications=notifications),
    }


def get_service(name):
    """Service lookup for request handlers"""
    return current_app.extensions['websiter'][name]


def create_app(config_name=None, store=None, log_dir='logs'):
    """
    Application factory

    Args:
        config_name: 'development', 'production' or 'testing'; defaults to FLASK_ENV
        store: Pre-built RemoteStore (tests); built from config when omitted
        log_dir: Directory for the rotating log file

    Returns:
        Configured Flask application instance
    """
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    setup_logging(app, log_dir=log_dir)

    logger.info("Initializing Websiter back-office API")
    logger.info(f"Environment: {config_name or os.environ.get('FLASK_ENV', 'development')}")

    setup_security(app, app.config)

    init_services(app, store or create_remote_store(app.config))

    from app import register_blueprints
    register_blueprints(app)

    register_health_checks(app)

    logger.info("Application initialization complete")
    return app

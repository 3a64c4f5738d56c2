"""
Database package for the Websiter back-office.
Provides SQLAlchemy models, connection management, and session handling.
"""

from database.connection import (
    Base,
    build_engine,
    get_session_factory,
    get_db_session,
    init_db,
    check_db_connection
)

from database.models import (
    ClientNote,
    Project,
    Invoice,
    Notification,
    SupportTicket,
    TicketResponse,
    TABLE_MODELS
)

__all__ = [
    # Connection
    'Base',
    'build_engine',
    'get_session_factory',
    'get_db_session',
    'init_db',
    'check_db_connection',
    # Models
    'ClientNote',
    'Project',
    'Invoice',
    'Notification',
    'SupportTicket',
    'TicketResponse',
    'TABLE_MODELS'
]

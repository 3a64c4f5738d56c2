"""
Websiter back-office - Application Package

This package contains the HTTP layer:
- api/: route handlers (Flask Blueprints), one per domain

The app factory lives in app_init.py at the project root; business logic lives
in the services package.
"""

import logging

from app.api.notes import notes_bp
from app.api.projects import projects_bp
from app.api.invoices import invoices_bp
from app.api.notifications import notifications_bp
from app.api.tickets import tickets_bp

logger = logging.getLogger(__name__)


def register_blueprints(app):
    """
    Register all API blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(notes_bp)
    app.register_blueprint(projects_bp)
    app.register_blueprint(invoices_bp)
    app.register_blueprint(notifications_bp)
    app.register_blueprint(tickets_bp)
    logger.info("API blueprints registered")


__all__ = ['register_blueprints', 'notes_bp', 'projects_bp', 'invoices_bp', 'notifications_bp', 'tickets_bp']

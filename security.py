"""
Security Utilities & Middleware
CORS, response headers, JSON error handlers and request logging for the API
"""
import os
import secrets
from typing import Dict, Any
from flask import Flask, request, jsonify, Response
from flask_cors import CORS
import logging

from services.remote_store import RemoteStoreError
from validators import ValidationError

logger = logging.getLogger(__name__)

QUIET_PATHS = ('/api/health', '/api/ping')


def ensure_secret_key(config: Dict[str, Any]) -> str:
    """
    Return the configured secret key, generating one if it is missing or short

    Args:
        config: Application configuration dictionary

    Returns:
        Secret key
    """
    secret_key = config.get('SECRET_KEY')

    if not secret_key or len(secret_key) < 32:
        if os.environ.get('FLASK_ENV') == 'production':
            logger.error("No secure SECRET_KEY in production! Generating one...")
        secret_key = secrets.token_hex(32)
        logger.warning(f"Generated new secret key (length: {len(secret_key)})")

    return secret_key


def setup_security_headers(app: Flask):
    """
    Add security headers to all responses

    Args:
        app: Flask application instance
    """
    @app.after_request
    def add_security_headers(response: Response) -> Response:
        response.headers['X-Frame-Options'] = 'DENY'
        response.headers['X-Content-Type-Options'] = 'nosniff'
        response.headers['Referrer-Policy'] = 'strict-origin-when-cross-origin'

        # HTTPS only in production
        if not app.debug:
            response.headers['Strict-Transport-Security'] = 'max-age=31536000; includeSubDomains'

        return response


def setup_cors(app: Flask, config: Dict[str, Any]):
    """
    Configure CORS for the dashboard front-end

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    cors_origins = config.get('CORS_ORIGINS', ['*'])
    cors_methods = config.get('CORS_METHODS', ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS'])
    cors_headers = config.get('CORS_ALLOW_HEADERS', ['Content-Type', 'Authorization'])

    if not app.debug and '*' in cors_origins:
        logger.warning("Using wildcard CORS in production! Set CORS_ORIGINS environment variable.")

    CORS(
        app,
        origins=cors_origins,
        methods=cors_methods,
        allow_headers=cors_headers,
        supports_credentials=True,
        max_age=3600
    )

    logger.info(f"CORS configured: origins={cors_origins}")


def setup_error_handlers(app: Flask):
    """
    Register JSON error handlers

    Args:
        app: Flask application instance
    """
    @app.errorhandler(ValidationError)
    def validation_error(error):
        return jsonify({'error': error.message, 'field': error.field}), 400

    @app.errorhandler(RemoteStoreError)
    def remote_store_error(error):
        logger.error(f"Remote store error on {request.path}: {error.message} ({error.code})")
        return jsonify(error.to_dict()), 502

    @app.errorhandler(404)
    def not_found(error):
        return jsonify({
            'error': 'Not Found',
            'message': 'The requested resource was not found'
        }), 404

    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({
            'error': 'Method Not Allowed',
            'message': 'The method is not allowed for the requested URL'
        }), 405

    @app.errorhandler(500)
    def internal_server_error(error):
        logger.error(f"Internal server error: {error}", exc_info=True)
        response = {
            'error': 'Internal Server Error',
            'message': 'An error occurred while processing your request'
        }
        if app.debug:
            response['details'] = str(error)
        return jsonify(response), 500

    logger.info("Error handlers registered")


def setup_request_logging(app: Flask):
    """
    Log requests and responses, skipping health probes

    Args:
        app: Flask application instance
    """
    @app.before_request
    def log_request():
        if request.path in QUIET_PATHS:
            return
        logger.info(f"Request: {request.method} {request.path} from {request.remote_addr}")

    @app.after_request
    def log_response(response: Response) -> Response:
        if request.path not in QUIET_PATHS:
            logger.info(f"Response: {request.method} {request.path} status={response.status_code}")
        return response


def setup_security(app: Flask, config: Dict[str, Any]):
    """
    Setup all security features for the application

    Args:
        app: Flask application instance
        config: Application configuration dictionary
    """
    app.secret_key = ensure_secret_key(config)
    setup_cors(app, config)
    setup_security_headers(app)
    setup_error_handlers(app)
    setup_request_logging(app)
    logger.info("Security configuration complete")

"""
Health Check & Monitoring Endpoints
Liveness, readiness and basic metrics for deployment probes
"""
import os
import sys
import time
import psutil
from datetime import datetime, timezone
from typing import Dict, Any
from flask import Blueprint, jsonify, current_app
import logging

logger = logging.getLogger(__name__)

health_bp = Blueprint('health', __name__)

# Track application start time
START_TIME = time.time()

VERSION = '1.0.0'


def _now_iso():
    return datetime.now(timezone.utc).isoformat()


def get_system_metrics() -> Dict[str, Any]:
    """
    Get basic process metrics

    Returns:
        Dictionary of system metrics, empty on failure
    """
    try:
        process = psutil.Process()

        return {
            'cpu_percent': process.cpu_percent(interval=0.1),
            'memory_mb': process.memory_info().rss / 1024 / 1024,
            'memory_percent': process.memory_percent(),
            'threads': process.num_threads(),
        }
    except Exception as e:
        logger.warning(f"Failed to get system metrics: {e}")
        return {}


def get_uptime() -> Dict[str, Any]:
    """
    Get application uptime

    Returns:
        Dictionary with uptime information
    """
    uptime_seconds = time.time() - START_TIME

    return {
        'uptime_seconds': round(uptime_seconds, 2),
        'uptime_minutes': round(uptime_seconds / 60, 2),
        'uptime_hours': round(uptime_seconds / 3600, 2),
        'started_at': datetime.fromtimestamp(START_TIME).isoformat()
    }


def check_remote_store(store) -> Dict[str, Any]:
    """
    Probe the remote store with a one-row read

    Args:
        store: RemoteStore instance

    Returns:
        Dictionary with backend name, healthy flag and error if any
    """
    status = {'backend': type(store).__name__, 'healthy': False}
    try:
        store.select('projects', limit=1)
        status['healthy'] = True
    except Exception as e:
        logger.error(f"Remote store check failed: {e}")
        status['error'] = str(e)
    return status


def check_change_feed(store) -> Dict[str, int]:
    """Active change subscriptions on the store's feed"""
    return {'subscriptions': store.feed.subscriber_count()}


@health_bp.route('/health', methods=['GET'])
def health_check():
    """
    Basic health check endpoint
    Returns 200 if application is running
    """
    return jsonify({
        'status': 'healthy',
        'timestamp': _now_iso(),
        'service': 'websiter-backoffice'
    }), 200


@health_bp.route('/ready', methods=['GET'])
def readiness_check():
    """
    Readiness probe endpoint
    Returns 200 once the remote store answers
    """
    store = current_app.extensions['websiter']['store']
    remote = check_remote_store(store)

    response = {
        'status': 'ready' if remote['healthy'] else 'not_ready',
        'timestamp': _now_iso(),
        'checks': {
            'remote_store': remote,
            'change_feed': check_change_feed(store)
        }
    }

    return jsonify(response), 200 if remote['healthy'] else 503


@health_bp.route('/metrics', methods=['GET'])
def metrics():
    """
    Basic metrics endpoint
    Returns process metrics and uptime
    """
    store = current_app.extensions['websiter']['store']

    return jsonify({
        'timestamp': _now_iso(),
        'service': 'websiter-backoffice',
        'version': VERSION,
        'environment': os.environ.get('FLASK_ENV', 'production'),
        'uptime': get_uptime(),
        'system': get_system_metrics(),
        'change_feed': check_change_feed(store),
        'python_version': sys.version.split()[0]
    }), 200


@health_bp.route('/ping', methods=['GET'])
def ping():
    """Simple connectivity check"""
    return 'pong', 200


def register_health_checks(app):
    """
    Register health check blueprint with Flask app

    Args:
        app: Flask application instance
    """
    app.register_blueprint(health_bp, url_prefix='/api')
    logger.info("Health check endpoints registered: /api/health, /api/ready, /api/metrics, /api/ping")

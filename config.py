"""
Centralized Configuration for the Websiter back-office
Manages environment-specific settings, remote backend and billing defaults.
"""
import os


def _normalize_database_url(url):
    """Render/Heroku style postgres:// URLs are not accepted by SQLAlchemy."""
    if url and url.startswith('postgres://'):
        return url.replace('postgres://', 'postgresql://', 1)
    return url


class Config:
    """Base configuration with defaults"""

    # Flask Settings
    SECRET_KEY = os.environ.get('SECRET_KEY') or os.urandom(32).hex()

    # CORS Settings
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', '*').split(',')
    CORS_METHODS = ['GET', 'POST', 'PUT', 'PATCH', 'DELETE', 'OPTIONS']
    CORS_ALLOW_HEADERS = ['Content-Type', 'Authorization', 'X-Requested-With']

    # Remote backend: 'database' (SQLAlchemy) or 'rest' (hosted PostgREST)
    REMOTE_BACKEND = os.environ.get('REMOTE_BACKEND', 'database').lower()
    DATABASE_URL = _normalize_database_url(
        os.environ.get('DATABASE_URL', 'sqlite:///websiter.db')
    )
    SUPABASE_URL = os.environ.get('SUPABASE_URL', '')
    SUPABASE_KEY = os.environ.get('SUPABASE_KEY', '')
    REMOTE_TIMEOUT = int(os.environ.get('REMOTE_TIMEOUT', '15'))  # seconds

    # Client notes: 'id_then_email' keeps the email fallback, 'id_only' does not
    NOTES_OWNER_LOOKUP = os.environ.get('NOTES_OWNER_LOOKUP', 'id_then_email')

    # Billing defaults
    DEFAULT_TAX_RATE = float(os.environ.get('DEFAULT_TAX_RATE', '0.13'))  # Ontario HST
    INVOICE_PREFIX = os.environ.get('INVOICE_PREFIX', 'WS')
    PAYMENT_TERMS_DAYS = int(os.environ.get('PAYMENT_TERMS_DAYS', '30'))

    # Logging Configuration
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    LOG_FILE = os.environ.get('LOG_FILE', 'websiter.log')


class DevelopmentConfig(Config):
    """Development-specific configuration"""
    DEBUG = True
    TESTING = False
    LOG_LEVEL = 'DEBUG'
    CORS_ORIGINS = ['*']


class ProductionConfig(Config):
    """Production-specific configuration"""
    DEBUG = False
    TESTING = False
    CORS_ORIGINS = os.environ.get('CORS_ORIGINS', 'https://websiter.ca').split(',')
    PREFERRED_URL_SCHEME = 'https'
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'


class TestingConfig(Config):
    """Testing-specific configuration"""
    DEBUG = True
    TESTING = True
    REMOTE_BACKEND = 'database'
    DATABASE_URL = 'sqlite://'


# Configuration selector
config_by_name = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
    'default': DevelopmentConfig,
}


def get_config(name=None):
    """Get configuration by name, falling back to the FLASK_ENV environment variable"""
    env = name or os.environ.get('FLASK_ENV', 'development')
    return config_by_name.get(env, DevelopmentConfig)

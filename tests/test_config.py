"""
Tests for configuration system
"""
import os
import pytest
from config import (
    Config,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    get_config,
    _normalize_database_url
)


@pytest.mark.unit
class TestBaseConfig:
    """Tests for base configuration"""

    def test_base_config_has_secret_key(self):
        """Test that base config has a secret key"""
        config = Config()
        assert config.SECRET_KEY is not None

    def test_base_config_has_cors_settings(self):
        """Test that base config has CORS settings"""
        config = Config()
        assert 'PATCH' in config.CORS_METHODS
        assert 'DELETE' in config.CORS_METHODS

    def test_base_config_has_remote_settings(self):
        """Test that base config selects a remote backend"""
        config = Config()
        assert config.REMOTE_BACKEND in ('database', 'rest')
        assert config.REMOTE_TIMEOUT > 0

    def test_base_config_has_billing_defaults(self):
        """Test that base config has invoice defaults"""
        config = Config()
        assert 0 <= config.DEFAULT_TAX_RATE < 1
        assert config.INVOICE_PREFIX
        assert config.PAYMENT_TERMS_DAYS > 0

    def test_base_config_has_logging_settings(self):
        """Test that base config has logging settings"""
        config = Config()
        assert config.LOG_FORMAT
        assert config.LOG_FILE


@pytest.mark.unit
class TestDatabaseUrl:
    """Tests for DATABASE_URL normalization"""

    def test_postgres_scheme_rewritten(self):
        assert _normalize_database_url('postgres://u:p@host/db') == 'postgresql://u:p@host/db'

    def test_other_urls_unchanged(self):
        assert _normalize_database_url('sqlite:///websiter.db') == 'sqlite:///websiter.db'
        assert _normalize_database_url(None) is None


@pytest.mark.unit
class TestEnvironmentConfigs:
    """Tests for per-environment configuration"""

    def test_development_config(self):
        config = DevelopmentConfig()
        assert config.DEBUG is True
        assert config.TESTING is False
        assert config.LOG_LEVEL == 'DEBUG'
        assert '*' in config.CORS_ORIGINS

    def test_production_config_has_secure_cookies(self):
        """Test that production config has secure cookies"""
        config = ProductionConfig()
        assert config.DEBUG is False
        assert config.SESSION_COOKIE_SECURE is True
        assert config.SESSION_COOKIE_HTTPONLY is True
        assert config.PREFERRED_URL_SCHEME == 'https'

    def test_testing_config_uses_in_memory_database(self):
        """Test that testing config uses an in-memory SQLite store"""
        config = TestingConfig()
        assert config.TESTING is True
        assert config.REMOTE_BACKEND == 'database'
        assert config.DATABASE_URL == 'sqlite://'


@pytest.mark.unit
class TestGetConfig:
    """Tests for configuration selector"""

    def test_explicit_name(self):
        assert get_config('production') is ProductionConfig
        assert get_config('testing') is TestingConfig

    def test_unknown_name_falls_back_to_development(self):
        assert get_config('staging') is DevelopmentConfig

    def test_reads_flask_env(self, monkeypatch):
        monkeypatch.setenv('FLASK_ENV', 'production')
        assert get_config() is ProductionConfig

    def test_defaults_to_development(self, monkeypatch):
        monkeypatch.delenv('FLASK_ENV', raising=False)
        assert get_config() is DevelopmentConfig

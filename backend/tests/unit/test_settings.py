"""
Unit tests for settings validation.
"""

import logging

import pytest

from core.security import ConfigurationError
from infrastructure.config.settings import Settings

VALID_SECRET = "test-jwt-secret-key-for-testing-purposes-only-min-32-chars"
VALID_AES_KEY = "0123456789abcdef0123456789abcdef"


def make_settings(**overrides) -> Settings:
    values = {
        "environment": "test",
        "jwt_secret": VALID_SECRET,
        "aes_secret_key": VALID_AES_KEY,
        "jwt_expires_in": "7d",
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


class TestValidateSecrets:
    def test_valid_configuration(self):
        make_settings().validate_secrets()

    def test_missing_jwt_secret(self):
        with pytest.raises(ConfigurationError, match="JWT_SECRET is not defined"):
            make_settings(jwt_secret="").validate_secrets()

    def test_short_jwt_secret_rejected_in_production(self):
        with pytest.raises(ConfigurationError, match="at least 32 characters"):
            make_settings(environment="production", jwt_secret="short").validate_secrets()

    def test_short_jwt_secret_warns_in_development(self, caplog):
        with caplog.at_level(logging.WARNING, logger="infrastructure.config.settings"):
            make_settings(environment="development", jwt_secret="short").validate_secrets()
        assert "shorter than the recommended" in caplog.text

    def test_missing_aes_key(self):
        with pytest.raises(ConfigurationError, match="AES_SECRET_KEY is not defined"):
            make_settings(aes_secret_key="").validate_secrets()

    @pytest.mark.parametrize("key", ["short", VALID_AES_KEY + "x", "é" * 32])
    def test_wrong_length_aes_key(self, key):
        with pytest.raises(ConfigurationError, match="exactly 32 characters"):
            make_settings(aes_secret_key=key).validate_secrets()

    def test_unparseable_lifetime(self):
        with pytest.raises(ConfigurationError, match="Invalid token lifetime"):
            make_settings(jwt_expires_in="forever").validate_secrets()

    def test_database_echo_rejected_in_production(self):
        with pytest.raises(ConfigurationError, match="DATABASE_ECHO"):
            make_settings(environment="production", database_echo=True).validate_secrets()


class TestSettingsFields:
    def test_defaults(self, monkeypatch):
        for name in ("BCRYPT_SALT_ROUNDS", "JWT_EXPIRES_IN", "PORT"):
            monkeypatch.delenv(name, raising=False)
        settings = Settings(_env_file=None)
        assert settings.bcrypt_salt_rounds == 10
        assert settings.jwt_expires_in == "7d"
        assert settings.port == 3000

    @pytest.mark.parametrize(
        "url, expected",
        [
            ("postgresql://u:p@db/identity", "postgresql+asyncpg://u:p@db/identity"),
            ("postgres://u:p@db/identity", "postgresql+asyncpg://u:p@db/identity"),
            ("sqlite+aiosqlite:///:memory:", "sqlite+aiosqlite:///:memory:"),
        ],
    )
    def test_database_url_uses_asyncpg(self, url, expected):
        assert make_settings(database_url=url).database_url == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("http://a.com,http://b.com/", ["http://a.com", "http://b.com"]),
            ('["http://a.com/", "http://b.com"]', ["http://a.com", "http://b.com"]),
            ("'http://a.com'", ["http://a.com"]),
        ],
    )
    def test_cors_origins_list(self, raw, expected):
        assert make_settings(cors_origins=raw).cors_origins_list == expected

    def test_environment_flags(self):
        assert make_settings(environment="production").is_production is True
        assert make_settings(environment="development").is_development is True
        assert make_settings(environment="test").is_production is False

    def test_environment_variables_are_read(self, monkeypatch):
        monkeypatch.setenv("BCRYPT_SALT_ROUNDS", "12")
        monkeypatch.setenv("JWT_EXPIRES_IN", "12h")
        settings = Settings(_env_file=None)
        assert settings.bcrypt_salt_rounds == 12
        assert settings.jwt_expires_in == "12h"

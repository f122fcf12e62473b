"""Unit tests for infrastructure settings."""

from datetime import timedelta

import pytest
from pydantic import SecretStr, ValidationError

from infrastructure.settings import (
    BootstrapSettings,
    CredentialSettings,
    DatabaseSettings,
    InvitationSettings,
    SessionSettings,
)


class TestDatabaseSettingsPoolConfiguration:
    """Tests for connection pool configuration."""

    def test_default_pool_settings(self):
        """Should have sensible pool defaults."""
        settings = DatabaseSettings()
        assert settings.pool_min_connections >= 1
        assert settings.pool_max_connections >= settings.pool_min_connections

    def test_pool_max_must_be_greater_than_or_equal_to_min(self):
        """Should validate max >= min."""
        with pytest.raises(ValidationError) as exc_info:
            DatabaseSettings(pool_min_connections=10, pool_max_connections=5)

        assert "pool_max_connections" in str(exc_info.value)

    def test_pool_max_respects_upper_limit(self):
        with pytest.raises(ValidationError):
            DatabaseSettings(pool_max_connections=101)

    def test_connection_string_omits_password(self):
        settings = DatabaseSettings(password=SecretStr("hunter2"))

        assert "hunter2" not in settings.connection_string


class TestSessionSettings:
    def test_defaults(self):
        settings = SessionSettings()

        assert settings.inactivity_window == timedelta(hours=24)
        assert settings.reissue_after == timedelta(days=7)
        assert settings.remember_me_max_age == timedelta(days=14)
        assert settings.magic_link_max_age == timedelta(minutes=15)
        assert settings.password_reset_max_age == timedelta(hours=24)
        assert settings.email_change_max_age == timedelta(days=7)
        assert settings.cookie_secure is True

    def test_read_from_environment(self, monkeypatch):
        monkeypatch.setenv("STOCKYARD_SESSION_INACTIVITY_TIMEOUT_HOURS", "8")

        assert SessionSettings().inactivity_window == timedelta(hours=8)

    def test_timeout_must_be_positive(self):
        with pytest.raises(ValidationError):
            SessionSettings(inactivity_timeout_hours=0)


class TestCredentialSettings:
    def test_defaults(self):
        settings = CredentialSettings()

        assert settings.min_password_length == 12
        assert settings.bcrypt_rounds == 12

    def test_bcrypt_rounds_bounds(self):
        with pytest.raises(ValidationError):
            CredentialSettings(bcrypt_rounds=3)


class TestInvitationSettings:
    def test_validity(self):
        assert InvitationSettings(validity_days=3).validity == timedelta(days=3)

    def test_sweep_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            InvitationSettings(sweep_interval_seconds=0)


class TestBootstrapSettings:
    def test_disabled_without_credentials(self):
        assert BootstrapSettings().enabled is False

    def test_disabled_with_email_only(self):
        assert BootstrapSettings(root_admin_email="root@x.test").enabled is False

    def test_enabled(self):
        settings = BootstrapSettings(
            root_admin_email="root@x.test",
            root_admin_password=SecretStr("correct horse battery"),
        )

        assert settings.enabled is True

"""Application settings using pydantic-settings.

Settings are loaded from environment variables with sensible defaults
for development. Production deployments should set all values explicitly.
"""

from datetime import timedelta
from functools import lru_cache

from pydantic import Field, SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database connection settings.

    Environment variables:
        STOCKYARD_DB_HOST: Database host (default: localhost)
        STOCKYARD_DB_PORT: Database port (default: 5432)
        STOCKYARD_DB_DATABASE: Database name (default: stockyard)
        STOCKYARD_DB_USERNAME: Database user (default: stockyard)
        STOCKYARD_DB_PASSWORD: Database password (required in production)
        STOCKYARD_DB_POOL_MIN_CONNECTIONS: Minimum connections in pool (default: 2)
        STOCKYARD_DB_POOL_MAX_CONNECTIONS: Maximum connections in pool (default: 10)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKYARD_DB_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="stockyard", description="Database name")
    username: str = Field(default="stockyard", description="Database username")
    password: SecretStr = Field(
        default=SecretStr(""),
        description="Database password",
    )
    pool_min_connections: int = Field(
        default=2,
        description="Minimum connections in pool",
        ge=1,
        le=100,
    )
    pool_max_connections: int = Field(
        default=10,
        description="Maximum connections in pool",
        ge=1,
        le=100,
    )

    @model_validator(mode="after")
    def validate_pool_settings(self) -> "DatabaseSettings":
        """Validate pool max >= min."""
        if self.pool_max_connections < self.pool_min_connections:
            raise ValueError(
                f"pool_max_connections ({self.pool_max_connections}) must be >= "
                f"pool_min_connections ({self.pool_min_connections})"
            )
        return self

    @property
    def connection_string(self) -> str:
        """Generate a connection string (without password for logging)."""
        return f"postgresql://{self.username}@{self.host}:{self.port}/{self.database}"


class SessionSettings(BaseSettings):
    """Session lifetime and cookie settings.

    Environment variables:
        STOCKYARD_SESSION_INACTIVITY_TIMEOUT_HOURS: Sign-in validity (default: 24)
        STOCKYARD_SESSION_REISSUE_AFTER_DAYS: Token rotation age (default: 7)
        STOCKYARD_SESSION_REMEMBER_ME_DAYS: Remember-me cookie age (default: 14)
        STOCKYARD_SESSION_MAGIC_LINK_MINUTES: Magic link validity (default: 15)
        STOCKYARD_SESSION_PASSWORD_RESET_HOURS: Reset link validity (default: 24)
        STOCKYARD_SESSION_EMAIL_CHANGE_DAYS: E-mail change link validity (default: 7)
        STOCKYARD_SESSION_COOKIE_SECURE: Send cookies over HTTPS only (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKYARD_SESSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    inactivity_timeout_hours: int = Field(
        default=24,
        description="Hours after sign-in before a session expires",
        ge=1,
    )
    reissue_after_days: int = Field(
        default=7,
        description="Age in days after which a session token is rotated",
        ge=1,
    )
    remember_me_days: int = Field(
        default=14,
        description="Lifetime of the remember-me cookie in days",
        ge=1,
    )
    magic_link_minutes: int = Field(
        default=15,
        description="Validity of a magic sign-in link in minutes",
        ge=1,
    )
    password_reset_hours: int = Field(
        default=24,
        description="Validity of a password reset link in hours",
        ge=1,
    )
    email_change_days: int = Field(
        default=7,
        description="Validity of an e-mail change confirmation link in days",
        ge=1,
    )
    cookie_name: str = Field(
        default="stockyard_session", description="Session cookie name"
    )
    remember_me_cookie_name: str = Field(
        default="stockyard_remember_me", description="Remember-me cookie name"
    )
    cookie_secure: bool = Field(
        default=True, description="Mark session cookies as Secure"
    )

    @property
    def inactivity_window(self) -> timedelta:
        return timedelta(hours=self.inactivity_timeout_hours)

    @property
    def reissue_after(self) -> timedelta:
        return timedelta(days=self.reissue_after_days)

    @property
    def remember_me_max_age(self) -> timedelta:
        return timedelta(days=self.remember_me_days)

    @property
    def magic_link_max_age(self) -> timedelta:
        return timedelta(minutes=self.magic_link_minutes)

    @property
    def password_reset_max_age(self) -> timedelta:
        return timedelta(hours=self.password_reset_hours)

    @property
    def email_change_max_age(self) -> timedelta:
        return timedelta(days=self.email_change_days)


class InvitationSettings(BaseSettings):
    """Invitation lifetime and expiry sweeper settings.

    Environment variables:
        STOCKYARD_INVITATION_VALIDITY_DAYS: Days an invitation stays valid (default: 7)
        STOCKYARD_INVITATION_SWEEP_INTERVAL_SECONDS: Sweeper tick (default: 86400)
        STOCKYARD_INVITATION_SWEEPER_ENABLED: Run the sweeper (default: true)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKYARD_INVITATION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    validity_days: int = Field(
        default=7, description="Days an invitation stays valid", ge=1
    )
    sweep_interval_seconds: float = Field(
        default=86400,
        description="Seconds between expiry sweeps",
        gt=0,
    )
    sweeper_enabled: bool = Field(
        default=True, description="Run the invitation expiry sweeper"
    )

    @property
    def validity(self) -> timedelta:
        return timedelta(days=self.validity_days)


class CredentialSettings(BaseSettings):
    """Password policy settings.

    Environment variables:
        STOCKYARD_CREDENTIAL_MIN_PASSWORD_LENGTH: Minimum length (default: 12)
        STOCKYARD_CREDENTIAL_BCRYPT_ROUNDS: bcrypt work factor (default: 12)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKYARD_CREDENTIAL_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    min_password_length: int = Field(
        default=12, description="Minimum password length", ge=8, le=72
    )
    bcrypt_rounds: int = Field(
        default=12, description="bcrypt work factor", ge=4, le=31
    )


class AuditSettings(BaseSettings):
    """Audit read-side settings.

    Environment variables:
        STOCKYARD_AUDIT_ACTIVITY_CACHE_TTL_SECONDS: Summary cache TTL (default: 300)
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKYARD_AUDIT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    activity_cache_ttl_seconds: float = Field(
        default=300,
        description="Seconds an activity summary stays cached",
        gt=0,
    )


class BootstrapSettings(BaseSettings):
    """Initial root admin provisioning.

    Environment variables:
        STOCKYARD_BOOTSTRAP_ROOT_ADMIN_EMAIL: E-mail of the first root admin
        STOCKYARD_BOOTSTRAP_ROOT_ADMIN_PASSWORD: Its initial password
    """

    model_config = SettingsConfigDict(
        env_prefix="STOCKYARD_BOOTSTRAP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    root_admin_email: str | None = Field(
        default=None, description="E-mail of the root admin created at startup"
    )
    root_admin_password: SecretStr | None = Field(
        default=None, description="Initial password of the bootstrap root admin"
    )

    @property
    def enabled(self) -> bool:
        return bool(self.root_admin_email and self.root_admin_password)


class Settings(BaseSettings):
    """Main application settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_prefix="STOCKYARD_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Application metadata
    app_name: str = Field(default="Stockyard API", description="Application name")
    debug: bool = Field(default=False, description="Debug mode")
    public_url: str = Field(
        default="http://localhost:8000",
        description="Base URL used in invitation and sign-in links",
    )
    log_delivery_links: bool = Field(
        default=False,
        description="Include token-bearing links in notifier log lines",
    )

    @property
    def database(self) -> DatabaseSettings:
        """Get database settings."""
        return get_database_settings()


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


@lru_cache
def get_database_settings() -> DatabaseSettings:
    """Get cached database settings.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return DatabaseSettings()


@lru_cache
def get_session_settings() -> SessionSettings:
    """Get cached session settings."""
    return SessionSettings()


@lru_cache
def get_invitation_settings() -> InvitationSettings:
    """Get cached invitation settings."""
    return InvitationSettings()


@lru_cache
def get_credential_settings() -> CredentialSettings:
    """Get cached credential settings."""
    return CredentialSettings()


@lru_cache
def get_audit_settings() -> AuditSettings:
    """Get cached audit settings."""
    return AuditSettings()


@lru_cache
def get_bootstrap_settings() -> BootstrapSettings:
    """Get cached bootstrap settings."""
    return BootstrapSettings()

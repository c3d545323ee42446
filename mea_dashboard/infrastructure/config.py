"""
Centralized configuration management for the MEA maturity assessment application.

Provides environment-specific configuration with validation, type safety,
and settings management using pydantic-settings.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal, TypeVar

from pydantic import Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError

S = TypeVar("S", bound=BaseSettings)


class DatabaseConfig(BaseSettings):
    """
    Database configuration settings.

    Handles both SQLite and MySQL configurations with validation
    and connection URL generation.

    Example:
        >>> db_config = DatabaseConfig(backend="sqlite", sqlite_path="./test.db")
        >>> db_config.get_connection_url()
        'sqlite:///./test.db'
    """

    backend: Literal["sqlite", "mysql"] = Field("sqlite", description="Database backend type")

    # SQLite settings
    sqlite_path: str | None = Field("./mea_assessments.db", description="SQLite database file path")

    # MySQL settings
    mysql_host: str | None = Field("localhost", description="MySQL host")
    mysql_port: int | None = Field(3306, ge=1, le=65535, description="MySQL port")
    mysql_user: str | None = Field("root", description="MySQL username")
    mysql_password: str | None = Field("", description="MySQL password")
    mysql_database: str | None = Field("mea_assessments", description="MySQL database name")
    mysql_charset: str = Field("utf8mb4", description="MySQL character set")

    # Connection settings
    pool_pre_ping: bool = Field(True, description="Enable connection pool pre-ping")
    pool_recycle: int = Field(3600, ge=60, description="Connection pool recycle time (seconds)")
    echo: bool = Field(False, description="Enable SQL query logging")

    model_config = {"env_prefix": "DB_", "case_sensitive": False}

    @field_validator("sqlite_path")
    def validate_sqlite_path(cls, v):
        """Ensure a .db extension on file-backed SQLite paths."""
        if v and v != ":memory:":
            path = Path(v)
            if not path.suffix:
                v = str(path.with_suffix(".db"))
        return v

    @model_validator(mode="after")
    def validate_mysql_config(self):
        """Validate MySQL configuration completeness."""
        if self.backend == "mysql":
            missing = []
            if not self.mysql_host:
                missing.append("mysql_host")
            if not self.mysql_user:
                missing.append("mysql_user")
            if not self.mysql_database:
                missing.append("mysql_database")
            if missing:
                raise ValueError(f"MySQL backend requires: {', '.join(missing)}")
        return self

    def get_connection_url(self) -> str:
        """
        Generate database connection URL.

        Returns:
            Database connection URL string

        Raises:
            ValueError: If backend is unsupported
        """
        if self.backend == "sqlite":
            return f"sqlite:///{self.sqlite_path}"
        elif self.backend == "mysql":
            password_part = f":{self.mysql_password}" if self.mysql_password else ""
            return (
                f"mysql+pymysql://{self.mysql_user}{password_part}@{self.mysql_host}:"
                f"{self.mysql_port}/{self.mysql_database}?charset={self.mysql_charset}"
            )
        else:
            raise ValueError(f"Unsupported database backend: {self.backend}")

    def get_engine_options(self) -> dict[str, Any]:
        """Get SQLAlchemy engine options."""
        options: dict[str, Any] = {
            "echo": self.echo,
            "pool_pre_ping": self.pool_pre_ping,
        }
        if self.backend == "mysql":
            options["pool_recycle"] = self.pool_recycle
        return options


class LoggingConfig(BaseSettings):
    """
    Logging configuration settings.

    Example:
        >>> LoggingConfig(level="DEBUG", file_path=None).max_bytes
        10485760
    """

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        "INFO", description="Minimum logging level"
    )
    file_path: str | None = Field("./logs/app.log", description="Log file path")
    max_bytes: int = Field(10 * 1024 * 1024, ge=1024, description="Max log file size in bytes")
    backup_count: int = Field(5, ge=1, description="Number of backup log files")
    structured: bool = Field(True, description="Use structured JSON logging")
    console_enabled: bool = Field(True, description="Enable console output")

    model_config = {"env_prefix": "LOG_", "case_sensitive": False}


class IdentityConfig(BaseSettings):
    """
    Identity settings.

    A configured ``initial_token`` signs every client in as the same stable
    user; without one each client gets an anonymous identity.
    """

    initial_token: str | None = Field(None, description="Token used for the initial sign-in")
    allow_anonymous: bool = Field(True, description="Allow anonymous sign-in without a token")

    model_config = {"env_prefix": "AUTH_", "case_sensitive": False}


class StreamlitConfig(BaseSettings):
    """Streamlit page configuration."""

    page_title: str = Field("MEA Maturity Assessment", description="Page title")
    page_icon: str = Field("📊", description="Page icon")
    layout: Literal["centered", "wide"] = Field("wide", description="Page layout")
    initial_sidebar_state: Literal["auto", "expanded", "collapsed"] = Field(
        "expanded", description="Initial sidebar state"
    )

    model_config = {"env_prefix": "STREAMLIT_", "case_sensitive": False}

    def get_streamlit_config(self) -> dict[str, Any]:
        """Get configuration for Streamlit page config."""
        return {
            "page_title": self.page_title,
            "page_icon": self.page_icon,
            "layout": self.layout,
            "initial_sidebar_state": self.initial_sidebar_state,
        }


class ApplicationConfig(BaseSettings):
    """
    Main application configuration.

    Example:
        >>> config = get_settings()
        >>> config.app.namespace
        'default-cobit-app'
    """

    environment: Literal["development", "testing", "production"] = Field(
        "development", description="Application environment"
    )
    debug: bool = Field(False, description="Enable debug mode")
    version: str = Field("0.1.0", description="Application version")
    title: str = Field("COBIT 5 MEA Maturity Assessment", description="Application title")
    namespace: str = Field(
        "default-cobit-app", min_length=1, description="Partition key for stored assessments"
    )

    model_config = {"env_prefix": "APP_", "case_sensitive": False}

    @model_validator(mode="after")
    def debug_implies_development(self):
        """Ensure debug mode is only enabled outside production."""
        if self.debug and self.environment == "production":
            raise ValueError("Debug mode cannot be enabled in production")
        return self


def load_section(section: type[S], **overrides: Any) -> S:
    """
    Build one settings section from the environment.

    Raises:
        ConfigurationError: The environment holds invalid values for the section
    """
    try:
        return section(**overrides)
    except PydanticValidationError as e:
        prefix = section.model_config.get("env_prefix", "")
        fields = ", ".join(f"{prefix}{err['loc'][0]}".upper() for err in e.errors() if err["loc"])
        raise ConfigurationError(
            f"Invalid {section.__name__}: {fields or e.error_count()}",
            config_key=section.__name__,
        ) from e


def _env_is_set(name: str) -> bool:
    return any(key.upper() == name for key in os.environ)


class Settings:
    """
    Complete application settings container.

    Provides structured access to all configuration sections
    with lazy loading and caching. Invalid sections raise
    ``ConfigurationError`` on first access.
    """

    def __init__(self):
        self._app: ApplicationConfig | None = None
        self._database: DatabaseConfig | None = None
        self._logging: LoggingConfig | None = None
        self._identity: IdentityConfig | None = None
        self._streamlit: StreamlitConfig | None = None

    @property
    def app(self) -> ApplicationConfig:
        """Get application configuration."""
        if self._app is None:
            self._app = load_section(ApplicationConfig)
        return self._app

    @property
    def database(self) -> DatabaseConfig:
        """Get database configuration."""
        if self._database is None:
            self._database = load_section(DatabaseConfig)
        return self._database

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration; LOG_LEVEL wins over the environment default."""
        if self._logging is None:
            overrides: dict[str, Any] = {}
            if not _env_is_set("LOG_LEVEL"):
                level = "DEBUG" if self.app.debug else "INFO"
                if self.app.environment == "production":
                    level = "WARNING"
                overrides["level"] = level
            self._logging = load_section(LoggingConfig, **overrides)
        return self._logging

    @property
    def identity(self) -> IdentityConfig:
        """Get identity configuration."""
        if self._identity is None:
            self._identity = load_section(IdentityConfig)
        return self._identity

    @property
    def streamlit(self) -> StreamlitConfig:
        """Get Streamlit configuration."""
        if self._streamlit is None:
            self._streamlit = load_section(StreamlitConfig)
        return self._streamlit

    def is_development(self) -> bool:
        return self.app.environment == "development"

    def is_production(self) -> bool:
        return self.app.environment == "production"

    def is_testing(self) -> bool:
        return self.app.environment == "testing"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get application settings instance (cached).

    Returns:
        Settings instance with all configuration loaded

    Example:
        >>> settings = get_settings()
        >>> db_url = settings.database.get_connection_url()
    """
    return Settings()


def override_settings(**kwargs: Any) -> Settings:
    """
    Override specific settings for testing or development.

    Keys are environment variable names without case, e.g.
    ``app_namespace="tests"`` or ``db_sqlite_path=":memory:"``.

    Example:
        >>> settings = override_settings(app_environment="testing")
        >>> settings.is_testing()
        True
    """
    for key, value in kwargs.items():
        os.environ[key.upper()] = str(value)

    get_settings.cache_clear()
    return get_settings()


def reset_settings() -> None:
    """Reset settings cache to reload from environment."""
    get_settings.cache_clear()

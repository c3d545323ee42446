"""
Tests for the infrastructure layer: configuration, identity, errors, logging and database setup.
"""

import json
import logging
import os

import pytest
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import inspect
from sqlalchemy.exc import OperationalError

from mea_dashboard.infrastructure.config import (
    DatabaseConfig,
    IdentityConfig,
    get_settings,
    override_settings,
    reset_settings,
)
from mea_dashboard.infrastructure.db import (
    create_database_engine,
    initialise_database,
    make_engine_and_session,
)
from mea_dashboard.infrastructure.exceptions import (
    AssessmentNotFoundError,
    AuthenticationError,
    ConfigurationError,
    PersistenceError,
    StoreUnavailableError,
    ValidationError,
    create_user_friendly_error_message,
    handle_persistence_error,
    log_error_details,
)
from mea_dashboard.infrastructure.identity import TOKEN_ID_LENGTH, Identity, IdentityProvider
from mea_dashboard.infrastructure.logging import (
    ROOT_LOGGER,
    LogContext,
    StructuredFormatter,
    auto_configure_logging,
    configure_test_logging,
    context_filter,
    get_logger,
)


class TestConfiguration:
    """Configuration management with pydantic-settings."""

    def test_sqlite_url(self):
        config = DatabaseConfig(backend="sqlite", sqlite_path="./data/assessments")
        assert config.sqlite_path.endswith("assessments.db")
        assert config.get_connection_url() == f"sqlite:///{config.sqlite_path}"

    def test_memory_path_is_kept(self):
        config = DatabaseConfig(backend="sqlite", sqlite_path=":memory:")
        assert config.get_connection_url() == "sqlite:///:memory:"

    def test_mysql_url_and_options(self):
        config = DatabaseConfig(
            backend="mysql",
            mysql_host="db",
            mysql_user="mea",
            mysql_password="secret",
            mysql_database="mea",
        )
        assert config.get_connection_url() == (
            "mysql+pymysql://mea:secret@db:3306/mea?charset=utf8mb4"
        )
        assert config.get_engine_options()["pool_recycle"] == 3600

    def test_mysql_requires_host(self):
        with pytest.raises(PydanticValidationError):
            DatabaseConfig(backend="mysql", mysql_host="", mysql_user="u", mysql_database="d")

    def test_override_settings(self):
        try:
            settings = override_settings(app_namespace="override-ns")
            assert settings.app.namespace == "override-ns"
            assert get_settings() is settings
        finally:
            os.environ.pop("APP_NAMESPACE", None)
            reset_settings()
        assert get_settings().app.namespace == "default-cobit-app"

    def test_invalid_section_raises_configuration_error(self, monkeypatch):
        monkeypatch.setenv("DB_BACKEND", "oracle")
        reset_settings()
        try:
            with pytest.raises(ConfigurationError) as exc_info:
                get_settings().database
            assert "DB_BACKEND" in exc_info.value.message
            assert exc_info.value.config_key == "DatabaseConfig"
        finally:
            reset_settings()

    def test_log_level_env_overrides_environment_default(self, monkeypatch):
        monkeypatch.setenv("LOG_LEVEL", "ERROR")
        reset_settings()
        try:
            assert get_settings().logging.level == "ERROR"
        finally:
            reset_settings()

    def test_logging_level_follows_debug_flag(self, monkeypatch):
        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.setenv("APP_DEBUG", "true")
        reset_settings()
        try:
            assert get_settings().logging.level == "DEBUG"
        finally:
            reset_settings()


class TestIdentity:
    def test_token_maps_to_stable_id(self):
        provider = IdentityProvider(IdentityConfig(initial_token=None))
        first = provider.sign_in("secret-token")
        second = provider.sign_in("  secret-token  ")
        assert first == second
        assert len(first.user_id) == TOKEN_ID_LENGTH
        assert not first.is_anonymous
        assert provider.sign_in("other-token") != first

    def test_initial_token_is_used_by_default(self):
        provider = IdentityProvider(IdentityConfig(initial_token="boot"))
        assert provider.sign_in() == IdentityProvider(IdentityConfig()).sign_in("boot")

    def test_anonymous_ids_are_unique(self):
        provider = IdentityProvider(IdentityConfig(initial_token=None, allow_anonymous=True))
        a, b = provider.sign_in(), provider.sign_in()
        assert a.is_anonymous and b.is_anonymous
        assert a.user_id != b.user_id

    def test_anonymous_can_be_disabled(self):
        provider = IdentityProvider(IdentityConfig(initial_token=None, allow_anonymous=False))
        with pytest.raises(AuthenticationError):
            provider.sign_in()

    def test_blank_identity_is_rejected(self):
        with pytest.raises(AuthenticationError):
            Identity("  ")


class TestErrorHandling:
    def test_connection_errors_map_to_store_unavailable(self):
        err = handle_persistence_error(OperationalError("SELECT 1", {}, Exception("connection refused")))
        assert isinstance(err, StoreUnavailableError)

    def test_other_errors_keep_operation(self):
        err = handle_persistence_error(OperationalError("SELECT 1", {}, Exception("no such table")), "list")
        assert type(err) is PersistenceError
        assert err.operation == "list"

    def test_user_friendly_messages(self):
        assert (
            create_user_friendly_error_message(ValidationError("name", "cannot be empty"))
            == "Invalid name: cannot be empty"
        )
        assert (
            create_user_friendly_error_message(AssessmentNotFoundError("x"))
            == "No data is available for the selected assessment."
        )
        assert "Invalid input" in create_user_friendly_error_message(ValueError("bad"))

    def test_log_error_details(self):
        details = log_error_details(PersistenceError("boom", "create"), {"assessment_name": "ACME"})
        assert details["error_type"] == "PersistenceError"
        assert details["context"] == {"assessment_name": "ACME"}


class TestLogging:
    def test_get_logger_prefixes_namespace(self):
        assert get_logger("database").name == "mea_dashboard.database"
        assert get_logger("mea_dashboard.web").name == "mea_dashboard.web"

    def test_structured_formatter_includes_context(self):
        record = logging.LogRecord("mea_dashboard.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
        with LogContext(user_id="u1", operation="op"):
            context_filter.filter(record)
        payload = json.loads(StructuredFormatter().format(record))
        assert payload["message"] == "hello world"
        assert payload["user_id"] == "u1"
        assert payload["operation"] == "op"

    def test_log_context_restores_previous(self):
        with LogContext(user_id="outer"):
            with LogContext(user_id="inner"):
                assert context_filter.context["user_id"] == "inner"
            assert context_filter.context["user_id"] == "outer"
        assert "user_id" not in context_filter.context

    def test_log_settings_take_effect(self, monkeypatch, tmp_path):
        log_file = tmp_path / "mea.log"
        monkeypatch.setenv("LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("LOG_FILE_PATH", str(log_file))
        monkeypatch.setenv("LOG_CONSOLE_ENABLED", "false")
        reset_settings()
        try:
            auto_configure_logging()
            logger = logging.getLogger(ROOT_LOGGER)
            assert logger.level == logging.DEBUG
            get_logger("tests").debug("written to file")
            for handler in logger.handlers:
                handler.flush()
            assert "written to file" in log_file.read_text(encoding="utf-8")
        finally:
            reset_settings()
            configure_test_logging()


class TestDatabase:
    def test_initialise_database_reports_existing_tables(self, tmp_path):
        engine = create_database_engine(
            DatabaseConfig(backend="sqlite", sqlite_path=str(tmp_path / "init.db"))
        )
        assert initialise_database(engine) is False
        assert initialise_database(engine) is True
        assert "assessments" in inspect(engine).get_table_names()
        engine.dispose()

    def test_make_engine_and_session(self, tmp_path):
        config = DatabaseConfig(backend="sqlite", sqlite_path=str(tmp_path / "mea.db"))
        engine, SessionLocal = make_engine_and_session(config)
        assert "assessments" in inspect(engine).get_table_names()
        with SessionLocal() as s:
            assert s.bind is engine
        engine.dispose()

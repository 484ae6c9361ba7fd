"""Tests for logging helpers and settings."""

from structlog.testing import capture_logs

from fleet_common.config import Settings
from fleet_common.logging import LoggerRegistry, get_logger, validation_logger
from fleet_common.validation import ModelValidator, schema


class TestLoggers:
    """Tests for domain loggers."""

    def test_loggers_are_shared(self):
        assert LoggerRegistry.get("validation") is validation_logger()

    def test_events_carry_logger_name(self):
        with capture_logs() as logs:
            get_logger("fleet_common.tests").info("something_happened", model="User")
        assert logs == [
            {"event": "something_happened", "logger": "fleet_common.tests", "model": "User", "log_level": "info"}
        ]

    def test_compilation_is_logged(self):
        with capture_logs() as logs:
            ModelValidator.create({"name": schema.string()}, name="Account")
        compiled = [e for e in logs if e["event"] == "schema_compiled"]
        assert compiled[0]["model"] == "Account"
        assert compiled[0]["pk_fields"] == ["id"]
        assert compiled[0]["logger"] == "fleet_common.validation"


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self):
        settings = Settings(_env_file=None)
        assert settings.VALIDATION_ALLOW_UNKNOWN is True
        assert settings.VALIDATION_STRIP_UNKNOWN is True
        assert settings.VALIDATION_ABORT_EARLY is False

    def test_env_prefix(self, monkeypatch):
        monkeypatch.setenv("FLEET_VALIDATION_ABORT_EARLY", "true")
        monkeypatch.setenv("FLEET_LOG_LEVEL", "DEBUG")
        settings = Settings(_env_file=None)
        assert settings.VALIDATION_ABORT_EARLY is True
        assert settings.LOG_LEVEL == "DEBUG"

"""Tests unitarios para la configuración de logging."""

import json
import logging

import pytest

from app.core import logging_config
from app.core.config import Settings
from app.core.logging_config import (
    RequestContextFilter,
    StructuredFormatter,
    get_logging_configuration,
    log_api_call,
    request_id_var,
)


@pytest.fixture
def use_settings(monkeypatch):
    """Reemplaza la configuración global por una construida en el test."""

    def _use(**overrides):
        settings = Settings(_env_file=None, **overrides)
        monkeypatch.setattr(logging_config, "get_settings", lambda: settings)
        return settings

    return _use


def _record(message="hola"):
    return logging.LogRecord("app.test", logging.INFO, __file__, 10, message, None, None)


class TestRequestContextFilter:
    """Tests para RequestContextFilter."""

    def test_uses_current_request_id(self):
        """Debe copiar el request_id de la request en curso."""
        token = request_id_var.set("req-42")
        try:
            record = _record()
            assert RequestContextFilter().filter(record) is True
        finally:
            request_id_var.reset(token)

        assert record.request_id == "req-42"

    def test_outside_a_request(self):
        """Debe usar '-' fuera de una request."""
        record = _record()
        RequestContextFilter().filter(record)

        assert record.request_id == "-"


class TestLoggingConfiguration:
    """Tests para get_logging_configuration."""

    def test_console_only_without_log_file(self, use_settings):
        """Debe configurar solo consola si no hay archivo de log."""
        use_settings(LOG_FILE_PATH=None, DEBUG=False)

        config = get_logging_configuration()

        assert list(config["handlers"]) == ["console"]
        assert config["handlers"]["console"]["formatter"] == "standard"
        assert config["handlers"]["console"]["filters"] == ["request_context"]

    def test_rotating_files_in_production(self, use_settings, tmp_path):
        """Debe agregar archivos rotativos y el JSON en producción."""
        use_settings(LOG_FILE_PATH=str(tmp_path / "app.log"), ENVIRONMENT="production", DEBUG=False)

        config = get_logging_configuration()

        assert config["root"]["handlers"] == ["console", "file", "error_file", "json_file"]
        assert config["handlers"]["error_file"]["filename"].endswith("app_errors.log")
        assert config["handlers"]["json_file"]["formatter"] == "json"
        assert config["handlers"]["file"]["maxBytes"] == 10 * 1024 * 1024


class TestStructuredFormatter:
    """Tests para el formato JSON."""

    def test_includes_request_id_as_extra(self, use_settings):
        """Debe serializar el mensaje y los campos extra."""
        use_settings(ENVIRONMENT="production")
        record = _record("API call")
        record.request_id = "req-1"

        entry = json.loads(StructuredFormatter().format(record))

        assert entry["message"] == "API call"
        assert entry["environment"] == "production"
        assert entry["extra"]["request_id"] == "req-1"


class TestLogApiCall:
    """Tests para log_api_call."""

    @pytest.mark.parametrize(
        "status_code, level",
        [(200, logging.INFO), (404, logging.WARNING), (502, logging.ERROR), (0, logging.ERROR)],
    )
    def test_level_depends_on_status(self, caplog, status_code, level):
        """Debe elegir el nivel según el código de respuesta."""
        with caplog.at_level(logging.DEBUG, logger="app.api.call"):
            log_api_call("GET", "https://api.example.com/latest", status_code, 0.1234, provider="frankfurter")

        record = caplog.records[-1]
        assert record.levelno == level
        assert record.status_code == status_code
        assert record.duration_ms == 123.4
        assert record.provider == "frankfurter"

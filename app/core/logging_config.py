"""
Configuración avanzada del sistema de logging.

Este módulo configura el logging de la aplicación con:
- Handlers de consola y archivo con rotación
- request_id de la request en curso en cada línea
- Logging estructurado en JSON para producción
"""

import json
import logging
import logging.config
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from app.core.config import get_settings

# Request ID de la request en curso (lo asigna el middleware de logging)
request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

_RESERVED_RECORD_KEYS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "taskName",
}


class StructuredFormatter(logging.Formatter):
    """
    Formatter para logging estructurado en JSON.
    Útil para sistemas de monitoreo como ELK Stack.
    """

    def format(self, record):
        """
        Formatea el record como JSON estructurado.

        Args:
            record: LogRecord a formatear

        Returns:
            str: Mensaje en formato JSON
        """
        settings = get_settings()

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "app_name": settings.APP_NAME,
            "app_version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {key: value for key, value in record.__dict__.items() if key not in _RESERVED_RECORD_KEYS}
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class RequestContextFilter(logging.Filter):
    """
    Filtro que agrega el request_id actual a los logs.
    """

    def filter(self, record):
        """
        Agrega información de contexto al record.

        Args:
            record: LogRecord a filtrar

        Returns:
            bool: True para permitir el log
        """
        if not hasattr(record, "request_id"):
            record.request_id = request_id_var.get() or "-"
        return True


def setup_logging() -> None:
    """
    Configura el sistema de logging completo de la aplicación.
    """
    settings = get_settings()

    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_configuration())
    configure_specific_loggers()

    logger = logging.getLogger(__name__)
    logger.info(f"Sistema de logging configurado - Nivel: {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.info(f"Logs guardándose en: {settings.LOG_FILE_PATH}")


def _rotating_file_handler(filename: str, level: str, formatter: str) -> Dict[str, Any]:
    settings = get_settings()
    return {
        "class": "logging.handlers.RotatingFileHandler",
        "level": level,
        "formatter": formatter,
        "filters": ["request_context"],
        "filename": filename,
        "maxBytes": settings.LOG_MAX_SIZE_MB * 1024 * 1024,
        "backupCount": settings.LOG_BACKUP_COUNT,
        "encoding": "utf-8",
    }


def get_logging_configuration() -> Dict[str, Any]:
    """
    Genera configuración completa de logging.

    Returns:
        Dict: Configuración de logging
    """
    settings = get_settings()

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {"request_context": {"()": RequestContextFilter}},
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": (
                    "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] "
                    "%(module)s.%(funcName)s:%(lineno)d - %(message)s"
                ),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": StructuredFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.LOG_LEVEL,
                "formatter": "detailed" if settings.DEBUG else "standard",
                "filters": ["request_context"],
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "uvicorn.access": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
            "uvicorn.error": {
                "level": "INFO",
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {"level": settings.LOG_LEVEL, "handlers": ["console"]},
    }

    if settings.LOG_FILE_PATH:
        config["handlers"]["file"] = _rotating_file_handler(settings.LOG_FILE_PATH, settings.LOG_LEVEL, "detailed")
        config["handlers"]["error_file"] = _rotating_file_handler(
            settings.LOG_FILE_PATH.replace(".log", "_errors.log"), "ERROR", "detailed"
        )
        config["root"]["handlers"].extend(["file", "error_file"])

        if settings.is_production:
            config["handlers"]["json_file"] = _rotating_file_handler(
                settings.LOG_FILE_PATH.replace(".log", ".json"), "INFO", "json"
            )
            config["root"]["handlers"].append("json_file")

    return config


def configure_specific_loggers() -> None:
    """
    Configura loggers específicos para diferentes módulos.
    """
    settings = get_settings()

    logging.getLogger("app.services").setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    logging.getLogger("app.api").setLevel(logging.INFO)
    logging.getLogger("app.db").setLevel(logging.INFO)

    # Reducir verbosidad de librerías externas
    for logger_name in ["pymongo", "aiohttp.access", "aiohttp.client", "httpx", "asyncio"]:
        logging.getLogger(logger_name).setLevel(logging.WARNING)


def log_api_call(method: str, url: str, status_code: int, duration: float, **kwargs) -> None:
    """
    Logger específico para llamadas a APIs externas (FX, Shippo).

    Args:
        method: Método HTTP
        url: URL de la API
        status_code: Código de respuesta (0 si no hubo respuesta)
        duration: Duración en segundos
        **kwargs: Datos adicionales
    """
    logger = logging.getLogger("app.api.call")

    extra_data = {
        "method": method,
        "url": url,
        "status_code": status_code,
        "duration_ms": round(duration * 1000, 2),
        **kwargs,
    }

    if 200 <= status_code < 300:
        level = logging.INFO
    elif 400 <= status_code < 500:
        level = logging.WARNING
    else:
        level = logging.ERROR

    logger.log(
        level,
        f"API call: {method} {url} -> {status_code} ({duration * 1000:.1f}ms)",
        extra=extra_data,
    )

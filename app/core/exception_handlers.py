"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Este módulo define todos los manejadores de excepciones personalizados y globales,
proporcionando respuestas consistentes y logging apropiado para diferentes tipos de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.config import get_settings
from app.utils.error_handler import (
    AppException,
    CarrierAPIException,
    DatabaseException,
    FxException,
    ShippingException,
    ValidationException,
)

logger = logging.getLogger(__name__)


def _request_id(request: Request) -> Optional[str]:
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_body(request: Request, exc: AppException, error_type: str, **extra: Any) -> Dict[str, Any]:
    """
    Cuerpo JSON común de errores de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción de la app
        error_type: Categoría del error
        **extra: Campos adicionales específicos del tipo de error

    Returns:
        Dict: Cuerpo de la respuesta
    """
    return {
        "error": True,
        "error_type": error_type,
        "error_code": exc.code,
        "message": exc.message,
        "details": exc.details if get_settings().DEBUG else None,
        **extra,
        "path": str(request.url.path),
        "timestamp": _timestamp(),
        "request_id": _request_id(request),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    logger.error(
        f"App Exception: {exc.message} - "
        f"Code: {exc.code} - "
        f"URL: {request.url} - "
        f"Details: {exc.details}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc, "application_error"),
    )


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Manejador para errores de validación de datos.

    Args:
        request: Request de FastAPI
        exc: Excepción de validación

    Returns:
        JSONResponse: Respuesta JSON con detalles de validación
    """
    logger.warning(
        f"Validation Exception: {exc.message} - "
        f"Field: {exc.field} - "
        f"Value: {exc.invalid_value} - "
        f"URL: {request.url}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            request,
            exc,
            "validation_error",
            field=exc.field,
            expected_format=exc.expected_format,
        ),
    )


async def shipping_exception_handler(request: Request, exc: ShippingException) -> JSONResponse:
    """
    Manejador para reglas de negocio de envío.

    Los problemas por ítem se devuelven siempre: son accionables por el cliente.
    """
    logger.warning(f"Shipping Exception: {exc.code} - {exc.message} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc, "shipping_error", problems=exc.problems),
    )


async def fx_exception_handler(request: Request, exc: FxException) -> JSONResponse:
    """
    Manejador para fallos de tipo de cambio.

    Args:
        request: Request de FastAPI
        exc: Excepción FX

    Returns:
        JSONResponse: Respuesta JSON con la conversión que falló
    """
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"FX Exception: {exc.code} - {exc.message} - "
        f"Pair: {exc.from_currency}->{exc.to_currency} - "
        f"Provider: {exc.provider} - "
        f"URL: {request.url}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            request,
            exc,
            "fx_error",
            retryable=exc.is_retryable,
        ),
    )


async def carrier_api_exception_handler(request: Request, exc: CarrierAPIException) -> JSONResponse:
    """
    Manejador específico para errores de la API del carrier.

    Args:
        request: Request de FastAPI
        exc: Excepción del carrier

    Returns:
        JSONResponse: Respuesta JSON con información del error del carrier
    """
    logger.error(
        f"Carrier API Exception: {exc.message} - "
        f"API Code: {exc.api_response_code} - "
        f"Endpoint: {exc.endpoint} - "
        f"URL: {request.url}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(
            request,
            exc,
            "carrier_api_error",
            carrier_response_code=exc.api_response_code,
            retryable=exc.is_retryable,
        ),
    )


async def database_exception_handler(request: Request, exc: DatabaseException) -> JSONResponse:
    """
    Manejador específico para errores de base de datos.
    """
    logger.error(
        f"Database Exception: {exc.message} - "
        f"Operation: {exc.operation} - "
        f"Collection: {exc.collection} - "
        f"URL: {request.url}"
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(request, exc, "database_error"),
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """
    Manejador para HTTPException estándar de FastAPI.

    Args:
        request: Request de FastAPI
        exc: HTTPException

    Returns:
        JSONResponse: Respuesta JSON estandarizada
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "error_type": "http_error",
            "status_code": exc.status_code,
            "message": exc.detail,
            "path": str(request.url.path),
            "timestamp": _timestamp(),
            "request_id": _request_id(request),
        },
        headers=getattr(exc, "headers", None),
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException de Starlette (nivel más bajo).

    Args:
        request: Request de FastAPI
        exc: StarletteHTTPException

    Returns:
        JSONResponse: Respuesta JSON estandarizada
    """
    logger.warning(f"Starlette HTTP Exception: {exc.status_code} - {exc.detail} - " f"URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": True,
            "error_type": "http_error",
            "status_code": exc.status_code,
            "message": exc.detail,
            "path": str(request.url.path),
            "timestamp": _timestamp(),
            "request_id": _request_id(request),
        },
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON de error interno
    """
    logger.error(
        f"Unhandled Exception: {str(exc)} - "
        f"Type: {type(exc).__name__} - "
        f"URL: {request.url} - "
        f"Traceback: {traceback.format_exc()}"
    )

    settings = get_settings()

    # Respuesta genérica (sin exponer detalles internos)
    error_message = "Internal server error occurred"
    if settings.DEBUG and not settings.is_production:
        error_message = f"{type(exc).__name__}: {str(exc)}"

    return JSONResponse(
        status_code=500,
        content={
            "error": True,
            "error_type": "internal_server_error",
            "message": error_message,
            "path": str(request.url.path),
            "timestamp": _timestamp(),
            "request_id": _request_id(request),
        },
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(ShippingException, shipping_exception_handler)
    app.add_exception_handler(FxException, fx_exception_handler)
    app.add_exception_handler(CarrierAPIException, carrier_api_exception_handler)
    app.add_exception_handler(DatabaseException, database_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)

    # Manejadores HTTP estándar
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")

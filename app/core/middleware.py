"""
Middleware de la API de checkout.

- CORS y TrustedHost (producción)
- request_id por request, propagado a los logs y a la respuesta
- Headers de seguridad
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from app.core.config import Settings, get_settings
from app.core.logging_config import request_id_var

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}


def configure_cors_middleware(app: FastAPI, settings: Settings) -> None:
    """Permite los orígenes de ALLOWED_HOSTS (todos si está vacío)."""
    allowed_origins = settings.ALLOWED_HOSTS or ["*"]

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Accept", "Content-Type", "Authorization", REQUEST_ID_HEADER],
        expose_headers=["X-Process-Time", REQUEST_ID_HEADER],
    )
    logger.info(f"CORS configurado - Origins permitidos: {allowed_origins}")


def configure_trusted_host_middleware(app: FastAPI, settings: Settings) -> None:
    """Valida el header Host fuera de modo debug."""
    if settings.DEBUG or not settings.ALLOWED_HOSTS:
        return

    allowed_hosts = settings.ALLOWED_HOSTS + ["localhost", "127.0.0.1"]
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)
    logger.info(f"TrustedHost configurado - Hosts permitidos: {allowed_hosts}")


def configure_request_logging_middleware(app: FastAPI, settings: Settings) -> None:
    """
    Loggea cada request con su duración.

    El request_id se toma del header X-Request-ID del cliente o se genera, se
    publica en request_id_var para los logs de la request y se devuelve en la
    respuesta.
    """

    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or generate_request_id()
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        start_time = time.perf_counter()

        logger.info(f"{request.method} {request.url.path} - Client: {get_client_ip(request)}")
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                f"{request.method} {request.url.path} - Error: {e} - "
                f"Time: {time.perf_counter() - start_time:.3f}s"
            )
            raise
        else:
            process_time = time.perf_counter() - start_time
            level = logging.WARNING if response.status_code >= 500 else logging.INFO
            logger.log(
                level,
                f"{request.method} {request.url.path} - Status: {response.status_code} - Time: {process_time:.3f}s",
            )
            if process_time > settings.SLOW_REQUEST_THRESHOLD:
                logger.warning(f"Request lenta: {process_time:.3f}s > {settings.SLOW_REQUEST_THRESHOLD}s")

            response.headers["X-Process-Time"] = f"{process_time:.3f}"
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)


def configure_security_headers_middleware(app: FastAPI, settings: Settings) -> None:
    """Agrega headers de seguridad; HSTS solo en producción sobre HTTPS."""

    @app.middleware("http")
    async def security_headers_middleware(request: Request, call_next):
        response = await call_next(request)

        response.headers.update(SECURITY_HEADERS)
        if not settings.DEBUG and request.url.scheme == "https":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

        return response


def configure_all_middleware(app: FastAPI) -> None:
    """
    Configura todos los middlewares de la aplicación.
    Se ejecutan en orden inverso al que se agregan.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    configure_security_headers_middleware(app, settings)
    configure_request_logging_middleware(app, settings)
    configure_trusted_host_middleware(app, settings)
    # CORS se agrega último para responder OPTIONS primero
    configure_cors_middleware(app, settings)


def generate_request_id() -> str:
    """ID corto de 8 caracteres."""
    return uuid.uuid4().hex[:8]


def get_client_ip(request: Request) -> str:
    """Primera IP de X-Forwarded-For, o la del socket."""
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.client.host if request.client else "unknown"

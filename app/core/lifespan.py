"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación:
crea los recursos compartidos (sesión HTTP, conexión MongoDB, caché FX)
y los publica en app.state para las dependencias de los endpoints.
"""

import logging
from contextlib import asynccontextmanager

import aiohttp
from fastapi import FastAPI

from app.core.config import Settings, get_environment_info, get_settings
from app.core.logging_config import setup_logging
from app.db.connection import MongoConnection
from app.db.mongo import BusinessRepository, OrderRepository, ProductRepository
from app.db.shippo_client import ShippoClient
from app.services.fx import FxRateCache, FxRateResolver, build_fx_provider
from app.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    # === STARTUP ===
    setup_logging()
    logger.info(f"🚀 Iniciando {settings.APP_NAME} v{settings.APP_VERSION} ({settings.ENVIRONMENT})")
    logger.debug(f"Entorno: {get_environment_info()}")

    startup_verify_configuration(settings)

    http_session = aiohttp.ClientSession()
    mongo = MongoConnection(settings)
    await startup_connect_database(mongo)

    attach_services(app, settings, http_session, mongo)
    logger.info("🎉 Aplicación iniciada correctamente")

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")
    await shutdown_close_connections(http_session, mongo)
    logger.info("👋 Aplicación cerrada correctamente")


# === FUNCIONES DE STARTUP ===


def startup_verify_configuration(settings: Settings) -> None:
    """
    Advierte sobre configuración incompleta sin impedir el arranque.

    Los endpoints afectados devuelven el código de error correspondiente
    (SHIPPO_NOT_CONFIGURED, FX_NOT_CONFIGURED, FX_PROVIDER_INVALID).
    """
    if not settings.SHIPPO_TOKEN:
        logger.warning("⚠️ SHIPPO_TOKEN no configurado: las declaraciones de aduana fallarán")

    if settings.FX_PROVIDER == "custom" and not settings.FX_API_BASE:
        logger.warning("⚠️ FX_PROVIDER=custom sin FX_API_BASE")
    elif settings.FX_PROVIDER not in ("frankfurter", "custom", "off"):
        logger.error(f"❌ FX_PROVIDER desconocido: {settings.FX_PROVIDER}")

    logger.info(f"✅ Configuración verificada (FX provider: {settings.FX_PROVIDER})")


async def startup_connect_database(mongo: MongoConnection) -> None:
    """Conecta a MongoDB; si falla, la app arranca y las lecturas devuelven 503."""
    try:
        await mongo.initialize()
        logger.info("✅ Conexión a MongoDB verificada")
    except DatabaseException as e:
        logger.error(f"❌ MongoDB no disponible: {e.message}")


def attach_services(
    app: FastAPI,
    settings: Settings,
    http_session: aiohttp.ClientSession,
    mongo: MongoConnection,
) -> None:
    """
    Construye los servicios compartidos y los publica en app.state.

    Args:
        app: Instancia de FastAPI
        settings: Configuración
        http_session: Sesión HTTP compartida (FX y Shippo)
        mongo: Conexión MongoDB
    """
    fx_cache = FxRateCache(ttl_seconds=settings.fx_cache_ttl_seconds)

    app.state.settings = settings
    app.state.http_session = http_session
    app.state.mongo = mongo
    app.state.product_lookup = ProductRepository(mongo)
    app.state.business_lookup = BusinessRepository(mongo)
    app.state.order_lookup = OrderRepository(mongo)
    app.state.carrier = ShippoClient(http_session, settings)
    app.state.fx_cache = fx_cache
    app.state.fx_resolver = FxRateResolver(
        provider=build_fx_provider(settings, http_session),
        cache=fx_cache,
        provider_name=settings.FX_PROVIDER,
    )


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_close_connections(http_session: aiohttp.ClientSession, mongo: MongoConnection) -> None:
    """Cierra la sesión HTTP y la conexión MongoDB."""
    try:
        await http_session.close()
        logger.info("✅ Sesión HTTP cerrada")
    except aiohttp.ClientError as e:
        logger.error(f"Error cerrando sesión HTTP: {e}")

    try:
        await mongo.close()
    except DatabaseException as e:
        logger.error(f"Error cerrando MongoDB: {e.message}")

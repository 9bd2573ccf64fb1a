"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo se encarga de registrar todos los routers de la API,
configurar endpoints base y organizar las rutas de manera estructurada.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.v1.endpoints.fx import router as fx_router
from app.api.v1.endpoints.orders import router as orders_router
from app.api.v1.endpoints.shipping import router as shipping_router
from app.core.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        """
        Endpoint raíz que proporciona información básica de la API.

        Returns:
            Dict con información de la API
        """
        return {
            "message": f"{settings.APP_NAME} API",
            "description": "Checkout core: parcels, customs, FX and order visibility",
            "version": settings.APP_VERSION,
            "status": "running",
            "documentation": "/docs" if (settings.DEBUG or settings.ENABLE_DOCS) else "disabled",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "api_v1": "/api/v1",
                "shipping": "/api/v1/shipping",
                "fx": "/api/v1/fx",
                "orders": "/api/v1/orders",
            },
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        """
        Endpoint simple para verificar que la API responde.

        Returns:
            Dict con pong y timestamp
        """
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}


async def get_health_status(request: Request) -> Dict[str, Any]:
    """
    Estado de salud de los servicios de la aplicación.

    Args:
        request: Request (para acceder a app.state)

    Returns:
        Dict con estado general y por servicio
    """
    state = request.app.state
    services: Dict[str, Any] = {}

    mongo = getattr(state, "mongo", None)
    if mongo is None:
        services["mongodb"] = {"status": "unknown"}
    else:
        mongo_health = await mongo.health_check()
        services["mongodb"] = {
            "status": "healthy" if mongo_health["test_passed"] else "unhealthy",
            "response_time_ms": mongo_health["response_time_ms"],
        }

    fx_resolver = getattr(state, "fx_resolver", None)
    services["fx"] = {
        "status": "configured" if fx_resolver is not None and fx_resolver.provider is not None else "unavailable",
        "provider": settings.FX_PROVIDER,
        "cached_rates": len(state.fx_cache) if getattr(state, "fx_cache", None) is not None else 0,
    }

    services["shippo"] = {"status": "configured" if settings.SHIPPO_TOKEN else "not_configured"}

    overall = services["mongodb"]["status"] != "unhealthy"
    return {"overall": overall, "services": services}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check y monitoreo.

    Args:
        app: Instancia de FastAPI
    """

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check(request: Request):
        """
        Endpoint de health check para uso general.

        Returns:
            Dict con estado de salud
        """
        health_status = await get_health_status(request)
        status_code = 200 if health_status["overall"] else 503

        return JSONResponse(
            status_code=status_code,
            content={
                "status": "healthy" if health_status["overall"] else "unhealthy",
                "version": settings.APP_VERSION,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "services": health_status["services"],
                "environment": settings.ENVIRONMENT,
                "debug": settings.DEBUG,
            },
        )


def configure_api_v1_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la API v1.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers de API v1...")

    app.include_router(
        shipping_router,
        prefix="/api/v1/shipping",
        tags=["Shipping"],
        responses={
            422: {"description": "Cart cannot be shipped"},
            502: {"description": "Carrier error"},
        },
    )
    logger.info("✅ Router de envíos configurado")

    app.include_router(
        fx_router,
        prefix="/api/v1/fx",
        tags=["FX"],
        responses={
            409: {"description": "FX disabled"},
            502: {"description": "FX provider error"},
        },
    )
    logger.info("✅ Router de tipo de cambio configurado")

    app.include_router(
        orders_router,
        prefix="/api/v1/orders",
        tags=["Orders"],
        responses={
            403: {"description": "Order not visible (non-production)"},
            404: {"description": "Order not found"},
        },
    )
    logger.info("✅ Router de órdenes configurado")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando todos los routers...")

    create_root_endpoints(app)
    create_health_endpoints(app)
    configure_api_v1_routers(app)

    logger.info("✅ Todos los routers configurados correctamente")

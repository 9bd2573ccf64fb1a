"""
Endpoints de órdenes: detalle de una orden según la identidad de la sesión.

En producción toda denegación se presenta como 404 "Order not found" para no
revelar la existencia de la orden; en otros entornos se devuelve 403 con el
motivo para facilitar el diagnóstico.
"""

import logging
from datetime import datetime, timezone

from bson import ObjectId
from fastapi import APIRouter, Depends, Request
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from app.api.dependencies import (
    get_app_settings,
    get_order_locator,
    get_session_identity,
    get_visibility_resolver,
)
from app.core.config import Settings
from app.domain.models import SessionIdentity
from app.services.orders import OrderLocator, OrderVisibilityResolver

logger = logging.getLogger(__name__)

router = APIRouter()


def deny_response(request: Request, settings: Settings, identity: SessionIdentity, reason: str) -> JSONResponse:
    """
    Respuesta de denegación según el entorno.

    Args:
        request: Request de FastAPI
        settings: Configuración (entorno)
        identity: Identidad de la sesión
        reason: Motivo de la denegación

    Returns:
        JSONResponse: 404 en producción, 403 con el motivo en otros entornos
    """
    logger.warning(f"Order view denied: {reason} - URL: {request.url.path}")

    body = {
        "error": True,
        "error_type": "order_not_visible",
        "path": str(request.url.path),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": getattr(request.state, "request_id", None),
    }

    if settings.is_production:
        return JSONResponse(status_code=404, content={**body, "message": "Order not found"})

    return JSONResponse(
        status_code=403,
        content={**body, "message": "Forbidden", "reason": reason, "identity": identity.flags()},
    )


@router.get("/{order_id}", summary="Order details visible to the current session")
async def get_order(
    order_id: str,
    request: Request,
    identity: SessionIdentity = Depends(get_session_identity),
    locator: OrderLocator = Depends(get_order_locator),
    resolver: OrderVisibilityResolver = Depends(get_visibility_resolver),
    settings: Settings = Depends(get_app_settings),
):
    """
    Devuelve la orden completa (admin, comprador, negocio involucrado) o solo
    los ítems propios cuando el negocio es vendedor de parte de la orden.
    """
    raw_id = order_id.strip()

    if identity.is_anonymous:
        return deny_response(request, settings, identity, "No session identity")

    order = await locator.locate(raw_id)
    if order is None:
        return deny_response(request, settings, identity, f'Order not found for id="{raw_id}" (no _id / orderId match)')

    visibility = await resolver.resolve(identity, order)
    if not visibility.ok:
        return deny_response(request, settings, identity, visibility.reason)

    return {"order": jsonable_encoder(visibility.to_view(), custom_encoder={ObjectId: str})}

"""
Dependencias de FastAPI para los endpoints de checkout.

Los servicios compartidos se crean en el lifespan y viven en app.state;
aquí solo se leen y se combinan por request.
"""

from fastapi import Depends, Request

from app.core.config import Settings, get_settings
from app.domain.models import SessionIdentity, ShippingAddress
from app.services.fx import FxRateResolver
from app.services.orders import OrderLocator, OrderVisibilityResolver
from app.services.shipping import (
    CustomsDeclarationBuilder,
    IBusinessLookup,
    ICarrierClient,
    IProductLookup,
    ParcelBuilder,
    ShipmentOriginResolver,
)


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


def get_product_lookup(request: Request) -> IProductLookup:
    return request.app.state.product_lookup


def get_business_lookup(request: Request) -> IBusinessLookup:
    return request.app.state.business_lookup


def get_carrier(request: Request) -> ICarrierClient:
    return request.app.state.carrier


def get_fx_resolver(request: Request) -> FxRateResolver:
    return request.app.state.fx_resolver


def get_session_identity(request: Request) -> SessionIdentity:
    """
    Identidad de la sesión actual.

    La sesión la establece el middleware de sesión de la plataforma en
    scope["session"]; sin sesión la identidad es anónima.
    """
    return SessionIdentity.from_session(request.scope.get("session"))


def get_parcel_builder(product_lookup: IProductLookup = Depends(get_product_lookup)) -> ParcelBuilder:
    return ParcelBuilder(product_lookup)


def get_customs_builder(
    product_lookup: IProductLookup = Depends(get_product_lookup),
    carrier: ICarrierClient = Depends(get_carrier),
    settings: Settings = Depends(get_app_settings),
) -> CustomsDeclarationBuilder:
    return CustomsDeclarationBuilder(product_lookup, carrier, settings)


def get_origin_resolver(
    product_lookup: IProductLookup = Depends(get_product_lookup),
    business_lookup: IBusinessLookup = Depends(get_business_lookup),
    settings: Settings = Depends(get_app_settings),
) -> ShipmentOriginResolver:
    return ShipmentOriginResolver(
        product_lookup,
        business_lookup,
        default_origin=ShippingAddress(**settings.get_default_origin_address()),
    )


def get_order_locator(request: Request) -> OrderLocator:
    return OrderLocator(request.app.state.order_lookup)


def get_visibility_resolver(
    product_lookup: IProductLookup = Depends(get_product_lookup),
) -> OrderVisibilityResolver:
    return OrderVisibilityResolver(product_lookup)

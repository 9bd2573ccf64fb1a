"""
Endpoints de envío: paquetes, declaraciones de aduana y origen del envío.

Todas las operaciones son fail-closed: si un producto del carrito no tiene
medidas completas no se devuelve ningún resultado parcial.
"""

import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import get_customs_builder, get_origin_resolver, get_parcel_builder
from app.api.v1.schemas.checkout_schemas import (
    AddressResponse,
    CartRequest,
    CustomsDeclarationResponse,
    CustomsRequest,
    CustomsSubmitResponse,
    ParcelsResponse,
)
from app.domain.models import Cart
from app.services.shipping import CustomsDeclarationBuilder, ParcelBuilder, ShipmentOriginResolver

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/parcels", response_model=ParcelsResponse, summary="Build carrier parcels for a cart")
async def build_parcels(
    request: CartRequest,
    builder: ParcelBuilder = Depends(get_parcel_builder),
):
    """
    Calcula los paquetes del carrito.

    Los ítems frágiles van en su propio paquete (primero); el resto en otro.
    """
    parcels = await builder.build(Cart.from_dict(request.to_cart_dict()))

    return {
        "parcels": [{**parcel.to_carrier_dict(), "fragile": parcel.fragile} for parcel in parcels],
        "count": len(parcels),
    }


@router.post("/customs", response_model=CustomsDeclarationResponse, summary="Preview a customs declaration")
async def preview_customs_declaration(
    request: CustomsRequest,
    builder: CustomsDeclarationBuilder = Depends(get_customs_builder),
):
    """Construye la declaración de aduana sin enviarla al carrier."""
    declaration = await builder.build(Cart.from_dict(request.to_cart_dict()), request.to_country)
    return declaration.to_carrier_dict()


@router.post("/customs/submit", response_model=CustomsSubmitResponse, summary="Create a customs declaration")
async def submit_customs_declaration(
    request: CustomsRequest,
    builder: CustomsDeclarationBuilder = Depends(get_customs_builder),
):
    """Construye y envía la declaración de aduana; devuelve el object_id del carrier."""
    object_id = await builder.create(Cart.from_dict(request.to_cart_dict()), request.to_country)
    logger.info(f"Customs declaration {object_id} created for destination {request.to_country or 'XX'}")
    return {"object_id": object_id}


@router.post("/origin", response_model=AddressResponse, summary="Resolve the shipment origin address")
async def resolve_origin(
    request: CartRequest,
    resolver: ShipmentOriginResolver = Depends(get_origin_resolver),
):
    """Dirección de origen: el vendedor para artículos de segunda mano, la tienda para el resto."""
    address = await resolver.resolve(Cart.from_dict(request.to_cart_dict()))
    return address.to_carrier_dict()

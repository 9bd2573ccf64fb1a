"""
Endpoints de tipo de cambio.
"""

import logging

from fastapi import APIRouter, Depends, Query

from app.api.dependencies import get_fx_resolver
from app.api.v1.schemas.checkout_schemas import FxConversionResponse, FxRateResponse
from app.services.fx import FxRateResolver

logger = logging.getLogger(__name__)

router = APIRouter()

# Query parameter singletons para evitar B008
QUERY_FROM = Query(..., alias="from", min_length=1, max_length=10, description="Moneda origen (ISO 4217)")
QUERY_TO = Query(..., alias="to", min_length=1, max_length=10, description="Moneda destino (ISO 4217)")
QUERY_AMOUNT = Query(..., description="Monto a convertir")


@router.get("/rate", response_model=FxRateResponse, summary="Get an exchange rate")
async def get_rate(
    from_currency: str = QUERY_FROM,
    to_currency: str = QUERY_TO,
    resolver: FxRateResolver = Depends(get_fx_resolver),
):
    """Tasa para convertir `from` a `to` (1 si son iguales)."""
    rate = await resolver.get_rate(from_currency, to_currency)
    return FxRateResponse(
        from_currency=from_currency.strip().upper(),
        to_currency=to_currency.strip().upper(),
        rate=rate,
        provider=resolver.provider_name,
    )


@router.get("/convert", response_model=FxConversionResponse, summary="Convert an amount")
async def convert(
    amount: str = QUERY_AMOUNT,
    from_currency: str = QUERY_FROM,
    to_currency: str = QUERY_TO,
    resolver: FxRateResolver = Depends(get_fx_resolver),
):
    """Convierte un monto y devuelve el valor con los datos de la conversión."""
    conversion = await resolver.convert_amount(amount, from_currency, to_currency)
    return conversion.to_dict()

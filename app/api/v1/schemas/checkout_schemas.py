"""
Modelos Pydantic para los endpoints de checkout (envíos, FX y órdenes).

Los ítems del carrito se aceptan como mappings sueltos: los nombres de campo
legados (customId, productId, pid, sku, qty/quantity, price/unitPrice) se
normalizan en el dominio, no aquí.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CartRequest(BaseModel):
    """Carrito enviado por el cliente."""

    items: List[Dict[str, Any]] = Field(default_factory=list, description="Ítems del carrito")

    def to_cart_dict(self) -> Dict[str, Any]:
        return {"items": self.items}


class CustomsRequest(CartRequest):
    """Carrito más país de destino para la declaración de aduana."""

    to_country: Optional[str] = Field(default=None, max_length=56, description="País destino (ISO2)")

    @field_validator("to_country")
    @classmethod
    def normalize_country(cls, v):
        """Normaliza el país destino a mayúsculas."""
        return v.strip().upper() if v else None


class ParcelResponse(BaseModel):
    """Paquete en formato del carrier."""

    length: str
    width: str
    height: str
    distance_unit: str = "cm"
    weight: str
    mass_unit: str = "kg"
    fragile: bool = False


class ParcelsResponse(BaseModel):
    """Paquetes calculados para el carrito."""

    parcels: List[ParcelResponse]
    count: int


class CustomsItemResponse(BaseModel):
    description: str
    quantity: int
    net_weight: str
    mass_unit: str
    value_amount: str
    value_currency: str
    origin_country: str


class CustomsDeclarationResponse(BaseModel):
    """Vista previa de la declaración de aduana."""

    certify: bool
    certify_signer: str
    contents_type: str
    non_delivery_option: str
    incoterm: str
    eel_pfc: str
    exporter_reference: str
    items: List[CustomsItemResponse]


class CustomsSubmitResponse(BaseModel):
    object_id: str


class AddressResponse(BaseModel):
    """Dirección de origen del envío."""

    name: str
    street1: str
    street2: str = ""
    city: str
    state: Optional[str] = None
    zip: str
    country: str
    phone: str
    email: Optional[str] = None


class FxRateResponse(BaseModel):
    """Tasa de cambio resuelta."""

    model_config = ConfigDict(populate_by_name=True)

    from_currency: str = Field(alias="from")
    to_currency: str = Field(alias="to")
    rate: float
    provider: str


class FxDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    rate: float
    from_currency: str = Field(alias="from")
    to_currency: str = Field(alias="to")
    original: float
    converted: float
    provider: str


class FxConversionResponse(BaseModel):
    """Monto convertido con los datos de auditoría de la conversión."""

    value: float
    currency: str
    fx: FxDetail

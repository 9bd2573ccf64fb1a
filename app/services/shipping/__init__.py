"""
Shipping services: parcels, customs declarations and shipment origin.
"""

from .customs_builder import CustomsDeclarationBuilder
from .interfaces import CarrierResponse, IBusinessLookup, ICarrierClient, IProductLookup
from .origin_resolver import ShipmentOriginResolver, address_from_business
from .parcel_builder import CartRow, ParcelBuilder, validate_rows

__all__ = [
    "CarrierResponse",
    "CartRow",
    "CustomsDeclarationBuilder",
    "IBusinessLookup",
    "ICarrierClient",
    "IProductLookup",
    "ParcelBuilder",
    "ShipmentOriginResolver",
    "address_from_business",
    "validate_rows",
]

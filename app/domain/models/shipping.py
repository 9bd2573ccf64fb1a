"""
Shipping domain models: parcels, customs declarations and carrier addresses.

All of them are derived per checkout and never persisted.
"""

from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

MIN_PARCEL_WEIGHT_KG = Decimal("0.001")
MIN_PARCEL_DIMENSION_CM = Decimal("0.1")


def quantize(value: float | Decimal, places: str) -> Decimal:
    """Round half up to the given exponent (e.g. "0.001")."""
    return Decimal(str(value)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def format_decimal(value: Decimal) -> str:
    """
    Plain decimal string without trailing zeros or scientific notation.

    Carrier APIs reject values like "1E+1", so normalize() alone is not enough.
    """
    normalized = value.normalize()
    text = format(normalized, "f")
    return "0" if text in ("-0", "") else text


@dataclass(frozen=True)
class Parcel:
    """
    Physical shipping unit submitted to the carrier.

    Attributes:
        length_cm: Bounding length (1 decimal, >= 0.1)
        width_cm: Bounding width (1 decimal, >= 0.1)
        height_cm: Bounding height (1 decimal, >= 0.1)
        weight_kg: Aggregate weight (3 decimals, >= 0.001)
        fragile: Whether the parcel holds the fragile partition
    """

    length_cm: Decimal
    width_cm: Decimal
    height_cm: Decimal
    weight_kg: Decimal
    fragile: bool = False

    @classmethod
    def from_measurements(
        cls, length_cm: float, width_cm: float, height_cm: float, weight_kg: float, fragile: bool = False
    ) -> "Parcel":
        """Round and clamp raw measurements to carrier minimums."""
        return cls(
            length_cm=max(MIN_PARCEL_DIMENSION_CM, quantize(length_cm, "0.1")),
            width_cm=max(MIN_PARCEL_DIMENSION_CM, quantize(width_cm, "0.1")),
            height_cm=max(MIN_PARCEL_DIMENSION_CM, quantize(height_cm, "0.1")),
            weight_kg=max(MIN_PARCEL_WEIGHT_KG, quantize(weight_kg, "0.001")),
            fragile=fragile,
        )

    def to_carrier_dict(self) -> dict[str, str]:
        """Carrier payload: unit-tagged strings."""
        return {
            "length": format_decimal(self.length_cm),
            "width": format_decimal(self.width_cm),
            "height": format_decimal(self.height_cm),
            "distance_unit": "cm",
            "weight": format_decimal(self.weight_kg),
            "mass_unit": "kg",
        }


@dataclass(frozen=True)
class CustomsLineItem:
    """One line of a customs declaration."""

    description: str
    quantity: int
    net_weight_kg: Decimal
    value_amount: Decimal
    value_currency: str
    origin_country: str

    def to_carrier_dict(self) -> dict[str, Any]:
        return {
            "description": self.description,
            "quantity": self.quantity,
            "net_weight": format_decimal(self.net_weight_kg),
            "mass_unit": "kg",
            "value_amount": format_decimal(self.value_amount),
            "value_currency": self.value_currency,
            "origin_country": self.origin_country,
        }


@dataclass(frozen=True)
class CustomsDeclaration:
    """
    Manifest-level customs record plus its line items.

    Attributes:
        certify_signer: Person or brand certifying the declaration (<= 100 chars)
        exporter_reference: "{PREFIX}-{CC}-{unix_ts}" capped at 20 chars
        eel_pfc: Export-control classification code
        items: One line per cart entry
    """

    certify_signer: str
    exporter_reference: str
    eel_pfc: str
    items: tuple[CustomsLineItem, ...] = field(default_factory=tuple)
    certify: bool = True
    contents_type: str = "MERCHANDISE"
    non_delivery_option: str = "RETURN"
    incoterm: str = "DDU"

    def to_carrier_dict(self) -> dict[str, Any]:
        return {
            "certify": self.certify,
            "certify_signer": self.certify_signer,
            "contents_type": self.contents_type,
            "non_delivery_option": self.non_delivery_option,
            "incoterm": self.incoterm,
            "eel_pfc": self.eel_pfc,
            "exporter_reference": self.exporter_reference,
            "items": [item.to_carrier_dict() for item in self.items],
        }


@dataclass(frozen=True)
class ShippingAddress:
    """Carrier address (ISO2 country)."""

    name: str
    street1: str
    city: str
    zip: str
    country: str
    phone: str
    street2: str = ""
    state: str | None = None
    email: str | None = None

    def to_carrier_dict(self) -> dict[str, str]:
        data = {
            "name": self.name,
            "street1": self.street1,
            "street2": self.street2,
            "city": self.city,
            "state": self.state,
            "zip": self.zip,
            "country": self.country,
            "phone": self.phone,
            "email": self.email,
        }
        return {key: value for key, value in data.items() if value is not None}

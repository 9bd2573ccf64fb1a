"""
CustomsDeclarationBuilder - Builds and submits international customs declarations.

The declaration reuses the parcel builder's product resolution and
validation, so a cart that cannot be shipped never reaches the carrier.
"""

import json
import logging
import time
from decimal import Decimal, InvalidOperation
from typing import Any, Callable

from app.core.config import Settings
from app.domain.models import Cart, CustomsDeclaration, CustomsLineItem
from app.domain.models.shipping import quantize
from app.services.shipping.interfaces import CarrierResponse, ICarrierClient, IProductLookup
from app.services.shipping.parcel_builder import CartRow, ParcelBuilder, validate_rows
from app.utils.error_handler import (
    CarrierAPIException,
    ErrorCode,
    ShippingException,
    ValidationException,
)

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 50
SIGNER_MAX_LENGTH = 100
EXPORTER_REFERENCE_MAX_LENGTH = 20
MIN_NET_WEIGHT_KG = Decimal("0.001")

CUSTOMS_ENDPOINT = "/customs/declarations/"


def build_exporter_reference(prefix: str, to_country: str | None, unix_ts: int) -> str:
    """
    Exporter reference "{PREFIX}-{CC}-{unix_ts}" capped at 20 characters.

    Args:
        prefix: Configured prefix
        to_country: Destination country (first two letters used, "XX" if empty)
        unix_ts: Seconds since epoch

    Returns:
        str: Reference
    """
    destination = (to_country or "").strip().upper()[:2] or "XX"
    return f"{prefix}-{destination}-{unix_ts}"[:EXPORTER_REFERENCE_MAX_LENGTH]


def provider_message(body: dict[str, Any]) -> str:
    """Extract the carrier's explanation from an error body."""
    messages = body.get("messages")
    if isinstance(messages, list) and messages:
        return json.dumps(messages)
    return str(body.get("detail") or body.get("message") or json.dumps(body))


class CustomsDeclarationBuilder:
    """Builds customs declarations from a cart and submits them to the carrier."""

    def __init__(
        self,
        product_lookup: IProductLookup,
        carrier: ICarrierClient,
        settings: Settings,
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize builder.

        Args:
            product_lookup: Batch product lookup
            carrier: Carrier API client
            settings: Application settings (currency, origin, signer, EEL/PFC)
            clock: Wall clock for the exporter reference
        """
        self.parcel_builder = ParcelBuilder(product_lookup)
        self.carrier = carrier
        self.settings = settings
        self.clock = clock

    def _line_item(self, index: int, row: CartRow) -> CustomsLineItem:
        item = row.item
        product = row.product

        description = (product.name if product else "") or item.name or f"Item {index + 1}"

        if item.unit_price is None:
            raise ValidationException(
                message=f"Cart item {item.ref_label} has no unit price; cannot declare customs value",
                field=f"items[{index}].price",
                invalid_value=None,
                expected_format="number or {value, currency}",
            )

        try:
            net_weight = quantize(Decimal(str(product.shipping.weight_kg)) * item.quantity, "0.001")
        except InvalidOperation:
            raise ValidationException(
                message=f"Cart item {item.ref_label} weighs too much to declare",
                field=f"items[{index}].qty",
                invalid_value=item.quantity,
            ) from None

        try:
            value_amount = quantize(item.unit_price * item.quantity, "0.01")
        except InvalidOperation:
            raise ValidationException(
                message=f"Cart item {item.ref_label} has a value too large to declare",
                field=f"items[{index}].price",
                invalid_value=str(item.unit_price),
                expected_format="number or {value, currency}",
            ) from None

        return CustomsLineItem(
            description=description[:DESCRIPTION_MAX_LENGTH],
            quantity=item.quantity,
            net_weight_kg=max(MIN_NET_WEIGHT_KG, net_weight),
            value_amount=max(Decimal("0"), value_amount),
            value_currency=self.settings.CHECKOUT_CURRENCY,
            origin_country=self.settings.SHIPPO_FROM_COUNTRY,
        )

    async def build(self, cart: Cart, to_country: str | None) -> CustomsDeclaration:
        """
        Build the declaration for a cart.

        Args:
            cart: Cart being shipped
            to_country: Destination country code

        Returns:
            CustomsDeclaration: Declaration ready to submit

        Raises:
            ShippingException: CART_EMPTY or PRODUCT_SHIPPING_MISSING
            ValidationException: If an item has no unit price
        """
        if cart.is_empty:
            raise ShippingException(
                message="Cart is empty; cannot create customs declaration.",
                error_code=ErrorCode.CART_EMPTY,
            )

        rows = await self.parcel_builder.resolve_rows(cart)
        validate_rows(rows)

        items = tuple(self._line_item(index, row) for index, row in enumerate(rows))

        return CustomsDeclaration(
            certify_signer=self.settings.customs_signer[:SIGNER_MAX_LENGTH],
            exporter_reference=build_exporter_reference(
                self.settings.CUSTOMS_EXPORTER_PREFIX, to_country, int(self.clock())
            ),
            eel_pfc=self.settings.SHIPPO_EEL_PFC,
            items=items,
        )

    async def submit(self, declaration: CustomsDeclaration) -> str:
        """
        Submit a declaration and return the carrier's object id.

        Raises:
            CarrierAPIException: SHIPPO_CUSTOMS_FAILED or SHIPPO_CUSTOMS_OBJECT_ERROR
        """
        response: CarrierResponse = await self.carrier.create_customs_declaration(declaration.to_carrier_dict())
        body = response.body or {}

        if not response.ok:
            raise CarrierAPIException(
                message=f"Shippo customs declaration error ({response.status}): {provider_message(body)}",
                error_code=ErrorCode.SHIPPO_CUSTOMS_FAILED,
                api_response_code=response.status,
                endpoint=CUSTOMS_ENDPOINT,
                provider_messages=body.get("messages"),
            )

        object_status = str(body.get("object_status") or "").upper()
        if object_status and object_status != "SUCCESS":
            raise CarrierAPIException(
                message=f"Shippo customs declaration object_status={object_status}: {provider_message(body)}",
                error_code=ErrorCode.SHIPPO_CUSTOMS_OBJECT_ERROR,
                api_response_code=response.status,
                endpoint=CUSTOMS_ENDPOINT,
                provider_messages=body.get("messages"),
            )

        object_id = body.get("object_id")
        if not object_id:
            raise CarrierAPIException(
                message="Shippo customs declaration did not return object_id.",
                error_code=ErrorCode.SHIPPO_CUSTOMS_FAILED,
                api_response_code=response.status,
                endpoint=CUSTOMS_ENDPOINT,
            )

        logger.info(f"Customs declaration created: {object_id}")
        return str(object_id)

    async def create(self, cart: Cart, to_country: str | None) -> str:
        """Build and submit in one step."""
        declaration = await self.build(cart, to_country)
        return await self.submit(declaration)

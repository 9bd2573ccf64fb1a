"""
ParcelBuilder - Builds carrier parcels from a cart.

Rules:
- Every cart item must resolve to a product with convertible weight and
  dimensions, otherwise nothing is built (PRODUCT_SHIPPING_MISSING).
- Fragile items travel in their own parcel, listed first.
- Parcel weight is the sum of unit weight x quantity; parcel dimensions are
  the per-axis maximum (not multiplied by quantity).
"""

import logging
from dataclasses import dataclass
from decimal import InvalidOperation

from app.domain.models import Cart, CartItem, Parcel, Product, ProductIndex
from app.services.shipping.interfaces import IProductLookup
from app.utils.error_handler import ErrorCode, ShippingException, ValidationException

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CartRow:
    """A cart item paired with its catalogue product (None if not found or ambiguous)."""

    item: CartItem
    product: Product | None
    ambiguous: bool = False


def validate_rows(rows: list[CartRow]) -> None:
    """
    Verify that every row has a product with complete shipping measurements.

    Args:
        rows: Resolved cart rows

    Raises:
        ShippingException: PRODUCT_SHIPPING_MISSING listing every offending item
    """
    problems = []
    for row in rows:
        if row.ambiguous:
            problems.append(f"{row.item.ref_label} (matches several products)")
            continue
        if row.product is None:
            problems.append(f"{row.item.ref_label} (product not found)")
            continue

        missing = row.product.shipping.missing_measurements()
        if missing:
            problems.append(f"{row.product.name or row.product.custom_id} (missing: {', '.join(missing)})")

    if problems:
        raise ShippingException(
            message=(
                "Shipping is unavailable because these products are missing shipping measurements: "
                + " | ".join(problems)
            ),
            error_code=ErrorCode.PRODUCT_SHIPPING_MISSING,
            problems=problems,
        )


def build_parcel(rows: list[CartRow], fragile: bool = False) -> Parcel:
    """
    Aggregate validated rows into one parcel.

    Args:
        rows: Rows already checked by validate_rows
        fragile: Flag stored on the parcel

    Returns:
        Parcel: Rounded and clamped parcel
    """
    total_kg = 0.0
    max_length = 0.0
    max_width = 0.0
    max_height = 0.0

    for row in rows:
        spec = row.product.shipping
        total_kg += spec.weight_kg * row.item.quantity
        max_length = max(max_length, spec.length_cm)
        max_width = max(max_width, spec.width_cm)
        max_height = max(max_height, spec.height_cm)

    return Parcel.from_measurements(
        length_cm=max_length,
        width_cm=max_width,
        height_cm=max_height,
        weight_kg=total_kg,
        fragile=fragile,
    )


class ParcelBuilder:
    """Turns a cart into one or two carrier parcels."""

    def __init__(self, product_lookup: IProductLookup):
        """
        Initialize builder.

        Args:
            product_lookup: Batch product lookup
        """
        self.product_lookup = product_lookup

    async def resolve_rows(self, cart: Cart) -> list[CartRow]:
        """
        Pair each cart item with its product using a single batch lookup.

        Args:
            cart: Cart to resolve

        Returns:
            list[CartRow]: One row per cart item, in cart order
        """
        refs = cart.refs()
        products = await self.product_lookup.find_by_refs(refs) if refs else []
        index = ProductIndex(products)
        return [
            CartRow(
                item=item,
                product=index.resolve(item.ref),
                ambiguous=item.ref is not None and index.is_ambiguous(item.ref),
            )
            for item in cart
        ]

    async def build(self, cart: Cart) -> list[Parcel]:
        """
        Build the parcels for a cart.

        Args:
            cart: Cart to ship

        Returns:
            list[Parcel]: Fragile parcel first (if any), then the normal parcel

        Raises:
            ShippingException: If any item lacks a product or measurements
            ValidationException: If quantities overflow the parcel weight
        """
        rows = await self.resolve_rows(cart)
        validate_rows(rows)

        fragile_rows = [row for row in rows if row.product.shipping.fragile]
        normal_rows = [row for row in rows if not row.product.shipping.fragile]

        try:
            if not fragile_rows:
                parcels = [build_parcel(rows)]
            else:
                parcels = [build_parcel(fragile_rows, fragile=True)]
                if normal_rows:
                    parcels.append(build_parcel(normal_rows))
        except (InvalidOperation, OverflowError):
            raise ValidationException(
                message="Cart quantities exceed the measurable parcel weight",
                field="items",
                invalid_value=[item.quantity for item in cart],
            ) from None

        logger.debug(f"Built {len(parcels)} parcel(s) for {len(rows)} cart item(s)")
        return parcels

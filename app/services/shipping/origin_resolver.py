"""
ShipmentOriginResolver - Decides the "from" address of a shipment.

Second-hand goods ship directly from the selling business; everything else
ships from the store's configured origin.
"""

import logging
from typing import Any, Mapping

from app.domain.models import Cart, ProductIndex, ShippingAddress
from app.services.shipping.interfaces import IBusinessLookup, IProductLookup
from app.utils.error_handler import ErrorCode, ShippingException

logger = logging.getLogger(__name__)

SECOND_HAND_CATEGORIES = frozenset({"second-hand-clothes", "uncategorized-second-hand-things"})


def _text(value: Any) -> str:
    return str(value or "").strip()


def address_from_business(business: Mapping[str, Any]) -> ShippingAddress:
    """
    Build a carrier address from a business document.

    Args:
        business: Business document (countryCode/country, addressLine1, city,
            postalCode, phone, state, addressLine2, name, email)

    Returns:
        ShippingAddress: Address with ISO2 country

    Raises:
        ShippingException: ADDRESS_INCOMPLETE naming every missing field
    """
    country = _text(business.get("countryCode") or business.get("country")).upper()
    street1 = _text(business.get("addressLine1"))
    city = _text(business.get("city"))
    state = _text(business.get("state"))
    zip_code = _text(business.get("postalCode"))
    phone = _text(business.get("phone"))

    missing = []
    if not country:
        missing.append("countryCode")
    if not street1:
        missing.append("addressLine1")
    if not city:
        missing.append("city")
    if not zip_code:
        missing.append("postalCode")
    if not phone:
        missing.append("phone")
    if country == "US" and not state:
        missing.append("state")

    if missing:
        raise ShippingException(
            message=f"Business address incomplete for shipping: missing {', '.join(missing)}",
            error_code=ErrorCode.ADDRESS_INCOMPLETE,
            problems=missing,
        )

    return ShippingAddress(
        name=_text(business.get("name")) or "Business",
        street1=street1,
        street2=_text(business.get("addressLine2")),
        city=city,
        state=state or None,
        zip=zip_code,
        country=country,
        phone=phone,
        email=_text(business.get("email")) or None,
    )


class ShipmentOriginResolver:
    """Resolves the origin address for a cart."""

    def __init__(
        self,
        product_lookup: IProductLookup,
        business_lookup: IBusinessLookup,
        default_origin: ShippingAddress,
    ):
        """
        Initialize resolver.

        Args:
            product_lookup: Batch product lookup
            business_lookup: Business lookup by id
            default_origin: Store origin used for regular goods
        """
        self.product_lookup = product_lookup
        self.business_lookup = business_lookup
        self.default_origin = default_origin

    async def resolve(self, cart: Cart) -> ShippingAddress:
        """
        Resolve the origin address for a cart.

        Args:
            cart: Cart being shipped

        Returns:
            ShippingAddress: Seller address for all-second-hand carts, default otherwise

        Raises:
            ShippingException: SELLER_BUSINESS_MISSING, MIXED_SELLERS_NOT_SUPPORTED,
                SELLER_BUSINESS_NOT_FOUND or ADDRESS_INCOMPLETE
        """
        refs = cart.refs()
        if not refs:
            return self.default_origin

        index = ProductIndex(await self.product_lookup.find_by_refs(refs))
        products = [index.resolve(ref) for ref in refs]

        if any(product is None or product.category not in SECOND_HAND_CATEGORIES for product in products):
            return self.default_origin

        business_id = products[0].business_id
        if not business_id:
            raise ShippingException(
                message=(
                    "Second-hand order detected, but product is missing seller businessId. "
                    "Cannot build FROM address."
                ),
                error_code=ErrorCode.SELLER_BUSINESS_MISSING,
            )

        if any(product.business_id != business_id for product in products):
            raise ShippingException(
                message=(
                    "Second-hand order contains products from different sellers. "
                    "Cannot build one FROM address for one shipment."
                ),
                error_code=ErrorCode.MIXED_SELLERS_NOT_SUPPORTED,
            )

        business = await self.business_lookup.get_by_id(business_id)
        if not business:
            raise ShippingException(
                message="Seller business not found for second-hand order.",
                error_code=ErrorCode.SELLER_BUSINESS_NOT_FOUND,
            )

        logger.debug(f"Second-hand cart ships from business {business_id}")
        return address_from_business(business)

"""
Order visibility - decides which identity may view an order and which items.

Precedence is admin, then user, then business; the first applicable identity
decides. A denial is returned as a value so the caller chooses how to render it.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from app.domain.models import Order, OrderLineItem, ProductIndex, SessionIdentity
from app.domain.value_objects import ProductRef
from app.domain.value_objects.product_reference import is_object_id_like
from app.services.orders.interfaces import IOrderLookup
from app.services.shipping.interfaces import IProductLookup

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OrderVisibility:
    """
    Visibility decision.

    Attributes:
        ok: Whether the identity may view the order
        reason: Human-readable explanation (shown only outside production)
        items: Items the identity may see
        seller_restricted: True when only the seller's own items are shown
        order: The order the decision is about
    """

    ok: bool
    reason: str
    items: list[OrderLineItem] = field(default_factory=list)
    seller_restricted: bool = False
    order: Order | None = None

    @classmethod
    def allow(cls, order: Order, reason: str, items: list[OrderLineItem] | None = None, seller_restricted=False):
        return cls(
            ok=True,
            reason=reason,
            items=list(order.items) if items is None else items,
            seller_restricted=seller_restricted,
            order=order,
        )

    @classmethod
    def deny(cls, order: Order | None, reason: str) -> "OrderVisibility":
        return cls(ok=False, reason=reason, order=order)

    def to_view(self) -> dict[str, Any]:
        """Order view limited to the visible items."""
        view = self.order.to_view(self.items)
        view["seller_restricted"] = self.seller_restricted
        view["visibility_reason"] = self.reason
        return view


class OrderVisibilityResolver:
    """Resolves what an identity can see of an order."""

    def __init__(self, product_lookup: IProductLookup):
        """
        Initialize resolver.

        Args:
            product_lookup: Batch product lookup used for seller ownership
        """
        self.product_lookup = product_lookup

    async def resolve(self, identity: SessionIdentity, order: Order) -> OrderVisibility:
        """
        Decide the visibility of an order for an identity.

        Args:
            identity: Session identity
            order: Order to show

        Returns:
            OrderVisibility: Allowed (full or seller-restricted) or denied with a reason
        """
        if identity.is_admin:
            return OrderVisibility.allow(order, "Admin session")

        if identity.is_user:
            if order.has_user(identity.subject_id) or order.has_email(identity.email):
                return OrderVisibility.allow(order, "Matched order user")
            return OrderVisibility.deny(order, "User session does not match this order (userId/email mismatch)")

        if identity.is_business:
            visibility = await self._business_view(identity.subject_id, order)
            if not visibility.ok:
                return OrderVisibility.deny(order, f"Business cannot view this order: {visibility.reason}")
            return visibility

        return OrderVisibility.deny(order, "No session identity")

    async def _business_view(self, business_id: str, order: Order) -> OrderVisibility:
        if not business_id:
            return OrderVisibility.deny(order, "Business session has no id")

        if order.has_seller(business_id):
            return OrderVisibility.allow(order, "Matched order businessId/sellerId/merchantId")

        if order.has_buyer_business(business_id):
            return OrderVisibility.allow(order, "Matched buyerBusinessId")

        refs = ProductRef.unique(item.ref for item in order.items)
        if not refs:
            return OrderVisibility.deny(order, "Order has no item product ids")

        products = await self.product_lookup.find_by_refs(refs)
        if not products:
            return OrderVisibility.deny(order, "No Product docs matched any item product ids")

        # Una referencia ambigua no prueba propiedad de ninguna línea
        index = ProductIndex(products)
        own_items = [
            item
            for item in order.items
            if (product := index.resolve(item.ref)) is not None and product.business_id == business_id
        ]

        if not own_items:
            return OrderVisibility.deny(
                order, "Products matched, but none belong to this businessId (ownership mismatch)"
            )

        logger.debug(f"Business {business_id} sees {len(own_items)}/{len(order.items)} items of order {order.id}")
        return OrderVisibility.allow(order, "Matched by product ownership", items=own_items, seller_restricted=True)


class OrderLocator:
    """Loads an order by document id or payment-provider order id."""

    def __init__(self, order_lookup: IOrderLookup):
        self.order_lookup = order_lookup

    async def locate(self, raw_id: str) -> Order | None:
        """
        Find an order.

        Args:
            raw_id: Document id (ObjectId hex) or payment-provider order id

        Returns:
            Order | None: The order, None if neither lookup matched
        """
        order_id = (raw_id or "").strip()
        if not order_id:
            return None

        document = None
        if is_object_id_like(order_id):
            document = await self.order_lookup.find_by_id(order_id)
        if document is None:
            document = await self.order_lookup.find_by_order_id(order_id)

        return Order.from_document(document) if document else None

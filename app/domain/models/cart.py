"""
Cart domain model.

Carts are transient: built per request from submitted form or session data.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping

from app.domain.value_objects.money import to_decimal, to_quantity
from app.domain.value_objects.product_reference import ProductRef


@dataclass(frozen=True)
class CartItem:
    """
    A cart line.

    Attributes:
        ref: Product reference (None if the submitted item carried no id)
        quantity: Positive integer quantity
        unit_price: Unit price, None when not submitted
        name: Display name submitted with the item
    """

    ref: ProductRef | None
    quantity: int = 1
    unit_price: Decimal | None = None
    name: str = ""

    @property
    def ref_label(self) -> str:
        return self.ref.value if self.ref else "UNKNOWN"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CartItem":
        """
        Create a cart item from a loosely typed mapping.

        Accepts `qty`/`quantity`, `price`/`unitPrice` (number or
        `{value, currency}`) and `name`/`title`.
        """
        quantity_raw = data.get("qty")
        if quantity_raw is None:
            quantity_raw = data.get("quantity")

        price_raw = data.get("price")
        if price_raw is None:
            price_raw = data.get("unitPrice")

        return cls(
            ref=ProductRef.from_item(data),
            quantity=to_quantity(quantity_raw, 1),
            unit_price=to_decimal(price_raw),
            name=str(data.get("name") or data.get("title") or ""),
        )


@dataclass(frozen=True)
class Cart:
    """Ordered collection of cart items."""

    items: tuple[CartItem, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    def refs(self) -> list[ProductRef]:
        """Unique product references in cart order."""
        return ProductRef.unique(item.ref for item in self.items)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "Cart":
        """Create a cart from `{"items": [...]}`; non-mapping entries are skipped."""
        raw_items = (data or {}).get("items") or []
        if not isinstance(raw_items, (list, tuple)):
            raw_items = []
        return cls(items=tuple(CartItem.from_dict(item) for item in raw_items if isinstance(item, Mapping)))

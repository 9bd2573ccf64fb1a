"""
Order domain model (read-only view).

Orders are created by the payment flow; this core only reads them to decide
who may see what.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Mapping

from app.domain.value_objects.money import to_decimal, to_quantity
from app.domain.value_objects.product_reference import ProductRef, id_value

USER_ID_FIELDS = ("userId", "user", "customerId", "buyerId")
SELLER_ID_FIELDS = ("businessId", "sellerId", "merchantId")
BUYER_BUSINESS_FIELDS = ("buyerBusinessId", "buyerBusiness", "buyerBusinessIdRef")


def _normalize_email(value: Any) -> str:
    return str(value or "").strip().lower()


def _collect_ids(doc: Mapping[str, Any], field_names: tuple[str, ...]) -> tuple[str, ...]:
    values = []
    for field_name in field_names:
        value = id_value(doc.get(field_name))
        if value and value not in values:
            values.append(value)
    return tuple(values)


def _collect_emails(doc: Mapping[str, Any]) -> tuple[str, ...]:
    shipping = doc.get("shipping") if isinstance(doc.get("shipping"), Mapping) else {}
    payer = doc.get("payer") if isinstance(doc.get("payer"), Mapping) else {}
    candidates = (
        doc.get("email"),
        doc.get("customerEmail"),
        doc.get("userEmail"),
        shipping.get("email"),
        payer.get("email"),
    )
    emails = []
    for candidate in candidates:
        email = _normalize_email(candidate)
        if email and email not in emails:
            emails.append(email)
    return tuple(emails)


def _order_currency(doc: Mapping[str, Any]) -> str:
    amount = doc.get("amount")
    if isinstance(amount, Mapping) and amount.get("currency"):
        return str(amount["currency"]).strip().upper()
    return str(doc.get("currency") or "USD").strip().upper()


@dataclass(frozen=True)
class OrderLineItem:
    """
    Order line as stored.

    Attributes:
        ref: Product reference, None for lines without an identifier
        name: Line display name
        quantity: Positive integer quantity
        unit_price: Unit price if stored
        raw: Original line document
    """

    ref: ProductRef | None
    name: str = ""
    quantity: int = 1
    unit_price: Decimal | None = None
    raw: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "OrderLineItem":
        price_raw = doc.get("price")
        if price_raw is None:
            price_raw = doc.get("unitPrice")
        return cls(
            ref=ProductRef.from_item(doc),
            name=str(doc.get("name") or doc.get("title") or ""),
            quantity=to_quantity(doc.get("qty") if doc.get("qty") is not None else doc.get("quantity")),
            unit_price=to_decimal(price_raw),
            raw=dict(doc),
        )

    def to_view(self) -> dict[str, Any]:
        """Stored line with `qty` and `price` replaced by the parsed values."""
        view = dict(self.raw)
        view["qty"] = self.quantity
        view["price"] = float(self.unit_price) if self.unit_price is not None else None
        return view


@dataclass(frozen=True)
class Order:
    """
    Order as seen by the visibility resolver.

    Attributes:
        id: Document id
        order_id: Payment-provider order id
        user_ids: Every user id stored on the order
        emails: Every buyer email stored on the order (lower-cased)
        seller_ids: Seller business ids stored at order level
        buyer_business_ids: Buying business ids
        currency: Order currency
        amount: Order total
        items: Line items
        raw: Original document
    """

    id: str = ""
    order_id: str = ""
    user_ids: tuple[str, ...] = ()
    emails: tuple[str, ...] = ()
    seller_ids: tuple[str, ...] = ()
    buyer_business_ids: tuple[str, ...] = ()
    currency: str = ""
    amount: Decimal | None = None
    items: tuple[OrderLineItem, ...] = ()
    raw: Mapping[str, Any] = field(default_factory=dict)

    def has_user(self, user_id: str) -> bool:
        return bool(user_id) and user_id in self.user_ids

    def has_email(self, email: str) -> bool:
        normalized = _normalize_email(email)
        return bool(normalized) and normalized in self.emails

    def has_seller(self, business_id: str) -> bool:
        return bool(business_id) and business_id in self.seller_ids

    def has_buyer_business(self, business_id: str) -> bool:
        return bool(business_id) and business_id in self.buyer_business_ids

    def to_view(self, items: list[OrderLineItem] | None = None) -> dict[str, Any]:
        """Serializable view of the order with the given (possibly filtered) items."""
        view = {key: value for key, value in self.raw.items() if key != "_id"}
        view["id"] = self.id
        view["currency"] = self.currency
        view["amount"] = float(self.amount) if self.amount is not None else 0.0
        view["items"] = [item.to_view() for item in (self.items if items is None else items)]
        return view

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Order":
        """Create an order from a document-store record."""
        raw_items = doc.get("items") or []
        if not isinstance(raw_items, (list, tuple)):
            raw_items = []

        return cls(
            id=id_value(doc.get("_id")),
            order_id=id_value(doc.get("orderId")),
            user_ids=_collect_ids(doc, USER_ID_FIELDS),
            emails=_collect_emails(doc),
            seller_ids=_collect_ids(doc, SELLER_ID_FIELDS),
            buyer_business_ids=_collect_ids(doc, BUYER_BUSINESS_FIELDS),
            currency=_order_currency(doc),
            amount=to_decimal(doc.get("amount")),
            items=tuple(OrderLineItem.from_document(item) for item in raw_items if isinstance(item, Mapping)),
            raw=dict(doc),
        )

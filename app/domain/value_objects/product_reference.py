"""
Canonical product reference.

Carts and orders reference products through several legacy field names
(customId, productId, pid, sku, _id). `ProductRef.from_item` is the only
place that knows those names; everything downstream works with a ProductRef.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping

# Orden de prioridad de los campos legacy
LEGACY_REFERENCE_FIELDS = ("customId", "productId", "pid", "sku", "_id")

_OBJECT_ID_RE = re.compile(r"^[a-fA-F0-9]{24}$")


def is_object_id_like(value: str) -> bool:
    """Check whether a string looks like a document-store ObjectId (24 hex chars)."""
    return bool(_OBJECT_ID_RE.match(value or ""))


def id_value(raw: Any) -> str:
    """
    Normalize an identifier that may be a string, number, ObjectId or an
    embedded document with `_id`/`id`.

    Returns:
        str: Identifier as string, "" when absent
    """
    if raw is None or raw == "":
        return ""
    if isinstance(raw, (str, int)) and not isinstance(raw, bool):
        return str(raw).strip()
    if isinstance(raw, Mapping):
        return id_value(raw.get("_id") or raw.get("id"))
    return str(raw).strip()


@dataclass(frozen=True)
class ProductRef:
    """
    Immutable reference to a product.

    Attributes:
        value: Identifier as submitted (custom id, SKU, product id or ObjectId hex)
    """

    value: str

    def __post_init__(self) -> None:
        normalized = str(self.value or "").strip()
        if not normalized:
            raise ValueError("ProductRef value cannot be empty")
        object.__setattr__(self, "value", normalized)

    @property
    def is_object_id(self) -> bool:
        """True when the reference can be matched against the document `_id`."""
        return is_object_id_like(self.value)

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_item(cls, item: Mapping[str, Any] | None) -> "ProductRef | None":
        """
        Build a reference from a cart/order item with legacy field names.

        Returns:
            ProductRef | None: None when the item carries no identifier
        """
        if not item:
            return None
        for field_name in LEGACY_REFERENCE_FIELDS:
            value = id_value(item.get(field_name))
            if value:
                return cls(value)
        return None

    @staticmethod
    def unique(refs: Iterable["ProductRef | None"]) -> list["ProductRef"]:
        """De-duplicate references preserving first-seen order and dropping None."""
        seen: dict[str, ProductRef] = {}
        for ref in refs:
            if ref is not None and ref.value not in seen:
                seen[ref.value] = ref
        return list(seen.values())

"""
Product domain model (read-only view used by checkout and order services).

Represents the subset of a catalogue product this core needs: identifiers,
owning business and shipping specification.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

from app.domain.value_objects.measurements import to_centimeters, to_kilograms
from app.domain.value_objects.product_reference import ProductRef, id_value

# Campos que distintos esquemas usan para el negocio dueño del producto
OWNER_BUSINESS_FIELDS = ("businessId", "sellerId", "merchantId", "seller", "ownerBusiness", "business")


@dataclass(frozen=True)
class ProductShippingSpec:
    """
    Shipping measurements of a product as catalogued.

    Attributes:
        weight_value: Weight in `weight_unit`
        weight_unit: kg, g, lb or oz
        length: Length in `dimension_unit`
        width: Width in `dimension_unit`
        height: Height in `dimension_unit`
        dimension_unit: cm or in
        ship_separately: Catalogued but not used for consolidation yet
        fragile: Fragile items travel in their own parcel
        packaging_hint: Free text for the warehouse
    """

    weight_value: Any = None
    weight_unit: str = "kg"
    length: Any = None
    width: Any = None
    height: Any = None
    dimension_unit: str = "cm"
    ship_separately: bool = False
    fragile: bool = False
    packaging_hint: str = ""

    @property
    def weight_kg(self) -> float | None:
        """Unit weight in kilograms (None if missing)."""
        return to_kilograms(self.weight_value, self.weight_unit)

    @property
    def length_cm(self) -> float | None:
        return to_centimeters(self.length, self.dimension_unit)

    @property
    def width_cm(self) -> float | None:
        return to_centimeters(self.width, self.dimension_unit)

    @property
    def height_cm(self) -> float | None:
        return to_centimeters(self.height, self.dimension_unit)

    def missing_measurements(self) -> list[str]:
        """
        List the measurements that cannot be converted to kg/cm.

        Returns:
            list[str]: Subset of ["weight", "length", "width", "height"]
        """
        problems = []
        if self.weight_kg is None:
            problems.append("weight")
        if self.length_cm is None:
            problems.append("length")
        if self.width_cm is None:
            problems.append("width")
        if self.height_cm is None:
            problems.append("height")
        return problems

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None) -> "ProductShippingSpec":
        """Create a shipping spec from the product document's `shipping` field."""
        data = data or {}
        weight = data.get("weight") or {}
        dimensions = data.get("dimensions") or {}
        return cls(
            weight_value=weight.get("value"),
            weight_unit=weight.get("unit") or "kg",
            length=dimensions.get("length"),
            width=dimensions.get("width"),
            height=dimensions.get("height"),
            dimension_unit=dimensions.get("unit") or "cm",
            ship_separately=bool(data.get("shipSeparately", False)),
            fragile=bool(data.get("fragile", False)),
            packaging_hint=str(data.get("packagingHint") or ""),
        )


@dataclass(frozen=True)
class Product:
    """
    Catalogue product as seen by checkout and order visibility.

    Attributes:
        id: Document id (`_id`) as string
        custom_id: Public custom id used by carts
        product_id: Alternative product id some catalogues use
        sku: Stock keeping unit
        name: Display name
        category: Category slug
        business_id: Owning (seller) business id
        shipping: Shipping measurements
    """

    id: str = ""
    custom_id: str = ""
    product_id: str = ""
    sku: str = ""
    name: str = ""
    category: str = ""
    business_id: str = ""
    shipping: ProductShippingSpec = field(default_factory=ProductShippingSpec)

    @property
    def display_name(self) -> str:
        return self.name or self.custom_id or self.id or "UNKNOWN"

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "Product":
        """Create a product from a document-store record."""
        business_id = ""
        for field_name in OWNER_BUSINESS_FIELDS:
            business_id = id_value(doc.get(field_name))
            if business_id:
                break

        return cls(
            id=id_value(doc.get("_id")),
            custom_id=id_value(doc.get("customId")),
            product_id=id_value(doc.get("productId")),
            sku=id_value(doc.get("sku")),
            name=str(doc.get("name") or ""),
            category=str(doc.get("category") or "").strip().lower(),
            business_id=business_id,
            shipping=ProductShippingSpec.from_dict(doc.get("shipping")),
        )


class ProductIndex:
    """
    Resolves product references against a batch of catalogue products.

    ObjectId-like references match the document `_id` only. Any other
    reference is tried against customId, then productId, then sku; the first
    identifier kind with a match decides. A reference that still matches
    several products is ambiguous and resolves to nothing.
    """

    ID_FIELDS = ("custom_id", "product_id", "sku")

    def __init__(self, products: list[Product]):
        self._by_field: dict[str, dict[str, list[Product]]] = {
            name: {} for name in ("id",) + self.ID_FIELDS
        }
        for product in products:
            for name, by_value in self._by_field.items():
                value = getattr(product, name)
                if not value:
                    continue
                matches = by_value.setdefault(value, [])
                if product not in matches:
                    matches.append(product)

    def candidates(self, ref: ProductRef) -> list[Product]:
        """Products matched by the highest-priority identifier kind."""
        fields = ("id",) if ref.is_object_id else self.ID_FIELDS
        for name in fields:
            matches = self._by_field[name].get(ref.value)
            if matches:
                return list(matches)
        return []

    def is_ambiguous(self, ref: ProductRef) -> bool:
        return len(self.candidates(ref)) > 1

    def resolve(self, ref: ProductRef | None) -> Product | None:
        """The single product a reference points to, None if unmatched or ambiguous."""
        if ref is None:
            return None
        matches = self.candidates(ref)
        return matches[0] if len(matches) == 1 else None

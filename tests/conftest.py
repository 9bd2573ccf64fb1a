"""
Fixtures compartidos: lookups en memoria, carrier falso y configuración de prueba.
"""

from typing import Any

import pytest

from app.core.config import Settings
from app.domain.models import Product
from app.services.shipping import CarrierResponse


class FakeProductLookup:
    """Catálogo en memoria que responde como ProductRepository."""

    def __init__(self, documents: list[dict[str, Any]] | None = None):
        self.products = [Product.from_document(doc) for doc in documents or []]
        self.calls: list[list[str]] = []

    async def find_by_refs(self, refs):
        values = [ref.value for ref in refs]
        self.calls.append(values)
        return [
            product
            for product in self.products
            if {product.id, product.custom_id, product.product_id, product.sku} & set(values)
        ]


class FakeBusinessLookup:
    def __init__(self, businesses: dict[str, dict[str, Any]] | None = None):
        self.businesses = businesses or {}
        self.calls: list[str] = []

    async def get_by_id(self, business_id):
        self.calls.append(business_id)
        return self.businesses.get(business_id)


class FakeOrderLookup:
    """Órdenes en memoria indexadas por _id y por orderId."""

    def __init__(self, documents: list[dict[str, Any]] | None = None):
        self.documents = documents or []
        self.calls: list[tuple[str, str]] = []

    async def find_by_id(self, order_id):
        self.calls.append(("find_by_id", order_id))
        return next((doc for doc in self.documents if str(doc.get("_id")) == order_id), None)

    async def find_by_order_id(self, order_id):
        self.calls.append(("find_by_order_id", order_id))
        return next((doc for doc in self.documents if doc.get("orderId") == order_id), None)


class FakeCarrier:
    """Carrier que devuelve una respuesta fija y guarda los payloads."""

    def __init__(self, status: int = 201, body: dict[str, Any] | None = None):
        self.response = CarrierResponse(status=status, body=body if body is not None else {})
        self.payloads: list[dict[str, Any]] = []

    async def create_customs_declaration(self, payload):
        self.payloads.append(payload)
        return self.response


def shipping_doc(weight=1, unit="kg", length=10, width=10, height=10, dim_unit="cm", fragile=False):
    return {
        "weight": {"value": weight, "unit": unit},
        "dimensions": {"length": length, "width": width, "height": height, "unit": dim_unit},
        "fragile": fragile,
    }


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ENVIRONMENT="testing",
        DEBUG=True,
        SHIPPO_TOKEN="shippo_test_token",
        SHIPPO_FROM_NAME="Unic Store",
        SHIPPO_FROM_STREET1="1 Long Street",
        SHIPPO_FROM_CITY="Cape Town",
        SHIPPO_FROM_ZIP="8001",
        SHIPPO_FROM_COUNTRY="za",
        SHIPPO_FROM_PHONE="+27210000000",
        CHECKOUT_CURRENCY="USD",
        FX_PROVIDER="frankfurter",
    )


@pytest.fixture
def catalogue():
    """Catálogo con un producto normal, uno frágil, uno sin medidas y dos de segunda mano."""
    return FakeProductLookup(
        [
            {
                "_id": "64b7f0c2a1b2c3d4e5f60001",
                "customId": "SHIRT-1",
                "name": "Linen Shirt",
                "category": "clothes",
                "businessId": "biz-a",
                "shipping": shipping_doc(weight=2, length=10, width=10, height=10),
            },
            {
                "_id": "64b7f0c2a1b2c3d4e5f60002",
                "customId": "VASE-1",
                "name": "Glass Vase",
                "category": "home",
                "businessId": "biz-b",
                "shipping": shipping_doc(weight=500, unit="g", length=5, width=5, height=5, fragile=True),
            },
            {
                "_id": "64b7f0c2a1b2c3d4e5f60003",
                "customId": "HAT-1",
                "name": "Straw Hat",
                "category": "clothes",
                "businessId": "biz-a",
                "shipping": {"weight": {"value": 0.3, "unit": "kg"}},
            },
            {
                "_id": "64b7f0c2a1b2c3d4e5f60004",
                "customId": "JACKET-2H",
                "name": "Used Jacket",
                "category": "second-hand-clothes",
                "businessId": "biz-seller",
                "shipping": shipping_doc(weight=1),
            },
            {
                "_id": "64b7f0c2a1b2c3d4e5f60005",
                "customId": "LAMP-2H",
                "name": "Old Lamp",
                "category": "uncategorized-second-hand-things",
                "businessId": "biz-seller",
                "shipping": shipping_doc(weight=1.5),
            },
        ]
    )


@pytest.fixture
def product_lookup_factory():
    return FakeProductLookup


@pytest.fixture
def business_lookup_factory():
    return FakeBusinessLookup


@pytest.fixture
def order_lookup_factory():
    return FakeOrderLookup


@pytest.fixture
def carrier_factory():
    return FakeCarrier


@pytest.fixture
def shipping_spec():
    """Constructor del campo `shipping` de un producto."""
    return shipping_doc

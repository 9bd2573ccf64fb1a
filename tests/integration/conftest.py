"""
Fixtures de integración: la aplicación real con servicios en memoria en app.state.

El lifespan no se ejecuta (TestClient sin context manager), así que no se abre
ni MongoDB ni la sesión HTTP.
"""

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.main import create_application
from app.services.fx import FxRateCache, FxRateResolver

ORDER_OID = "64b7f0c2a1b2c3d4e5f6aaaa"

SELLER = {
    "name": "Vintage Corner",
    "countryCode": "ZA",
    "addressLine1": "22 Bree Street",
    "city": "Cape Town",
    "postalCode": "8000",
    "phone": "+27211111111",
}


class StaticFxProvider:
    name = "frankfurter"

    def __init__(self, rate: float):
        self.rate = rate
        self.calls = 0

    async def fetch_rate(self, from_currency, to_currency):
        self.calls += 1
        return self.rate


@pytest.fixture
def fx_provider():
    return StaticFxProvider(18.5)


@pytest.fixture
def carrier(carrier_factory):
    return carrier_factory(201, {"object_id": "cd_abc", "object_status": "SUCCESS"})


@pytest.fixture
def order_lookup(order_lookup_factory):
    return order_lookup_factory(
        [
            {
                "_id": ObjectId(ORDER_OID),
                "orderId": "PAYPAL-123",
                "userId": ObjectId("64b7f0c2a1b2c3d4e5f6bbbb"),
                "email": "buyer@example.com",
                "amount": {"value": "35.00", "currency": "USD"},
                "items": [
                    {"customId": "SHIRT-1", "qty": 1, "price": 20},
                    {"customId": "VASE-1", "qty": 1, "price": 15},
                ],
            }
        ]
    )


@pytest.fixture
def app(settings, catalogue, business_lookup_factory, order_lookup, carrier, fx_provider):
    application = create_application()
    fx_cache = FxRateCache(ttl_seconds=600)

    application.state.settings = settings
    application.state.product_lookup = catalogue
    application.state.business_lookup = business_lookup_factory({"biz-seller": SELLER})
    application.state.order_lookup = order_lookup
    application.state.carrier = carrier
    application.state.fx_cache = fx_cache
    application.state.fx_resolver = FxRateResolver(fx_provider, fx_cache, "frankfurter")
    return application


@pytest.fixture
def client(app):
    return TestClient(app)

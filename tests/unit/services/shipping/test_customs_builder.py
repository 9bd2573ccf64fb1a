"""Tests unitarios para CustomsDeclarationBuilder."""

import pytest

from app.domain.models import Cart
from app.services.shipping import CustomsDeclarationBuilder
from app.services.shipping.customs_builder import build_exporter_reference, provider_message
from app.utils.error_handler import CarrierAPIException, ErrorCode, ShippingException, ValidationException

FIXED_CLOCK = 1_700_000_000.7


def _cart(*items):
    return Cart.from_dict({"items": list(items)})


@pytest.fixture
def make_builder(catalogue, carrier_factory, settings):
    def factory(carrier=None, product_lookup=None):
        return CustomsDeclarationBuilder(
            product_lookup or catalogue,
            carrier or carrier_factory(201, {"object_id": "cd_123", "object_status": "SUCCESS"}),
            settings,
            clock=lambda: FIXED_CLOCK,
        )

    return factory


class TestExporterReference:
    """Tests para la referencia del exportador."""

    def test_format(self):
        """Debe usar PREFIJO-PAIS-timestamp."""
        assert build_exporter_reference("UNIC", "us", 1700000000) == "UNIC-US-1700000000"

    def test_missing_country_uses_xx(self):
        """Debe usar XX si no hay país destino."""
        assert build_exporter_reference("UNIC", None, 1700000000) == "UNIC-XX-1700000000"

    def test_is_capped_at_20_chars(self):
        """Debe truncar a 20 caracteres."""
        reference = build_exporter_reference("UNICMARKET", "DEU", 1700000000)
        assert reference == "UNICMARKET-DE-170000"
        assert len(reference) == 20


class TestProviderMessage:
    """Tests para la extracción del mensaje del carrier."""

    def test_prefers_messages(self):
        """Debe serializar la lista de mensajes."""
        assert provider_message({"messages": [{"text": "bad"}], "detail": "x"}) == '[{"text": "bad"}]'

    def test_falls_back_to_detail_and_body(self):
        """Debe usar detail, luego message, luego el cuerpo completo."""
        assert provider_message({"detail": "Invalid token"}) == "Invalid token"
        assert provider_message({"message": "oops"}) == "oops"
        assert provider_message({"code": 1}) == '{"code": 1}'


class TestCustomsDeclarationBuild:
    """Tests para la construcción de la declaración."""

    @pytest.mark.asyncio
    async def test_builds_one_line_per_item(self, make_builder):
        """Debe crear una línea por ítem con peso neto y valor por cantidad."""
        declaration = await make_builder().build(
            _cart(
                {"customId": "SHIRT-1", "qty": 2, "price": "19.99"},
                {"customId": "VASE-1", "qty": 1, "price": {"value": 5, "currency": "USD"}},
            ),
            "us",
        )

        payload = declaration.to_carrier_dict()
        assert payload["certify"] is True
        assert payload["certify_signer"] == "Unic Store"
        assert payload["contents_type"] == "MERCHANDISE"
        assert payload["non_delivery_option"] == "RETURN"
        assert payload["incoterm"] == "DDU"
        assert payload["eel_pfc"] == "NOEEI_30_37_a"
        assert payload["exporter_reference"] == "UNIC-US-1700000000"
        assert payload["items"] == [
            {
                "description": "Linen Shirt",
                "quantity": 2,
                "net_weight": "4",
                "mass_unit": "kg",
                "value_amount": "39.98",
                "value_currency": "USD",
                "origin_country": "ZA",
            },
            {
                "description": "Glass Vase",
                "quantity": 1,
                "net_weight": "0.5",
                "mass_unit": "kg",
                "value_amount": "5",
                "value_currency": "USD",
                "origin_country": "ZA",
            },
        ]

    @pytest.mark.asyncio
    async def test_description_is_truncated(self, make_builder, product_lookup_factory, shipping_spec):
        """Debe truncar la descripción a 50 caracteres."""
        lookup = product_lookup_factory([{"customId": "LONG", "name": "X" * 80, "shipping": shipping_spec()}])

        declaration = await make_builder(product_lookup=lookup).build(_cart({"customId": "LONG", "price": 1}), "US")

        assert declaration.items[0].description == "X" * 50

    @pytest.mark.asyncio
    async def test_empty_cart(self, make_builder, carrier_factory):
        """Debe fallar con CART_EMPTY sin llamar al carrier."""
        carrier = carrier_factory()

        with pytest.raises(ShippingException) as exc_info:
            await make_builder(carrier=carrier).create(Cart(), "US")

        assert exc_info.value.error_code is ErrorCode.CART_EMPTY
        assert carrier.payloads == []

    @pytest.mark.asyncio
    async def test_missing_measurements_block_submission(self, make_builder, carrier_factory):
        """Debe aplicar la validación de envío antes de contactar al carrier."""
        carrier = carrier_factory()

        with pytest.raises(ShippingException) as exc_info:
            await make_builder(carrier=carrier).create(_cart({"customId": "HAT-1", "price": 3}), "US")

        assert exc_info.value.error_code is ErrorCode.PRODUCT_SHIPPING_MISSING
        assert carrier.payloads == []

    @pytest.mark.asyncio
    async def test_missing_price_is_a_validation_error(self, make_builder):
        """Debe rechazar ítems sin precio unitario."""
        with pytest.raises(ValidationException) as exc_info:
            await make_builder().build(_cart({"customId": "SHIRT-1", "qty": 1}), "US")

        assert exc_info.value.field == "items[0].price"

    @pytest.mark.asyncio
    async def test_huge_price_is_a_validation_error(self, make_builder):
        """Debe rechazar precios que exceden la precisión decimal."""
        with pytest.raises(ValidationException) as exc_info:
            await make_builder().build(_cart({"customId": "SHIRT-1", "price": "1e30"}), "US")

        assert exc_info.value.field == "items[0].price"

    @pytest.mark.asyncio
    async def test_huge_quantity_is_a_validation_error(self, make_builder):
        """Debe rechazar cantidades cuyo peso excede la precisión decimal."""
        with pytest.raises(ValidationException) as exc_info:
            await make_builder().build(_cart({"customId": "SHIRT-1", "qty": "1e30", "price": 1}), "US")

        assert exc_info.value.field == "items[0].qty"


class TestCustomsDeclarationSubmit:
    """Tests para el envío al carrier."""

    @pytest.mark.asyncio
    async def test_returns_object_id(self, make_builder, carrier_factory):
        """Debe devolver el object_id y enviar el payload construido."""
        carrier = carrier_factory(201, {"object_id": "cd_123", "object_status": "SUCCESS"})

        object_id = await make_builder(carrier=carrier).create(_cart({"customId": "SHIRT-1", "price": 10}), "DE")

        assert object_id == "cd_123"
        assert len(carrier.payloads) == 1
        assert carrier.payloads[0]["exporter_reference"] == "UNIC-DE-1700000000"

    @pytest.mark.asyncio
    async def test_non_2xx_response(self, make_builder, carrier_factory):
        """Debe fallar con SHIPPO_CUSTOMS_FAILED incluyendo el mensaje del carrier."""
        carrier = carrier_factory(400, {"messages": [{"text": "Invalid eel_pfc"}]})

        with pytest.raises(CarrierAPIException) as exc_info:
            await make_builder(carrier=carrier).create(_cart({"customId": "SHIRT-1", "price": 10}), "DE")

        exc = exc_info.value
        assert exc.error_code is ErrorCode.SHIPPO_CUSTOMS_FAILED
        assert exc.api_response_code == 400
        assert "Invalid eel_pfc" in exc.message

    @pytest.mark.asyncio
    async def test_object_status_error(self, make_builder, carrier_factory):
        """Debe fallar con SHIPPO_CUSTOMS_OBJECT_ERROR si object_status no es SUCCESS."""
        carrier = carrier_factory(201, {"object_id": "cd_1", "object_status": "ERROR", "messages": ["bad item"]})

        with pytest.raises(CarrierAPIException) as exc_info:
            await make_builder(carrier=carrier).create(_cart({"customId": "SHIRT-1", "price": 10}), "DE")

        assert exc_info.value.error_code is ErrorCode.SHIPPO_CUSTOMS_OBJECT_ERROR

    @pytest.mark.asyncio
    async def test_missing_object_id(self, make_builder, carrier_factory):
        """Debe fallar si el carrier no devuelve object_id."""
        carrier = carrier_factory(201, {})

        with pytest.raises(CarrierAPIException) as exc_info:
            await make_builder(carrier=carrier).create(_cart({"customId": "SHIRT-1", "price": 10}), "DE")

        assert exc_info.value.error_code is ErrorCode.SHIPPO_CUSTOMS_FAILED

"""Tests unitarios para la identidad de sesión y el modelo de orden."""

from decimal import Decimal

from bson import ObjectId

from app.domain.models import IdentityKind, Order, SessionIdentity


class TestSessionIdentity:
    """Tests para SessionIdentity.from_session."""

    def test_admin_wins(self):
        """Debe priorizar admin sobre user y business."""
        identity = SessionIdentity.from_session({"admin": {"name": "root"}, "user": {"_id": "u1"}})
        assert identity.kind is IdentityKind.ADMIN
        assert identity.flags() == {"admin": True, "user": False, "business": False}

    def test_user_with_id_and_email(self):
        """Debe leer id y email del usuario (email en minúsculas)."""
        identity = SessionIdentity.from_session({"user": {"_id": "u1", "email": " Ana@Example.COM "}})

        assert identity.is_user
        assert identity.subject_id == "u1"
        assert identity.email == "ana@example.com"

    def test_user_with_only_email(self):
        """Debe aceptar un usuario identificado solo por email."""
        identity = SessionIdentity.from_session({"user": {"email": "a@b.co"}})
        assert identity.is_user
        assert identity.subject_id == ""

    def test_user_wins_over_business(self):
        """Debe priorizar user sobre business."""
        identity = SessionIdentity.from_session({"user": {"id": "u1"}, "business": {"_id": "b1"}})
        assert identity.is_user

    def test_business_from_mapping_and_legacy_id(self):
        """Debe aceptar business embebido y businessId legado."""
        assert SessionIdentity.from_session({"business": {"_id": "b1"}}).subject_id == "b1"
        assert SessionIdentity.from_session({"businessId": "b2"}).subject_id == "b2"

    def test_empty_session_is_anonymous(self):
        """Debe retornar identidad anónima si no hay sesión."""
        assert SessionIdentity.from_session(None).is_anonymous
        assert SessionIdentity.from_session({}).is_anonymous
        assert SessionIdentity.from_session({"user": {}}).is_anonymous


class TestOrder:
    """Tests para Order.from_document."""

    def _document(self):
        return {
            "_id": ObjectId("64b7f0c2a1b2c3d4e5f6aaaa"),
            "orderId": "PAYPAL-123",
            "userId": ObjectId("64b7f0c2a1b2c3d4e5f6bbbb"),
            "customerEmail": "Buyer@Example.com",
            "payer": {"email": "payer@example.com"},
            "sellerId": "biz-a",
            "buyerBusinessId": {"_id": "biz-buyer"},
            "amount": {"value": "42.50", "currency": "zar"},
            "items": [
                {"customId": "SHIRT-1", "qty": 2, "price": 10},
                {"name": "No id line"},
                "garbage",
            ],
        }

    def test_collects_identities(self):
        """Debe reunir ids de usuario, emails, vendedores y negocios compradores."""
        order = Order.from_document(self._document())

        assert order.id == "64b7f0c2a1b2c3d4e5f6aaaa"
        assert order.order_id == "PAYPAL-123"
        assert order.has_user("64b7f0c2a1b2c3d4e5f6bbbb")
        assert order.has_email("BUYER@example.com")
        assert order.has_email("payer@example.com")
        assert order.has_seller("biz-a")
        assert order.has_buyer_business("biz-buyer")

    def test_empty_values_never_match(self):
        """Debe rechazar ids y emails vacíos."""
        order = Order.from_document(self._document())
        assert not order.has_user("")
        assert not order.has_email("")
        assert not order.has_seller("")

    def test_amount_and_currency(self):
        """Debe leer monto y moneda de amount."""
        order = Order.from_document(self._document())
        assert order.amount == Decimal("42.50")
        assert order.currency == "ZAR"

    def test_currency_defaults_to_usd(self):
        """Debe usar USD si la orden no declara moneda."""
        assert Order.from_document({"_id": "x"}).currency == "USD"

    def test_items_skip_non_mappings(self):
        """Debe ignorar líneas que no sean objetos."""
        order = Order.from_document(self._document())
        assert len(order.items) == 2
        assert order.items[0].quantity == 2
        assert order.items[1].ref is None

    def test_view_replaces_internal_id(self):
        """Debe exponer id como string sin _id."""
        order = Order.from_document(self._document())
        view = order.to_view(order.items[:1])

        assert "_id" not in view
        assert view["id"] == "64b7f0c2a1b2c3d4e5f6aaaa"
        assert view["amount"] == 42.5
        assert view["items"] == [{"customId": "SHIRT-1", "qty": 2, "price": 10}]

    def test_view_normalizes_line_quantity_and_price(self):
        """Debe exponer qty y price ya interpretados junto a los campos originales."""
        order = Order.from_document(
            {
                "_id": "x",
                "items": [
                    {"customId": "A", "quantity": "3", "unitPrice": {"value": "9.50", "currency": "USD"}},
                    {"customId": "B", "qty": "0"},
                ],
            }
        )

        first, second = order.to_view()["items"]

        assert first["qty"] == 3
        assert first["price"] == 9.5
        assert first["quantity"] == "3"
        assert first["unitPrice"] == {"value": "9.50", "currency": "USD"}
        assert second["qty"] == 1
        assert second["price"] is None

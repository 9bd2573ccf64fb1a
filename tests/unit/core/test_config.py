"""Tests unitarios para la configuración de la aplicación."""

import pytest
from pydantic import ValidationError

from app.core.config import (
    FX_CACHE_TTL_DEFAULT_MS,
    FX_CACHE_TTL_MAX_MS,
    FX_CACHE_TTL_MIN_MS,
    FX_TIMEOUT_DEFAULT_MS,
    FX_TIMEOUT_MAX_MS,
    FX_TIMEOUT_MIN_MS,
    Settings,
)


def _settings(**overrides):
    return Settings(_env_file=None, **overrides)


class TestFxSettings:
    """Tests para la configuración FX."""

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (1000, FX_TIMEOUT_MIN_MS),
            (60_000, FX_TIMEOUT_MAX_MS),
            ("5000", 5000),
            ("abc", FX_TIMEOUT_DEFAULT_MS),
            ("", FX_TIMEOUT_DEFAULT_MS),
        ],
    )
    def test_timeout_is_clamped(self, raw, expected):
        """Debe recortar el timeout FX a [3s, 15s]."""
        assert _settings(FX_TIMEOUT_MS=raw).FX_TIMEOUT_MS == expected

    @pytest.mark.parametrize(
        "raw, expected",
        [
            (1000, FX_CACHE_TTL_MIN_MS),
            (10**9, FX_CACHE_TTL_MAX_MS),
            ("nope", FX_CACHE_TTL_DEFAULT_MS),
        ],
    )
    def test_cache_ttl_is_clamped(self, raw, expected):
        """Debe recortar el TTL del caché FX a [60s, 6h]."""
        assert _settings(FX_CACHE_TTL_MS=raw).FX_CACHE_TTL_MS == expected

    def test_provider_resolution(self):
        """Debe resolver el proveedor según FX_PROVIDER y FX_API_BASE."""
        assert _settings(FX_PROVIDER="", FX_API_BASE="").FX_PROVIDER == "frankfurter"
        assert _settings(FX_PROVIDER="", FX_API_BASE="https://fx.example.com/").FX_PROVIDER == "custom"
        assert _settings(FX_PROVIDER=" Disabled ").FX_PROVIDER == "off"
        assert _settings(FX_PROVIDER="None").FX_PROVIDER == "off"
        assert _settings(FX_PROVIDER="Oanda").FX_PROVIDER == "oanda"

    def test_base_url_trailing_slash(self):
        """Debe quitar la barra final de las URLs base."""
        assert _settings(FX_API_BASE=" https://fx.example.com/ ").FX_API_BASE == "https://fx.example.com"

    def test_seconds_helpers(self):
        """Debe exponer timeouts y TTL en segundos."""
        settings = _settings(FX_TIMEOUT_MS=8000, FX_CACHE_TTL_MS=600_000)
        assert settings.fx_timeout_seconds == 8
        assert settings.fx_cache_ttl_seconds == 600


class TestCheckoutSettings:
    """Tests para la configuración de checkout y envíos."""

    def test_checkout_currency_is_normalized(self):
        """Debe normalizar la moneda de checkout."""
        assert _settings(CHECKOUT_CURRENCY=" zar ").CHECKOUT_CURRENCY == "ZAR"

    def test_invalid_checkout_currency(self):
        """Debe rechazar monedas de checkout inválidas."""
        with pytest.raises(ValidationError):
            _settings(CHECKOUT_CURRENCY="RAND")

    def test_customs_signer_falls_back_to_brand(self):
        """Debe usar BRAND_NAME si no hay nombre de remitente."""
        assert _settings(SHIPPO_FROM_NAME="", BRAND_NAME="Unic").customs_signer == "Unic"
        assert _settings(SHIPPO_FROM_NAME="Ana", BRAND_NAME="Unic").customs_signer == "Ana"

    def test_default_origin_address(self, settings):
        """Debe construir la dirección de origen sin campos opcionales vacíos."""
        address = settings.get_default_origin_address()

        assert address["name"] == "Unic Store"
        assert address["country"] == "ZA"
        assert "state" not in address
        assert "email" not in address

    def test_invalid_environment(self):
        """Debe rechazar entornos desconocidos."""
        with pytest.raises(ValidationError):
            _settings(ENVIRONMENT="qa")

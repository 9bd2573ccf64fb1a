"""Tests unitarios para los proveedores FX (sesión aiohttp simulada)."""

import asyncio

import aiohttp
import pytest

from app.core.config import Settings
from app.services.fx import CustomFxProvider, FrankfurterFxProvider, build_fx_provider
from app.services.fx.providers import FRANKFURTER_HOSTS, parse_rate
from app.utils.error_handler import ErrorCode, FxException


class FakeResponse:
    def __init__(self, status, body):
        self.status = status
        self.body = body

    async def json(self, content_type=None):
        if isinstance(self.body, Exception):
            raise self.body
        return self.body


class FakeRequestContext:
    def __init__(self, outcome):
        self.outcome = outcome

    async def __aenter__(self):
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome

    async def __aexit__(self, exc_type, exc, tb):
        return False


class FakeSession:
    """Sesión que responde en orden y registra cada GET."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.requests: list[tuple[str, dict]] = []

    def get(self, url, **kwargs):
        self.requests.append((url, kwargs))
        return FakeRequestContext(self.outcomes.pop(0))


class TestParseRate:
    """Tests para la validación de tasas del proveedor."""

    def test_valid_rates(self):
        """Debe aceptar números y strings numéricos positivos."""
        assert parse_rate(18.5) == 18.5
        assert parse_rate("0.055") == 0.055

    @pytest.mark.parametrize("raw", [None, 0, -2, "abc", float("nan"), float("inf"), True])
    def test_invalid_rates(self, raw):
        """Debe rechazar tasas inválidas."""
        assert parse_rate(raw) is None


class TestFrankfurterFxProvider:
    """Tests para el proveedor Frankfurter."""

    @pytest.mark.asyncio
    async def test_reads_rate_from_primary_host(self):
        """Debe consultar base/symbols en el host principal."""
        session = FakeSession(FakeResponse(200, {"base": "USD", "rates": {"ZAR": 18.5}}))
        provider = FrankfurterFxProvider(session, timeout_seconds=8)

        assert await provider.fetch_rate("USD", "ZAR") == 18.5
        url, kwargs = session.requests[0]
        assert url == FRANKFURTER_HOSTS[0]
        assert kwargs["params"] == {"base": "USD", "symbols": "ZAR"}
        assert kwargs["timeout"].total == 8

    @pytest.mark.asyncio
    async def test_falls_back_on_transport_error(self):
        """Debe probar el host alternativo si el principal falla."""
        session = FakeSession(
            aiohttp.ClientConnectionError("connection refused"),
            FakeResponse(200, {"rates": {"ZAR": 18.4}}),
        )
        provider = FrankfurterFxProvider(session, timeout_seconds=8)

        assert await provider.fetch_rate("USD", "ZAR") == 18.4
        assert [url for url, _ in session.requests] == list(FRANKFURTER_HOSTS)

    @pytest.mark.asyncio
    async def test_falls_back_on_bad_status(self):
        """Debe probar el host alternativo ante una respuesta no 2xx."""
        session = FakeSession(FakeResponse(503, {}), FakeResponse(200, {"rates": {"ZAR": 18.4}}))
        provider = FrankfurterFxProvider(session, timeout_seconds=8)

        assert await provider.fetch_rate("USD", "ZAR") == 18.4

    @pytest.mark.asyncio
    async def test_all_hosts_fail(self):
        """Debe fallar con FX_LOOKUP_FAILED si ningún host responde una tasa válida."""
        session = FakeSession(asyncio.TimeoutError(), FakeResponse(200, {"rates": {}}))
        provider = FrankfurterFxProvider(session, timeout_seconds=8)

        with pytest.raises(FxException) as exc_info:
            await provider.fetch_rate("USD", "ZAR")

        assert exc_info.value.error_code is ErrorCode.FX_LOOKUP_FAILED
        assert exc_info.value.provider == "frankfurter"

    @pytest.mark.asyncio
    async def test_unparseable_body_counts_as_empty(self):
        """Debe tratar un JSON inválido como cuerpo vacío."""
        session = FakeSession(FakeResponse(200, ValueError("bad json")), FakeResponse(200, ["not", "an", "object"]))
        provider = FrankfurterFxProvider(session, timeout_seconds=8)

        with pytest.raises(FxException):
            await provider.fetch_rate("USD", "ZAR")


class TestCustomFxProvider:
    """Tests para el proveedor propio."""

    @pytest.mark.asyncio
    async def test_reads_top_level_rate(self):
        """Debe llamar {base}/convert con from/to."""
        session = FakeSession(FakeResponse(200, {"rate": "0.92"}))
        provider = CustomFxProvider(session, timeout_seconds=5, base_url="https://fx.example.com/")

        assert await provider.fetch_rate("USD", "EUR") == 0.92
        url, kwargs = session.requests[0]
        assert url == "https://fx.example.com/convert"
        assert kwargs["params"] == {"from": "USD", "to": "EUR"}

    @pytest.mark.asyncio
    async def test_reads_nested_rate(self):
        """Debe aceptar la tasa dentro de data."""
        session = FakeSession(FakeResponse(200, {"data": {"rate": 1.08}}))
        provider = CustomFxProvider(session, timeout_seconds=5, base_url="https://fx.example.com")

        assert await provider.fetch_rate("EUR", "USD") == 1.08

    @pytest.mark.asyncio
    async def test_not_configured(self):
        """Debe fallar con FX_NOT_CONFIGURED sin URL base y sin hacer requests."""
        session = FakeSession()
        provider = CustomFxProvider(session, timeout_seconds=5, base_url="")

        with pytest.raises(FxException) as exc_info:
            await provider.fetch_rate("USD", "EUR")

        assert exc_info.value.error_code is ErrorCode.FX_NOT_CONFIGURED
        assert session.requests == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "outcome",
        [
            FakeResponse(500, {"rate": 1.1}),
            FakeResponse(200, {"rate": "abc"}),
            FakeResponse(200, {}),
            aiohttp.ClientPayloadError("truncated"),
        ],
    )
    async def test_lookup_failures(self, outcome):
        """Debe fallar con FX_LOOKUP_FAILED ante errores HTTP, de red o tasas inválidas."""
        provider = CustomFxProvider(FakeSession(outcome), timeout_seconds=5, base_url="https://fx.example.com")

        with pytest.raises(FxException) as exc_info:
            await provider.fetch_rate("USD", "EUR")

        assert exc_info.value.error_code is ErrorCode.FX_LOOKUP_FAILED


class TestBuildFxProvider:
    """Tests para la selección del proveedor por configuración."""

    def test_frankfurter_by_default(self):
        """Debe usar Frankfurter si no hay proveedor ni URL base."""
        provider = build_fx_provider(Settings(_env_file=None, FX_PROVIDER="", FX_API_BASE=""), session=None)
        assert isinstance(provider, FrankfurterFxProvider)

    def test_custom_when_base_url_is_set(self):
        """Debe usar el proveedor propio si hay URL base."""
        provider = build_fx_provider(
            Settings(_env_file=None, FX_PROVIDER="", FX_API_BASE="https://fx.example.com"), session=None
        )
        assert isinstance(provider, CustomFxProvider)
        assert provider.base_url == "https://fx.example.com"

    @pytest.mark.parametrize("name", ["off", "none", "disabled", "oanda"])
    def test_off_and_unknown_have_no_provider(self, name):
        """Debe retornar None para off (y alias) y para proveedores desconocidos."""
        assert build_fx_provider(Settings(_env_file=None, FX_PROVIDER=name), session=None) is None

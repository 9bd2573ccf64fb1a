"""
FX rate providers.

Each provider performs exactly one logical lookup per call (Frankfurter may
try its fallback host once). Any transport error, timeout, non-2xx status or
unusable rate ends as FX_LOOKUP_FAILED; nothing is retried here.
"""

import asyncio
import logging
import math
import time
from typing import Any, Protocol

import aiohttp
from aiohttp import ClientTimeout

from app.core.config import Settings
from app.core.logging_config import log_api_call
from app.utils.error_handler import ErrorCode, FxException

logger = logging.getLogger(__name__)

FRANKFURTER_HOSTS = (
    "https://api.frankfurter.dev/v1/latest",
    "https://api.frankfurter.app/latest",
)

PROVIDER_FRANKFURTER = "frankfurter"
PROVIDER_CUSTOM = "custom"
PROVIDER_OFF = "off"


class IFxProvider(Protocol):
    """Protocol for FX rate providers."""

    name: str

    async def fetch_rate(self, from_currency: str, to_currency: str) -> float:
        """Return the rate to multiply a `from_currency` amount by."""
        ...


def parse_rate(raw: Any) -> float | None:
    """
    Convert a provider rate to float.

    Returns:
        float | None: None unless the value is a finite number > 0
    """
    if raw is None or isinstance(raw, bool):
        return None
    try:
        rate = float(raw)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(rate) or rate <= 0:
        return None
    return rate


async def read_json(response: aiohttp.ClientResponse) -> dict[str, Any]:
    """Parse a JSON body; unparseable or non-object bodies count as empty."""
    try:
        data = await response.json(content_type=None)
    except (aiohttp.ContentTypeError, ValueError):
        return {}
    return data if isinstance(data, dict) else {}


class HttpFxProvider:
    """Shared HTTP plumbing for FX providers."""

    name = ""

    def __init__(self, session: aiohttp.ClientSession, timeout_seconds: float):
        """
        Initialize provider.

        Args:
            session: Shared aiohttp session (owned by the application lifespan)
            timeout_seconds: Total timeout per request
        """
        self.session = session
        self.timeout = ClientTimeout(total=timeout_seconds)

    async def _get_json(self, url: str, params: dict[str, str]) -> tuple[int, dict[str, Any]]:
        """
        GET a JSON document.

        Returns:
            tuple[int, dict]: HTTP status and parsed body
        """
        start = time.time()
        async with self.session.get(
            url, params=params, timeout=self.timeout, headers={"Accept": "application/json"}
        ) as response:
            body = await read_json(response)
            log_api_call("GET", url, response.status, time.time() - start, provider=self.name)
            return response.status, body

    def _lookup_failed(self, from_currency: str, to_currency: str, reason: str) -> FxException:
        return FxException(
            message=f"FX {self.name} lookup failed for {from_currency}->{to_currency}: {reason}",
            error_code=ErrorCode.FX_LOOKUP_FAILED,
            from_currency=from_currency,
            to_currency=to_currency,
            provider=self.name,
        )


class FrankfurterFxProvider(HttpFxProvider):
    """Public Frankfurter API (no key). Tries the primary host, then one fallback."""

    name = PROVIDER_FRANKFURTER

    def __init__(
        self,
        session: aiohttp.ClientSession,
        timeout_seconds: float,
        hosts: tuple[str, ...] = FRANKFURTER_HOSTS,
    ):
        super().__init__(session, timeout_seconds)
        self.hosts = hosts

    async def fetch_rate(self, from_currency: str, to_currency: str) -> float:
        last_error = "unknown error"

        for host in self.hosts:
            try:
                status, body = await self._get_json(host, {"base": from_currency, "symbols": to_currency})
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_error = f"{type(e).__name__}: {e}"
                logger.warning(f"Frankfurter request to {host} failed: {last_error}")
                continue

            rates = body.get("rates") if isinstance(body.get("rates"), dict) else {}
            rate = parse_rate(rates.get(to_currency))
            if 200 <= status < 300 and rate is not None:
                return rate

            last_error = f"bad response from {host} (HTTP {status})"
            logger.warning(f"Frankfurter {last_error}")

        raise self._lookup_failed(from_currency, to_currency, last_error)


class CustomFxProvider(HttpFxProvider):
    """Self-hosted FX API: GET {base}/convert?from=&to= returning {rate} or {data: {rate}}."""

    name = PROVIDER_CUSTOM

    def __init__(self, session: aiohttp.ClientSession, timeout_seconds: float, base_url: str):
        super().__init__(session, timeout_seconds)
        self.base_url = (base_url or "").strip().rstrip("/")

    async def fetch_rate(self, from_currency: str, to_currency: str) -> float:
        if not self.base_url:
            raise FxException(
                message="FX_PROVIDER=custom but FX_API_BASE is not configured.",
                error_code=ErrorCode.FX_NOT_CONFIGURED,
                from_currency=from_currency,
                to_currency=to_currency,
                provider=self.name,
            )

        url = f"{self.base_url}/convert"
        try:
            status, body = await self._get_json(url, {"from": from_currency, "to": to_currency})
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise self._lookup_failed(from_currency, to_currency, f"{type(e).__name__}: {e}") from e

        raw_rate = body.get("rate")
        if raw_rate is None and isinstance(body.get("data"), dict):
            raw_rate = body["data"].get("rate")

        rate = parse_rate(raw_rate)
        if not 200 <= status < 300 or rate is None:
            raise self._lookup_failed(from_currency, to_currency, f"HTTP {status}")

        return rate


def build_fx_provider(settings: Settings, session: aiohttp.ClientSession) -> IFxProvider | None:
    """
    Create the provider selected by FX_PROVIDER.

    Returns:
        IFxProvider | None: None for "off" and for unrecognized names; the
        resolver reports those as FX_DISABLED / FX_PROVIDER_INVALID.
    """
    if settings.FX_PROVIDER == PROVIDER_FRANKFURTER:
        return FrankfurterFxProvider(session, settings.fx_timeout_seconds)
    if settings.FX_PROVIDER == PROVIDER_CUSTOM:
        return CustomFxProvider(session, settings.fx_timeout_seconds, settings.FX_API_BASE)
    if settings.FX_PROVIDER != PROVIDER_OFF:
        logger.error(f"Unsupported FX_PROVIDER: {settings.FX_PROVIDER}")
    return None

"""
FxRateResolver - Exchange rates and amount conversion for checkout.

Rates are cached per "FROM->TO" pair and concurrent lookups for the same
pair share one provider call. Any failure is terminal for that conversion:
no estimated or stale rate is ever substituted.
"""

import asyncio
import logging
import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

from app.domain.value_objects.money import CENTS, normalize_currency, round_money, to_decimal
from app.services.fx.providers import PROVIDER_OFF, IFxProvider
from app.services.fx.rate_cache import FxRateCache, rate_key
from app.utils.error_handler import ErrorCode, FxException

logger = logging.getLogger(__name__)

RATE_PRECISION = Decimal("0.00000001")


@dataclass(frozen=True)
class FxConversion:
    """
    Result of converting an amount.

    Attributes:
        value: Converted amount (2 decimals)
        currency: Target currency
        rate: Applied rate (8 decimals)
        from_currency: Source currency
        to_currency: Target currency
        original: Source amount (2 decimals)
        converted: Same as value
        provider: Configured provider name
    """

    value: Decimal
    currency: str
    rate: Decimal
    from_currency: str
    to_currency: str
    original: Decimal
    converted: Decimal
    provider: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "value": float(self.value),
            "currency": self.currency,
            "fx": {
                "rate": float(self.rate),
                "from": self.from_currency,
                "to": self.to_currency,
                "original": float(self.original),
                "converted": float(self.converted),
                "provider": self.provider,
            },
        }


class FxRateResolver:
    """Resolves exchange rates through the configured provider."""

    def __init__(self, provider: IFxProvider | None, cache: FxRateCache, provider_name: str):
        """
        Initialize resolver.

        Args:
            provider: Provider instance, None when FX is off or misconfigured
            cache: Process-wide rate cache
            provider_name: Configured FX_PROVIDER value (normalized)
        """
        self.provider = provider
        self.cache = cache
        self.provider_name = provider_name
        self._inflight: dict[str, asyncio.Task] = {}

    def _currency(self, code: Any) -> str:
        normalized = normalize_currency(code)
        if normalized is None:
            raise FxException(
                message=f"Invalid FX currency code: {code}",
                error_code=ErrorCode.FX_INVALID_CURRENCY,
                provider=self.provider_name,
            )
        return normalized

    def _invalid_amount(self, amount: Any) -> FxException:
        return FxException(
            message=f"Invalid amount for conversion: {amount}",
            error_code=ErrorCode.FX_INVALID_AMOUNT,
            provider=self.provider_name,
        )

    async def get_rate(self, from_currency: Any, to_currency: Any) -> float:
        """
        Get the rate converting `from_currency` into `to_currency`.

        Args:
            from_currency: Source currency code (trimmed, case-insensitive)
            to_currency: Target currency code

        Returns:
            float: Finite rate > 0 (1 for identical currencies)

        Raises:
            FxException: FX_INVALID_CURRENCY, FX_DISABLED, FX_PROVIDER_INVALID,
                FX_NOT_CONFIGURED, FX_LOOKUP_FAILED or FX_INVALID_RATE
        """
        source = self._currency(from_currency)
        target = self._currency(to_currency)

        if source == target:
            return 1.0

        if self.provider_name == PROVIDER_OFF:
            raise FxException(
                message=f"FX is disabled (FX_PROVIDER=off): {source}->{target}",
                error_code=ErrorCode.FX_DISABLED,
                from_currency=source,
                to_currency=target,
                provider=self.provider_name,
            )

        if self.provider is None:
            raise FxException(
                message=f"Unsupported FX_PROVIDER: {self.provider_name}",
                error_code=ErrorCode.FX_PROVIDER_INVALID,
                from_currency=source,
                to_currency=target,
                provider=self.provider_name,
            )

        key = rate_key(source, target)

        cached = self.cache.get(key)
        if cached is not None:
            return cached

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._lookup(key, source, target))
            task.add_done_callback(_retrieve_exception)
            self._inflight[key] = task
        else:
            logger.debug(f"Joining in-flight FX lookup {key}")

        # El shield evita que cancelar un solicitante cancele la consulta compartida
        return await asyncio.shield(task)

    async def _lookup(self, key: str, source: str, target: str) -> float:
        try:
            rate = await self.provider.fetch_rate(source, target)

            if not isinstance(rate, (int, float)) or isinstance(rate, bool) or not math.isfinite(rate) or rate <= 0:
                raise FxException(
                    message=f"Invalid FX rate for {source}->{target}",
                    error_code=ErrorCode.FX_INVALID_RATE,
                    from_currency=source,
                    to_currency=target,
                    provider=self.provider_name,
                )

            self.cache.set(key, float(rate))
            logger.info(f"FX rate {key} = {rate} ({self.provider_name})")
            return float(rate)
        finally:
            self._inflight.pop(key, None)

    async def convert_amount(self, amount: Any, from_currency: Any, to_currency: Any) -> FxConversion:
        """
        Convert an amount between currencies.

        Args:
            amount: Number, numeric string or Decimal
            from_currency: Source currency code
            to_currency: Target currency code

        Returns:
            FxConversion: Converted value plus the audit data of the conversion

        Raises:
            FxException: FX_INVALID_AMOUNT or any get_rate failure
        """
        number = to_decimal(amount) if not isinstance(amount, Decimal) else amount
        try:
            original = round_money(number) if number is not None and number.is_finite() else None
        except InvalidOperation:
            # Magnitud fuera de la precisión decimal
            original = None
        if original is None:
            raise self._invalid_amount(amount)

        source = self._currency(from_currency)
        target = self._currency(to_currency)

        if source == target:
            return FxConversion(
                value=original,
                currency=target,
                rate=Decimal("1"),
                from_currency=source,
                to_currency=target,
                original=original,
                converted=original,
                provider=self.provider_name,
            )

        rate = Decimal(str(await self.get_rate(source, target)))
        try:
            converted = (number * rate).quantize(CENTS, rounding=ROUND_HALF_UP)
        except InvalidOperation:
            raise self._invalid_amount(amount) from None

        return FxConversion(
            value=converted,
            currency=target,
            rate=rate.quantize(RATE_PRECISION, rounding=ROUND_HALF_UP),
            from_currency=source,
            to_currency=target,
            original=original,
            converted=converted,
            provider=self.provider_name,
        )


def _retrieve_exception(task: asyncio.Task) -> None:
    # Marca la excepción como recuperada aunque todos los solicitantes se hayan cancelado
    if not task.cancelled():
        task.exception()

"""
Foreign-exchange services: provider clients, rate cache and resolver.
"""

from .providers import CustomFxProvider, FrankfurterFxProvider, IFxProvider, build_fx_provider
from .rate_cache import FxRateCache, rate_key
from .rate_resolver import FxConversion, FxRateResolver

__all__ = [
    "CustomFxProvider",
    "FrankfurterFxProvider",
    "FxConversion",
    "FxRateCache",
    "FxRateResolver",
    "IFxProvider",
    "build_fx_provider",
    "rate_key",
]

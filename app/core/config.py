"""
Configuración centralizada de la aplicación.

Este módulo maneja todas las variables de entorno y configuraciones
de la aplicación usando Pydantic Settings para validación automática.
"""

import re
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings

# Límites del proveedor FX (milisegundos)
FX_TIMEOUT_MIN_MS = 3_000
FX_TIMEOUT_MAX_MS = 15_000
FX_TIMEOUT_DEFAULT_MS = 8_000
FX_CACHE_TTL_MIN_MS = 60_000
FX_CACHE_TTL_MAX_MS = 6 * 60 * 60 * 1000
FX_CACHE_TTL_DEFAULT_MS = 10 * 60 * 1000

FX_PROVIDER_ALIASES = {
    "frankfurter": "frankfurter",
    "custom": "custom",
    "off": "off",
    "none": "off",
    "disabled": "off",
}


def _clamp_ms(raw, low: int, high: int, default: int) -> int:
    """Convierte a entero y recorta al rango; valores no numéricos usan el default."""
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return default
    try:
        value = float(str(raw).strip())
    except (TypeError, ValueError):
        return default
    if value != value or value in (float("inf"), float("-inf")):
        return default
    return max(low, min(high, int(value)))


class Settings(BaseSettings):
    """
    Configuración de la aplicación usando Pydantic Settings.

    Todas las configuraciones se cargan desde variables de entorno
    con valores por defecto apropiados para desarrollo.
    """

    # === CONFIGURACIÓN BÁSICA DE LA APP ===
    APP_NAME: str = "Unic Marketplace Checkout"
    APP_VERSION: str = "0.1.0"
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=True)

    # === CONFIGURACIÓN DEL SERVIDOR ===
    HOST: str = Field(default="0.0.0.0")
    PORT: int = Field(default=8080)
    LOG_LEVEL: str = Field(default="INFO")
    ALLOWED_HOSTS: Optional[List[str]] = Field(default=None)
    SLOW_REQUEST_THRESHOLD: float = Field(default=5.0)
    ENABLE_DOCS: bool = Field(default=True)

    # === CONFIGURACIÓN DE LOGGING ===
    LOG_FILE_PATH: Optional[str] = Field(default=None)
    LOG_MAX_SIZE_MB: int = Field(default=10)
    LOG_BACKUP_COUNT: int = Field(default=5)

    # === CONFIGURACIÓN DE MONGODB ===
    MONGODB_URI: str = Field(default="mongodb://localhost:27017")
    MONGODB_DB_NAME: str = Field(default="marketplace")
    MONGODB_TIMEOUT_MS: int = Field(default=5000)

    # === CONFIGURACIÓN DE TIPO DE CAMBIO (FX) ===
    # FX_PROVIDER: frankfurter | custom | off (none/disabled son alias de off).
    # Vacío: custom si FX_API_BASE está definido, si no frankfurter.
    FX_PROVIDER: str = Field(default="")
    FX_API_BASE: str = Field(default="")
    FX_TIMEOUT_MS: int = Field(default=FX_TIMEOUT_DEFAULT_MS)
    FX_CACHE_TTL_MS: int = Field(default=FX_CACHE_TTL_DEFAULT_MS)
    CHECKOUT_CURRENCY: str = Field(default="USD")

    # === CONFIGURACIÓN DE SHIPPO ===
    SHIPPO_API_BASE: str = Field(default="https://api.goshippo.com")
    SHIPPO_TOKEN: str = Field(default="")
    SHIPPO_TIMEOUT_MS: int = Field(default=20_000)
    SHIPPO_EEL_PFC: str = Field(default="NOEEI_30_37_a")
    CUSTOMS_EXPORTER_PREFIX: str = Field(default="UNIC")
    BRAND_NAME: str = Field(default="My Store")

    # Dirección de origen por defecto (cuando el envío no sale del vendedor)
    SHIPPO_FROM_NAME: str = Field(default="")
    SHIPPO_FROM_STREET1: str = Field(default="")
    SHIPPO_FROM_STREET2: str = Field(default="")
    SHIPPO_FROM_CITY: str = Field(default="")
    SHIPPO_FROM_STATE: str = Field(default="")
    SHIPPO_FROM_ZIP: str = Field(default="")
    SHIPPO_FROM_COUNTRY: str = Field(default="ZA")
    SHIPPO_FROM_PHONE: str = Field(default="")
    SHIPPO_FROM_EMAIL: str = Field(default="")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": True,
        "extra": "allow",
    }

    @field_validator("ALLOWED_HOSTS", mode="before")
    @classmethod
    def parse_allowed_hosts(cls, v):
        """Parsea ALLOWED_HOSTS como lista separada por comas."""
        if isinstance(v, str):
            return [host.strip() for host in v.split(",") if host.strip()]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        """Valida que el nivel de log sea válido."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL debe ser uno de: {valid_levels}")
        return v.upper()

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Valida que el entorno sea válido."""
        valid_envs = ["development", "staging", "production", "testing"]
        if v.lower() not in valid_envs:
            raise ValueError(f"ENVIRONMENT debe ser uno de: {valid_envs}")
        return v.lower()

    @field_validator("PORT")
    @classmethod
    def validate_port(cls, v):
        """Valida que el puerto esté en rango válido."""
        if not 1 <= v <= 65535:
            raise ValueError("PORT debe estar entre 1 y 65535")
        return v

    @field_validator("FX_TIMEOUT_MS", mode="before")
    @classmethod
    def clamp_fx_timeout(cls, v):
        """Recorta el timeout FX a [3s, 15s]; default 8s."""
        return _clamp_ms(v, FX_TIMEOUT_MIN_MS, FX_TIMEOUT_MAX_MS, FX_TIMEOUT_DEFAULT_MS)

    @field_validator("FX_CACHE_TTL_MS", mode="before")
    @classmethod
    def clamp_fx_cache_ttl(cls, v):
        """Recorta el TTL del caché FX a [60s, 6h]; default 10 min."""
        return _clamp_ms(v, FX_CACHE_TTL_MIN_MS, FX_CACHE_TTL_MAX_MS, FX_CACHE_TTL_DEFAULT_MS)

    @field_validator("FX_API_BASE", "SHIPPO_API_BASE")
    @classmethod
    def strip_base_url(cls, v):
        """Elimina espacios y la barra final de las URLs base."""
        return (v or "").strip().rstrip("/")

    @field_validator("CHECKOUT_CURRENCY")
    @classmethod
    def validate_checkout_currency(cls, v):
        """La moneda de checkout debe ser un código ISO de 3 letras."""
        code = (v or "").strip().upper()
        if not re.fullmatch(r"[A-Z]{3}", code):
            raise ValueError("CHECKOUT_CURRENCY debe ser un código de 3 letras (ej. USD)")
        return code

    @field_validator("SHIPPO_FROM_COUNTRY")
    @classmethod
    def normalize_from_country(cls, v):
        """Normaliza el país de origen a ISO2 en mayúsculas."""
        code = (v or "").strip().upper()
        return code[:2] if len(code) >= 2 else "ZA"

    @model_validator(mode="after")
    def resolve_fx_provider(self):
        """
        Normaliza FX_PROVIDER.

        Valores desconocidos se conservan tal cual para que el resolver
        los rechace con FX_PROVIDER_INVALID en lugar de ignorarlos.
        """
        raw = (self.FX_PROVIDER or "").strip().lower()
        if not raw:
            self.FX_PROVIDER = "custom" if self.FX_API_BASE else "frankfurter"
        else:
            self.FX_PROVIDER = FX_PROVIDER_ALIASES.get(raw, raw)
        return self

    @property
    def is_production(self) -> bool:
        """Verifica si está en entorno de producción."""
        return self.ENVIRONMENT == "production"

    @property
    def fx_timeout_seconds(self) -> float:
        """Timeout FX en segundos."""
        return self.FX_TIMEOUT_MS / 1000

    @property
    def fx_cache_ttl_seconds(self) -> float:
        """TTL del caché FX en segundos."""
        return self.FX_CACHE_TTL_MS / 1000

    @property
    def shippo_timeout_seconds(self) -> float:
        """Timeout de Shippo en segundos."""
        return self.SHIPPO_TIMEOUT_MS / 1000

    @property
    def customs_signer(self) -> str:
        """Firmante de declaraciones de aduana (nombre del remitente o marca)."""
        return (self.SHIPPO_FROM_NAME or "").strip() or self.BRAND_NAME

    def get_shippo_headers(self) -> dict:
        """
        Obtiene headers para requests a Shippo.

        Returns:
            dict: Headers de autenticación
        """
        return {
            "Authorization": f"ShippoToken {self.SHIPPO_TOKEN}",
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"{self.APP_NAME}/{self.APP_VERSION}",
        }

    def get_default_origin_address(self) -> dict:
        """
        Dirección de origen configurada para envíos de la tienda.

        Returns:
            dict: Dirección en formato del carrier
        """
        address = {
            "name": self.customs_signer,
            "street1": self.SHIPPO_FROM_STREET1,
            "street2": self.SHIPPO_FROM_STREET2,
            "city": self.SHIPPO_FROM_CITY,
            "state": self.SHIPPO_FROM_STATE or None,
            "zip": self.SHIPPO_FROM_ZIP,
            "country": self.SHIPPO_FROM_COUNTRY,
            "phone": self.SHIPPO_FROM_PHONE,
            "email": self.SHIPPO_FROM_EMAIL or None,
        }
        return {key: value for key, value in address.items() if value is not None}


@lru_cache()
def get_settings() -> Settings:
    """
    Obtiene instancia singleton de configuración.

    Usa LRU cache para evitar recrear la configuración
    múltiples veces durante la ejecución.

    Returns:
        Settings: Instancia de configuración
    """
    return Settings()


def get_environment_info() -> dict:
    """
    Obtiene información del entorno actual.

    Returns:
        dict: Información del entorno
    """
    settings = get_settings()

    return {
        "app_name": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "environment": settings.ENVIRONMENT,
        "debug": settings.DEBUG,
        "is_production": settings.is_production,
        "log_level": settings.LOG_LEVEL,
        "fx_provider": settings.FX_PROVIDER,
        "checkout_currency": settings.CHECKOUT_CURRENCY,
        "features": {
            "docs": settings.ENABLE_DOCS,
            "shippo": bool(settings.SHIPPO_TOKEN),
        },
    }

"""
Cliente HTTP para la API de Shippo.

Solo expone lo que el checkout necesita (declaraciones de aduana). La
interpretación de la respuesta vive en CustomsDeclarationBuilder.
"""

import asyncio
import logging
import time
from typing import Any

import aiohttp
from aiohttp import ClientTimeout

from app.core.config import Settings
from app.core.logging_config import log_api_call
from app.services.shipping.interfaces import CarrierResponse
from app.utils.error_handler import CarrierAPIException, ErrorCode

logger = logging.getLogger(__name__)

CUSTOMS_DECLARATIONS_PATH = "/customs/declarations/"


class ShippoClient:
    """
    Cliente de Shippo sobre una sesión aiohttp compartida.

    La sesión la crea y la cierra el lifespan de la aplicación.
    """

    def __init__(self, session: aiohttp.ClientSession, settings: Settings):
        """
        Inicializa el cliente.

        Args:
            session: Sesión HTTP compartida
            settings: Configuración (token, base URL, timeout)
        """
        self.session = session
        self.settings = settings
        self.api_base = settings.SHIPPO_API_BASE.rstrip("/")
        self.timeout = ClientTimeout(total=settings.shippo_timeout_seconds)

    @property
    def is_configured(self) -> bool:
        return bool((self.settings.SHIPPO_TOKEN or "").strip())

    async def _post(self, path: str, payload: dict[str, Any]) -> CarrierResponse:
        """
        POST JSON al carrier.

        Args:
            path: Ruta relativa a SHIPPO_API_BASE
            payload: Cuerpo JSON

        Returns:
            CarrierResponse: Status y cuerpo parseado ({} si no es JSON)

        Raises:
            CarrierAPIException: SHIPPO_NOT_CONFIGURED sin token, SHIPPO_CUSTOMS_FAILED
                en errores de red o timeout
        """
        if not self.is_configured:
            raise CarrierAPIException(
                message="Shippo is not configured (SHIPPO_TOKEN is empty).",
                error_code=ErrorCode.SHIPPO_NOT_CONFIGURED,
                endpoint=path,
            )

        url = f"{self.api_base}{path}"
        start = time.time()
        try:
            async with self.session.post(
                url, json=payload, headers=self.settings.get_shippo_headers(), timeout=self.timeout
            ) as response:
                try:
                    body = await response.json(content_type=None)
                except (aiohttp.ContentTypeError, ValueError):
                    body = {}
                log_api_call("POST", url, response.status, time.time() - start, provider="shippo")
                return CarrierResponse(status=response.status, body=body if isinstance(body, dict) else {})

        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            log_api_call("POST", url, 0, time.time() - start, provider="shippo", error=str(e))
            raise CarrierAPIException(
                message=f"Shippo request failed: {type(e).__name__}: {e}",
                error_code=ErrorCode.SHIPPO_CUSTOMS_FAILED,
                endpoint=path,
            ) from e

    async def create_customs_declaration(self, payload: dict[str, Any]) -> CarrierResponse:
        """Crea una declaración de aduana."""
        return await self._post(CUSTOMS_DECLARATIONS_PATH, payload)

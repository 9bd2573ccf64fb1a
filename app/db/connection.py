# app/db/connection.py
"""
Clase MongoConnection para gestión exclusiva de la conexión a MongoDB.

Esta clase maneja únicamente el cliente, la base de datos seleccionada
y el ciclo de vida de la conexión. Las consultas viven en los repositorios.
"""

import logging
import time
from typing import Optional

from pymongo import AsyncMongoClient
from pymongo.asynchronous.database import AsyncDatabase
from pymongo.errors import PyMongoError

from app.core.config import Settings
from app.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)


class MongoConnection:
    """
    Conexión al almacén de documentos (catálogo, negocios, órdenes).

    Se crea una instancia por proceso en el lifespan de la aplicación.
    """

    def __init__(self, settings: Settings):
        """
        Inicializa la conexión sin abrirla.

        Args:
            settings: Configuración de la aplicación
        """
        self.uri = settings.MONGODB_URI
        self.db_name = settings.MONGODB_DB_NAME
        self.timeout_ms = settings.MONGODB_TIMEOUT_MS
        self.client: Optional[AsyncMongoClient] = None
        self._connection_tested = False

    async def initialize(self):
        """
        Crea el cliente y verifica la conexión con un ping.

        Raises:
            DatabaseException: Si falla la inicialización
        """
        if self.client is not None:
            logger.info("MongoDB connection already initialized")
            return

        try:
            logger.info("Initializing MongoDB connection...")
            self.client = AsyncMongoClient(
                self.uri,
                serverSelectionTimeoutMS=self.timeout_ms,
                connectTimeoutMS=self.timeout_ms,
                tz_aware=True,
            )
            await self.client.admin.command("ping")
            self._connection_tested = True
            logger.info(f"MongoDB connection initialized (db={self.db_name})")

        except PyMongoError as e:
            logger.error(f"Failed to initialize MongoDB connection: {e}")
            await self._cleanup_failed_initialization()
            raise DatabaseException(
                message=f"Failed to initialize database connection: {str(e)}",
                operation="initialization",
            ) from e

    async def _cleanup_failed_initialization(self):
        """Limpia recursos en caso de fallo de inicialización."""
        if self.client is not None:
            await self.client.close()
        self.client = None
        self._connection_tested = False

    def is_initialized(self) -> bool:
        """
        Verifica si la conexión está inicializada.

        Returns:
            bool: True si está inicializada y probada
        """
        return self.client is not None and self._connection_tested

    @property
    def database(self) -> AsyncDatabase:
        """
        Base de datos configurada.

        Raises:
            DatabaseException: Si no hay conexión inicializada
        """
        if self.client is None:
            raise DatabaseException(
                message="Database connection not initialized. Call initialize() first.",
                operation="get_database",
            )
        return self.client[self.db_name]

    async def health_check(self) -> dict:
        """
        Realiza un health check de la conexión.

        Returns:
            dict: Estado de salud de la conexión
        """
        health_info = {
            "connection_initialized": self.is_initialized(),
            "database": self.db_name,
            "test_passed": False,
            "response_time_ms": None,
            "error": None,
        }

        if self.client is None:
            return health_info

        start_time = time.time()
        try:
            await self.client.admin.command("ping")
            health_info["test_passed"] = True
        except PyMongoError as e:
            health_info["error"] = str(e)
            logger.error(f"MongoDB health check failed: {e}")
        health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)

        return health_info

    async def close(self):
        """Cierra el cliente y limpia los recursos."""
        if self.client is not None:
            logger.info("Closing MongoDB connection...")
            await self.client.close()
            logger.info("MongoDB connection closed")
        self.client = None
        self._connection_tested = False

    def __repr__(self) -> str:
        return f"MongoConnection(initialized={self.is_initialized()}, db={self.db_name})"

"""
Base repository for document-store reads.

Every repository receives the MongoConnection created in the lifespan and
wraps driver errors in DatabaseException.
"""

import logging
from typing import Any

from bson import ObjectId
from bson.errors import InvalidId
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from app.db.connection import MongoConnection
from app.domain.value_objects.product_reference import is_object_id_like
from app.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)


def to_object_id(value: str) -> ObjectId | None:
    """Parse an ObjectId hex string; None if it is not one."""
    if not isinstance(value, str) or not is_object_id_like(value):
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        return None


class BaseRepository:
    """Common read helpers for one collection."""

    collection_name = ""

    def __init__(self, connection: MongoConnection):
        """
        Initialize repository.

        Args:
            connection: Shared MongoDB connection
        """
        self.connection = connection

    @property
    def collection(self) -> AsyncCollection:
        return self.connection.database[self.collection_name]

    async def _find_one(self, query: dict[str, Any], projection: dict[str, int] | None = None):
        try:
            return await self.collection.find_one(query, projection)
        except PyMongoError as e:
            logger.error(f"find_one on {self.collection_name} failed: {e}")
            raise DatabaseException(
                message=f"Failed to query {self.collection_name}: {str(e)}",
                operation="find_one",
                collection=self.collection_name,
            ) from e

    async def _find_many(self, query: dict[str, Any], projection: dict[str, int] | None = None) -> list[dict]:
        try:
            cursor = self.collection.find(query, projection)
            return await cursor.to_list(length=None)
        except PyMongoError as e:
            logger.error(f"find on {self.collection_name} failed: {e}")
            raise DatabaseException(
                message=f"Failed to query {self.collection_name}: {str(e)}",
                operation="find",
                collection=self.collection_name,
            ) from e

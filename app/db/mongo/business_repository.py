"""
Business repository.
"""

from typing import Any

from app.db.mongo.base import BaseRepository, to_object_id


class BusinessRepository(BaseRepository):
    """Reads business (seller/buyer/supplier) accounts."""

    collection_name = "businesses"

    async def get_by_id(self, business_id: str) -> dict[str, Any] | None:
        object_id = to_object_id(business_id)
        if object_id is None:
            return None
        return await self._find_one({"_id": object_id})

"""
Order repository.
"""

from typing import Any

from app.db.mongo.base import BaseRepository, to_object_id


class OrderRepository(BaseRepository):
    """Reads orders created by the payment flow."""

    collection_name = "orders"

    async def find_by_id(self, order_id: str) -> dict[str, Any] | None:
        """Find by document `_id` (None for ids that are not ObjectIds)."""
        object_id = to_object_id(order_id)
        if object_id is None:
            return None
        return await self._find_one({"_id": object_id})

    async def find_by_order_id(self, order_id: str) -> dict[str, Any] | None:
        """Find by payment-provider order id."""
        return await self._find_one({"orderId": order_id})

"""
Product repository: batch product lookup by canonical references.
"""

import logging

from app.db.mongo.base import BaseRepository, to_object_id
from app.domain.models import Product
from app.domain.models.product import OWNER_BUSINESS_FIELDS
from app.domain.value_objects import ProductRef

logger = logging.getLogger(__name__)

PRODUCT_PROJECTION = {
    field_name: 1
    for field_name in ("_id", "customId", "productId", "sku", "name", "category", "shipping", *OWNER_BUSINESS_FIELDS)
}


class ProductRepository(BaseRepository):
    """Reads catalogue products."""

    collection_name = "products"

    async def find_by_refs(self, refs: list[ProductRef]) -> list[Product]:
        """
        Find every product matching any reference in one query.

        ObjectId-like references match `_id`; the rest match `customId`,
        `productId` or `sku`.

        Args:
            refs: Product references

        Returns:
            list[Product]: Matching products (unordered)
        """
        object_ids = [oid for oid in (to_object_id(ref.value) for ref in refs if ref.is_object_id) if oid]
        other_ids = [ref.value for ref in refs if not ref.is_object_id]

        clauses = []
        if object_ids:
            clauses.append({"_id": {"$in": object_ids}})
        if other_ids:
            clauses.extend(
                [
                    {"customId": {"$in": other_ids}},
                    {"productId": {"$in": other_ids}},
                    {"sku": {"$in": other_ids}},
                ]
            )

        if not clauses:
            return []

        documents = await self._find_many({"$or": clauses}, PRODUCT_PROJECTION)
        logger.debug(f"Product lookup: {len(refs)} refs -> {len(documents)} products")
        return [Product.from_document(doc) for doc in documents]

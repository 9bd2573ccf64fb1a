"""
MongoDB repositories.
"""

from .business_repository import BusinessRepository
from .order_repository import OrderRepository
from .product_repository import ProductRepository

__all__ = ["BusinessRepository", "OrderRepository", "ProductRepository"]

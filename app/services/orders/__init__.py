"""
Order services: locating orders and deciding who may see them.
"""

from .interfaces import IOrderLookup
from .visibility import OrderLocator, OrderVisibility, OrderVisibilityResolver

__all__ = ["IOrderLookup", "OrderLocator", "OrderVisibility", "OrderVisibilityResolver"]

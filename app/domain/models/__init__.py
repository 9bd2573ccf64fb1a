"""
Domain models for business entities.

These models represent core business concepts and contain
business logic and invariants.
"""

from .cart import Cart, CartItem
from .identity import IdentityKind, SessionIdentity
from .order import Order, OrderLineItem
from .product import Product, ProductIndex, ProductShippingSpec
from .shipping import CustomsDeclaration, CustomsLineItem, Parcel, ShippingAddress

__all__ = [
    "Cart",
    "CartItem",
    "CustomsDeclaration",
    "CustomsLineItem",
    "IdentityKind",
    "Order",
    "OrderLineItem",
    "Parcel",
    "Product",
    "ProductIndex",
    "ProductShippingSpec",
    "SessionIdentity",
    "ShippingAddress",
]

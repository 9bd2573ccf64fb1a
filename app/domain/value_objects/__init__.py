"""
Value objects for the domain layer.

Value objects are immutable objects that represent concepts
with no conceptual identity, only defined by their attributes.
"""

from .measurements import to_centimeters, to_kilograms
from .product_reference import ProductRef

__all__ = ["ProductRef", "to_kilograms", "to_centimeters"]

"""
Domain layer for the marketplace checkout core.

This layer contains the cart, product, parcel, order and identity entities
plus the value objects (money, measurements, product references) they share.
"""

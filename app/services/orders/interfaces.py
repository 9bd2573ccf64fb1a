"""
Interfaces/Protocols for order services (Dependency Inversion Principle).

These protocols define contracts that services must implement,
allowing for loose coupling and easy testing.
"""

from typing import Any, Protocol


class IOrderLookup(Protocol):
    """Protocol for order lookup."""

    async def find_by_id(self, order_id: str) -> dict[str, Any] | None:
        """Find an order by document id."""
        ...

    async def find_by_order_id(self, order_id: str) -> dict[str, Any] | None:
        """Find an order by payment-provider order id."""
        ...

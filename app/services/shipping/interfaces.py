"""
Interfaces/Protocols for shipping services (Dependency Inversion Principle).

These protocols define contracts that services must implement,
allowing for loose coupling and easy testing.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from app.domain.models import Product
from app.domain.value_objects import ProductRef


@dataclass(frozen=True)
class CarrierResponse:
    """Raw carrier answer: HTTP status plus parsed JSON body ({} if unparseable)."""

    status: int
    body: dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class IProductLookup(Protocol):
    """Protocol for batch product lookup."""

    async def find_by_refs(self, refs: list[ProductRef]) -> list[Product]:
        """Return every product matching any of the references (one query)."""
        ...


class IBusinessLookup(Protocol):
    """Protocol for business lookup."""

    async def get_by_id(self, business_id: str) -> dict[str, Any] | None:
        """Return the business document or None."""
        ...


class ICarrierClient(Protocol):
    """Protocol for the shipping carrier API."""

    async def create_customs_declaration(self, payload: dict[str, Any]) -> CarrierResponse:
        """Submit a customs declaration payload."""
        ...

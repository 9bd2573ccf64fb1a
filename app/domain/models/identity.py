"""
Session identity.

A session carries at most one kind of identity. The canonical session shape is:

    {"admin": {...}}                       -> admin
    {"user": {"_id": "...", "email": ...}} -> user
    {"business": {"_id": "..."}}           -> business

Legacy sessions storing a bare ``businessId`` string are accepted by
``SessionIdentity.from_session`` and nowhere else.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping

from app.domain.value_objects.product_reference import id_value


class IdentityKind(str, Enum):
    NONE = "none"
    ADMIN = "admin"
    USER = "user"
    BUSINESS = "business"


@dataclass(frozen=True)
class SessionIdentity:
    """
    Who is asking.

    Attributes:
        kind: Identity kind, admin wins over user, user over business
        subject_id: User or business id ("" for admin/none)
        email: User email, lower-cased
    """

    kind: IdentityKind = IdentityKind.NONE
    subject_id: str = ""
    email: str = ""

    @property
    def is_admin(self) -> bool:
        return self.kind is IdentityKind.ADMIN

    @property
    def is_user(self) -> bool:
        return self.kind is IdentityKind.USER

    @property
    def is_business(self) -> bool:
        return self.kind is IdentityKind.BUSINESS

    @property
    def is_anonymous(self) -> bool:
        return self.kind is IdentityKind.NONE

    def flags(self) -> dict[str, bool]:
        """Identity flags echoed in non-production denials."""
        return {"admin": self.is_admin, "user": self.is_user, "business": self.is_business}

    @classmethod
    def anonymous(cls) -> "SessionIdentity":
        return cls()

    @classmethod
    def from_session(cls, session: Mapping[str, Any] | None) -> "SessionIdentity":
        """Build the identity from a session mapping (admin → user → business)."""
        if not session:
            return cls.anonymous()

        if session.get("admin"):
            return cls(kind=IdentityKind.ADMIN)

        user = session.get("user")
        if isinstance(user, Mapping):
            user_id = id_value(user)
            email = str(user.get("email") or "").strip().lower()
            if user_id or email:
                return cls(kind=IdentityKind.USER, subject_id=user_id, email=email)

        business_id = id_value(session.get("business")) or id_value(session.get("businessId"))
        if business_id:
            return cls(kind=IdentityKind.BUSINESS, subject_id=business_id)

        return cls.anonymous()

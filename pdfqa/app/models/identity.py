"""Identity domain models."""

from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class IdentityAttribute(str, Enum):
    """Attributes that can be checked for duplicates."""

    email = "email"
    phone = "phone"
    name = "name"


class Identity(BaseModel):
    """Registered user."""

    identity_id: UUID
    display_name: str
    email: str
    phone: str
    verified: bool = False


class IdentitySummary(BaseModel):
    """Public view of an identity returned after authentication."""

    id: UUID
    name: str
    email: str

    @classmethod
    def from_identity(cls, identity: Identity) -> "IdentitySummary":
        return cls(id=identity.identity_id, name=identity.display_name, email=identity.email)

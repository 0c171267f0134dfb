"""Request context for ownership enforcement."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True)
class RequestContext:
    """Request context containing the authenticated identity.

    Used to enforce ownership boundaries in all document and conversation
    operations.
    """

    identity_id: UUID

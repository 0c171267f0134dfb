"""Repository protocol interfaces for data access."""

from datetime import datetime
from typing import Protocol
from uuid import UUID

from pdfqa.app.db.context import RequestContext
from pdfqa.app.models.challenge import Challenge, ChallengePurpose
from pdfqa.app.models.conversations import ConversationEntry
from pdfqa.app.models.documents import Document, DocumentSummary
from pdfqa.app.models.identity import Identity, IdentityAttribute


class ChallengeRepository(Protocol):
    """Storage for live OTP challenges, keyed by (identity_key, purpose)."""

    async def replace(self, challenge: Challenge) -> None:
        """Store a challenge, deleting any prior one for the same pair.

        The delete and insert are a single atomic step; concurrent callers
        for the same pair leave exactly one row (last writer wins).

        Args:
            challenge: Challenge to store
        """
        ...

    async def get(self, identity_key: str, purpose: ChallengePurpose) -> Challenge | None:
        """Get the live challenge for a pair.

        Args:
            identity_key: Email the challenge was issued to
            purpose: register or login

        Returns:
            Challenge or None if none exists
        """
        ...

    async def delete(self, challenge_id: UUID) -> bool:
        """Delete a challenge by ID.

        Args:
            challenge_id: Challenge ID

        Returns:
            True if this call removed the row, False if it was already gone
        """
        ...

    async def purge_expired(self, now: datetime) -> int:
        """Delete every challenge whose expiry is at or before now.

        Args:
            now: Current timestamp

        Returns:
            Number of challenges removed
        """
        ...


class IdentityRepository(Protocol):
    """Durable identity records."""

    async def exists(self, attribute: IdentityAttribute, value: str) -> bool:
        """Check whether any identity has the given attribute value."""
        ...

    async def create(
        self, *, display_name: str, email: str, phone: str, verified: bool
    ) -> Identity:
        """Create an identity.

        Raises:
            ConflictError: email_exists, enforced atomically at insert time
        """
        ...

    async def find_by_email(self, email: str) -> Identity | None:
        """Get identity by email."""
        ...

    async def find_by_id(self, identity_id: UUID) -> Identity | None:
        """Get identity by ID."""
        ...


class DocumentRepository(Protocol):
    """Owner-scoped document storage."""

    async def add(self, document: Document) -> None:
        """Persist a new document."""
        ...

    async def get(self, document_id: UUID, ctx: RequestContext) -> Document | None:
        """Get a document with its text.

        Args:
            document_id: Document ID
            ctx: Request context (enforces ownership)

        Returns:
            Document or None if missing or owned by someone else
        """
        ...

    async def list_recent(self, ctx: RequestContext) -> list[DocumentSummary]:
        """List the caller's documents, newest first, without text."""
        ...


class ConversationRepository(Protocol):
    """Append-only conversation log."""

    async def append(self, entry: ConversationEntry) -> None:
        """Persist a new entry."""
        ...

    async def list_recent(self, ctx: RequestContext) -> list[ConversationEntry]:
        """List the caller's entries across all documents, newest first."""
        ...

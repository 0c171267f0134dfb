"""In-memory implementations of repository interfaces."""

import threading
import uuid
from datetime import datetime

from pdfqa.app.db.context import RequestContext
from pdfqa.app.errors import ConflictError
from pdfqa.app.models.challenge import Challenge, ChallengePurpose
from pdfqa.app.models.conversations import ConversationEntry
from pdfqa.app.models.documents import Document, DocumentSummary
from pdfqa.app.models.identity import Identity, IdentityAttribute


class InMemoryChallengeRepository:
    """In-memory implementation of ChallengeRepository."""

    def __init__(self) -> None:
        self._challenges: dict[tuple[str, ChallengePurpose], Challenge] = {}
        self._lock = threading.Lock()

    async def replace(self, challenge: Challenge) -> None:
        """Store a challenge, superseding any prior one for the pair."""
        with self._lock:
            self._challenges[(challenge.identity_key, challenge.purpose)] = challenge

    async def get(self, identity_key: str, purpose: ChallengePurpose) -> Challenge | None:
        """Get the live challenge for a pair."""
        with self._lock:
            return self._challenges.get((identity_key, purpose))

    async def delete(self, challenge_id: uuid.UUID) -> bool:
        """Delete a challenge by ID."""
        with self._lock:
            for key, challenge in self._challenges.items():
                if challenge.challenge_id == challenge_id:
                    del self._challenges[key]
                    return True
            return False

    async def purge_expired(self, now: datetime) -> int:
        """Delete expired challenges."""
        with self._lock:
            expired = [key for key, c in self._challenges.items() if c.is_expired(now)]
            for key in expired:
                del self._challenges[key]
            return len(expired)


class InMemoryIdentityRepository:
    """In-memory implementation of IdentityRepository."""

    def __init__(self) -> None:
        self._identities: dict[uuid.UUID, Identity] = {}
        self._lock = threading.Lock()

    async def exists(self, attribute: IdentityAttribute, value: str) -> bool:
        """Check whether any identity has the attribute value."""
        field = {
            IdentityAttribute.email: "email",
            IdentityAttribute.phone: "phone",
            IdentityAttribute.name: "display_name",
        }[attribute]
        with self._lock:
            return any(getattr(i, field) == value for i in self._identities.values())

    async def create(
        self, *, display_name: str, email: str, phone: str, verified: bool
    ) -> Identity:
        """Create an identity; email uniqueness is checked under the lock."""
        with self._lock:
            if any(i.email == email for i in self._identities.values()):
                raise ConflictError("email_exists")

            identity = Identity(
                identity_id=uuid.uuid4(),
                display_name=display_name,
                email=email,
                phone=phone,
                verified=verified,
            )
            self._identities[identity.identity_id] = identity
            return identity

    async def find_by_email(self, email: str) -> Identity | None:
        """Get identity by email."""
        with self._lock:
            return next((i for i in self._identities.values() if i.email == email), None)

    async def find_by_id(self, identity_id: uuid.UUID) -> Identity | None:
        """Get identity by ID."""
        with self._lock:
            return self._identities.get(identity_id)


class InMemoryDocumentRepository:
    """In-memory implementation of DocumentRepository."""

    def __init__(self) -> None:
        self._documents: dict[uuid.UUID, Document] = {}

    async def add(self, document: Document) -> None:
        """Persist a new document."""
        self._documents[document.document_id] = document

    async def get(self, document_id: uuid.UUID, ctx: RequestContext) -> Document | None:
        """Get a document owned by the caller."""
        document = self._documents.get(document_id)

        if document is None:
            return None

        # Enforce ownership
        if document.owner_id != ctx.identity_id:
            return None

        return document

    async def list_recent(self, ctx: RequestContext) -> list[DocumentSummary]:
        """List the caller's documents without text."""
        results = [
            doc.summary() for doc in self._documents.values() if doc.owner_id == ctx.identity_id
        ]

        # Sort by uploaded_at descending
        results.sort(key=lambda x: x.uploaded_at, reverse=True)

        return results


class InMemoryConversationRepository:
    """In-memory implementation of ConversationRepository."""

    def __init__(self) -> None:
        self._entries: list[ConversationEntry] = []

    async def append(self, entry: ConversationEntry) -> None:
        """Persist a new entry."""
        self._entries.append(entry)

    async def list_recent(self, ctx: RequestContext) -> list[ConversationEntry]:
        """List the caller's entries, newest first."""
        results = [e for e in self._entries if e.owner_id == ctx.identity_id]
        results.sort(key=lambda x: x.created_at, reverse=True)
        return results

"""SQL implementations of repository interfaces.

Every method opens its own short-lived session, so each mutation is one
transaction and no state is shared between requests.
"""

import logging
import uuid
from datetime import datetime, timezone

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pdfqa.app.db.context import RequestContext
from pdfqa.app.db.models import Challenge as ChallengeDB
from pdfqa.app.db.models import ConversationEntry as ConversationEntryDB
from pdfqa.app.db.models import Document as DocumentDB
from pdfqa.app.db.models import Identity as IdentityDB
from pdfqa.app.errors import ConflictError
from pdfqa.app.models.challenge import Challenge, ChallengePurpose
from pdfqa.app.models.conversations import ConversationEntry
from pdfqa.app.models.documents import Document, DocumentSummary
from pdfqa.app.models.identity import Identity, IdentityAttribute

logger = logging.getLogger(__name__)

# Retries for concurrent replace() calls racing on the unique (key, purpose) row
_REPLACE_ATTEMPTS = 3


def _as_utc(value: datetime) -> datetime:
    """SQLite drops tzinfo on read; stored values are always UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_identity(row: IdentityDB) -> Identity:
    return Identity(
        identity_id=row.identity_id,
        display_name=row.display_name,
        email=row.email,
        phone=row.phone,
        verified=row.verified,
    )


class SqlChallengeRepository:
    """SQL implementation of ChallengeRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def replace(self, challenge: Challenge) -> None:
        """Delete-then-insert in one transaction, serialised by the unique constraint."""
        for attempt in range(1, _REPLACE_ATTEMPTS + 1):
            try:
                async with self._session_factory() as session, session.begin():
                    await session.execute(
                        delete(ChallengeDB).where(
                            ChallengeDB.identity_key == challenge.identity_key,
                            ChallengeDB.purpose == challenge.purpose.value,
                        )
                    )
                    session.add(
                        ChallengeDB(
                            challenge_id=challenge.challenge_id,
                            identity_key=challenge.identity_key,
                            purpose=challenge.purpose.value,
                            code=challenge.code,
                            expires_at=challenge.expires_at,
                        )
                    )
                return
            except IntegrityError:
                if attempt == _REPLACE_ATTEMPTS:
                    raise
                logger.info(
                    f"Concurrent challenge replace for purpose={challenge.purpose.value}, "
                    f"retrying (attempt {attempt})"
                )

    async def get(self, identity_key: str, purpose: ChallengePurpose) -> Challenge | None:
        """Get the live challenge for a pair."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ChallengeDB).where(
                    ChallengeDB.identity_key == identity_key,
                    ChallengeDB.purpose == purpose.value,
                )
            )
            row = result.scalar_one_or_none()

        if row is None:
            return None

        return Challenge(
            challenge_id=row.challenge_id,
            identity_key=row.identity_key,
            code=row.code,
            purpose=ChallengePurpose(row.purpose),
            expires_at=_as_utc(row.expires_at),
        )

    async def delete(self, challenge_id: uuid.UUID) -> bool:
        """Delete a challenge by ID; True only for the caller that removed it."""
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                delete(ChallengeDB).where(ChallengeDB.challenge_id == challenge_id)
            )
        return bool(result.rowcount)

    async def purge_expired(self, now: datetime) -> int:
        """Delete expired challenges."""
        async with self._session_factory() as session, session.begin():
            result = await session.execute(
                delete(ChallengeDB).where(ChallengeDB.expires_at <= now)
            )
        return int(result.rowcount or 0)


class SqlIdentityRepository:
    """SQL implementation of IdentityRepository."""

    _COLUMNS = {
        IdentityAttribute.email: IdentityDB.email,
        IdentityAttribute.phone: IdentityDB.phone,
        IdentityAttribute.name: IdentityDB.display_name,
    }

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def exists(self, attribute: IdentityAttribute, value: str) -> bool:
        """Check whether any identity has the attribute value."""
        column = self._COLUMNS[attribute]
        async with self._session_factory() as session:
            result = await session.execute(
                select(IdentityDB.identity_id).where(column == value).limit(1)
            )
            return result.first() is not None

    async def create(
        self, *, display_name: str, email: str, phone: str, verified: bool
    ) -> Identity:
        """Insert an identity; the unique constraint on email decides races."""
        row = IdentityDB(
            identity_id=uuid.uuid4(),
            display_name=display_name,
            email=email,
            phone=phone,
            verified=verified,
        )
        try:
            async with self._session_factory() as session, session.begin():
                session.add(row)
        except IntegrityError as e:
            raise ConflictError("email_exists") from e

        return _to_identity(row)

    async def find_by_email(self, email: str) -> Identity | None:
        """Get identity by email."""
        async with self._session_factory() as session:
            result = await session.execute(select(IdentityDB).where(IdentityDB.email == email))
            row = result.scalar_one_or_none()
        return _to_identity(row) if row else None

    async def find_by_id(self, identity_id: uuid.UUID) -> Identity | None:
        """Get identity by ID."""
        async with self._session_factory() as session:
            row = await session.get(IdentityDB, identity_id)
        return _to_identity(row) if row else None


class SqlDocumentRepository:
    """SQL implementation of DocumentRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(self, document: Document) -> None:
        """Persist a new document."""
        async with self._session_factory() as session, session.begin():
            session.add(
                DocumentDB(
                    document_id=document.document_id,
                    owner_id=document.owner_id,
                    stored_name=document.stored_name,
                    original_name=document.original_name,
                    extracted_text=document.extracted_text,
                    uploaded_at=document.uploaded_at,
                )
            )

    async def get(self, document_id: uuid.UUID, ctx: RequestContext) -> Document | None:
        """Get a document owned by the caller."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(DocumentDB).where(
                    DocumentDB.document_id == document_id,
                    DocumentDB.owner_id == ctx.identity_id,
                )
            )
            row = result.scalar_one_or_none()

        if row is None:
            return None

        return Document(
            document_id=row.document_id,
            owner_id=row.owner_id,
            stored_name=row.stored_name,
            original_name=row.original_name,
            extracted_text=row.extracted_text,
            uploaded_at=_as_utc(row.uploaded_at),
        )

    async def list_recent(self, ctx: RequestContext) -> list[DocumentSummary]:
        """List the caller's documents; the text column is never selected."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(
                    DocumentDB.document_id,
                    DocumentDB.owner_id,
                    DocumentDB.stored_name,
                    DocumentDB.original_name,
                    DocumentDB.uploaded_at,
                )
                .where(DocumentDB.owner_id == ctx.identity_id)
                .order_by(DocumentDB.uploaded_at.desc())
            )
            rows = result.all()

        return [
            DocumentSummary(
                document_id=row.document_id,
                owner_id=row.owner_id,
                stored_name=row.stored_name,
                original_name=row.original_name,
                uploaded_at=_as_utc(row.uploaded_at),
            )
            for row in rows
        ]


class SqlConversationRepository:
    """SQL implementation of ConversationRepository."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: ConversationEntry) -> None:
        """Persist a new entry."""
        async with self._session_factory() as session, session.begin():
            session.add(
                ConversationEntryDB(
                    conversation_id=entry.conversation_id,
                    owner_id=entry.owner_id,
                    document_id=entry.document_id,
                    question=entry.question,
                    answer=entry.answer,
                    created_at=entry.created_at,
                )
            )

    async def list_recent(self, ctx: RequestContext) -> list[ConversationEntry]:
        """List the caller's entries, newest first."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ConversationEntryDB)
                .where(ConversationEntryDB.owner_id == ctx.identity_id)
                .order_by(ConversationEntryDB.created_at.desc())
            )
            rows = list(result.scalars().all())

        return [
            ConversationEntry(
                conversation_id=row.conversation_id,
                owner_id=row.owner_id,
                document_id=row.document_id,
                question=row.question,
                answer=row.answer,
                created_at=_as_utc(row.created_at),
            )
            for row in rows
        ]

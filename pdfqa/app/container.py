"""Explicit construction of the service graph.

All clients (database sessions, SMTP, inference) are built here and passed
into the components; nothing in the core reaches for a global.
"""

from dataclasses import dataclass
from datetime import timedelta

from sqlalchemy.ext.asyncio import AsyncEngine

from pdfqa.app.auth.challenges import ChallengeStore
from pdfqa.app.auth.codes import CodeGenerator
from pdfqa.app.auth.notifier import Notifier, build_notifier
from pdfqa.app.auth.service import AuthService
from pdfqa.app.auth.sessions import SessionIssuer
from pdfqa.app.config import Settings
from pdfqa.app.db.engine import create_async_engine_from_settings, create_session_factory
from pdfqa.app.db.inmemory import (
    InMemoryChallengeRepository,
    InMemoryConversationRepository,
    InMemoryDocumentRepository,
    InMemoryIdentityRepository,
)
from pdfqa.app.db.repositories import (
    ChallengeRepository,
    ConversationRepository,
    DocumentRepository,
    IdentityRepository,
)
from pdfqa.app.db.sql_repositories import (
    SqlChallengeRepository,
    SqlConversationRepository,
    SqlDocumentRepository,
    SqlIdentityRepository,
)
from pdfqa.app.docs.extract import PdfTextExtractor, TextExtractor
from pdfqa.app.docs.ingest import DocumentService
from pdfqa.app.llm.client import InferenceClient, build_inference_client
from pdfqa.app.qa.service import QAService
from pdfqa.app.utils.clock import Clock, utc_now


@dataclass
class Services:
    """Everything the HTTP layer needs, wired once per application."""

    settings: Settings
    auth: AuthService
    sessions: SessionIssuer
    challenges: ChallengeStore
    documents: DocumentService
    qa: QAService
    engine: AsyncEngine | None = None


def build_services(
    settings: Settings,
    *,
    challenge_repo: ChallengeRepository,
    identity_repo: IdentityRepository,
    document_repo: DocumentRepository,
    conversation_repo: ConversationRepository,
    notifier: Notifier | None = None,
    inference: InferenceClient | None = None,
    extractor: TextExtractor | None = None,
    code_generator: CodeGenerator | None = None,
    clock: Clock = utc_now,
    engine: AsyncEngine | None = None,
) -> Services:
    """Wire components over the given repositories.

    Collaborators left as None are built from settings.
    """
    challenges = ChallengeStore(
        challenge_repo,
        code_generator=code_generator,
        clock=clock,
        code_length=settings.otp_length,
        ttl=timedelta(minutes=settings.otp_ttl_minutes),
    )
    sessions = SessionIssuer(
        settings.jwt_secret.get_secret_value(),
        ttl=timedelta(days=settings.session_ttl_days),
        clock=clock,
    )
    auth = AuthService(
        challenges=challenges,
        notifier=notifier or build_notifier(settings),
        identities=identity_repo,
        sessions=sessions,
    )
    documents = DocumentService(
        documents=document_repo,
        extractor=extractor or PdfTextExtractor(),
        max_upload_bytes=settings.max_upload_bytes,
        clock=clock,
    )
    qa = QAService(
        documents=document_repo,
        conversations=conversation_repo,
        inference=inference or build_inference_client(settings),
        context_char_limit=settings.context_char_limit,
        timeout_seconds=settings.inference_timeout_seconds,
        clock=clock,
    )
    return Services(
        settings=settings,
        auth=auth,
        sessions=sessions,
        challenges=challenges,
        documents=documents,
        qa=qa,
        engine=engine,
    )


def build_inmemory_services(settings: Settings, **overrides: object) -> Services:
    """Services over in-memory repositories (tests and local demos)."""
    return build_services(
        settings,
        challenge_repo=InMemoryChallengeRepository(),
        identity_repo=InMemoryIdentityRepository(),
        document_repo=InMemoryDocumentRepository(),
        conversation_repo=InMemoryConversationRepository(),
        **overrides,  # type: ignore[arg-type]
    )


def build_sql_services(settings: Settings, engine: AsyncEngine | None = None) -> Services:
    """Services over SQL repositories sharing one session factory."""
    engine = engine or create_async_engine_from_settings(settings)
    session_factory = create_session_factory(engine)
    return build_services(
        settings,
        challenge_repo=SqlChallengeRepository(session_factory),
        identity_repo=SqlIdentityRepository(session_factory),
        document_repo=SqlDocumentRepository(session_factory),
        conversation_repo=SqlConversationRepository(session_factory),
        engine=engine,
    )

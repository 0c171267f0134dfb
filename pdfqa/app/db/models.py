"""SQLAlchemy ORM models for identities, challenges, documents and conversations."""

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, Text, UniqueConstraint
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.sql import func


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


class Identity(Base):
    """Identity table - verified users, email globally unique."""

    __tablename__ = "identity"
    __table_args__ = (
        UniqueConstraint("email", name="uq_identity_email"),
        Index("idx_identity_phone", "phone"),
    )

    identity_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    display_name: Mapped[str] = mapped_column(Text, nullable=False)
    email: Mapped[str] = mapped_column(Text, nullable=False)
    phone: Mapped[str] = mapped_column(Text, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    # Relationships
    documents: Mapped[list["Document"]] = relationship("Document", back_populates="owner")
    conversations: Mapped[list["ConversationEntry"]] = relationship(
        "ConversationEntry", back_populates="owner"
    )


class Challenge(Base):
    """Challenge table - at most one live OTP per (identity_key, purpose)."""

    __tablename__ = "challenge"
    __table_args__ = (
        UniqueConstraint("identity_key", "purpose", name="uq_challenge_key_purpose"),
        Index("idx_challenge_expires", "expires_at"),
    )

    challenge_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    identity_key: Mapped[str] = mapped_column(Text, nullable=False)
    purpose: Mapped[str] = mapped_column(Text, nullable=False)
    code: Mapped[str] = mapped_column(Text, nullable=False)
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Document(Base):
    """Document table - extracted text of an uploaded PDF."""

    __tablename__ = "document"
    __table_args__ = (Index("idx_document_owner", "owner_id", "uploaded_at"),)

    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("identity.identity_id"), nullable=False
    )
    stored_name: Mapped[str] = mapped_column(Text, nullable=False)
    original_name: Mapped[str] = mapped_column(Text, nullable=False)
    extracted_text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    uploaded_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    owner: Mapped["Identity"] = relationship("Identity", back_populates="documents")
    conversations: Mapped[list["ConversationEntry"]] = relationship(
        "ConversationEntry", back_populates="document"
    )


class ConversationEntry(Base):
    """Conversation entry table - append-only question/answer log."""

    __tablename__ = "conversation_entry"
    __table_args__ = (
        Index("idx_conversation_owner", "owner_id", "created_at"),
        Index("idx_conversation_document", "document_id"),
    )

    conversation_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("identity.identity_id"), nullable=False
    )
    document_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), ForeignKey("document.document_id"), nullable=False
    )
    question: Mapped[str] = mapped_column(Text, nullable=False)
    answer: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)

    # Relationships
    owner: Mapped["Identity"] = relationship("Identity", back_populates="conversations")
    document: Mapped["Document"] = relationship("Document", back_populates="conversations")

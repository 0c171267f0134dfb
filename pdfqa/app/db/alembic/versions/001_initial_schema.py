"""Initial schema - identities, challenges, documents, conversation entries

Revision ID: 001
Revises:
Create Date: 2026-10-19

Challenges are unique per (identity_key, purpose) so that at most one live
code exists per flow, and indexed on expires_at for the reaper.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers
revision: str = "001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    """Create the four core tables."""
    op.create_table(
        "identity",
        sa.Column("identity_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("display_name", sa.Text(), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.Text(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.func.now(),
            nullable=False,
        ),
        sa.UniqueConstraint("email", name="uq_identity_email"),
    )
    op.create_index("idx_identity_phone", "identity", ["phone"])

    op.create_table(
        "challenge",
        sa.Column("challenge_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("identity_key", sa.Text(), nullable=False),
        sa.Column("purpose", sa.Text(), nullable=False),
        sa.Column("code", sa.Text(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.UniqueConstraint("identity_key", "purpose", name="uq_challenge_key_purpose"),
    )
    op.create_index("idx_challenge_expires", "challenge", ["expires_at"])

    op.create_table(
        "document",
        sa.Column("document_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "owner_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("identity.identity_id"),
            nullable=False,
        ),
        sa.Column("stored_name", sa.Text(), nullable=False),
        sa.Column("original_name", sa.Text(), nullable=False),
        sa.Column("extracted_text", sa.Text(), nullable=False, server_default=""),
        sa.Column("uploaded_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("idx_document_owner", "document", ["owner_id", "uploaded_at"])

    op.create_table(
        "conversation_entry",
        sa.Column("conversation_id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column(
            "owner_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("identity.identity_id"),
            nullable=False,
        ),
        sa.Column(
            "document_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("document.document_id"),
            nullable=False,
        ),
        sa.Column("question", sa.Text(), nullable=False),
        sa.Column("answer", sa.Text(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index(
        "idx_conversation_owner", "conversation_entry", ["owner_id", "created_at"]
    )
    op.create_index("idx_conversation_document", "conversation_entry", ["document_id"])


def downgrade() -> None:
    """Drop the core tables."""
    op.drop_index("idx_conversation_document", table_name="conversation_entry")
    op.drop_index("idx_conversation_owner", table_name="conversation_entry")
    op.drop_table("conversation_entry")
    op.drop_index("idx_document_owner", table_name="document")
    op.drop_table("document")
    op.drop_index("idx_challenge_expires", table_name="challenge")
    op.drop_table("challenge")
    op.drop_index("idx_identity_phone", table_name="identity")
    op.drop_table("identity")

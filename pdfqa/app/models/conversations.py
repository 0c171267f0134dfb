"""Conversation log models."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel


class ConversationEntry(BaseModel):
    """One persisted question/answer exchange."""

    conversation_id: UUID
    owner_id: UUID
    document_id: UUID
    question: str
    answer: str
    created_at: datetime


class AskResult(BaseModel):
    """Outcome of a successful ask."""

    answer: str
    conversation_id: UUID

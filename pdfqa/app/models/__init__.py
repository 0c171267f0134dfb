"""Models package - re-exports for convenience."""

from pdfqa.app.models.challenge import Challenge, ChallengeOutcome, ChallengePurpose
from pdfqa.app.models.conversations import AskResult, ConversationEntry
from pdfqa.app.models.documents import Document, DocumentSummary
from pdfqa.app.models.identity import Identity, IdentityAttribute, IdentitySummary

__all__ = [
    # Challenges
    "Challenge",
    "ChallengeOutcome",
    "ChallengePurpose",
    # Identities
    "Identity",
    "IdentityAttribute",
    "IdentitySummary",
    # Documents
    "Document",
    "DocumentSummary",
    # Conversations
    "ConversationEntry",
    "AskResult",
]

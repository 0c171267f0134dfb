"""OTP challenge types."""

from datetime import datetime
from enum import Enum
from uuid import UUID

from pydantic import BaseModel


class ChallengePurpose(str, Enum):
    """Flow a challenge belongs to."""

    register = "register"
    login = "login"


class ChallengeOutcome(str, Enum):
    """Result of checking a submitted code."""

    ACCEPTED = "accepted"
    NO_CHALLENGE = "no_challenge"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


class Challenge(BaseModel):
    """Live OTP challenge for one (identity_key, purpose) pair."""

    challenge_id: UUID
    identity_key: str  # email
    code: str
    purpose: ChallengePurpose
    expires_at: datetime

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

"""Domain error taxonomy.

Core operations raise these; the HTTP layer turns each one into the
``{"ok": false, "error": <code>}`` envelope with the matching status.
"""

from fastapi import status

from pdfqa.app.models.challenge import ChallengeOutcome


class DomainError(Exception):
    """Base class for errors the caller can act on."""

    status_code: int = status.HTTP_400_BAD_REQUEST
    default_code: str = "error"

    def __init__(self, code: str | None = None, *, details: str | None = None) -> None:
        self.code = code or self.default_code
        self.details = details
        super().__init__(self.code)


class ValidationError(DomainError):
    """Missing or malformed input."""

    default_code = "invalid_input"

    def __init__(self, code: str | None = None, *, details: str | None = None) -> None:
        super().__init__(code, details=details)
        if self.code == "too_large":
            self.status_code = status.HTTP_413_REQUEST_ENTITY_TOO_LARGE


class ConflictError(DomainError):
    """Identifying attribute already registered."""

    default_code = "conflict"


class NotFoundError(DomainError):
    """Resource absent or not owned by the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"

    def __init__(self, code: str | None = None, *, details: str | None = None) -> None:
        super().__init__(code, details=details)
        # Unknown login emails are a client error, not a missing resource
        if self.code == "not_registered":
            self.status_code = status.HTTP_400_BAD_REQUEST


# Challenge outcome -> wire error code
CHALLENGE_ERROR_CODES: dict[ChallengeOutcome, str] = {
    ChallengeOutcome.NO_CHALLENGE: "no_otp",
    ChallengeOutcome.EXPIRED: "expired",
    ChallengeOutcome.MISMATCH: "wrong",
}


class AuthChallengeError(DomainError):
    """OTP verification did not succeed."""

    def __init__(self, outcome: ChallengeOutcome) -> None:
        if outcome not in CHALLENGE_ERROR_CODES:
            raise ValueError(f"Outcome {outcome.value} is not an error")
        self.outcome = outcome
        super().__init__(CHALLENGE_ERROR_CODES[outcome])


class UnauthenticatedError(DomainError):
    """Credential missing, malformed, mis-signed or expired.

    The cause is deliberately not part of the error.
    """

    status_code = status.HTTP_401_UNAUTHORIZED
    default_code = "unauthenticated"


class UpstreamError(DomainError):
    """Inference service failed or timed out."""

    status_code = status.HTTP_502_BAD_GATEWAY
    default_code = "llm_error"


class InternalError(DomainError):
    """Unexpected failure; details stay in the server log."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "server_error"

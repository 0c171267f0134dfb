"""Session credential issuing and validation (HS256 JWT).

Credentials are stateless: validity is decided by signature and expiry at
validation time. There is no revocation list, so logging out only clears the
client's cookie and a leaked token stays valid until it expires.
"""

import logging
import uuid
from datetime import timedelta

import jwt
from jwt.exceptions import PyJWTError

from pdfqa.app.errors import UnauthenticatedError
from pdfqa.app.utils.clock import Clock, utc_now

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"


class SessionIssuer:
    """Mints and validates session credentials bound to one identity."""

    def __init__(
        self,
        secret: str,
        *,
        ttl: timedelta = timedelta(days=7),
        clock: Clock = utc_now,
    ) -> None:
        if not secret:
            raise ValueError("Session secret must not be empty")
        self._secret = secret
        self._ttl = ttl
        self._clock = clock

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    def issue(self, identity_id: uuid.UUID) -> str:
        """Issue a credential expiring `ttl` after now."""
        issued_at = self._clock()
        payload = {
            "sub": str(identity_id),
            "iat": int(issued_at.timestamp()),
            "exp": int((issued_at + self._ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret, algorithm=ALGORITHM)

    def validate(self, credential: str | None) -> uuid.UUID:
        """Return the identity ID the credential is bound to.

        Expiry is checked against the injected clock rather than PyJWT's
        wall clock.

        Raises:
            UnauthenticatedError: For a missing, malformed, mis-signed or
                expired credential (indistinguishable to the caller)
        """
        if not credential:
            raise UnauthenticatedError()

        try:
            payload = jwt.decode(
                credential,
                self._secret,
                algorithms=[ALGORITHM],
                options={"require": ["sub", "iat", "exp"], "verify_exp": False, "verify_iat": False},
            )
            identity_id = uuid.UUID(str(payload["sub"]))
            expires_at = int(payload["exp"])
        except (PyJWTError, ValueError, TypeError) as e:
            logger.debug(f"Credential rejected: {type(e).__name__}")
            raise UnauthenticatedError() from e

        if self._clock().timestamp() >= expires_at:
            logger.debug("Credential rejected: expired")
            raise UnauthenticatedError()

        return identity_id

"""Registration and login as two-step OTP challenge/response flows."""

import logging
from dataclasses import dataclass
from uuid import UUID

from pdfqa.app.auth.challenges import ChallengeStore
from pdfqa.app.auth.notifier import Notifier
from pdfqa.app.auth.sessions import SessionIssuer
from pdfqa.app.db.repositories import IdentityRepository
from pdfqa.app.errors import AuthChallengeError, ConflictError, NotFoundError, ValidationError
from pdfqa.app.models.challenge import ChallengeOutcome, ChallengePurpose
from pdfqa.app.models.identity import Identity, IdentityAttribute, IdentitySummary
from pdfqa.app.utils.logging import StructuredEventLogger
from pdfqa.app.utils.metrics import PrometheusAuthMetrics

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthenticatedSession:
    """Result of a successful verify step."""

    identity: IdentitySummary
    credential: str


def _clean(value: str | None) -> str:
    return value.strip() if value else ""


class AuthService:
    """Orchestrates OTP registration and login."""

    def __init__(
        self,
        *,
        challenges: ChallengeStore,
        notifier: Notifier,
        identities: IdentityRepository,
        sessions: SessionIssuer,
        metrics: PrometheusAuthMetrics | None = None,
    ) -> None:
        self._challenges = challenges
        self._notifier = notifier
        self._identities = identities
        self._sessions = sessions
        self._metrics = metrics or PrometheusAuthMetrics()
        self._events = StructuredEventLogger("auth")

    async def check_duplicates(
        self,
        *,
        email: str | None = None,
        phone: str | None = None,
        name: str | None = None,
    ) -> dict[str, bool]:
        """Report which of the supplied attributes are already registered.

        Only attributes that were supplied appear in the result.
        """
        result: dict[str, bool] = {}
        if email:
            result["email_exists"] = await self._identities.exists(IdentityAttribute.email, email)
        if phone:
            result["phone_exists"] = await self._identities.exists(IdentityAttribute.phone, phone)
        if name:
            result["name_exists"] = await self._identities.exists(IdentityAttribute.name, name)
        return result

    async def start_registration(
        self, name: str | None, email: str | None, phone: str | None
    ) -> None:
        """Issue a registration challenge.

        Raises:
            ValidationError: missing_fields
            ConflictError: email_exists, phone_exists
        """
        name, email, phone = _clean(name), _clean(email), _clean(phone)
        if not name or not email or not phone:
            raise ValidationError("missing_fields")

        if await self._identities.exists(IdentityAttribute.email, email):
            raise ConflictError("email_exists")
        if await self._identities.exists(IdentityAttribute.phone, phone):
            raise ConflictError("phone_exists")

        await self._issue_and_notify(email, ChallengePurpose.register)

    async def verify_registration(
        self,
        name: str | None,
        email: str | None,
        phone: str | None,
        otp: str | None,
    ) -> AuthenticatedSession:
        """Consume the registration challenge and create the identity.

        Raises:
            ValidationError: missing_fields
            AuthChallengeError: no_otp, expired, wrong
            ConflictError: email_exists (registered while the challenge was pending)
        """
        name, email, phone, otp = _clean(name), _clean(email), _clean(phone), _clean(otp)
        if not name or not email or not phone or not otp:
            raise ValidationError("missing_fields")

        await self._consume(email, otp, ChallengePurpose.register)

        if await self._identities.exists(IdentityAttribute.email, email):
            raise ConflictError("email_exists")

        # The repository re-checks uniqueness atomically on insert
        identity = await self._identities.create(
            display_name=name, email=email, phone=phone, verified=True
        )
        self._events.log_event("register", "success", identity_key=email)
        return self._open_session(identity, flow="register")

    async def start_login(self, email: str | None) -> None:
        """Issue a login challenge for a registered email.

        Raises:
            ValidationError: missing_email
            NotFoundError: not_registered
        """
        email = _clean(email)
        if not email:
            raise ValidationError("missing_email")

        if await self._identities.find_by_email(email) is None:
            raise NotFoundError("not_registered")

        await self._issue_and_notify(email, ChallengePurpose.login)

    async def verify_login(self, email: str | None, otp: str | None) -> AuthenticatedSession:
        """Consume the login challenge and open a session.

        Raises:
            ValidationError: missing_fields
            AuthChallengeError: no_otp, expired, wrong
            NotFoundError: not_registered (identity removed after start)
        """
        email, otp = _clean(email), _clean(otp)
        if not email or not otp:
            raise ValidationError("missing_fields")

        await self._consume(email, otp, ChallengePurpose.login)

        identity = await self._identities.find_by_email(email)
        if identity is None:
            raise NotFoundError("not_registered")

        self._events.log_event("login", "success", identity_key=email)
        return self._open_session(identity, flow="login")

    async def get_identity(self, identity_id: UUID) -> Identity:
        """Profile of an authenticated identity.

        Raises:
            NotFoundError: not_found (identity removed after the session was issued)
        """
        identity = await self._identities.find_by_id(identity_id)
        if identity is None:
            raise NotFoundError("not_found")
        return identity

    async def _issue_and_notify(self, email: str, purpose: ChallengePurpose) -> None:
        code = await self._challenges.issue(email, purpose)
        self._events.log_event("challenge_issued", "success", identity_key=email, purpose=purpose.value)

        # Delivery is best-effort: the challenge stays valid if sending fails
        try:
            await self._notifier.send(email, code)
        except Exception as e:
            logger.error(f"Failed to send OTP email: {type(e).__name__}: {e}")

    async def _consume(self, email: str, otp: str, purpose: ChallengePurpose) -> None:
        outcome = await self._challenges.verify(email, otp, purpose)
        if outcome is not ChallengeOutcome.ACCEPTED:
            self._events.log_event(
                f"{purpose.value}_verify",
                outcome.value,
                identity_key=email,
                error_reason=outcome.value,
            )
            raise AuthChallengeError(outcome)

    def _open_session(self, identity: Identity, *, flow: str) -> AuthenticatedSession:
        credential = self._sessions.issue(identity.identity_id)
        self._metrics.inc_session(flow)
        return AuthenticatedSession(
            identity=IdentitySummary.from_identity(identity),
            credential=credential,
        )

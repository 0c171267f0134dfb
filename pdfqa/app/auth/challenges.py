"""OTP challenge store: issue and verify single-use codes with absolute expiry."""

import hmac
import logging
import uuid
from datetime import timedelta

from pdfqa.app.auth.codes import CodeGenerator, SecretsCodeGenerator
from pdfqa.app.db.repositories import ChallengeRepository
from pdfqa.app.models.challenge import Challenge, ChallengeOutcome, ChallengePurpose
from pdfqa.app.utils.clock import Clock, utc_now
from pdfqa.app.utils.metrics import PrometheusAuthMetrics

logger = logging.getLogger(__name__)


class ChallengeStore:
    """Issues and verifies OTP challenges keyed by (identity_key, purpose).

    State per pair: NONE -> PENDING on issue; PENDING -> NONE on accept or
    expiry; PENDING stays PENDING on mismatch so the user can retry until the
    challenge expires. Expiry is decided at read time.
    """

    def __init__(
        self,
        repository: ChallengeRepository,
        *,
        code_generator: CodeGenerator | None = None,
        clock: Clock = utc_now,
        code_length: int = 6,
        ttl: timedelta = timedelta(minutes=10),
        metrics: PrometheusAuthMetrics | None = None,
    ) -> None:
        self._repository = repository
        self._code_generator = code_generator or SecretsCodeGenerator()
        self._clock = clock
        self._code_length = code_length
        self._ttl = ttl
        self._metrics = metrics or PrometheusAuthMetrics()

    @property
    def ttl(self) -> timedelta:
        return self._ttl

    async def issue(self, identity_key: str, purpose: ChallengePurpose) -> str:
        """Issue a fresh code, superseding any live challenge for the pair.

        Args:
            identity_key: Email the code is sent to
            purpose: register or login

        Returns:
            The generated code, for delivery by the caller
        """
        code = self._code_generator.generate(self._code_length)
        challenge = Challenge(
            challenge_id=uuid.uuid4(),
            identity_key=identity_key,
            code=code,
            purpose=purpose,
            expires_at=self._clock() + self._ttl,
        )
        await self._repository.replace(challenge)
        self._metrics.inc_issued(purpose.value)
        return code

    async def verify(
        self, identity_key: str, code: str, purpose: ChallengePurpose
    ) -> ChallengeOutcome:
        """Check a submitted code.

        Returns:
            ACCEPTED (challenge consumed), NO_CHALLENGE, EXPIRED (challenge
            removed) or MISMATCH (challenge kept)
        """
        outcome = await self._check(identity_key, code, purpose)
        self._metrics.inc_verification(purpose.value, outcome.value)
        return outcome

    async def purge_expired(self) -> int:
        """Remove every expired challenge; returns the number removed."""
        removed = await self._repository.purge_expired(self._clock())
        if removed:
            logger.info(f"Purged {removed} expired challenge(s)")
        return removed

    async def _check(
        self, identity_key: str, code: str, purpose: ChallengePurpose
    ) -> ChallengeOutcome:
        challenge = await self._repository.get(identity_key, purpose)
        if challenge is None:
            return ChallengeOutcome.NO_CHALLENGE

        if challenge.is_expired(self._clock()):
            await self._repository.delete(challenge.challenge_id)
            return ChallengeOutcome.EXPIRED

        if not hmac.compare_digest(challenge.code.encode(), code.encode()):
            return ChallengeOutcome.MISMATCH

        # Only the caller whose delete removed the row gets ACCEPTED
        if not await self._repository.delete(challenge.challenge_id):
            return ChallengeOutcome.NO_CHALLENGE

        return ChallengeOutcome.ACCEPTED

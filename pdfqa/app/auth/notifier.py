"""Out-of-band delivery of OTP codes.

Security: SMTP credentials are read from settings only, never hardcoded.
Falls back to a logging notifier when no SMTP host is configured.
"""

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from typing import Protocol

from pdfqa.app.config import Settings
from pdfqa.app.utils.logging import mask_email

logger = logging.getLogger(__name__)

OTP_SUBJECT = "Your verification OTP"


def render_otp_body(code: str, ttl_minutes: int) -> str:
    """Build the plain-text message body carrying the code."""
    return f"Your OTP is: {code}. It will expire in {ttl_minutes} minutes."


class Notifier(Protocol):
    """Protocol for code delivery implementations."""

    async def send(self, identity_key: str, code: str) -> None:
        """Deliver a code to the identity's address.

        Args:
            identity_key: Recipient email
            code: OTP code

        Raises:
            Exception: Implementations may raise; callers treat delivery as best-effort
        """
        ...


class LoggingNotifier:
    """Development notifier that logs deliveries instead of sending mail.

    Holds no state; neither the code nor the full address is written out.
    """

    async def send(self, identity_key: str, code: str) -> None:
        """Log the masked recipient only."""
        logger.info(f"SMTP not configured, OTP for {mask_email(identity_key)} not delivered")


class SmtpNotifier:
    """SMTP-backed notifier."""

    def __init__(
        self,
        *,
        host: str,
        port: int = 587,
        username: str | None = None,
        password: str | None = None,
        sender: str | None = None,
        ttl_minutes: int = 10,
        timeout: float = 10.0,
    ) -> None:
        """Initialize SMTP notifier.

        Args:
            host: SMTP server host
            port: SMTP port; 465 uses implicit TLS, anything else STARTTLS
            username: Login user (also the default sender)
            password: Login password
            sender: From address override
            ttl_minutes: Code lifetime quoted in the message body
            timeout: Socket timeout in seconds
        """
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._sender = sender or username or f"no-reply@{host}"
        self._ttl_minutes = ttl_minutes
        self._timeout = timeout

    def build_message(self, to: str, code: str) -> EmailMessage:
        """Build the OTP email."""
        message = EmailMessage()
        message["From"] = self._sender
        message["To"] = to
        message["Subject"] = OTP_SUBJECT
        message.set_content(render_otp_body(code, self._ttl_minutes))
        return message

    async def send(self, identity_key: str, code: str) -> None:
        """Send the code without blocking the event loop."""
        message = self.build_message(identity_key, code)
        await asyncio.to_thread(self._deliver, message)

    def _deliver(self, message: EmailMessage) -> None:
        if self._port == 465:
            smtp: smtplib.SMTP = smtplib.SMTP_SSL(self._host, self._port, timeout=self._timeout)
        else:
            smtp = smtplib.SMTP(self._host, self._port, timeout=self._timeout)

        with smtp:
            if self._port != 465:
                smtp.starttls()
            if self._username and self._password:
                smtp.login(self._username, self._password)
            smtp.send_message(message)


def build_notifier(settings: Settings) -> Notifier:
    """Factory function to get appropriate notifier based on config.

    Returns:
        SmtpNotifier if an SMTP host is configured, LoggingNotifier otherwise
    """
    if settings.smtp_host:
        logger.info("Using SMTP notifier for OTP delivery")
        return SmtpNotifier(
            host=settings.smtp_host,
            port=settings.smtp_port,
            username=settings.smtp_user,
            password=settings.smtp_password.get_secret_value() if settings.smtp_password else None,
            sender=settings.smtp_sender,
            ttl_minutes=settings.otp_ttl_minutes,
        )

    logger.warning("No SMTP host configured, using logging notifier")
    return LoggingNotifier()

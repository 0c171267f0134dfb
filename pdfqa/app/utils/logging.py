"""Structured logging for auth and Q&A events."""

import logging
from typing import Any

logger = logging.getLogger(__name__)


def mask_email(email: str) -> str:
    """Mask the local part of an email for logs (a***@example.com)."""
    local, sep, domain = email.partition("@")
    if not sep:
        return "***"
    return f"{local[:1]}***@{domain}"


class StructuredEventLogger:
    """Structured logger for auth and Q&A events.

    Codes and credentials are never passed in; identity keys are masked.
    """

    def __init__(self, component: str) -> None:
        self._component = component

    def log_event(
        self,
        event: str,
        outcome: str,
        *,
        identity_key: str | None = None,
        error_reason: str | None = None,
        **fields: Any,
    ) -> None:
        """Log an event with structured data."""
        log_data: dict[str, Any] = {
            "component": self._component,
            "event": event,
            "outcome": outcome,
            **fields,
        }

        if identity_key:
            log_data["identity"] = mask_email(identity_key)
        if error_reason:
            log_data["error_reason"] = error_reason

        log_msg = f"{self._component}: {event} - {outcome}"

        if outcome in ("success", "accepted"):
            logger.info(log_msg, extra={"structured": log_data})
        else:
            logger.warning(log_msg, extra={"structured": log_data})

"""Tests for session credential issuing and validation."""

import uuid
from datetime import timedelta

import pytest

from pdfqa.app.auth.sessions import SessionIssuer
from pdfqa.app.errors import UnauthenticatedError


@pytest.fixture
def issuer(clock) -> SessionIssuer:
    """Issuer with a seven day lifetime on the fake clock."""
    return SessionIssuer("test-secret", ttl=timedelta(days=7), clock=clock)


def test_credential_resolves_to_identity(issuer: SessionIssuer) -> None:
    """Test that a fresh credential validates to the bound identity."""
    identity_id = uuid.uuid4()

    credential = issuer.issue(identity_id)

    assert issuer.validate(credential) == identity_id


def test_credential_valid_within_lifetime(issuer: SessionIssuer, clock) -> None:
    """Test that a credential is still accepted after six days."""
    identity_id = uuid.uuid4()
    credential = issuer.issue(identity_id)

    clock.advance(timedelta(days=6))

    assert issuer.validate(credential) == identity_id


def test_credential_rejected_after_lifetime(issuer: SessionIssuer, clock) -> None:
    """Test that a credential is rejected after eight days."""
    credential = issuer.issue(uuid.uuid4())

    clock.advance(timedelta(days=8))

    with pytest.raises(UnauthenticatedError):
        issuer.validate(credential)


def test_tampered_payload_rejected(issuer: SessionIssuer) -> None:
    """Test that swapping the payload invalidates the signature."""
    victim = issuer.issue(uuid.uuid4())
    attacker = issuer.issue(uuid.uuid4())
    header, _, signature = victim.split(".")
    _, payload, _ = attacker.split(".")

    with pytest.raises(UnauthenticatedError):
        issuer.validate(f"{header}.{payload}.{signature}")


def test_wrong_secret_rejected(issuer: SessionIssuer, clock) -> None:
    """Test that a credential signed with another secret is rejected."""
    other = SessionIssuer("another-secret", clock=clock)

    with pytest.raises(UnauthenticatedError):
        issuer.validate(other.issue(uuid.uuid4()))


@pytest.mark.parametrize("credential", [None, "", "garbage", "a.b.c"])
def test_malformed_credentials_rejected(issuer: SessionIssuer, credential: str | None) -> None:
    """Test that missing and malformed credentials raise the same error."""
    with pytest.raises(UnauthenticatedError) as exc_info:
        issuer.validate(credential)

    assert exc_info.value.code == "unauthenticated"
    assert exc_info.value.status_code == 401


def test_empty_secret_refused() -> None:
    """Test that an issuer cannot be built without a secret."""
    with pytest.raises(ValueError):
        SessionIssuer("")

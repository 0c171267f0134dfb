"""Tests for settings loading."""

import pytest
from pydantic import ValidationError

from pdfqa.app.config import Settings


def test_jwt_secret_is_required(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that settings refuse to load without a signing secret."""
    monkeypatch.delenv("JWT_SECRET", raising=False)

    with pytest.raises(ValidationError) as exc_info:
        Settings(_env_file=None)

    assert exc_info.value.errors()[0]["loc"] == ("jwt_secret",)


def test_jwt_secret_from_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    """Test that the secret is read from the environment and kept masked."""
    monkeypatch.setenv("JWT_SECRET", "from-env")

    settings = Settings(_env_file=None)

    assert settings.jwt_secret.get_secret_value() == "from-env"
    assert "from-env" not in repr(settings)

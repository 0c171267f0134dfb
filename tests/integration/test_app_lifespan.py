"""Integration tests for application startup over SQL storage."""

import asyncio
from datetime import timedelta
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from pdfqa.app.auth.challenges import ChallengeStore
from pdfqa.app.auth.codes import SequenceCodeGenerator
from pdfqa.app.config import Settings
from pdfqa.app.db.inmemory import InMemoryChallengeRepository
from pdfqa.app.main import create_app, reap_expired_challenges
from pdfqa.app.models.challenge import ChallengePurpose


def test_startup_builds_sql_services(settings: Settings, tmp_path: Path) -> None:
    """Test that the lifespan creates tables and serves requests from SQLite."""
    configured = settings.model_copy(
        update={"database_url": f"sqlite+aiosqlite:///{tmp_path / 'app.db'}"}
    )

    with TestClient(create_app(settings=configured)) as client:
        health = client.get("/healthz")
        assert health.status_code == 200
        assert health.json()["components"]["db"] == "ok"

        response = client.post("/api/login/start", json={"email": "ghost@example.com"})
        assert response.status_code == 400
        assert response.json() == {"ok": False, "error": "not_registered"}

        response = client.post(
            "/api/register/start",
            json={"name": "Ann", "email": "ann@example.com", "phone": "+1-555-0100"},
        )
        assert response.json() == {"ok": True, "msg": "otp_sent"}

    assert (tmp_path / "app.db").exists()


@pytest.mark.asyncio
async def test_reaper_purges_expired_challenges(clock) -> None:
    """Test that the background reaper removes expired challenges."""
    repository = InMemoryChallengeRepository()
    store = ChallengeStore(repository, code_generator=SequenceCodeGenerator(["111111"]), clock=clock)
    await store.issue("ann@example.com", ChallengePurpose.login)
    clock.advance(timedelta(minutes=11))

    task = asyncio.create_task(reap_expired_challenges(store, 0.01))
    try:
        for _ in range(100):
            if await repository.get("ann@example.com", ChallengePurpose.login) is None:
                break
            await asyncio.sleep(0.01)
    finally:
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    assert await repository.get("ann@example.com", ChallengePurpose.login) is None

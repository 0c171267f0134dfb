"""Shared pytest fixtures for all test suites."""

from collections.abc import AsyncGenerator, Callable
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from pdfqa.app.auth.codes import SequenceCodeGenerator
from pdfqa.app.config import Settings
from pdfqa.app.container import Services, build_inmemory_services
from pdfqa.app.db.engine import create_session_factory, create_tables
from pdfqa.app.docs.extract import ExtractedText
from pdfqa.app.llm.client import DeterministicStubClient

T0 = datetime(2026, 1, 5, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock."""

    def __init__(self, start: datetime = T0) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta: timedelta) -> None:
        self.now = self.now + delta


class RecordingNotifier:
    """Notifier that keeps delivered codes for the test to read back."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send(self, identity_key: str, code: str) -> None:
        self.sent.append((identity_key, code))


class FakeExtractor:
    """Extractor returning a fixed text regardless of input."""

    def __init__(self, text: str = "") -> None:
        self.text = text
        self.calls = 0

    def extract(self, data: bytes) -> ExtractedText:
        self.calls += 1
        return ExtractedText(text=self.text)


def build_pdf(*lines: str) -> bytes:
    """Build a minimal single-page PDF with one Helvetica text line per argument."""

    def escape(s: str) -> str:
        return s.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")

    ops = ["BT", "/F1 12 Tf", "72 720 Td"]
    for i, line in enumerate(lines):
        if i:
            ops.append("0 -16 Td")
        ops.append(f"({escape(line)}) Tj")
    ops.append("ET")
    stream = "\n".join(ops).encode("latin-1")

    objects = [
        b"<< /Type /Catalog /Pages 2 0 R >>",
        b"<< /Type /Pages /Kids [3 0 R] /Count 1 >>",
        b"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
        b"/Contents 4 0 R /Resources << /Font << /F1 5 0 R >> >> >>",
        b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream",
        b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    ]

    out = bytearray(b"%PDF-1.4\n")
    offsets = []
    for number, body in enumerate(objects, start=1):
        offsets.append(len(out))
        out += b"%d 0 obj\n" % number + body + b"\nendobj\n"

    xref_pos = len(out)
    out += b"xref\n0 %d\n" % (len(objects) + 1)
    out += b"0000000000 65535 f \n"
    for offset in offsets:
        out += b"%010d 00000 n \n" % offset
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (
        len(objects) + 1,
        xref_pos,
    )
    return bytes(out)


@pytest.fixture
def clock() -> FakeClock:
    """Clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def settings() -> Settings:
    """Settings isolated from the environment and .env files."""
    return Settings(
        _env_file=None,
        database_url="sqlite+aiosqlite:///:memory:",
        jwt_secret="test-secret",
        hf_api_key=None,
        smtp_host=None,
    )


@pytest.fixture
def notifier() -> RecordingNotifier:
    """Notifier that records codes for the test to read back."""
    return RecordingNotifier()


@pytest.fixture
def fake_extractor() -> FakeExtractor:
    """Extractor with settable text."""
    return FakeExtractor()


@pytest.fixture
def make_pdf() -> Callable[..., bytes]:
    """Factory for small text PDFs."""
    return build_pdf


@pytest.fixture
def services(settings: Settings, notifier: RecordingNotifier, clock: FakeClock) -> Services:
    """In-memory service graph with deterministic codes and a fake clock."""
    return build_inmemory_services(
        settings,
        notifier=notifier,
        inference=DeterministicStubClient(),
        code_generator=SequenceCodeGenerator(["111111", "222222", "333333", "444444", "555555"]),
        clock=clock,
    )


@pytest_asyncio.fixture
async def sqlite_engine(tmp_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    """File-backed SQLite engine with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
        echo=False,
    )
    await create_tables(engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the test engine."""
    return create_session_factory(sqlite_engine)


"""FastAPI application."""

import asyncio
import contextlib
import logging
from collections.abc import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pdfqa.app.api.routes.auth import router as auth_router
from pdfqa.app.api.routes.documents import router as documents_router
from pdfqa.app.api.routes.health import router as health_router
from pdfqa.app.api.routes.metrics import router as metrics_router
from pdfqa.app.api.routes.qa import router as qa_router
from pdfqa.app.auth.challenges import ChallengeStore
from pdfqa.app.config import Settings, get_settings
from pdfqa.app.container import Services, build_sql_services
from pdfqa.app.db.engine import create_tables
from pdfqa.app.errors import DomainError, InternalError, ValidationError

logger = logging.getLogger(__name__)


async def reap_expired_challenges(challenges: ChallengeStore, interval_seconds: float) -> None:
    """Periodically purge expired challenges.

    Verification checks expiry itself, so this only keeps the table small.
    """
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await challenges.purge_expired()
        except Exception as e:
            logger.error(f"Challenge reaper pass failed: {type(e).__name__}: {e}")


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    """Render a domain error as the {"ok": false, "error": code} envelope."""
    body: dict[str, object] = {"ok": False, "error": exc.code}
    if exc.code == "llm_error" and exc.details:
        body["details"] = exc.details
    return JSONResponse(status_code=exc.status_code, content=body)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed bodies (wrong JSON types, unparseable JSON) as invalid_input."""
    logger.info(f"[{request.method} {request.url.path}] rejected input: {len(exc.errors())} error(s)")
    return await domain_error_handler(request, ValidationError("invalid_input"))


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """Log unexpected failures and return a generic error."""
    logger.error(f"[{request.method} {request.url.path}] failed: {exc}", exc_info=exc)
    error = InternalError()
    return JSONResponse(status_code=error.status_code, content={"ok": False, "error": error.code})


def create_app(settings: Settings | None = None, services: Services | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Settings override (defaults to environment)
        services: Pre-built service graph; when omitted, SQL-backed services
            are built on startup and the tables are created if missing
    """
    settings = settings or (services.settings if services else get_settings())

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        owns_services = app.state.services is None
        if owns_services:
            app.state.services = build_sql_services(settings)
            await create_tables(app.state.services.engine)

        reaper: asyncio.Task[None] | None = None
        if settings.challenge_reaper_interval_seconds > 0:
            reaper = asyncio.create_task(
                reap_expired_challenges(
                    app.state.services.challenges, settings.challenge_reaper_interval_seconds
                )
            )

        try:
            yield
        finally:
            if reaper is not None:
                reaper.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await reaper
            if owns_services and app.state.services.engine is not None:
                await app.state.services.engine.dispose()

    app = FastAPI(title="PDF Q&A API", version="0.1.0", lifespan=lifespan)
    app.state.services = services

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.ui_origin],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    # Register routes
    app.include_router(health_router, tags=["health"])
    app.include_router(metrics_router, tags=["metrics"])
    app.include_router(auth_router)
    app.include_router(documents_router)
    app.include_router(qa_router)

    @app.get("/")
    async def root() -> dict[str, str]:
        """Root endpoint."""
        return {"message": "Server running", "version": "0.1.0"}

    return app


app = create_app()

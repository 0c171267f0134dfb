"""Auth dependencies: resolve the session credential into a request context."""

from typing import Annotated

from fastapi import Depends, Header, Request

from pdfqa.app.container import Services
from pdfqa.app.db.context import RequestContext


def get_services(request: Request) -> Services:
    """Service graph attached to the running application."""
    services: Services = request.app.state.services
    return services


async def get_current_context(
    request: Request,
    services: Annotated[Services, Depends(get_services)],
    authorization: Annotated[str | None, Header()] = None,
) -> RequestContext:
    """Extract request context from the session cookie.

    Falls back to an "Authorization: Bearer <token>" header for non-browser
    clients. Every failure surfaces as the same 401.

    Returns:
        RequestContext with identity_id

    Raises:
        UnauthenticatedError: If the credential is missing or invalid
    """
    token = request.cookies.get(services.settings.session_cookie_name)

    if not token and authorization and authorization.startswith("Bearer "):
        token = authorization[7:]  # Strip "Bearer "

    identity_id = services.sessions.validate(token)
    return RequestContext(identity_id=identity_id)

"""Google OAuth endpoints. Both end in a browser redirect."""

from typing import Annotated

from fastapi import APIRouter, Query
from fastapi.responses import RedirectResponse

from src.identity.api.dependencies import OAuthServiceDep, RequestDevice
from src.identity.core.exceptions import AppError
from src.identity.core.logging import get_logger
from src.identity.models import Role
from src.identity.services.oauth_service import error_redirect_url, success_redirect_url

logger = get_logger(__name__)

router = APIRouter(prefix="/auth/google", tags=["oauth"])


@router.get("/initiate", response_class=RedirectResponse, status_code=302)
async def google_initiate(
    service: OAuthServiceDep,
    role: Annotated[Role, Query()] = Role.STUDENT,
    invitation_token: Annotated[str | None, Query(alias="invitationToken")] = None,
) -> RedirectResponse:
    """Redirect to Google consent. ADMIN sign-ups pass their invitation token."""
    return RedirectResponse(service.initiate(role, invitation_token), status_code=302)


@router.get("/callback", response_class=RedirectResponse, status_code=302)
async def google_callback(
    service: OAuthServiceDep,
    device: RequestDevice,
    state: Annotated[str, Query()],
    code: Annotated[str | None, Query()] = None,
    error: Annotated[str | None, Query()] = None,
) -> RedirectResponse:
    """Redirect to the frontend with a session token, or to its error page."""
    if error or not code:
        logger.warning("Google returned no authorization code", error=error)
        return RedirectResponse(error_redirect_url(error or "Missing authorization code"), 302)

    try:
        user, issued = await service.callback(code, state, device)
    except AppError as e:
        logger.warning("Google sign-in failed", error=e.message)
        return RedirectResponse(error_redirect_url(e.message), status_code=302)
    return RedirectResponse(success_redirect_url(user, issued), status_code=302)

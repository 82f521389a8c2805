import logging
from typing import Optional
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import RedirectResponse
from dependency_injector.wiring import inject, Provide

from partner_oauth.containers import Container
from partner_oauth.core.session import ServerSession, get_session
from partner_oauth.schemas.oauth import CallbackErrorType, CallbackResult
from partner_oauth.services.auth_service import AuthService

router = APIRouter(tags=["authentication"])
logger = logging.getLogger(__name__)

LANDING_PATH = "/"
ERROR_VIEW_PATH = "/callback.html"


def error_view_url(error_type: CallbackErrorType, details: Optional[str] = None) -> str:
    params = {"type": error_type.value}
    if details:
        params["details"] = details
    return f"{ERROR_VIEW_PATH}?{urlencode(params)}"


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=status.HTTP_302_FOUND)


@router.get("/login")
@inject
def login(
    session: ServerSession = Depends(get_session),
    auth_service: AuthService = Depends(Provide[Container.services.auth_service]),
):
    """Redirects the user agent to the provider's authorization page."""
    return _redirect(auth_service.start_login(session))


@router.get("/callback")
@inject
async def oauth_callback(
    request: Request,
    session: ServerSession = Depends(get_session),
    auth_service: AuthService = Depends(Provide[Container.services.auth_service]),
):
    """Provider redirects here. Exchange code -> tokens, then redirect to landing."""
    try:
        result: CallbackResult = await auth_service.handle_callback(
            session, request.query_params.multi_items()
        )
    except Exception as e:
        logger.exception("OAuth callback error")
        return _redirect(error_view_url(CallbackErrorType.TOKEN_FAILED, str(e) or "Unknown error"))

    if result.success:
        return _redirect(LANDING_PATH)
    return _redirect(error_view_url(result.error_type, result.details))


@router.get("/logout")
@inject
async def logout(
    session: ServerSession = Depends(get_session),
    auth_service: AuthService = Depends(Provide[Container.services.auth_service]),
):
    await auth_service.logout(session)
    return _redirect(LANDING_PATH)

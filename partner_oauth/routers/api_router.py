from typing import Any

from fastapi import APIRouter, Depends
from dependency_injector.wiring import inject, Provide

from partner_oauth.containers import Container
from partner_oauth.core.exceptions import AuthenticationError
from partner_oauth.core.session import ServerSession, get_session
from partner_oauth.providers.oauth.clerk import ClerkOAuthProvider
from partner_oauth.schemas.session import AuthStatusResponse
from partner_oauth.services.auth_service import AuthService
from partner_oauth.services.partner_api_service import PartnerAPIService

router = APIRouter(prefix="/api", tags=["api"])


@router.get("/auth-status", response_model=AuthStatusResponse, response_model_by_alias=True)
@inject
def auth_status(
    session: ServerSession = Depends(get_session),
    auth_service: AuthService = Depends(Provide[Container.services.auth_service]),
) -> AuthStatusResponse:
    return AuthStatusResponse(is_authenticated=auth_service.is_authenticated(session))


@router.get("/test-connection")
@inject
async def test_connection(
    session: ServerSession = Depends(get_session),
    partner_api_service: PartnerAPIService = Depends(
        Provide[Container.services.partner_api_service]
    ),
) -> Any:
    """Relay the partner API's OAuth test endpoint using the session token."""
    return await partner_api_service.test_connection(session)


@router.get("/userinfo")
@inject
async def userinfo(
    session: ServerSession = Depends(get_session),
    provider: ClerkOAuthProvider = Depends(Provide[Container.services.clerk_provider]),
) -> Any:
    """Relay the provider's userinfo for the signed-in user."""
    if not session.access_token:
        raise AuthenticationError()
    return await provider.get_user_info(session.access_token)

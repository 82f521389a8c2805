import httpx
from typing import Any, Dict, Optional
from urllib.parse import urlencode

from pydantic import ValidationError

from partner_oauth.config import Settings
from partner_oauth.core.exceptions import OAuthError
from partner_oauth.providers.http import get_json_with_bearer
from partner_oauth.schemas.oauth import OAuthTokenResponse
import logging

logger = logging.getLogger(__name__)


class ClerkOAuthProvider:
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.client_id = settings.CLERK_OAUTH_CLIENT_ID
        self.client_secret = settings.CLERK_OAUTH_CLIENT_SECRET
        self.redirect_uri = settings.redirect_uri
        self.scope = settings.OAUTH_SCOPE
        self.timeout = settings.HTTP_TIMEOUT_SECONDS
        urls = settings.oauth_urls
        self.auth_url = urls["authorize"]
        self.token_url = urls["token"]
        self.user_info_url = urls["userinfo"]
        self._transport = transport

    def generate_auth_url(self, state: str) -> str:
        """Generate Clerk OAuth authorization URL"""
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.scope,
            "state": state,
        }
        return f"{self.auth_url}?{urlencode(params)}"

    async def get_access_token(self, code: str) -> OAuthTokenResponse:
        """Exchange authorization code for access and refresh tokens"""
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.post(
                    self.token_url,
                    data={
                        "client_id": self.client_id,
                        "client_secret": self.client_secret,
                        "code": code,
                        "grant_type": "authorization_code",
                        "redirect_uri": self.redirect_uri,
                    },
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
        except httpx.TimeoutException as e:
            logger.error("Clerk OAuth token exchange timeout")
            raise OAuthError(f"OAuth provider timeout: {e}") from e
        except httpx.HTTPError as e:
            raise OAuthError(f"OAuth provider unreachable: {e}") from e

        if not response.is_success:
            logger.error(f"Clerk token exchange failed ({response.status_code}): {response.text}")
            raise OAuthError(f"Token exchange failed: {response.text}")

        try:
            return OAuthTokenResponse.model_validate(response.json())
        except ValidationError as e:
            raise OAuthError(f"Invalid token response from provider: {e}") from e
        except ValueError as e:
            raise OAuthError(f"Token response is not valid JSON: {e}") from e

    async def get_user_info(self, access_token: str) -> Dict[str, Any]:
        """Get the signed-in user's profile from Clerk"""
        return await get_json_with_bearer(
            self.user_info_url, access_token, self.timeout, self._transport
        )

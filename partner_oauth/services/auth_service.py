import logging
from typing import Iterable, Optional, Tuple

from pydantic import ValidationError

from partner_oauth.core.exceptions import OAuthError, SessionStoreError
from partner_oauth.core.security import generate_state, states_match
from partner_oauth.core.session import ServerSession
from partner_oauth.providers.oauth.clerk import ClerkOAuthProvider
from partner_oauth.repositories.session_repository import SessionRepository
from partner_oauth.schemas.oauth import (
    CallbackErrorType,
    CallbackResult,
    OAuthCallbackQuery,
)

logger = logging.getLogger(__name__)


def _fail(error_type: CallbackErrorType, details: Optional[str] = None) -> CallbackResult:
    return CallbackResult(success=False, error_type=error_type, details=details)


def parse_callback_query(items: Iterable[Tuple[str, str]]) -> OAuthCallbackQuery:
    """Validate raw query pairs; repeated keys are kept as lists and rejected."""
    raw: dict = {}
    for key, value in items:
        if key in raw:
            existing = raw[key]
            raw[key] = existing + [value] if isinstance(existing, list) else [existing, value]
        else:
            raw[key] = value
    return OAuthCallbackQuery.model_validate(raw)


class AuthService:
    """OAuth login flow and session lifecycle"""

    def __init__(self, provider: ClerkOAuthProvider, session_repository: SessionRepository):
        self.provider = provider
        self.session_repository = session_repository

    def start_login(self, session: ServerSession) -> str:
        """Store a fresh anti-forgery state and return the authorize URL"""
        state = generate_state()
        session.update(oauth_state=state)
        return self.provider.generate_auth_url(state)

    async def handle_callback(
        self, session: ServerSession, query_items: Iterable[Tuple[str, str]]
    ) -> CallbackResult:
        """Validate the provider redirect and exchange the code for tokens.

        Never raises; every failure comes back as a ``CallbackResult``.
        """
        try:
            query = parse_callback_query(query_items)
        except ValidationError as e:
            logger.warning(f"OAuth callback with malformed query: {e}")
            return _fail(CallbackErrorType.MISSING_CODE)

        if query.error:
            logger.warning(f"OAuth provider returned error: {query.error}")
            return _fail(CallbackErrorType.AUTH, query.error)

        if not states_match(query.state, session.oauth_state):
            logger.warning("OAuth callback state mismatch (possible CSRF)")
            return _fail(CallbackErrorType.CSRF)
        session.pop_oauth_state()

        if not query.code:
            logger.warning("OAuth callback without authorization code")
            return _fail(CallbackErrorType.MISSING_CODE)

        try:
            token = await self.provider.get_access_token(query.code)
        except OAuthError as e:
            logger.error(f"OAuth callback error: {e.message}")
            return _fail(CallbackErrorType.TOKEN_FAILED, e.message)

        session.update(
            access_token=token.access_token,
            refresh_token=token.refresh_token,
        )
        logger.info("OAuth token exchange succeeded")
        return CallbackResult(success=True)

    def is_authenticated(self, session: ServerSession) -> bool:
        return bool(session.access_token)

    async def logout(self, session: ServerSession) -> None:
        """Destroy the session; store failures are logged, not raised"""
        try:
            await self.session_repository.destroy(session.session_id)
        except SessionStoreError as e:
            logger.error(f"Session destruction error: {e}")
        session.invalidate()

"""
Server-side sessions.

The cookie only carries a signed, opaque session id; the record itself lives
in the configured ``SessionRepository``. A cookie is issued only once the
session has been modified, so read-only probes never create sessions.
"""

import logging
from typing import Callable, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from partner_oauth.config import Settings
from partner_oauth.core.exceptions import SessionStoreError
from partner_oauth.core.security import (
    generate_session_id,
    sign_session_id,
    unsign_session_id,
)
from partner_oauth.repositories.session_repository import SessionRepository
from partner_oauth.schemas.session import SessionData

logger = logging.getLogger(__name__)


class ServerSession:
    """Per-request view of one session record with change tracking."""

    def __init__(self, session_id: str, data: SessionData):
        self.session_id = session_id
        self.data = data
        self.modified = False
        self.destroyed = False

    @property
    def access_token(self) -> Optional[str]:
        return self.data.access_token

    @property
    def refresh_token(self) -> Optional[str]:
        return self.data.refresh_token

    @property
    def oauth_state(self) -> Optional[str]:
        return self.data.oauth_state

    def update(self, **fields) -> None:
        self.data = self.data.model_copy(update=fields)
        self.modified = True

    def pop_oauth_state(self) -> Optional[str]:
        """Return the stored state and clear it; it is single use."""
        state = self.data.oauth_state
        if state is not None:
            self.update(oauth_state=None)
        return state

    def invalidate(self) -> None:
        self.data = SessionData()
        self.destroyed = True


class SessionMiddleware(BaseHTTPMiddleware):
    def __init__(
        self,
        app,
        settings: Settings,
        repository_factory: Callable[[], SessionRepository],
    ):
        super().__init__(app)
        self.settings = settings
        # Resolved per request so container overrides apply
        self.repository_factory = repository_factory

    async def _load(self, request: Request, repository: SessionRepository) -> ServerSession:
        cookie = request.cookies.get(self.settings.SESSION_COOKIE_NAME)
        session_id = unsign_session_id(cookie, self.settings.SESSION_SECRET)
        if session_id:
            data = await repository.get(session_id)
            if data is not None:
                return ServerSession(session_id, data)
        return ServerSession(generate_session_id(), SessionData())

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        repository = self.repository_factory()
        session = await self._load(request, repository)
        request.state.session = session

        response = await call_next(request)

        if session.destroyed:
            response.delete_cookie(self.settings.SESSION_COOKIE_NAME, path="/")
        elif session.modified:
            try:
                await repository.set(session.session_id, session.data)
            except SessionStoreError as e:
                logger.error(f"Session save failed for {session.session_id[:8]}...: {e}")
                return response
            response.set_cookie(
                self.settings.SESSION_COOKIE_NAME,
                sign_session_id(session.session_id, self.settings.SESSION_SECRET),
                max_age=self.settings.SESSION_TTL_SECONDS,
                path="/",
                httponly=True,
                secure=self.settings.SESSION_COOKIE_SECURE,
                samesite="lax",
            )
        return response


def get_session(request: Request) -> ServerSession:
    """FastAPI dependency returning the current request's session."""
    return request.state.session

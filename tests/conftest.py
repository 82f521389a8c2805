import sys
from pathlib import Path
from typing import Callable, Dict, List

import httpx
import pytest
from fastapi.testclient import TestClient

# Ensure project root is on path for `partner_oauth` imports
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from dependency_injector import providers

from partner_oauth.config import Settings
from partner_oauth.main import app
from partner_oauth.providers.oauth.clerk import ClerkOAuthProvider
from partner_oauth.repositories.session_repository import InMemorySessionRepository
from partner_oauth.services.partner_api_service import PartnerAPIService


class FakeUpstream:
    """Stands in for the Clerk OAuth server and the partner API.

    Routes are keyed by URL path; every request is recorded.
    """

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.routes: Dict[str, Callable[[httpx.Request], httpx.Response]] = {
            "/oauth/token": lambda request: httpx.Response(
                200,
                json={
                    "access_token": "a",
                    "refresh_token": "b",
                    "token_type": "Bearer",
                    "expires_in": 3600,
                },
            ),
            "/v1/credit/oauth-test": lambda request: httpx.Response(
                200, json={"ok": True, "partner": "acme"}
            ),
            "/oauth/userinfo": lambda request: httpx.Response(
                200, json={"sub": "user_123", "email": "jane@example.com"}
            ),
        }

    def respond(self, path: str, status_code: int, **kwargs) -> None:
        self.routes[path] = lambda request: httpx.Response(status_code, **kwargs)

    def fail(self, path: str, exc: Exception) -> None:
        def _raise(request):
            raise exc

        self.routes[path] = _raise

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, text="not found")
        return route(request)

    def calls_to(self, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.url.path == path]


@pytest.fixture
def settings() -> Settings:
    return Settings(
        _env_file=None,
        ECAIR_CLERK_DOMAIN="clerk.example.com",
        CLERK_OAUTH_CLIENT_ID="client-123",
        CLERK_OAUTH_CLIENT_SECRET="secret-xyz",
        APP_BASE_URL="http://testserver",
        ECAIR_API_URL="https://api.example.com",
    )


@pytest.fixture
def upstream() -> FakeUpstream:
    return FakeUpstream()


@pytest.fixture
def transport(upstream) -> httpx.MockTransport:
    return httpx.MockTransport(upstream)


@pytest.fixture
def session_repository() -> InMemorySessionRepository:
    return InMemorySessionRepository(ttl_seconds=3600)


@pytest.fixture
def client(settings, transport, session_repository):
    container = app.container  # type: ignore
    container.repositories.session_repository.override(
        providers.Object(session_repository)
    )
    container.services.clerk_provider.override(
        providers.Factory(ClerkOAuthProvider, settings=settings, transport=transport)
    )
    container.services.partner_api_service.override(
        providers.Factory(PartnerAPIService, settings=settings, transport=transport)
    )
    yield TestClient(app, follow_redirects=False)
    container.repositories.session_repository.reset_override()
    container.services.clerk_provider.reset_override()
    container.services.partner_api_service.reset_override()

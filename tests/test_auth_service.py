import pytest
from unittest.mock import AsyncMock, Mock

from partner_oauth.core.exceptions import OAuthError, SessionStoreError
from partner_oauth.core.session import ServerSession
from partner_oauth.schemas.oauth import CallbackErrorType, OAuthTokenResponse
from partner_oauth.schemas.session import SessionData
from partner_oauth.services.auth_service import AuthService, parse_callback_query


@pytest.fixture
def mock_provider():
    provider = Mock()
    provider.generate_auth_url.side_effect = lambda state: f"https://idp/authorize?state={state}"
    provider.get_access_token = AsyncMock(
        return_value=OAuthTokenResponse(access_token="a", refresh_token="b")
    )
    return provider


@pytest.fixture
def mock_repository():
    repository = Mock()
    repository.destroy = AsyncMock()
    return repository


@pytest.fixture
def auth_service(mock_provider, mock_repository):
    return AuthService(provider=mock_provider, session_repository=mock_repository)


@pytest.fixture
def pending_session():
    return ServerSession("sid-1", SessionData(oauth_state="expected"))


class TestAuthService:
    """AuthService callback flow"""

    def test_start_login_stores_state(self, auth_service):
        session = ServerSession("sid-1", SessionData())

        url = auth_service.start_login(session)

        assert session.modified is True
        assert url.endswith(f"state={session.oauth_state}")

    @pytest.mark.asyncio
    async def test_success_copies_tokens(self, auth_service, mock_provider, pending_session):
        result = await auth_service.handle_callback(
            pending_session, [("code", "c"), ("state", "expected")]
        )

        assert result.success is True
        assert pending_session.access_token == "a"
        assert pending_session.refresh_token == "b"
        assert pending_session.oauth_state is None
        mock_provider.get_access_token.assert_awaited_once_with("c")

    @pytest.mark.asyncio
    async def test_csrf_keeps_stored_state(self, auth_service, mock_provider, pending_session):
        result = await auth_service.handle_callback(
            pending_session, [("code", "c"), ("state", "other")]
        )

        assert result.error_type == CallbackErrorType.CSRF
        assert pending_session.oauth_state == "expected"
        mock_provider.get_access_token.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_exchange_failure_leaves_tokens_unset(
        self, auth_service, mock_provider, pending_session
    ):
        mock_provider.get_access_token.side_effect = OAuthError("Token exchange failed: boom")

        result = await auth_service.handle_callback(
            pending_session, [("code", "c"), ("state", "expected")]
        )

        assert result.error_type == CallbackErrorType.TOKEN_FAILED
        assert result.details == "Token exchange failed: boom"
        assert pending_session.access_token is None

    def test_is_authenticated(self, auth_service):
        assert not auth_service.is_authenticated(ServerSession("s", SessionData()))
        assert not auth_service.is_authenticated(
            ServerSession("s", SessionData(access_token=""))
        )
        assert auth_service.is_authenticated(
            ServerSession("s", SessionData(access_token="a"))
        )

    @pytest.mark.asyncio
    async def test_logout_survives_store_failure(self, auth_service, mock_repository):
        mock_repository.destroy.side_effect = SessionStoreError("down")
        session = ServerSession("sid-1", SessionData(access_token="a"))

        await auth_service.logout(session)

        assert session.destroyed is True
        assert session.access_token is None


def test_parse_callback_query_ignores_unknown_params():
    query = parse_callback_query([("code", "c"), ("session_state", "x")])

    assert query.code == "c"
    assert query.state is None

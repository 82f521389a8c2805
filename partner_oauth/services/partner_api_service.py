import logging
from typing import Any, Optional

import httpx

from partner_oauth.config import Settings
from partner_oauth.core.exceptions import AuthenticationError
from partner_oauth.core.session import ServerSession
from partner_oauth.providers.http import get_json_with_bearer

logger = logging.getLogger(__name__)


class PartnerAPIService:
    """Calls the partner API with the session's access token"""

    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.test_url = settings.partner_test_url
        self.timeout = settings.HTTP_TIMEOUT_SECONDS
        self._transport = transport

    async def test_connection(self, session: ServerSession) -> Any:
        if not session.access_token:
            raise AuthenticationError()

        logger.info(f"Calling partner API: {self.test_url}")
        return await get_json_with_bearer(
            self.test_url, session.access_token, self.timeout, self._transport
        )
